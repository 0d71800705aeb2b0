"""orderhub — users, orders and items over a generic paginated query engine."""

__version__ = "0.1.0"
