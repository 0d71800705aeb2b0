"""Tests for per-resource query configuration."""

import pytest

from orderhub.models import Order, User
from orderhub.query.resources import (
    RESOURCES,
    FilterOp,
    FilterSpec,
    ResourceConfig,
    filters,
    sortable,
)


class TestResourceConfig:
    def test_registry(self):
        assert set(RESOURCES) == {"users", "orders", "items"}

    def test_users_default_ordering(self):
        assert RESOURCES["users"].default_ordering == "name"

    def test_orders_filter_on_joined_user_columns(self):
        cfg = RESOURCES["orders"]
        assert cfg.filter_config["user_name"] == FilterSpec(User.name, FilterOp.LIKE)
        assert cfg.sort_config["user_email"] is User.email

    def test_configs_are_read_only(self):
        with pytest.raises(TypeError):
            RESOURCES["users"].sort_config["password"] = User.id  # type: ignore[index]
        with pytest.raises(TypeError):
            RESOURCES["new"] = RESOURCES["users"]  # type: ignore[index]

    def test_default_ordering_must_be_sortable(self):
        with pytest.raises(ValueError, match="not a sortable field"):
            ResourceConfig(
                name="broken",
                sort_config=sortable(Order, "id"),
                filter_config={},
                cursor_column=Order.id,
                default_ordering="-created_at",
            )

    def test_filters_helper(self):
        assert filters(FilterOp.GTE, min_total=Order.total) == {
            "min_total": FilterSpec(Order.total, FilterOp.GTE)
        }
