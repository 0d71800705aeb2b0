"""Run the API server: ``python -m orderhub``."""

import os

import uvicorn
from dotenv import load_dotenv

from orderhub.api import create_app


def main() -> None:
    load_dotenv()
    uvicorn.run(
        create_app(),
        host=os.environ.get("ORDERHUB_HOST", "127.0.0.1"),
        port=int(os.environ.get("ORDERHUB_PORT", "8000")),
        log_config=None,  # setup_logging() owns the logging config
    )


if __name__ == "__main__":
    main()
