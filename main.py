"""
Household Chores — Entry Point.

Single entry point: `python main.py` starts the HTTP API.
"""

import logging

from household.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

import uvicorn

from household.api.server import create_app


def main() -> None:
    app = create_app()
    logging.getLogger(__name__).info(
        "Starting API on %s:%d (%s backend)",
        settings.API_HOST, settings.API_PORT, settings.STORE_BACKEND,
    )
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT, log_config=None)


if __name__ == "__main__":
    main()
