"""
Run the tracker API under uvicorn.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from tracker.app import create_app
from tracker.config import get_settings

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Expense and task tracker API")
    parser.add_argument(
        "--host",
        type=str,
        default=settings.host,
        help="Address to bind",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help="Port to listen on (defaults to $PORT)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    app = create_app(settings)
    logger.info("Server running on port %d", args.port)
    logger.info("API routes are available under %s", settings.api_prefix)
    uvicorn.run(app, host=args.host, port=args.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
