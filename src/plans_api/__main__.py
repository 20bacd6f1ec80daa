"""
Run the plans backend.

Usage:
    python -m plans_api                 # bind to HOST:PORT from the environment
    python -m plans_api --port 8080
"""
import argparse
import logging

import uvicorn

from .logging_config import configure_logging
from .settings import get_settings

logger = logging.getLogger("plans_api")


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Plans backend")
    parser.add_argument("--host", default=settings.host, help="Web server host")
    parser.add_argument("--port", type=int, default=settings.port, help="Web server port")
    args = parser.parse_args()
    configure_logging(settings.log_level)

    logger.info("Running web server on %s:%s", args.host, args.port)
    uvicorn.run("plans_api.main:app", host=args.host, port=args.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
