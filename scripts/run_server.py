from __future__ import annotations

import argparse

import uvicorn

from psychometric.infrastructure.config import get_settings
from psychometric.infrastructure.db import create_database_engine, initialise_database
from psychometric.infrastructure.logging import get_logger, setup_logging

APP_PATH = "psychometric.web.main:app"

logger = get_logger("run_server")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the psychometric assessment API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    parser.add_argument(
        "--init-db", action="store_true", help="Create missing tables before serving"
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(**settings.logging.as_setup_kwargs())

    if args.init_db:
        initialise_database(create_database_engine(settings.database))

    logger.info("Serving %s on %s:%s", APP_PATH, args.host, args.port)
    uvicorn.run(
        APP_PATH,
        host=args.host,
        port=args.port,
        reload=args.reload or settings.is_development(),
    )


if __name__ == "__main__":
    main()
