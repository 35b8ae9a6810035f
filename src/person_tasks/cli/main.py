# src/person_tasks/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs one front end:
- console: interactive command loop (default),
- serve: REST API under uvicorn.
"""

from __future__ import annotations

import argparse
import logging

from ..config import get_settings
from ..logging_setup import setup_logging
from .bootstrap import create_initial_state

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="person-tasks", description="Person/Task records CLI and REST API.")
    parser.add_argument(
        "mode",
        nargs="?",
        choices=("console", "serve"),
        default="console",
        help="console: interactive commands (default); serve: run the REST API",
    )
    parser.add_argument("--host", default=None, help="API bind host (overrides settings)")
    parser.add_argument("--port", type=int, default=None, help="API port (overrides settings)")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = _build_parser().parse_args(argv)
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s (%s)...", settings.app_name, args.mode)
    state = create_initial_state(settings=settings)

    try:
        if args.mode == "serve":
            import uvicorn

            from ..api.app import create_app

            app = create_app(state.store, title=settings.app_name)
            uvicorn.run(
                app,
                host=args.host or settings.api_host,
                port=args.port or settings.api_port,
                log_config=None,
            )
        else:
            from ..cli.commands import build_dispatcher
            from ..connectors.console_connector import run_console_loop

            run_console_loop(build_dispatcher(state.store))
    finally:
        close = getattr(state.client, "close", None)
        if callable(close):
            close()
        logger.info("Bye.")


if __name__ == "__main__":
    main()
