# src/person_tasks/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..cli.commands import CommandDispatcher
from ..core.errors import StoreError, UserInputError

logger = logging.getLogger(__name__)

PROMPT = "> "


def run_console_loop(
    dispatcher: CommandDispatcher,
    *,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> None:
    """
    Read commands until a blank line (or EOF / Ctrl+C).

    Input errors print the message and the usage; store errors are logged
    and reported, and the loop keeps going in both cases.
    """
    logger.info("Console connector started.")
    write("Cloud Datastore Task List")
    write("")
    write(dispatcher.usage())

    while True:
        try:
            line = read_line(PROMPT)
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            write("")
            break

        if not line.strip():
            break

        try:
            write(dispatcher.handle(line))
        except UserInputError as e:
            write(str(e))
            write(dispatcher.usage())
        except StoreError as e:
            logger.error("Store error while handling %r: %s", line, e)
            write(f"store error: {e}")

    write("exiting")
    logger.info("Console connector finished.")
