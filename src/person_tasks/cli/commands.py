# src/person_tasks/cli/commands.py

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from ..core.errors import ArgumentCountError, IdParseError, UnknownCommandError, UserInputError
from ..store.formatter import format_records
from ..store.record_store import RecordStore

# handler(store, line, args) -> text to show the user
CommandHandler = Callable[[RecordStore, str, list[str]], str]

logger = logging.getLogger(__name__)

_ID_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass(frozen=True, slots=True)
class _Command:
    handler: CommandHandler
    usage: str
    help_text: str


class CommandDispatcher:
    """
    Line-oriented command registry bound to one RecordStore.

    handle() turns "done 7" into a call on the store and returns the text
    to print. Bad input raises UserInputError; store failures propagate
    untouched as StoreError.
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store
        self._commands: dict[str, _Command] = {}

    @property
    def store(self) -> RecordStore:
        return self._store

    def register(self, name: str, handler: CommandHandler, usage: str, help_text: str) -> None:
        self._commands[name] = _Command(handler=handler, usage=usage, help_text=help_text)

    def handle(self, line: str) -> str:
        args = line.split()
        if not args:
            raise UserInputError("not enough args")

        name = args[0]
        command = self._commands.get(name)
        if command is None:
            raise UnknownCommandError(name)

        logger.debug("Dispatching command %s args=%s", name, args[1:])
        return command.handler(self._store, line, args)

    def usage(self) -> str:
        width = max((len(c.usage) for c in self._commands.values()), default=0)
        lines = ["Usage:", ""]
        for c in self._commands.values():
            lines.append(f"  {c.usage.ljust(width)}  {c.help_text}")
        lines.append("")
        return "\n".join(lines)


def assert_args_length(args: list[str], expected: int) -> None:
    if len(args) != expected:
        raise ArgumentCountError(expected, len(args))


def parse_id(raw: str) -> int:
    """Parse a signed 64-bit decimal id ("7", "+7", "-7")."""
    if not _ID_RE.fullmatch(raw):
        raise IdParseError(raw)
    value = int(raw)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise IdParseError(raw)
    return value


def cmd_new(store: RecordStore, line: str, args: list[str]) -> str:
    # Everything after the first whitespace run is the description.
    parts = line.strip().split(None, 1)
    if len(parts) != 2:
        raise UserInputError("missing description")
    store.add(parts[1])
    return "task added"


def cmd_done(store: RecordStore, line: str, args: list[str]) -> str:
    assert_args_length(args, 2)
    record_id = parse_id(args[1])
    if store.mark_done(record_id):
        return "task marked done"
    return f"did not find a Task entity with ID {record_id}"


def cmd_list(store: RecordStore, line: str, args: list[str]) -> str:
    assert_args_length(args, 1)
    tasks = format_records(store.list_records())
    lines = [
        f"found {len(tasks)} tasks:",
        "task ID : description",
        "---------------------",
    ]
    lines.extend(tasks)
    return "\n".join(lines)


def cmd_delete(store: RecordStore, line: str, args: list[str]) -> str:
    assert_args_length(args, 2)
    store.delete(parse_id(args[1]))
    return "task deleted (if it existed)"


def build_dispatcher(store: RecordStore) -> CommandDispatcher:
    dispatcher = CommandDispatcher(store)
    dispatcher.register(
        "new", cmd_new, "new <description>", "Adds a task with a description <description>"
    )
    dispatcher.register("done", cmd_done, "done <task-id>", "Marks a task as done")
    dispatcher.register("list", cmd_list, "list", "Lists all tasks by creation time")
    dispatcher.register("delete", cmd_delete, "delete <task-id>", "Deletes a task")
    return dispatcher
