# src/person_tasks/core/errors.py

"""
Error kinds shared by the store and both front ends.

Two families, so callers can treat them differently:
- UserInputError: the request itself is wrong (bad command, wrong arity, bad id).
- StoreError: the document store failed (unreachable, conflict, ...).
"""

from __future__ import annotations


class UserInputError(ValueError):
    """Bad user input. Reported to the user; never fatal."""


class ArgumentCountError(UserInputError):
    def __init__(self, expected: int, found: int) -> None:
        self.expected = expected
        self.found = found
        super().__init__(f"expected exactly {expected} arg(s), found {found}")


class IdParseError(UserInputError):
    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"invalid task ID: {raw!r}")


class UnknownCommandError(UserInputError):
    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"unrecognized command: {command}")


class StoreError(RuntimeError):
    """The backing document store failed."""


class StoreUnavailableError(StoreError):
    """The store could not be reached or refused the credentials."""


class TransactionConflictError(StoreError):
    """A transaction lost a race with a concurrent writer and was not applied."""
