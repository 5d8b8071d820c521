"""Exception hierarchy for the SQL client."""

from __future__ import annotations


class SqlClientError(Exception):
    """Base class for every failure the client reports to the user."""


class SqlParseError(SqlClientError):
    """A statement could not be parsed.

    ``position`` is the character offset of the offending token, or None
    when the error was found at the end of input.
    """

    def __init__(self, message: str, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


class ValidationError(SqlClientError):
    """An operation is not legal in the current run mode or batch state."""


class SqlExecutionError(SqlClientError):
    """The executor failed to run a legal operation."""


class InvariantViolation(SqlClientError):
    """A collaborator broke its contract. Always a bug, never user error."""


class MalformedResultError(InvariantViolation):
    """A result that must carry a row came back without one."""


class InvalidStateError(SqlClientError):
    """A statement set method was called in the wrong state."""
