"""State of an open BEGIN STATEMENT SET batch."""

from __future__ import annotations

from sqlcli.errors import InvalidStateError
from sqlcli.operations import ModifyOperation


class StatementSetSession:
    """Collects modify operations between BEGIN STATEMENT SET and END.

    ``pending`` is only non-empty while the set is active, and it is
    cleared whenever the set is closed by ``end`` or ``abandon``.
    """

    def __init__(self) -> None:
        self.active = False
        self.pending: list[ModifyOperation] = []

    def begin(self) -> None:
        if self.active:
            raise InvalidStateError("A statement set is already open.")
        self.active = True
        self.pending = []

    def add(self, operation: ModifyOperation) -> None:
        if not self.active:
            raise InvalidStateError("No statement set is open.")
        self.pending.append(operation)

    def end(self) -> list[ModifyOperation]:
        """Close the set and return its operations in the order they were added."""
        if not self.active:
            raise InvalidStateError("No statement set is open.")
        operations = self.pending
        self.pending = []
        self.active = False
        return operations

    def abandon(self) -> list[ModifyOperation]:
        """Drop an open set without submitting it; returns what was discarded."""
        discarded = self.pending
        self.pending = []
        self.active = False
        return discarded
