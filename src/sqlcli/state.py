"""Run mode and the per-run loop state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from sqlcli.statement_set import StatementSetSession


class RunMode(Enum):
    """The context a loop runs in."""

    INTERACTIVE = "interactive"
    NON_INTERACTIVE = "non-interactive"
    INITIALIZATION = "initialization"

    @property
    def exit_on_failure(self) -> bool:
        return self is not RunMode.INTERACTIVE


@dataclass
class LoopState:
    """Owned by one loop run; QUIT and the statement set operations mutate it."""

    mode: RunMode
    statement_set: StatementSetSession = field(default_factory=StatementSetSession)
    running: bool = True
