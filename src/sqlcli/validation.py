"""Decides whether an operation is legal in the current context."""

from __future__ import annotations

from dataclasses import dataclass

from sqlcli import messages
from sqlcli.config import RESULT_MODE, ResultMode
from sqlcli.operations import (
    AddJarOperation,
    AlterOperation,
    CreateOperation,
    CreateTableAsOperation,
    DropOperation,
    EndStatementSetOperation,
    LoadModuleOperation,
    Operation,
    QueryOperation,
    RemoveJarOperation,
    ResetOperation,
    SetOperation,
    SinkModifyOperation,
    UnloadModuleOperation,
    UseOperation,
)
from sqlcli.state import RunMode


@dataclass(frozen=True)
class Allowed:
    pass


@dataclass(frozen=True)
class Denied:
    reason: str


ValidationResult = Allowed | Denied

ALLOWED = Allowed()

# Administrative statements an initialization file may contain
INIT_ALLOWED = (
    SetOperation,
    ResetOperation,
    CreateOperation,
    DropOperation,
    UseOperation,
    AlterOperation,
    LoadModuleOperation,
    UnloadModuleOperation,
    AddJarOperation,
    RemoveJarOperation,
)

STATEMENT_SET_ALLOWED = (SinkModifyOperation, CreateTableAsOperation, EndStatementSetOperation)


def validate(
    operation: Operation,
    mode: RunMode,
    statement_set_active: bool,
    result_mode: ResultMode,
) -> ValidationResult:
    """Check ``operation`` against the run mode and the statement set state.

    Rules apply in order and the first denial wins. ``result_mode`` is the
    session's configured result mode; it only matters for queries outside
    interactive mode.
    """
    if mode is RunMode.INITIALIZATION:
        if not isinstance(operation, INIT_ALLOWED):
            return Denied(messages.MESSAGE_INIT_UNSUPPORTED.format(summary=operation.summary()))
    elif mode is RunMode.NON_INTERACTIVE:
        if isinstance(operation, QueryOperation) and result_mode is not ResultMode.TABLEAU:
            return Denied(
                messages.MESSAGE_NON_INTERACTIVE_RESULT_MODE.format(
                    mode=ResultMode.TABLEAU.value, key=RESULT_MODE.key
                )
            )

    if statement_set_active and not isinstance(operation, STATEMENT_SET_ALLOWED):
        return Denied(messages.MESSAGE_STATEMENT_SET_SQL_EXECUTION_ERROR)

    return ALLOWED
