"""sqlcli - A command line client for submitting SQL statements."""

from sqlcli.client import CliClient
from sqlcli.dispatcher import OperationDispatcher
from sqlcli.errors import (
    InvalidStateError,
    InvariantViolation,
    MalformedResultError,
    SqlClientError,
    SqlExecutionError,
    SqlParseError,
    ValidationError,
)
from sqlcli.gateway import Executor, ResultDescriptor, ResultKind, TableResult
from sqlcli.local_executor import LocalExecutor
from sqlcli.loop import ReadEvalLoop
from sqlcli.parsing import StatementParser
from sqlcli.reporter import ErrorReporter
from sqlcli.state import LoopState, RunMode
from sqlcli.statement_set import StatementSetSession
from sqlcli.validation import validate

__all__ = [
    # Main API
    "CliClient",
    "ReadEvalLoop",
    "OperationDispatcher",
    "ErrorReporter",
    "StatementParser",
    "StatementSetSession",
    "LoopState",
    "RunMode",
    "validate",
    # Execution
    "Executor",
    "LocalExecutor",
    "ResultDescriptor",
    "ResultKind",
    "TableResult",
    # Errors
    "SqlClientError",
    "SqlParseError",
    "ValidationError",
    "SqlExecutionError",
    "InvariantViolation",
    "MalformedResultError",
    "InvalidStateError",
]

__version__ = "0.1.0"
