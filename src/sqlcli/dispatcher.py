"""Routes validated operations to their handlers."""

from __future__ import annotations

import logging
from typing import Sequence, assert_never

from sqlcli import messages
from sqlcli.config import DML_SYNC, MAX_TABLE_RESULT_ROWS, RESULT_MODE
from sqlcli.errors import InvariantViolation, MalformedResultError, ValidationError
from sqlcli.gateway import Executor, ResultKind
from sqlcli.operations import (
    AddJarOperation,
    AlterOperation,
    BeginStatementSetOperation,
    ClearOperation,
    CreateOperation,
    CreateTableAsOperation,
    DescribeOperation,
    DropOperation,
    EndStatementSetOperation,
    ExplainOperation,
    HelpOperation,
    LoadModuleOperation,
    ModifyOperation,
    Operation,
    QueryOperation,
    QuitOperation,
    RemoveJarOperation,
    ResetOperation,
    SetOperation,
    ShowCreateTableOperation,
    ShowCreateViewOperation,
    ShowOperation,
    SinkModifyOperation,
    StatementSetOperation,
    StopJobOperation,
    UnloadModuleOperation,
    UseOperation,
)
from sqlcli.reporter import ErrorReporter
from sqlcli.result_view import (
    ChangelogResultView,
    ResultView,
    TableauResultView,
    TableResultView,
    print_tableau,
)
from sqlcli.state import LoopState
from sqlcli.terminal import Terminal
from sqlcli.validation import Denied, validate

logger = logging.getLogger(__name__)


def escape_single_quotes(text: str) -> str:
    return text.replace("'", "''")


class OperationDispatcher:
    """Validates an operation and runs its handler.

    Every failure is raised: ``ValidationError`` for illegal operations,
    ``SqlExecutionError`` from the executor and ``InvariantViolation`` when
    the executor breaks its contract.
    """

    def __init__(self, executor: Executor, terminal: Terminal, reporter: ErrorReporter) -> None:
        self.executor = executor
        self.terminal = terminal
        self.reporter = reporter

    def dispatch(self, operation: Operation, state: LoopState) -> None:
        result_mode = self.executor.get_config_value(RESULT_MODE)
        verdict = validate(operation, state.mode, state.statement_set.active, result_mode)
        if isinstance(verdict, Denied):
            raise ValidationError(verdict.reason)

        logger.debug("Dispatching %s", operation.summary())
        match operation:
            case QuitOperation():
                self._call_quit(state)
            case ClearOperation():
                self.terminal.clear()
            case HelpOperation():
                self.terminal.println(messages.MESSAGE_HELP)
                self.terminal.flush()
            case SetOperation():
                self._call_set(operation)
            case ResetOperation():
                self._call_reset(operation)
            case SinkModifyOperation() | CreateTableAsOperation():
                self._call_insert(operation, state)
            case StatementSetOperation():
                self._call_inserts(list(operation.operations))
            case QueryOperation():
                self._call_select(operation)
            case ExplainOperation() | ShowCreateTableOperation() | ShowCreateViewOperation():
                self._print_raw_content(operation)
            case BeginStatementSetOperation():
                state.statement_set.begin()
                self.reporter.info(messages.MESSAGE_BEGIN_STATEMENT_SET)
            case EndStatementSetOperation():
                self._call_end_statement_set(state)
            case RemoveJarOperation():
                self.executor.remove_jar(operation.path)
                self.reporter.info(messages.MESSAGE_REMOVE_JAR_STATEMENT)
            case StopJobOperation():
                self._call_stop_job(operation)
            case (
                CreateOperation()
                | DropOperation()
                | AlterOperation()
                | UseOperation()
                | LoadModuleOperation()
                | UnloadModuleOperation()
                | AddJarOperation()
                | ShowOperation()
                | DescribeOperation()
            ):
                self._execute_generic(operation)
            case _:
                assert_never(operation)

    # --- Handlers ---

    def _call_quit(self, state: LoopState) -> None:
        self.reporter.info(messages.MESSAGE_QUIT)
        state.running = False

    def _call_set(self, operation: SetOperation) -> None:
        # set a property
        if operation.key is not None and operation.value is not None:
            self.executor.set_session_property(operation.key.strip(), operation.value.strip())
            self.reporter.info(messages.MESSAGE_SET_KEY)
            return

        # show all properties
        properties = self.executor.get_session_config_map()
        if not properties:
            self.reporter.info(messages.MESSAGE_EMPTY)
            return
        for key in sorted(properties):
            self.terminal.println(f"'{escape_single_quotes(key)}' = '{escape_single_quotes(properties[key])}'")
        self.terminal.flush()

    def _call_reset(self, operation: ResetOperation) -> None:
        if operation.key is None:
            self.executor.reset_session_properties()
            self.reporter.info(messages.MESSAGE_RESET)
        else:
            self.executor.reset_session_property(operation.key)
            self.reporter.info(messages.MESSAGE_RESET_KEY)

    def _call_insert(self, operation: ModifyOperation, state: LoopState) -> None:
        if state.statement_set.active:
            state.statement_set.add(operation)
            self.reporter.info(messages.MESSAGE_ADD_STATEMENT_TO_STATEMENT_SET)
        else:
            self._call_inserts([operation])

    def _call_inserts(self, operations: Sequence[ModifyOperation]) -> None:
        self.reporter.info(messages.MESSAGE_SUBMITTING_STATEMENT)

        sync = self.executor.get_config_value(DML_SYNC)
        if sync:
            self.reporter.info(messages.MESSAGE_WAIT_EXECUTE)
        result = self.executor.execute_modify_operations(operations)
        if result.job_client is None:
            raise InvariantViolation("The result of a modify operation carries no job client.")

        if sync:
            self.reporter.info(messages.MESSAGE_FINISH_STATEMENT)
        else:
            self.reporter.info(messages.MESSAGE_STATEMENT_SUBMITTED)
            self.terminal.println(f"Job ID: {result.job_client.job_id}\n")
        self.terminal.flush()

    def _call_select(self, operation: QueryOperation) -> None:
        descriptor = self.executor.execute_query(operation)

        if descriptor.is_tableau_mode:
            with TableauResultView(self.terminal, descriptor) as tableau_view:
                tableau_view.display_results()
            return

        view: ResultView
        if descriptor.is_materialized:
            max_rows = self.executor.get_config_value(MAX_TABLE_RESULT_ROWS)
            view = TableResultView(self.terminal, descriptor, max_rows)
        else:
            view = ChangelogResultView(self.terminal, descriptor)

        with view:
            view.open()
        self.reporter.info(messages.MESSAGE_RESULT_QUIT)

    def _print_raw_content(
        self, operation: ExplainOperation | ShowCreateTableOperation | ShowCreateViewOperation
    ) -> None:
        result = self.executor.execute_operation(operation)
        # show raw content instead of tableau style
        if not result.rows or not result.rows[0] or result.rows[0][0] is None:
            raise MalformedResultError(f"'{operation.summary()}' returned no content.")
        self.terminal.println(str(result.rows[0][0]))
        self.terminal.flush()

    def _call_end_statement_set(self, state: LoopState) -> None:
        if not state.statement_set.active:
            raise ValidationError(messages.MESSAGE_STATEMENT_SET_END_CALL_ERROR)
        operations = state.statement_set.end()
        if operations:
            self._call_inserts(operations)
        else:
            self.reporter.info(messages.MESSAGE_NO_STATEMENT_IN_STATEMENT_SET)

    def _call_stop_job(self, operation: StopJobOperation) -> None:
        savepoint = self.executor.stop_job(operation.job_id, operation.with_savepoint, operation.with_drain)
        if operation.with_savepoint:
            if savepoint is None:
                raise InvariantViolation(f"Job '{operation.job_id}' was stopped with a savepoint but no path was returned.")
            self.reporter.info(messages.MESSAGE_STOP_JOB_WITH_SAVEPOINT_STATEMENT.format(path=savepoint))
        else:
            self.reporter.info(messages.MESSAGE_STOP_JOB_STATEMENT)

    def _execute_generic(self, operation: Operation) -> None:
        result = self.executor.execute_operation(operation)
        if result.kind is ResultKind.SUCCESS:
            # print a more meaningful message than the OK row
            self.reporter.info(messages.MESSAGE_EXECUTE_STATEMENT)
        else:
            printed = print_tableau(self.terminal, result.columns, result.rows)
            if printed:
                self.terminal.println(f"{printed} row{'s' if printed != 1 else ''} in set")
            self.terminal.flush()
