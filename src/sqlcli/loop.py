"""The read-parse-validate-dispatch loop."""

from __future__ import annotations

import logging

from sqlcli import messages
from sqlcli.dispatcher import OperationDispatcher
from sqlcli.errors import InvariantViolation, SqlParseError
from sqlcli.gateway import Executor
from sqlcli.operations import Operation
from sqlcli.parsing import StatementParser
from sqlcli.reporter import ErrorReporter
from sqlcli.state import LoopState, RunMode
from sqlcli.terminal import LineReader, Terminal

logger = logging.getLogger(__name__)


class ReadEvalLoop:
    """Reads statements one at a time and runs them until input ends.

    ``run`` never raises. It returns False when a failure aborted the run
    (any failure outside interactive mode, an internal error in every
    mode) and True otherwise.
    """

    def __init__(
        self,
        executor: Executor,
        terminal: Terminal,
        parser: StatementParser | None = None,
        prompt: str = messages.PROMPT,
    ) -> None:
        self.executor = executor
        self.terminal = terminal
        self.parser = parser if parser is not None else StatementParser()
        self.prompt = prompt
        self.reporter = ErrorReporter(terminal, executor)
        self.dispatcher = OperationDispatcher(executor, terminal, self.reporter)

    def run(self, reader: LineReader, mode: RunMode) -> bool:
        state = LoopState(mode=mode)
        try:
            return self._run(reader, state)
        finally:
            self._close_statement_set(state)

    def _run(self, reader: LineReader, state: LoopState) -> bool:
        while state.running:
            # make some space to the previous command
            self.terminal.println()
            self.terminal.flush()

            try:
                line = reader.read_statement(self.prompt)
                if not line.strip():
                    continue
                operation = self.parser.parse(line)
                if self.parser.command != line:
                    raise InvariantViolation(
                        f"Statement read [{line}] is not the statement parsed [{self.parser.command}]."
                    )
            except KeyboardInterrupt:
                # user cancelled the line
                continue
            except EOFError:
                # user closed the input
                break
            except OSError:
                logger.info("Input channel closed", exc_info=True)
                self.reporter.info(messages.MESSAGE_INPUT_CLOSED)
                break
            except SqlParseError as e:
                self.reporter.report(e)
                if state.mode.exit_on_failure:
                    return False
                continue
            except Exception as e:
                self.reporter.report(e)
                return False

            # nothing to run for this statement
            if operation is None:
                continue

            if not self._execute(operation, state):
                return False

        return True

    def _execute(self, operation: Operation, state: LoopState) -> bool:
        """Dispatch one operation; False means the run must stop."""
        try:
            with self.terminal.interrupt_scope():
                self.dispatcher.dispatch(operation, state)
        except InvariantViolation as e:
            self.reporter.report(e)
            return False
        except Exception as e:
            self.reporter.report(e)
            return not state.mode.exit_on_failure
        return True

    def _close_statement_set(self, state: LoopState) -> None:
        if not state.statement_set.active:
            return
        discarded = state.statement_set.abandon()
        logger.warning("Input ended inside a statement set, discarding %d statement(s)", len(discarded))
        self.reporter.warning(messages.MESSAGE_STATEMENT_SET_ABANDONED.format(count=len(discarded)))
