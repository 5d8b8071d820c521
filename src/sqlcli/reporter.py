"""Reports failures and status messages on the terminal."""

from __future__ import annotations

import logging

from sqlcli import messages
from sqlcli.config import VERBOSE
from sqlcli.errors import InvariantViolation
from sqlcli.gateway import Executor
from sqlcli.terminal import Terminal

logger = logging.getLogger(__name__)


class ErrorReporter:
    """Formats failures for the user without ever raising itself."""

    def __init__(self, terminal: Terminal, executor: Executor) -> None:
        self.terminal = terminal
        self.executor = executor

    def _is_verbose(self) -> bool:
        try:
            return bool(self.executor.get_config_value(VERBOSE))
        except Exception:
            logger.debug("Could not read %s, reporting tersely", VERBOSE.key, exc_info=True)
            return False

    def report(self, error: BaseException) -> None:
        if isinstance(error, InvariantViolation):
            message = messages.MESSAGE_INTERNAL_ERROR
            logger.error(message, exc_info=error)
        else:
            message = messages.MESSAGE_SQL_EXECUTION_ERROR
            logger.warning(message, exc_info=error)

        verbose = self._is_verbose()
        if isinstance(error, InvariantViolation) and not verbose:
            text = messages.message_error(f"{message} {error}")
        else:
            text = messages.message_error(message, error, verbose)
        self._emit(text)

    def info(self, message: str) -> None:
        self._emit(messages.message_info(message))

    def warning(self, message: str) -> None:
        self._emit(messages.message_warning(message))

    def _emit(self, text: str) -> None:
        try:
            self.terminal.println(text)
            self.terminal.flush()
        except (OSError, ValueError):
            # The sink is gone; the failure is already in the log
            logger.debug("Could not write to terminal: %s", text, exc_info=True)
