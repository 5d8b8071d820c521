"""Entry points for interactive, script and initialization runs."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from sqlcli import messages
from sqlcli.gateway import Executor
from sqlcli.loop import ReadEvalLoop
from sqlcli.state import RunMode
from sqlcli.terminal import InteractiveLineReader, ScriptLineReader, Terminal

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_FILE = Path.home() / ".sqlcli_history"


class CliClient:
    """SQL client bound to one executor."""

    def __init__(
        self,
        executor: Executor,
        terminal: Terminal | None = None,
        history_file: Path | None = DEFAULT_HISTORY_FILE,
    ) -> None:
        self.executor = executor
        self.terminal = terminal if terminal is not None else Terminal()
        self.history_file = history_file

    def execute_interactive(self) -> bool:
        """Run the interactive shell until QUIT or end of input."""
        # make space from previous output and test the writer
        self.terminal.println()
        self.terminal.write(messages.MESSAGE_WELCOME)
        self.terminal.flush()

        reader = InteractiveLineReader(self._prepare_history_file())
        try:
            return ReadEvalLoop(self.executor, self.terminal).run(reader, RunMode.INTERACTIVE)
        finally:
            reader.close()
            self.terminal.close()

    def execute_file(self, content: str) -> bool:
        """Run a script; the first failing statement stops it."""
        self.terminal.println(messages.message_info(messages.MESSAGE_EXECUTE_FILE))
        reader = ScriptLineReader(content, self.terminal)
        try:
            return ReadEvalLoop(self.executor, self.terminal).run(reader, RunMode.NON_INTERACTIVE)
        finally:
            self.terminal.close()

    def execute_initialization(self, content: str) -> bool:
        """Run an initialization script; its output goes to the log, not the screen."""
        output = io.StringIO()
        terminal = Terminal(output, dumb=True)
        reader = ScriptLineReader(content, terminal)
        success = ReadEvalLoop(self.executor, terminal).run(reader, RunMode.INITIALIZATION)
        logger.info(output.getvalue())
        if not success:
            # the failure would otherwise only be visible in the log
            self.terminal.write(output.getvalue())
            self.terminal.flush()
        return success

    def _prepare_history_file(self) -> Path | None:
        if self.history_file is None:
            return None
        try:
            self.history_file.parent.mkdir(parents=True, exist_ok=True)
            self.history_file.touch(exist_ok=True)
        except OSError:
            msg = f"Unable to create history file: {self.history_file}"
            self.terminal.println(msg)
            logger.warning(msg)
            return None
        msg = f"Command history file path: {self.history_file}"
        self.terminal.println(msg)
        logger.info(msg)
        return self.history_file
