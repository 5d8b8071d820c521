"""Terminal output and statement readers."""

from __future__ import annotations

import logging
import readline  # noqa: F401 - enables line editing in input()
import signal
import sys
import threading
from collections import deque
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Protocol, TextIO

from sqlcli.messages import CONTINUATION_PROMPT
from sqlcli.parsing.statements import is_statement_complete, split_statements

logger = logging.getLogger(__name__)

CLEAR_SCREEN = "\033[2J\033[H"


class Terminal:
    """Line-oriented output sink with screen clearing and interrupt wiring.

    A dumb terminal (files, captured output) has no cursor control, so
    clearing it scrolls the old content away instead.
    """

    def __init__(self, output: TextIO | None = None, dumb: bool = False) -> None:
        self.output = output if output is not None else sys.stdout
        self.dumb = dumb
        self.interrupt_requested = threading.Event()

    def write(self, text: str) -> None:
        self.output.write(text)

    def println(self, text: str = "") -> None:
        self.output.write(text + "\n")

    def flush(self) -> None:
        self.output.flush()

    def clear(self) -> None:
        if self.dumb:
            self.output.write("\n" * 200)
        else:
            self.output.write(CLEAR_SCREEN)
        self.flush()

    @contextmanager
    def interrupt_scope(self) -> Iterator[threading.Event]:
        """Turn SIGINT into a cooperative interrupt request while the block runs.

        The previous handler is restored on every exit path. Outside the
        main thread signals cannot be handled, so only the event is reset.
        """
        self.interrupt_requested.clear()
        if threading.current_thread() is not threading.main_thread():
            yield self.interrupt_requested
            return

        def request_interrupt(signum: int, frame: object) -> None:
            logger.debug("Interrupt requested for the running statement")
            self.interrupt_requested.set()

        previous = signal.signal(signal.SIGINT, request_interrupt)
        try:
            yield self.interrupt_requested
        finally:
            signal.signal(signal.SIGINT, previous if previous is not None else signal.SIG_DFL)

    def close(self) -> None:
        try:
            self.flush()
        except ValueError:
            # Output stream already closed
            pass


class LineReader(Protocol):
    """Source of statements for the loop.

    ``read_statement`` raises EOFError at end of input and KeyboardInterrupt
    when the user cancels the current line.
    """

    def read_statement(self, prompt: str) -> str:
        ...


class InteractiveLineReader:
    """Reads statements from the user, continuing lines until a ';' ends them."""

    def __init__(self, history_file: Path | None = None) -> None:
        self.history_file = history_file
        self._pending: deque[str] = deque()
        if history_file is not None:
            try:
                readline.read_history_file(history_file)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("Unable to read history file %s: %s", history_file, e)

    def read_statement(self, prompt: str) -> str:
        if self._pending:
            return self._pending.popleft()

        buffer = input(prompt)
        while True:
            statements = split_statements(buffer)
            if not statements:
                # Only whitespace or comments so far
                return ""
            if is_statement_complete(buffer):
                break
            buffer += "\n" + input(CONTINUATION_PROMPT)

        self._pending.extend(statements[1:])
        return statements[0]

    def close(self) -> None:
        if self.history_file is None:
            return
        try:
            readline.set_history_length(1000)
            readline.write_history_file(self.history_file)
        except OSError as e:
            logger.warning("Unable to write history file %s: %s", self.history_file, e)


class ScriptLineReader:
    """Reads the statements of a script, echoing each one after the prompt."""

    def __init__(self, content: str, terminal: Terminal, echo: bool = True) -> None:
        self.terminal = terminal
        self.echo = echo
        self._statements = deque(split_statements(content))

    def read_statement(self, prompt: str) -> str:
        if not self._statements:
            raise EOFError
        statement = self._statements.popleft()
        if self.echo:
            lines = statement.split("\n")
            self.terminal.println(prompt + lines[0])
            for line in lines[1:]:
                self.terminal.println(CONTINUATION_PROMPT + line)
        return statement
