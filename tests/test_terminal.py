"""Tests for terminal output and statement readers."""

import signal

import pytest

from sqlcli.messages import CONTINUATION_PROMPT
from sqlcli.terminal import CLEAR_SCREEN, InteractiveLineReader, ScriptLineReader, Terminal


def _feed_input(monkeypatch, lines):
    """Replace input() with one returning ``lines`` in turn, then EOFError."""
    remaining = list(lines)
    prompts = []

    def fake_input(prompt=""):
        prompts.append(prompt)
        if not remaining:
            raise EOFError
        return remaining.pop(0)

    monkeypatch.setattr("builtins.input", fake_input)
    return prompts


class TestTerminal:
    def test_println(self, terminal, output):
        terminal.println("hello")
        terminal.println()
        assert output.getvalue() == "hello\n\n"

    def test_clear_ansi(self, output):
        Terminal(output).clear()
        assert output.getvalue() == CLEAR_SCREEN

    def test_clear_dumb(self, terminal, output):
        terminal.clear()
        assert output.getvalue() == "\n" * 200

    def test_interrupt_scope_sets_flag(self, terminal):
        with terminal.interrupt_scope() as interrupted:
            assert not interrupted.is_set()
            signal.raise_signal(signal.SIGINT)
            assert interrupted.is_set()

    def test_interrupt_scope_restores_handler(self, terminal):
        before = signal.getsignal(signal.SIGINT)
        with pytest.raises(RuntimeError):
            with terminal.interrupt_scope():
                assert signal.getsignal(signal.SIGINT) is not before
                raise RuntimeError("statement failed")
        assert signal.getsignal(signal.SIGINT) is before

    def test_interrupt_flag_cleared_on_entry(self, terminal):
        terminal.interrupt_requested.set()
        with terminal.interrupt_scope() as interrupted:
            assert not interrupted.is_set()

    def test_close_after_stream_closed(self, output):
        terminal = Terminal(output)
        output.close()
        terminal.close()


class TestScriptLineReader:
    def test_reads_statements_then_eof(self, terminal):
        reader = ScriptLineReader("SET;\nQUIT;", terminal, echo=False)
        assert reader.read_statement("SQL> ") == "SET;"
        assert reader.read_statement("SQL> ") == "QUIT;"
        with pytest.raises(EOFError):
            reader.read_statement("SQL> ")

    def test_echo(self, terminal, output):
        reader = ScriptLineReader("SELECT *\nFROM t;", terminal)
        reader.read_statement("SQL> ")
        assert output.getvalue() == f"SQL> SELECT *\n{CONTINUATION_PROMPT}FROM t;\n"


class TestInteractiveLineReader:
    def test_single_line(self, monkeypatch):
        _feed_input(monkeypatch, ["SHOW TABLES;"])
        assert InteractiveLineReader().read_statement("SQL> ") == "SHOW TABLES;"

    def test_continuation(self, monkeypatch):
        prompts = _feed_input(monkeypatch, ["SELECT *", "FROM t", ";"])
        assert InteractiveLineReader().read_statement("SQL> ") == "SELECT *\nFROM t\n;"
        assert prompts == ["SQL> ", CONTINUATION_PROMPT, CONTINUATION_PROMPT]

    def test_several_statements_on_one_line(self, monkeypatch):
        _feed_input(monkeypatch, ["SET 'a' = 'b'; RESET;"])
        reader = InteractiveLineReader()
        assert reader.read_statement("SQL> ") == "SET 'a' = 'b';"
        assert reader.read_statement("SQL> ") == "RESET;"

    def test_blank_line(self, monkeypatch):
        _feed_input(monkeypatch, ["   "])
        assert InteractiveLineReader().read_statement("SQL> ") == ""

    def test_eof(self, monkeypatch):
        _feed_input(monkeypatch, [])
        with pytest.raises(EOFError):
            InteractiveLineReader().read_statement("SQL> ")

    def test_history_file_written(self, tmp_path, monkeypatch):
        history = tmp_path / "history"
        _feed_input(monkeypatch, ["SHOW JOBS;"])
        reader = InteractiveLineReader(history)
        reader.read_statement("SQL> ")
        reader.close()
        assert history.exists()
