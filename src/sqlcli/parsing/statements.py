"""Splitting SQL text into statements."""

from __future__ import annotations

import re

_STATEMENT_SET_START = re.compile(r"^\s*execute\s+statement\s+set\s+begin\b", re.IGNORECASE)
_STATEMENT_SET_END = re.compile(r"\bend\s*$", re.IGNORECASE)


def _inside_statement_set(text: str) -> bool:
    """True while an EXECUTE STATEMENT SET block has not reached its END."""
    return bool(_STATEMENT_SET_START.match(text)) and not _STATEMENT_SET_END.search(text)


def _scan(content: str) -> tuple[list[tuple[int, str]], int, str]:
    """Split content on top-level semicolons.

    Returns the complete statements as (offset, text) pairs, the offset
    where the unterminated remainder starts and that remainder. Comments
    are blanked out with spaces so offsets still point into the original
    content. Semicolons inside quotes, backticks and EXECUTE STATEMENT SET
    blocks do not end a statement.
    """
    statements = []
    current: list[str] = []
    start = 0
    quote: str | None = None
    i = 0
    n = len(content)

    while i < n:
        ch = content[i]

        # A doubled quote ('') closes and reopens the string
        if quote:
            current.append(ch)
            if ch == quote:
                quote = None
            i += 1
            continue

        if ch in "'`\"":
            quote = ch
            current.append(ch)
            i += 1
            continue

        if content.startswith("--", i):
            end = content.find("\n", i)
            end = n if end == -1 else end
            current.append(" " * (end - i))
            i = end
            continue

        if content.startswith("/*", i):
            end = content.find("*/", i + 2)
            end = n if end == -1 else end + 2
            current.append(re.sub(r"[^\n]", " ", content[i:end]))
            i = end
            continue

        if ch == ";":
            current.append(ch)
            text = "".join(current)
            if not _inside_statement_set(text[:-1]):
                stripped = text.strip()
                if stripped != ";":
                    offset = start + (len(text) - len(text.lstrip()))
                    statements.append((offset, stripped))
                start = i + 1
                current = []
            i += 1
            continue

        current.append(ch)
        i += 1

    return statements, start, "".join(current)


def iter_statements(content: str) -> list[tuple[int, str]]:
    """All statements with their offsets, including an unterminated last one."""
    statements, rest, remainder = _scan(content)
    if remainder.strip():
        offset = rest + (len(remainder) - len(remainder.lstrip()))
        statements.append((offset, remainder.strip()))
    return statements


def split_statements(content: str) -> list[str]:
    """Split a script into statements, comments removed.

    Every statement keeps its terminating semicolon; a trailing statement
    without one is returned as is.
    """
    return [text for _, text in iter_statements(content)]


def is_statement_complete(buffer: str) -> bool:
    """True once the buffer holds a terminated statement and nothing after it."""
    statements, _, remainder = _scan(buffer)
    return bool(statements) and not remainder.strip()
