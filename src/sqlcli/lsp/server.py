"""SQL client language server: diagnostics, completion, hover via pygls."""

from __future__ import annotations

import re

from lsprotocol import types
from pygls.lsp.server import LanguageServer

from sqlcli.config import OPTIONS
from sqlcli.errors import SqlParseError
from sqlcli.parsing import StatementParser, iter_statements

# ---------------------------------------------------------------------------
# Static data
# ---------------------------------------------------------------------------

KEYWORDS: dict[str, str] = {
    "quit": "Leave the client",
    "exit": "Leave the client",
    "clear": "Clear the terminal",
    "help": "Print the list of client commands",
    "set": "Set a session property ('key' = 'value'), or list all of them",
    "reset": "Reset one session property, or all of them, to the defaults",
    "begin": "Start a statement set (begin statement set)",
    "end": "Submit the open statement set as one job",
    "statement": "Used with 'begin statement set' and 'execute statement set'",
    "execute": "Run a statement set block in one statement",
    "add": "Register a jar with the session (add jar '<path>')",
    "remove": "Unregister a jar from the session (remove jar '<path>')",
    "jar": "A jar file used by the session",
    "jars": "List the jars registered with the session (show jars)",
    "show": "Display catalog metadata, jobs or jars",
    "create": "Create a table, view, database, catalog or function",
    "drop": "Drop a table, view, database, catalog or function",
    "alter": "Change a table, view, database, catalog or function",
    "use": "Switch the current database, or catalog with 'use catalog'",
    "load": "Load a module (load module <name>)",
    "unload": "Unload a module (unload module <name>)",
    "stop": "Stop a running job (stop job '<id>')",
    "job": "A submitted job",
    "jobs": "List submitted jobs (show jobs)",
    "savepoint": "Take a savepoint when stopping a job",
    "drain": "Drain the job's sources before it stops",
    "explain": "Print the execution plan of a statement",
    "select": "Query rows",
    "insert": "Write rows into a table (insert into / insert overwrite)",
    "overwrite": "Replace the content of the target table",
    "values": "Literal rows of an insert",
    "describe": "Show the columns of a table or view",
    "desc": "Short form of describe",
    "temporary": "Create or drop a session-scoped object",
}

# Regex to find the SET/RESET key being typed
_SET_KEY_RE = re.compile(r"^\s*(?:set|reset)\s+'([^']*)$", re.IGNORECASE)

# ---------------------------------------------------------------------------
# Helpers (module-level so they are easy to unit-test)
# ---------------------------------------------------------------------------


def lexpos_to_position(source: str, lexpos: int) -> types.Position:
    """Convert a character offset into an LSP ``Position(line, character)``."""
    line = source.count("\n", 0, lexpos)
    last_nl = source.rfind("\n", 0, lexpos)
    character = lexpos if last_nl == -1 else lexpos - last_nl - 1
    return types.Position(line=line, character=character)


def _word_at_position(line_text: str, character: int) -> str:
    """Return the contiguous identifier-like word surrounding *character*."""
    if character < 0 or character >= len(line_text):
        return ""
    ch = line_text[character]
    if not (ch.isalnum() or ch == "_"):
        return ""
    # Scan left
    left = character
    while left > 0 and (line_text[left - 1].isalnum() or line_text[left - 1] == "_"):
        left -= 1
    # Scan right
    right = character
    while right < len(line_text) and (line_text[right].isalnum() or line_text[right] == "_"):
        right += 1
    return line_text[left:right]


def document_diagnostics(source: str, parser: StatementParser | None = None) -> list[types.Diagnostic]:
    """Parse every statement of *source* and report the ones that fail."""
    parser = parser if parser is not None else StatementParser()
    diagnostics: list[types.Diagnostic] = []
    for offset, text in iter_statements(source):
        try:
            parser.parse(text)
        except SqlParseError as exc:
            # A missing position means the statement ended too early
            pos = offset + (exc.position if exc.position is not None else len(text))
            start = lexpos_to_position(source, pos)
            end = types.Position(line=start.line, character=start.character + 1)
            diagnostics.append(
                types.Diagnostic(
                    range=types.Range(start=start, end=end),
                    severity=types.DiagnosticSeverity.Error,
                    source="sqlcli",
                    message=str(exc),
                )
            )
    return diagnostics


def completion_items(line_prefix: str) -> list[types.CompletionItem]:
    """Config keys inside a SET/RESET key, keywords everywhere else."""
    if _SET_KEY_RE.match(line_prefix):
        return [
            types.CompletionItem(
                label=key,
                kind=types.CompletionItemKind.Property,
                detail=option.description,
            )
            for key, option in sorted(OPTIONS.items())
        ]
    return [
        types.CompletionItem(
            label=name.upper(),
            kind=types.CompletionItemKind.Keyword,
            detail=desc,
        )
        for name, desc in KEYWORDS.items()
    ]


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

server = LanguageServer("sqlcli-language-server", "0.1.0")
_parser = StatementParser()


@server.feature(types.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: types.DidOpenTextDocumentParams) -> None:
    _validate_document(params.text_document.uri)


@server.feature(types.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: types.DidChangeTextDocumentParams) -> None:
    _validate_document(params.text_document.uri)


def _validate_document(uri: str) -> None:
    doc = server.workspace.get_text_document(uri)
    server.text_document_publish_diagnostics(
        types.PublishDiagnosticsParams(uri=uri, diagnostics=document_diagnostics(doc.source, _parser))
    )


@server.feature(
    types.TEXT_DOCUMENT_COMPLETION,
    types.CompletionOptions(trigger_characters=["'", " "]),
)
def completions(params: types.CompletionParams) -> types.CompletionList:
    doc = server.workspace.get_text_document(params.text_document.uri)
    line_text = doc.lines[params.position.line] if params.position.line < len(doc.lines) else ""
    items = completion_items(line_text[: params.position.character])
    return types.CompletionList(is_incomplete=False, items=items)


@server.feature(types.TEXT_DOCUMENT_HOVER)
def hover(params: types.HoverParams) -> types.Hover | None:
    doc = server.workspace.get_text_document(params.text_document.uri)
    if params.position.line >= len(doc.lines):
        return None
    line_text = doc.lines[params.position.line]
    word = _word_at_position(line_text, params.position.character)
    lower = word.lower()
    if lower not in KEYWORDS:
        return None
    return types.Hover(
        contents=types.MarkupContent(
            kind=types.MarkupKind.Markdown,
            value=f"**{lower.upper()}**: {KEYWORDS[lower]}",
        )
    )


def main() -> None:
    server.start_io()


if __name__ == "__main__":
    main()
