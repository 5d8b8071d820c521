"""Parser for SQL client statements."""

from __future__ import annotations

import re
from typing import Any

import ply.yacc as yacc

from sqlcli.errors import SqlParseError
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
from sqlcli.parsing.statement_lexer import StatementLexer

# SET 'key' = 'value' and the legacy unquoted SET key=value
_SET_RE = re.compile(r"^('(?:[^']|'')*'|[^=\s]+)\s*=\s*(.*)$", re.DOTALL)
_RESET_RE = re.compile(r"^('(?:[^']|'')*'|\S+)$")

_LITERAL_TYPES = frozenset({"INTEGER", "FLOAT", "STRING", "TRUE", "FALSE", "NULL"})

# Leading words of a column definition that declare a constraint instead
_CONSTRAINT_WORDS = frozenset({"primary", "watermark", "constraint", "unique", "period"})


def _unquote(text: str) -> str:
    text = text.strip()
    if len(text) >= 2 and text[0] == "'" and text[-1] == "'":
        return text[1:-1].replace("''", "'")
    return text


def _literal_value(tokens: list[Any], i: int) -> tuple[Any, int] | None:
    """Read one literal at ``tokens[i]``; return (value, next index) or None."""
    if i >= len(tokens):
        return None
    tok = tokens[i]
    if tok.type == "MINUS" and i + 1 < len(tokens) and tokens[i + 1].type in ("INTEGER", "FLOAT"):
        return -tokens[i + 1].value, i + 2
    if tok.type not in _LITERAL_TYPES:
        return None
    if tok.type == "TRUE":
        return True, i + 1
    if tok.type == "FALSE":
        return False, i + 1
    if tok.type == "NULL":
        return None, i + 1
    return tok.value, i + 1


def _literal_list(tokens: list[Any], i: int, closing: str | None) -> tuple[tuple[Any, ...], int] | None:
    """Read ``lit, lit, ...`` up to ``closing`` (or the end when None)."""
    values = []
    while True:
        read = _literal_value(tokens, i)
        if read is None:
            return None
        value, i = read
        values.append(value)
        if i < len(tokens) and tokens[i].type == "COMMA":
            i += 1
            continue
        break
    if closing is None:
        return (tuple(values), i) if i == len(tokens) else None
    if i < len(tokens) and tokens[i].type == closing:
        return tuple(values), i + 1
    return None


def _values_rows(tokens: list[Any]) -> tuple[tuple[Any, ...], ...] | None:
    """Literal rows of ``[(col, ...)] VALUES (...), (...)``, or None."""
    i = 0
    if i < len(tokens) and tokens[i].type == "LPAREN":
        while i < len(tokens) and tokens[i].type != "RPAREN":
            i += 1
        i += 1
    if i >= len(tokens) or tokens[i].type != "VALUES":
        return None
    i += 1
    rows = []
    while i < len(tokens):
        if tokens[i].type != "LPAREN":
            return None
        read = _literal_list(tokens, i + 1, "RPAREN")
        if read is None:
            return None
        row, i = read
        rows.append(row)
        if i < len(tokens) and tokens[i].type == "COMMA":
            i += 1
        elif i < len(tokens):
            return None
    return tuple(rows) if rows else None


def _column_names(tokens: list[Any]) -> tuple[str, ...]:
    """Column names from the parenthesised schema of a CREATE TABLE."""
    if not tokens or tokens[0].type != "LPAREN":
        return ()
    names = []
    depth = 0
    expect_name = True
    for tok in tokens:
        if tok.type == "LPAREN":
            depth += 1
            continue
        if tok.type == "RPAREN":
            depth -= 1
            if depth == 0:
                break
            continue
        if depth != 1:
            continue
        if tok.type == "COMMA":
            expect_name = True
            continue
        if expect_name:
            expect_name = False
            if tok.type == "IDENTIFIER" and tok.value.lower() not in _CONSTRAINT_WORDS:
                names.append(tok.value)
    return tuple(names)


class StatementParser:
    """Parser for SQL client statements.

    ``parse`` takes the text of one statement (an optional trailing
    semicolon included) and returns its operation, or None for an empty
    statement. The text of the last parsed statement stays in ``command``.
    """

    tokens = StatementLexer.tokens

    def __init__(self) -> None:
        self.lexer = StatementLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self.command: str | None = None
        self._source = ""
        self._end = 0

    # --- Statements ---

    def p_statement(self, p: yacc.YaccProduction) -> None:
        """statement : command SEMICOLON
                     | command"""
        p[0] = p[1]

    def p_statement_empty(self, p: yacc.YaccProduction) -> None:
        """statement : SEMICOLON
                     | """
        p[0] = None

    def p_command_quit(self, p: yacc.YaccProduction) -> None:
        """command : QUIT
                   | EXIT"""
        p[0] = QuitOperation()

    def p_command_clear(self, p: yacc.YaccProduction) -> None:
        """command : CLEAR"""
        p[0] = ClearOperation()

    def p_command_help(self, p: yacc.YaccProduction) -> None:
        """command : HELP"""
        p[0] = HelpOperation()

    def p_command_set(self, p: yacc.YaccProduction) -> None:
        """command : SET tail"""
        raw = self._text(p.lexpos(1) + len("set"))
        if not raw:
            p[0] = SetOperation()
            return
        m = _SET_RE.match(raw)
        if not m:
            raise SqlParseError(f"Syntax error in SET, expected 'key' = 'value' (position {p.lexpos(1)})", p.lexpos(1))
        p[0] = SetOperation(key=_unquote(m.group(1)), value=_unquote(m.group(2)))

    def p_command_reset(self, p: yacc.YaccProduction) -> None:
        """command : RESET tail"""
        raw = self._text(p.lexpos(1) + len("reset"))
        if not raw:
            p[0] = ResetOperation()
            return
        if not _RESET_RE.match(raw):
            raise SqlParseError(f"Syntax error in RESET, expected 'key' (position {p.lexpos(1)})", p.lexpos(1))
        p[0] = ResetOperation(key=_unquote(raw))

    def p_command_begin_statement_set(self, p: yacc.YaccProduction) -> None:
        """command : BEGIN STATEMENT SET"""
        p[0] = BeginStatementSetOperation()

    def p_command_end(self, p: yacc.YaccProduction) -> None:
        """command : END"""
        p[0] = EndStatementSetOperation()

    def p_command_execute_statement_set(self, p: yacc.YaccProduction) -> None:
        """command : EXECUTE STATEMENT SET BEGIN insert_list END"""
        p[0] = StatementSetOperation(operations=tuple(p[5]))

    def p_insert_list_single(self, p: yacc.YaccProduction) -> None:
        """insert_list : insert SEMICOLON"""
        p[0] = [self._sink_modify(p[1], p.lexpos(2))]

    def p_insert_list_multiple(self, p: yacc.YaccProduction) -> None:
        """insert_list : insert_list insert SEMICOLON"""
        p[0] = p[1] + [self._sink_modify(p[2], p.lexpos(3))]

    def p_command_insert(self, p: yacc.YaccProduction) -> None:
        """command : insert"""
        p[0] = self._sink_modify(p[1], None)

    def p_insert(self, p: yacc.YaccProduction) -> None:
        """insert : INSERT INTO IDENTIFIER tail
                  | INSERT OVERWRITE IDENTIFIER tail"""
        p[0] = (p.lexpos(1), p[3], p.slice[2].type == "OVERWRITE", p[4])

    def p_command_query(self, p: yacc.YaccProduction) -> None:
        """command : SELECT tail
                   | WITH tail"""
        p[0] = self._query(p.lexpos(1), p.slice[1].type, p[2])

    def p_command_explain(self, p: yacc.YaccProduction) -> None:
        """command : EXPLAIN tail"""
        if not p[2]:
            raise SqlParseError(f"EXPLAIN requires a statement (position {p.lexpos(1)})", p.lexpos(1))
        target = self._text(p.lexpos(1) + len("explain"))
        target = re.sub(r"^plan\s+for\s+", "", target, flags=re.IGNORECASE)
        p[0] = ExplainOperation(statement=self._text(p.lexpos(1)), target=target)

    def p_command_add_jar(self, p: yacc.YaccProduction) -> None:
        """command : ADD JAR STRING"""
        p[0] = AddJarOperation(path=p[3])

    def p_command_remove_jar(self, p: yacc.YaccProduction) -> None:
        """command : REMOVE JAR STRING"""
        p[0] = RemoveJarOperation(path=p[3])

    def p_command_show(self, p: yacc.YaccProduction) -> None:
        """command : SHOW JARS
                   | SHOW JOBS
                   | SHOW TABLES
                   | SHOW VIEWS
                   | SHOW DATABASES
                   | SHOW CATALOGS
                   | SHOW MODULES
                   | SHOW FUNCTIONS"""
        p[0] = ShowOperation(what=p.slice[2].type)

    def p_command_show_create_table(self, p: yacc.YaccProduction) -> None:
        """command : SHOW CREATE TABLE IDENTIFIER"""
        p[0] = ShowCreateTableOperation(name=p[4])

    def p_command_show_create_view(self, p: yacc.YaccProduction) -> None:
        """command : SHOW CREATE VIEW IDENTIFIER"""
        p[0] = ShowCreateViewOperation(name=p[4])

    def p_command_stop_job(self, p: yacc.YaccProduction) -> None:
        """command : STOP JOB STRING stop_options"""
        options = p[4]
        p[0] = StopJobOperation(
            job_id=p[3],
            with_savepoint="SAVEPOINT" in options,
            with_drain="DRAIN" in options,
        )

    def p_stop_options_empty(self, p: yacc.YaccProduction) -> None:
        """stop_options : """
        p[0] = set()

    def p_stop_options(self, p: yacc.YaccProduction) -> None:
        """stop_options : stop_options WITH SAVEPOINT
                        | stop_options WITH DRAIN"""
        p[0] = p[1] | {p.slice[3].type}

    def p_command_create(self, p: yacc.YaccProduction) -> None:
        """command : CREATE temporary_opt object_kind if_not_exists_opt IDENTIFIER tail"""
        start = p.lexpos(1)
        kind, name, tail = p[3], p[5], p[6]
        if tail and tail[0].type == "AS" and kind in ("TABLE", "VIEW"):
            query = self._query_from(tail[1:])
            if kind == "TABLE":
                p[0] = CreateTableAsOperation(table=name, statement=self._text(start), query=query)
                return
            p[0] = CreateOperation(
                kind=kind, name=name, statement=self._text(start),
                if_not_exists=p[4], temporary=p[2], query=query,
            )
            return
        p[0] = CreateOperation(
            kind=kind, name=name, statement=self._text(start),
            if_not_exists=p[4], temporary=p[2],
            columns=_column_names(tail) if kind == "TABLE" else (),
        )

    def p_command_drop(self, p: yacc.YaccProduction) -> None:
        """command : DROP temporary_opt object_kind if_exists_opt IDENTIFIER tail"""
        p[0] = DropOperation(kind=p[3], name=p[5], if_exists=p[4], temporary=p[2])

    def p_command_alter(self, p: yacc.YaccProduction) -> None:
        """command : ALTER object_kind IDENTIFIER tail"""
        tail = p[4]
        new_name = None
        if len(tail) == 3 and tail[0].type == "RENAME" and tail[1].type == "TO" and tail[2].type == "IDENTIFIER":
            new_name = tail[2].value
        p[0] = AlterOperation(kind=p[2], name=p[3], statement=self._text(p.lexpos(1)), new_name=new_name)

    def p_command_use(self, p: yacc.YaccProduction) -> None:
        """command : USE IDENTIFIER"""
        p[0] = UseOperation(name=p[2])

    def p_command_use_catalog(self, p: yacc.YaccProduction) -> None:
        """command : USE CATALOG IDENTIFIER"""
        p[0] = UseOperation(name=p[3], catalog=True)

    def p_command_load_module(self, p: yacc.YaccProduction) -> None:
        """command : LOAD MODULE IDENTIFIER tail"""
        p[0] = LoadModuleOperation(name=p[3])

    def p_command_unload_module(self, p: yacc.YaccProduction) -> None:
        """command : UNLOAD MODULE IDENTIFIER"""
        p[0] = UnloadModuleOperation(name=p[3])

    def p_command_describe(self, p: yacc.YaccProduction) -> None:
        """command : DESCRIBE IDENTIFIER
                   | DESC IDENTIFIER"""
        p[0] = DescribeOperation(name=p[2])

    # --- Shared pieces ---

    def p_object_kind(self, p: yacc.YaccProduction) -> None:
        """object_kind : TABLE
                       | VIEW
                       | DATABASE
                       | CATALOG
                       | FUNCTION"""
        p[0] = p.slice[1].type

    def p_temporary_opt(self, p: yacc.YaccProduction) -> None:
        """temporary_opt : TEMPORARY
                         | """
        p[0] = len(p) > 1

    def p_if_not_exists_opt(self, p: yacc.YaccProduction) -> None:
        """if_not_exists_opt : IF NOT EXISTS
                             | """
        p[0] = len(p) > 1

    def p_if_exists_opt(self, p: yacc.YaccProduction) -> None:
        """if_exists_opt : IF EXISTS
                         | """
        p[0] = len(p) > 1

    def p_tail_empty(self, p: yacc.YaccProduction) -> None:
        """tail : """
        p[0] = []

    def p_tail(self, p: yacc.YaccProduction) -> None:
        """tail : tail any_token"""
        p[0] = p[1] + [p[2]]

    def p_any_token(self, p: yacc.YaccProduction) -> None:
        p[0] = p.slice[1]

    p_any_token.__doc__ = "any_token : " + "\n| ".join(
        t for t in StatementLexer.tokens if t != "SEMICOLON"
    )

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SqlParseError(f"Syntax error at '{p.value}' (position {p.lexpos})", p.lexpos)
        else:
            raise SqlParseError("Syntax error at end of input")

    # --- Helpers ---

    def _text(self, start: int, end: int | None = None) -> str:
        """Source text from ``start`` to ``end`` (default: end of statement)."""
        stop = self._end if end is None else end
        return self._source[start:stop].strip()

    def _query_from(self, tokens: list[Any]) -> QueryOperation:
        if not tokens or tokens[0].type not in ("SELECT", "WITH"):
            pos = tokens[0].lexpos if tokens else None
            raise SqlParseError(f"Expected a query after AS (position {pos})", pos)
        return self._query(tokens[0].lexpos, tokens[0].type, tokens[1:])

    def _query(self, start: int, keyword: str, tail: list[Any], end: int | None = None) -> QueryOperation:
        statement = self._text(start, end)
        if keyword != "SELECT":
            return QueryOperation(statement=statement)
        types = [t.type for t in tail]
        if types[:3] == ["STAR", "FROM", "IDENTIFIER"]:
            if len(types) == 3:
                return QueryOperation(statement=statement, table=tail[2].value)
            if types[3:] == ["LIMIT", "INTEGER"]:
                return QueryOperation(statement=statement, table=tail[2].value, limit=tail[4].value)
        read = _literal_list(tail, 0, None)
        if read is not None:
            return QueryOperation(statement=statement, literals=read[0])
        return QueryOperation(statement=statement)

    def _sink_modify(self, insert: tuple[int, str, bool, list[Any]], end: int | None) -> SinkModifyOperation:
        start, table, overwrite, tail = insert
        source = None
        select_at = next((i for i, t in enumerate(tail) if t.type in ("SELECT", "WITH")), None)
        if select_at is not None:
            head = tail[select_at]
            source = self._query(head.lexpos, head.type, tail[select_at + 1:], end)
        return SinkModifyOperation(
            table=table,
            statement=self._text(start, end),
            overwrite=overwrite,
            values=_values_rows(tail),
            source=source,
        )

    def _statement_end(self, data: str) -> int:
        """Offset of the terminating semicolon, or the length of the text."""
        tokens = self.lexer.tokenize(data)
        if tokens and tokens[-1].type == "SEMICOLON":
            return tokens[-1].lexpos
        return len(data)

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, start="statement", **kwargs)

    def parse(self, data: str) -> Operation | None:
        """Parse one statement."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        self.command = data
        self._source = data
        self._end = self._statement_end(data)
        self.lexer.input(data)
        return self.parser.parse(data, lexer=self.lexer.lexer)
