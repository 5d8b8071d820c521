"""Parsing of SQL client statements."""

from sqlcli.parsing.statement_lexer import RESERVED_KEYWORDS, StatementLexer
from sqlcli.parsing.statement_parser import StatementParser
from sqlcli.parsing.statements import is_statement_complete, iter_statements, split_statements

__all__ = [
    "RESERVED_KEYWORDS",
    "StatementLexer",
    "StatementParser",
    "is_statement_complete",
    "iter_statements",
    "split_statements",
]
