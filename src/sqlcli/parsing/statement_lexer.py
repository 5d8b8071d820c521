"""Lexer for SQL client statements."""

import ply.lex as lex

from sqlcli.errors import SqlParseError


class StatementLexer:
    """Lexer for tokenizing client statements.

    Only the words the client grammar needs are keywords; everything else
    in a SQL body lexes as identifiers, literals and operator runs.
    """

    # Reserved keywords
    reserved = {
        "quit": "QUIT",
        "exit": "EXIT",
        "clear": "CLEAR",
        "help": "HELP",
        "set": "SET",
        "reset": "RESET",
        "begin": "BEGIN",
        "end": "END",
        "statement": "STATEMENT",
        "execute": "EXECUTE",
        "add": "ADD",
        "remove": "REMOVE",
        "jar": "JAR",
        "jars": "JARS",
        "show": "SHOW",
        "create": "CREATE",
        "drop": "DROP",
        "alter": "ALTER",
        "use": "USE",
        "load": "LOAD",
        "unload": "UNLOAD",
        "module": "MODULE",
        "modules": "MODULES",
        "table": "TABLE",
        "tables": "TABLES",
        "view": "VIEW",
        "views": "VIEWS",
        "database": "DATABASE",
        "databases": "DATABASES",
        "catalog": "CATALOG",
        "catalogs": "CATALOGS",
        "function": "FUNCTION",
        "functions": "FUNCTIONS",
        "temporary": "TEMPORARY",
        "if": "IF",
        "not": "NOT",
        "exists": "EXISTS",
        "stop": "STOP",
        "job": "JOB",
        "jobs": "JOBS",
        "with": "WITH",
        "savepoint": "SAVEPOINT",
        "drain": "DRAIN",
        "explain": "EXPLAIN",
        "select": "SELECT",
        "from": "FROM",
        "limit": "LIMIT",
        "insert": "INSERT",
        "into": "INTO",
        "overwrite": "OVERWRITE",
        "values": "VALUES",
        "as": "AS",
        "rename": "RENAME",
        "to": "TO",
        "describe": "DESCRIBE",
        "desc": "DESC",
        "null": "NULL",
        "true": "TRUE",
        "false": "FALSE",
    }

    # Token list
    tokens = [
        "IDENTIFIER",
        "STRING",
        "INTEGER",
        "FLOAT",
        "STAR",
        "COMMA",
        "LPAREN",
        "RPAREN",
        "MINUS",
        "OPERATOR",
        "SEMICOLON",
    ] + list(reserved.values())

    # Simple tokens
    t_STAR = r"\*"
    t_COMMA = r","
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_SEMICOLON = r";"
    t_MINUS = r"-"
    t_OPERATOR = r"[+/%<>=!|&^~?@#:$.\[\]{}]+"

    t_ignore = " \t\r"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    def t_COMMENT(self, t: lex.LexToken) -> None:
        r"--[^\n]*"
        pass

    def t_BLOCK_COMMENT(self, t: lex.LexToken) -> None:
        r"/\*(.|\n)*?\*/"
        t.lexer.lineno += t.value.count("\n")

    def t_FLOAT(self, t: lex.LexToken) -> lex.LexToken:
        r"\d+\.\d+"
        t.value = float(t.value)
        return t

    def t_INTEGER(self, t: lex.LexToken) -> lex.LexToken:
        r"\d+"
        t.value = int(t.value)
        return t

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r"'([^']|'')*'"
        # SQL escapes a quote by doubling it
        t.value = t.value[1:-1].replace("''", "'")
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r'(?:`[^`]+`|"[^"]+"|[a-zA-Z_][a-zA-Z0-9_]*)(?:\.(?:`[^`]+`|"[^"]+"|[a-zA-Z_][a-zA-Z0-9_]*))*'
        # Dotted paths lex as one name; quoted parts never become keywords
        if "." not in t.value and t.value[0] not in "`\"":
            t.type = self.reserved.get(t.value.lower(), "IDENTIFIER")
            return t
        parts = split_qualified_name(t.value)
        t.value = ".".join(parts)
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        raise SqlParseError(f"Illegal character '{t.value[0]}' at position {t.lexpos}", t.lexpos)

    # --- Lexer methods ---

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.lineno = 1
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens


def split_qualified_name(text: str) -> list[str]:
    """Split ``a.`b c`."d"`` into its unquoted parts."""
    parts = []
    current = []
    quote: str | None = None
    for ch in text:
        if quote:
            if ch == quote:
                quote = None
            else:
                current.append(ch)
        elif ch in "`\"":
            quote = ch
        elif ch == ".":
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return parts


# Module-level set of reserved keywords (lowercase) for use by other modules
RESERVED_KEYWORDS: frozenset[str] = frozenset(StatementLexer.reserved.keys())
