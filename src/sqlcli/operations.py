"""Typed operations produced by the statement parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class QuitOperation:
    """QUIT / EXIT."""

    def summary(self) -> str:
        return "QUIT"


@dataclass(frozen=True)
class ClearOperation:
    """CLEAR."""

    def summary(self) -> str:
        return "CLEAR"


@dataclass(frozen=True)
class HelpOperation:
    """HELP."""

    def summary(self) -> str:
        return "HELP"


@dataclass(frozen=True)
class SetOperation:
    """SET, or SET 'key' = 'value'."""

    key: str | None = None
    value: str | None = None

    def summary(self) -> str:
        if self.key is None:
            return "SET"
        return f"SET {self.key}={self.value}"


@dataclass(frozen=True)
class ResetOperation:
    """RESET, or RESET 'key'."""

    key: str | None = None

    def summary(self) -> str:
        return "RESET" if self.key is None else f"RESET {self.key}"


@dataclass(frozen=True)
class QueryOperation:
    """A SELECT or WITH query.

    ``table`` is set for ``SELECT * FROM name``; ``literals`` holds the
    single row of a ``SELECT <literal>, ...`` without FROM.
    """

    statement: str
    table: str | None = None
    literals: tuple[Any, ...] | None = None
    limit: int | None = None

    def summary(self) -> str:
        return f"SELECT: {self.statement}"


@dataclass(frozen=True)
class SinkModifyOperation:
    """INSERT INTO / INSERT OVERWRITE.

    ``values`` holds the literal rows of an ``INSERT ... VALUES`` form;
    ``source`` the query of an ``INSERT ... SELECT`` form.
    """

    table: str
    statement: str
    overwrite: bool = False
    values: tuple[tuple[Any, ...], ...] | None = None
    source: QueryOperation | None = None

    def summary(self) -> str:
        verb = "OVERWRITE" if self.overwrite else "INTO"
        return f"INSERT {verb} {self.table}"


@dataclass(frozen=True)
class CreateTableAsOperation:
    """CREATE TABLE name AS <query>."""

    table: str
    statement: str
    query: QueryOperation

    def summary(self) -> str:
        return f"CREATE TABLE {self.table} AS"


@dataclass(frozen=True)
class ExplainOperation:
    """EXPLAIN [PLAN FOR] <statement>."""

    statement: str
    target: str

    def summary(self) -> str:
        return f"EXPLAIN {self.target}"


@dataclass(frozen=True)
class BeginStatementSetOperation:
    def summary(self) -> str:
        return "BEGIN STATEMENT SET"


@dataclass(frozen=True)
class EndStatementSetOperation:
    def summary(self) -> str:
        return "END"


@dataclass(frozen=True)
class StatementSetOperation:
    """EXECUTE STATEMENT SET BEGIN ...; ...; END."""

    operations: tuple[SinkModifyOperation, ...] = field(default_factory=tuple)

    def summary(self) -> str:
        return f"STATEMENT SET ({len(self.operations)} statements)"


@dataclass(frozen=True)
class AddJarOperation:
    path: str

    def summary(self) -> str:
        return f"ADD JAR '{self.path}'"


@dataclass(frozen=True)
class RemoveJarOperation:
    path: str

    def summary(self) -> str:
        return f"REMOVE JAR '{self.path}'"


@dataclass(frozen=True)
class ShowCreateTableOperation:
    name: str

    def summary(self) -> str:
        return f"SHOW CREATE TABLE {self.name}"


@dataclass(frozen=True)
class ShowCreateViewOperation:
    name: str

    def summary(self) -> str:
        return f"SHOW CREATE VIEW {self.name}"


@dataclass(frozen=True)
class StopJobOperation:
    """STOP JOB 'id' [WITH SAVEPOINT] [WITH DRAIN]."""

    job_id: str
    with_savepoint: bool = False
    with_drain: bool = False

    def summary(self) -> str:
        parts = [f"STOP JOB '{self.job_id}'"]
        if self.with_savepoint:
            parts.append("WITH SAVEPOINT")
        if self.with_drain:
            parts.append("WITH DRAIN")
        return " ".join(parts)


@dataclass(frozen=True)
class CreateOperation:
    """CREATE TABLE | VIEW | DATABASE | CATALOG | FUNCTION."""

    kind: str  # TABLE, VIEW, DATABASE, CATALOG, FUNCTION
    name: str
    statement: str
    if_not_exists: bool = False
    temporary: bool = False
    columns: tuple[str, ...] = ()
    query: QueryOperation | None = None  # Views only

    def summary(self) -> str:
        return f"CREATE {self.kind} {self.name}"


@dataclass(frozen=True)
class DropOperation:
    kind: str
    name: str
    if_exists: bool = False
    temporary: bool = False

    def summary(self) -> str:
        return f"DROP {self.kind} {self.name}"


@dataclass(frozen=True)
class AlterOperation:
    """ALTER <kind> name ...; ``new_name`` is set for RENAME TO."""

    kind: str
    name: str
    statement: str
    new_name: str | None = None

    def summary(self) -> str:
        return f"ALTER {self.kind} {self.name}"


@dataclass(frozen=True)
class UseOperation:
    """USE name, or USE CATALOG name."""

    name: str
    catalog: bool = False

    def summary(self) -> str:
        return f"USE CATALOG {self.name}" if self.catalog else f"USE {self.name}"


@dataclass(frozen=True)
class LoadModuleOperation:
    name: str

    def summary(self) -> str:
        return f"LOAD MODULE {self.name}"


@dataclass(frozen=True)
class UnloadModuleOperation:
    name: str

    def summary(self) -> str:
        return f"UNLOAD MODULE {self.name}"


@dataclass(frozen=True)
class ShowOperation:
    """SHOW TABLES | VIEWS | DATABASES | CATALOGS | MODULES | FUNCTIONS | JARS | JOBS."""

    what: str

    def summary(self) -> str:
        return f"SHOW {self.what}"


@dataclass(frozen=True)
class DescribeOperation:
    name: str

    def summary(self) -> str:
        return f"DESCRIBE {self.name}"


ModifyOperation = SinkModifyOperation | CreateTableAsOperation

# Operations that run through the executor's generic path
GenericOperation = (
    CreateOperation
    | DropOperation
    | AlterOperation
    | UseOperation
    | LoadModuleOperation
    | UnloadModuleOperation
    | AddJarOperation
    | ShowOperation
    | DescribeOperation
)

Operation = (
    QuitOperation
    | ClearOperation
    | HelpOperation
    | SetOperation
    | ResetOperation
    | QueryOperation
    | SinkModifyOperation
    | CreateTableAsOperation
    | ExplainOperation
    | BeginStatementSetOperation
    | EndStatementSetOperation
    | StatementSetOperation
    | RemoveJarOperation
    | ShowCreateTableOperation
    | ShowCreateViewOperation
    | StopJobOperation
    | GenericOperation
)
