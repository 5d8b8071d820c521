"""In-memory executor backing the command line client."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Sequence

from sqlcli.config import (
    DISPLAY_MAX_COLUMN_WIDTH,
    DML_SYNC,
    OPTIONS,
    RESULT_MODE,
    RUNTIME_MODE,
    SAVEPOINT_DIR,
    ConfigOption,
    RuntimeMode,
    default_properties,
)
from sqlcli.errors import SqlExecutionError, SqlParseError
from sqlcli.gateway import (
    Executor,
    JobClient,
    JobStatus,
    ResultDescriptor,
    ResultKind,
    TableResult,
    table_result_ok,
)
from sqlcli.operations import (
    AddJarOperation,
    AlterOperation,
    CreateOperation,
    CreateTableAsOperation,
    DescribeOperation,
    DropOperation,
    ExplainOperation,
    LoadModuleOperation,
    ModifyOperation,
    Operation,
    QueryOperation,
    ShowCreateTableOperation,
    ShowCreateViewOperation,
    ShowOperation,
    SinkModifyOperation,
    UnloadModuleOperation,
    UseOperation,
)
from sqlcli.parsing import StatementParser

logger = logging.getLogger(__name__)

DEFAULT_CATALOG = "default_catalog"
DEFAULT_DATABASE = "default_database"
CORE_MODULE = "core"

# Functions the core module provides
BUILTIN_FUNCTIONS = ("abs", "avg", "concat", "count", "lower", "max", "min", "sum", "upper")

ObjectPath = tuple[str, str, str]


@dataclass
class CatalogTable:
    """A table or view registered in a database."""

    kind: str  # TABLE or VIEW
    name: str
    ddl: str
    columns: list[str] = field(default_factory=list)
    rows: list[tuple[Any, ...]] = field(default_factory=list)
    query: QueryOperation | None = None  # Views only
    temporary: bool = False


class LocalExecutor(Executor):
    """Executor that keeps catalogs, session properties and jobs in memory.

    Queries understand ``SELECT * FROM name [LIMIT n]`` and selects of
    literals; inserts understand ``VALUES`` rows and such queries as their
    source. Any other query text is rejected with ``SqlExecutionError``.
    """

    def __init__(self, properties: dict[str, str] | None = None) -> None:
        self._initial = default_properties()
        for key, value in (properties or {}).items():
            self._check_property(key, value)
            self._initial[key] = value
        self._properties = dict(self._initial)

        self.catalogs: dict[str, set[str]] = {DEFAULT_CATALOG: {DEFAULT_DATABASE}}
        self.current_catalog = DEFAULT_CATALOG
        self.current_database = DEFAULT_DATABASE
        self.tables: dict[ObjectPath, CatalogTable] = {}
        self.functions: set[str] = set()
        self.modules: list[str] = [CORE_MODULE]
        self.jars: list[str] = []
        self.jobs: dict[str, JobClient] = {}

    # --- Session properties ---

    def _check_property(self, key: str, value: str) -> None:
        option = OPTIONS.get(key)
        if option is not None:
            option.parse(value)

    def set_session_property(self, key: str, value: str) -> None:
        self._check_property(key, value)
        logger.debug("Session property %s = %s", key, value)
        self._properties[key] = value

    def reset_session_property(self, key: str) -> None:
        if key in self._initial:
            self._properties[key] = self._initial[key]
        else:
            self._properties.pop(key, None)

    def reset_session_properties(self) -> None:
        self._properties = dict(self._initial)

    def get_session_config_map(self) -> dict[str, str]:
        return dict(self._properties)

    def get_config_value(self, option: ConfigOption) -> Any:
        raw = self._properties.get(option.key)
        if raw is None:
            return option.default
        return option.parse(raw)

    # --- Name resolution ---

    def _path(self, name: str) -> ObjectPath:
        parts = name.split(".")
        if len(parts) == 1:
            return self.current_catalog, self.current_database, parts[0]
        if len(parts) == 2:
            return self.current_catalog, parts[0], parts[1]
        if len(parts) == 3:
            return parts[0], parts[1], parts[2]
        raise SqlExecutionError(f"Invalid object name '{name}'.")

    def _database_path(self, name: str) -> tuple[str, str]:
        parts = name.split(".")
        if len(parts) == 1:
            return self.current_catalog, parts[0]
        if len(parts) == 2:
            return parts[0], parts[1]
        raise SqlExecutionError(f"Invalid database name '{name}'.")

    def _lookup(self, name: str, kind: str | None = None) -> CatalogTable:
        obj = self.tables.get(self._path(name))
        if obj is None or (kind is not None and obj.kind != kind):
            label = (kind or "table").lower()
            raise SqlExecutionError(f"Could not find {label} '{name}' in {self.current_catalog}.{self.current_database}.")
        return obj

    # --- Queries ---

    def _evaluate(self, query: QueryOperation) -> tuple[list[str], list[tuple[Any, ...]]]:
        if query.literals is not None:
            return [f"EXPR${i}" for i in range(len(query.literals))], [tuple(query.literals)]
        if query.table is None:
            raise SqlExecutionError(f"Unsupported query: {query.statement}")

        obj = self._lookup(query.table)
        if obj.kind == "VIEW" and obj.query is not None:
            columns, rows = self._evaluate(obj.query)
            if obj.columns:
                columns = list(obj.columns)
        else:
            columns, rows = list(obj.columns), list(obj.rows)
        if query.limit is not None:
            rows = rows[: query.limit]
        return columns, rows

    def execute_query(self, operation: QueryOperation) -> ResultDescriptor:
        columns, rows = self._evaluate(operation)
        return ResultDescriptor(
            result_id=uuid.uuid4().hex,
            columns=columns,
            rows=rows,
            result_mode=self.get_config_value(RESULT_MODE),
            is_streaming=self.get_config_value(RUNTIME_MODE) is RuntimeMode.STREAMING,
            max_column_width=self.get_config_value(DISPLAY_MAX_COLUMN_WIDTH),
        )

    # --- Modifications ---

    def _rows_for(self, operation: SinkModifyOperation) -> list[tuple[Any, ...]]:
        if operation.values is not None:
            return [tuple(row) for row in operation.values]
        if operation.source is not None:
            return self._evaluate(operation.source)[1]
        raise SqlExecutionError(f"Unsupported INSERT source: {operation.statement}")

    def _stage(self, operation: ModifyOperation, staged: dict[ObjectPath, CatalogTable]) -> str:
        """Record the sink's new content in ``staged`` and return the sink name.

        The catalog itself is left alone so a failing operation later in the
        same job leaves every table unchanged.
        """
        path = self._path(operation.table)
        if isinstance(operation, CreateTableAsOperation):
            if path in self.tables or path in staged:
                raise SqlExecutionError(f"Table '{operation.table}' already exists.")
            columns, rows = self._evaluate(operation.query)
            staged[path] = CatalogTable("TABLE", operation.table, operation.statement, columns, list(rows))
            return operation.table

        target = staged[path] if path in staged else self._lookup(operation.table)
        if target.kind != "TABLE":
            raise SqlExecutionError(f"Cannot insert into view '{operation.table}'.")
        rows = self._rows_for(operation)
        for row in rows:
            if len(row) != len(target.columns):
                raise SqlExecutionError(
                    f"Column count mismatch for '{operation.table}': "
                    f"expected {len(target.columns)} values, got {len(row)}."
                )
        new_rows = list(rows) if operation.overwrite else [*target.rows, *rows]
        staged[path] = replace(target, rows=new_rows)
        return operation.table

    def execute_modify_operations(self, operations: Sequence[ModifyOperation]) -> TableResult:
        if not operations:
            raise SqlExecutionError("No modify operations to execute.")
        staged: dict[ObjectPath, CatalogTable] = {}
        sinks = [self._stage(operation, staged) for operation in operations]
        self.tables.update(staged)

        job_id = uuid.uuid4().hex
        sync = self.get_config_value(DML_SYNC)
        status = JobStatus.FINISHED if sync else JobStatus.RUNNING
        job = JobClient(job_id, "insert-into_" + ",".join(sinks), status)
        self.jobs[job_id] = job
        logger.info("Submitted job %s for %d statement(s)", job_id, len(operations))
        return TableResult(
            kind=ResultKind.SUCCESS_WITH_CONTENT,
            columns=["job id"],
            rows=[(job_id,)],
            job_client=job,
        )

    # --- Jobs and jars ---

    def stop_job(self, job_id: str, with_savepoint: bool, with_drain: bool) -> str | None:
        job = self.jobs.get(job_id)
        if job is None:
            raise SqlExecutionError(f"Could not find job '{job_id}'.")
        if job.status is not JobStatus.RUNNING:
            raise SqlExecutionError(f"Job '{job_id}' is not running, its status is {job.status.value}.")

        savepoint = None
        if with_savepoint:
            directory = self.get_config_value(SAVEPOINT_DIR)
            if not directory:
                raise SqlExecutionError(
                    f"No savepoint directory configured, set '{SAVEPOINT_DIR.key}' to stop with a savepoint."
                )
            savepoint = f"{directory.rstrip('/')}/savepoint-{job_id[:6]}-{uuid.uuid4().hex[:12]}"

        job.status = JobStatus.FINISHED if with_drain else JobStatus.CANCELED
        logger.info("Stopped job %s (savepoint=%s)", job_id, savepoint)
        return savepoint

    def remove_jar(self, path: str) -> None:
        if path not in self.jars:
            raise SqlExecutionError(f"The jar '{path}' has not been added.")
        self.jars.remove(path)

    def _add_jar(self, path: str) -> None:
        if not Path(path).is_file():
            raise SqlExecutionError(f"Jar file '{path}' does not exist.")
        if path not in self.jars:
            self.jars.append(path)

    # --- Generic operations ---

    def execute_operation(self, operation: Operation) -> TableResult:
        match operation:
            case ExplainOperation():
                return _content("result", [self._explain(operation)])
            case ShowCreateTableOperation():
                obj = self._lookup(operation.name)
                if obj.kind != "TABLE":
                    raise SqlExecutionError(
                        f"SHOW CREATE TABLE is only supported for tables, but '{operation.name}' is a view. "
                        "Please use SHOW CREATE VIEW instead."
                    )
                return _content("result", [obj.ddl])
            case ShowCreateViewOperation():
                obj = self._lookup(operation.name)
                if obj.kind != "VIEW":
                    raise SqlExecutionError(
                        f"SHOW CREATE VIEW is only supported for views, but '{operation.name}' is a table. "
                        "Please use SHOW CREATE TABLE instead."
                    )
                return _content("result", [obj.ddl])
            case CreateOperation():
                self._create(operation)
            case DropOperation():
                self._drop(operation)
            case AlterOperation():
                self._alter(operation)
            case UseOperation():
                self._use(operation)
            case LoadModuleOperation():
                if operation.name in self.modules:
                    raise SqlExecutionError(f"A module with name '{operation.name}' already exists.")
                self.modules.append(operation.name)
            case UnloadModuleOperation():
                if operation.name not in self.modules:
                    raise SqlExecutionError(f"No module with name '{operation.name}' exists.")
                self.modules.remove(operation.name)
            case AddJarOperation():
                self._add_jar(operation.path)
            case ShowOperation():
                return self._show(operation.what)
            case DescribeOperation():
                obj = self._lookup(operation.name)
                columns = obj.columns
                if not columns and obj.query is not None:
                    columns = self._evaluate(obj.query)[0]
                return TableResult(ResultKind.SUCCESS_WITH_CONTENT, ["name"], [(c,) for c in columns])
            case _:
                raise SqlExecutionError(f"Unsupported operation: {operation.summary()}")
        return table_result_ok()

    def _explain(self, operation: ExplainOperation) -> str:
        try:
            target = StatementParser().parse(operation.target)
        except SqlParseError as e:
            raise SqlExecutionError(f"Cannot explain '{operation.target}': {e}") from e

        source = target
        if isinstance(target, SinkModifyOperation):
            source = target.source
        lines = ["== Abstract Syntax Tree ==", operation.target, "", "== Optimized Execution Plan =="]
        if isinstance(target, SinkModifyOperation):
            lines.append(f"Sink(table=[{'.'.join(self._path(target.table))}])")
        if isinstance(source, QueryOperation) and source.table is not None:
            obj = self._lookup(source.table)
            if source.limit is not None:
                lines.append(f"Limit(fetch=[{source.limit}])")
            fields = ", ".join(obj.columns)
            lines.append(f"TableSourceScan(table=[[{', '.join(self._path(source.table))}]], fields=[{fields}])")
        elif isinstance(source, QueryOperation) and source.literals is not None:
            lines.append(f"Values(tuples=[[{', '.join(repr(v) for v in source.literals)}]])")
        elif isinstance(target, SinkModifyOperation) and target.values is not None:
            lines.append(f"Values(tuples=[{len(target.values)} rows])")
        else:
            raise SqlExecutionError(f"Unsupported statement for EXPLAIN: {operation.target}")
        return "\n".join(lines)

    def _create(self, operation: CreateOperation) -> None:
        name = operation.name
        if operation.kind in ("TABLE", "VIEW"):
            path = self._path(name)
            if path[1] not in self.catalogs.get(path[0], ()):
                raise SqlExecutionError(f"Database {path[0]}.{path[1]} does not exist.")
            if path in self.tables:
                if operation.if_not_exists:
                    return
                raise SqlExecutionError(f"{operation.kind.capitalize()} '{name}' already exists.")
            if operation.kind == "VIEW" and operation.query is None:
                raise SqlExecutionError(f"View '{name}' needs a query.")
            if operation.kind == "TABLE" and not operation.columns:
                raise SqlExecutionError(f"Table '{name}' needs a column list.")
            self.tables[path] = CatalogTable(
                operation.kind,
                name,
                operation.statement,
                columns=list(operation.columns),
                query=operation.query,
                temporary=operation.temporary,
            )
        elif operation.kind == "DATABASE":
            catalog, database = self._database_path(name)
            if catalog not in self.catalogs:
                raise SqlExecutionError(f"Catalog '{catalog}' does not exist.")
            if database in self.catalogs[catalog]:
                if operation.if_not_exists:
                    return
                raise SqlExecutionError(f"Database '{name}' already exists.")
            self.catalogs[catalog].add(database)
        elif operation.kind == "CATALOG":
            if name in self.catalogs:
                if operation.if_not_exists:
                    return
                raise SqlExecutionError(f"Catalog '{name}' already exists.")
            self.catalogs[name] = {DEFAULT_DATABASE}
        else:
            if name in self.functions:
                if operation.if_not_exists:
                    return
                raise SqlExecutionError(f"Function '{name}' already exists.")
            self.functions.add(name)

    def _drop(self, operation: DropOperation) -> None:
        name = operation.name
        if operation.kind in ("TABLE", "VIEW"):
            path = self._path(name)
            obj = self.tables.get(path)
            if obj is None or obj.kind != operation.kind:
                if operation.if_exists:
                    return
                raise SqlExecutionError(f"{operation.kind.capitalize()} '{name}' does not exist.")
            del self.tables[path]
        elif operation.kind == "DATABASE":
            catalog, database = self._database_path(name)
            if database not in self.catalogs.get(catalog, ()):
                if operation.if_exists:
                    return
                raise SqlExecutionError(f"Database '{name}' does not exist.")
            if (catalog, database) == (self.current_catalog, self.current_database):
                raise SqlExecutionError(f"Cannot drop the database '{name}' that is in use.")
            if any(p[:2] == (catalog, database) for p in self.tables):
                raise SqlExecutionError(f"Database '{name}' is not empty.")
            self.catalogs[catalog].discard(database)
        elif operation.kind == "CATALOG":
            if name not in self.catalogs:
                if operation.if_exists:
                    return
                raise SqlExecutionError(f"Catalog '{name}' does not exist.")
            if name == self.current_catalog:
                raise SqlExecutionError(f"Cannot drop the catalog '{name}' that is in use.")
            del self.catalogs[name]
            self.tables = {p: t for p, t in self.tables.items() if p[0] != name}
        else:
            if name not in self.functions:
                if operation.if_exists:
                    return
                raise SqlExecutionError(f"Function '{name}' does not exist.")
            self.functions.discard(name)

    def _alter(self, operation: AlterOperation) -> None:
        if operation.kind not in ("TABLE", "VIEW"):
            raise SqlExecutionError(f"Unsupported operation: {operation.summary()}")
        path = self._path(operation.name)
        obj = self._lookup(operation.name, operation.kind)
        if operation.new_name is None:
            # Options and schema changes have nothing to alter in memory
            return
        new_path = self._path(operation.new_name)
        if new_path in self.tables:
            raise SqlExecutionError(f"'{operation.new_name}' already exists.")
        del self.tables[path]
        obj.name = operation.new_name
        self.tables[new_path] = obj

    def _use(self, operation: UseOperation) -> None:
        if operation.catalog:
            if operation.name not in self.catalogs:
                raise SqlExecutionError(f"Catalog '{operation.name}' does not exist.")
            self.current_catalog = operation.name
            if self.current_database not in self.catalogs[operation.name]:
                self.current_database = min(self.catalogs[operation.name], default=DEFAULT_DATABASE)
            return
        catalog, database = self._database_path(operation.name)
        if database not in self.catalogs.get(catalog, ()):
            raise SqlExecutionError(f"Database '{operation.name}' does not exist.")
        self.current_catalog, self.current_database = catalog, database

    def _show(self, what: str) -> TableResult:
        here = (self.current_catalog, self.current_database)
        if what == "TABLES":
            names = sorted(p[2] for p in self.tables if p[:2] == here)
            return _content("table name", names)
        if what == "VIEWS":
            names = sorted(p[2] for p, t in self.tables.items() if p[:2] == here and t.kind == "VIEW")
            return _content("view name", names)
        if what == "DATABASES":
            return _content("database name", sorted(self.catalogs[self.current_catalog]))
        if what == "CATALOGS":
            return _content("catalog name", sorted(self.catalogs))
        if what == "MODULES":
            return _content("module name", self.modules)
        if what == "FUNCTIONS":
            names = sorted(set(BUILTIN_FUNCTIONS) | self.functions)
            return _content("function name", names)
        if what == "JARS":
            return _content("jars", self.jars)
        if what == "JOBS":
            rows = [(job.job_id, job.job_name, job.status.value) for job in self.jobs.values()]
            return TableResult(ResultKind.SUCCESS_WITH_CONTENT, ["job id", "job name", "status"], rows)
        raise SqlExecutionError(f"Unsupported operation: SHOW {what}")


def _content(column: str, values: Sequence[Any]) -> TableResult:
    """Single-column result holding ``values``."""
    return TableResult(ResultKind.SUCCESS_WITH_CONTENT, [column], [(value,) for value in values])
