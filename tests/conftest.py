"""Shared fixtures: an in-memory executor fake and a captured terminal."""

from __future__ import annotations

import io
import logging
from typing import Any, Sequence

import pytest

from sqlcli.config import RESULT_MODE, ConfigOption, default_properties
from sqlcli.gateway import (
    Executor,
    JobClient,
    ResultDescriptor,
    ResultKind,
    TableResult,
    table_result_ok,
)
from sqlcli.operations import ModifyOperation, Operation, QueryOperation
from sqlcli.terminal import Terminal


class FakeExecutor(Executor):
    """Records every call and answers with canned results."""

    def __init__(self) -> None:
        self.properties = default_properties()
        self.queries: list[QueryOperation] = []
        self.modify_calls: list[list[ModifyOperation]] = []
        self.operations: list[Operation] = []
        self.removed_jars: list[str] = []
        self.stopped: list[tuple[str, bool, bool]] = []
        self.results: dict[type, TableResult] = {}
        self.rows: list[tuple[Any, ...]] = [(1,)]
        self.job_client: JobClient | None = JobClient("job-1")
        self.savepoint: str | None = "/tmp/savepoints/savepoint-1"
        self.fail_with: Exception | None = None

    def set_session_property(self, key: str, value: str) -> None:
        self.properties[key] = value

    def reset_session_property(self, key: str) -> None:
        defaults = default_properties()
        if key in defaults:
            self.properties[key] = defaults[key]
        else:
            self.properties.pop(key, None)

    def reset_session_properties(self) -> None:
        self.properties = default_properties()

    def get_session_config_map(self) -> dict[str, str]:
        return dict(self.properties)

    def get_config_value(self, option: ConfigOption) -> Any:
        raw = self.properties.get(option.key)
        return option.default if raw is None else option.parse(raw)

    def execute_query(self, operation: QueryOperation) -> ResultDescriptor:
        self.queries.append(operation)
        return ResultDescriptor(
            result_id="result-1",
            columns=["EXPR$0"],
            rows=list(self.rows),
            result_mode=self.get_config_value(RESULT_MODE),
        )

    def execute_modify_operations(self, operations: Sequence[ModifyOperation]) -> TableResult:
        self.modify_calls.append(list(operations))
        return TableResult(
            kind=ResultKind.SUCCESS_WITH_CONTENT,
            columns=["job id"],
            rows=[("job-1",)],
            job_client=self.job_client,
        )

    def execute_operation(self, operation: Operation) -> TableResult:
        if self.fail_with is not None:
            raise self.fail_with
        self.operations.append(operation)
        return self.results.get(type(operation)) or table_result_ok()

    def remove_jar(self, path: str) -> None:
        self.removed_jars.append(path)

    def stop_job(self, job_id: str, with_savepoint: bool, with_drain: bool) -> str | None:
        self.stopped.append((job_id, with_savepoint, with_drain))
        return self.savepoint if with_savepoint else None


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def terminal(output: io.StringIO) -> Terminal:
    return Terminal(output, dumb=True)


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo handlers installed by ``repl.configure_logging``."""
    yield
    logger = logging.getLogger("sqlcli")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
