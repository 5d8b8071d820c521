"""Executor contract and the result types it returns."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence

from sqlcli.config import ConfigOption, ResultMode
from sqlcli.operations import ModifyOperation, Operation, QueryOperation


class ResultKind(Enum):
    """Whether a result only signals success or also carries rows."""

    SUCCESS = "SUCCESS"
    SUCCESS_WITH_CONTENT = "SUCCESS_WITH_CONTENT"


class JobStatus(Enum):
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"
    CANCELED = "CANCELED"


@dataclass
class JobClient:
    """Handle to a submitted job."""

    job_id: str
    job_name: str = ""
    status: JobStatus = JobStatus.RUNNING


@dataclass
class TableResult:
    """Result of executing an operation."""

    kind: ResultKind
    columns: list[str] = field(default_factory=list)
    rows: list[tuple[Any, ...]] = field(default_factory=list)
    job_client: JobClient | None = None


def table_result_ok() -> TableResult:
    """A new plain success result; callers may mutate what they get."""
    return TableResult(kind=ResultKind.SUCCESS, columns=["result"], rows=[("OK",)])


@dataclass
class ResultDescriptor:
    """Describes the result of a query and how it should be shown."""

    result_id: str
    columns: list[str]
    rows: list[tuple[Any, ...]]
    result_mode: ResultMode = ResultMode.TABLE
    is_streaming: bool = True
    max_column_width: int = 30

    @property
    def is_tableau_mode(self) -> bool:
        return self.result_mode is ResultMode.TABLEAU

    @property
    def is_materialized(self) -> bool:
        return self.result_mode is ResultMode.TABLE


class Executor(ABC):
    """Everything the client needs from the execution gateway.

    Failures are raised as ``SqlExecutionError``.
    """

    @abstractmethod
    def set_session_property(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def reset_session_property(self, key: str) -> None:
        ...

    @abstractmethod
    def reset_session_properties(self) -> None:
        ...

    @abstractmethod
    def get_session_config_map(self) -> dict[str, str]:
        """All effective session properties as strings."""

    @abstractmethod
    def get_config_value(self, option: ConfigOption) -> Any:
        """Typed value of ``option``, falling back to its default."""

    @abstractmethod
    def execute_query(self, operation: QueryOperation) -> ResultDescriptor:
        ...

    @abstractmethod
    def execute_modify_operations(self, operations: Sequence[ModifyOperation]) -> TableResult:
        """Submit modify operations as one job; the result carries its job client."""

    @abstractmethod
    def execute_operation(self, operation: Operation) -> TableResult:
        ...

    @abstractmethod
    def remove_jar(self, path: str) -> None:
        ...

    @abstractmethod
    def stop_job(self, job_id: str, with_savepoint: bool, with_drain: bool) -> str | None:
        """Stop a job; returns the savepoint path when one was taken."""
