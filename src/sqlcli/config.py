"""Session configuration options."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from sqlcli.errors import SqlExecutionError


class ResultMode(Enum):
    """How query results are presented."""

    TABLE = "table"
    CHANGELOG = "changelog"
    TABLEAU = "tableau"


class RuntimeMode(Enum):
    STREAMING = "streaming"
    BATCH = "batch"


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"expected 'true' or 'false', got '{value}'")


def _parse_positive_int(value: str) -> int:
    number = int(value.strip())
    if number <= 0:
        raise ValueError(f"expected a positive integer, got '{value}'")
    return number


def _enum_parser(enum_type: type[Enum]) -> Callable[[str], Any]:
    def parse(value: str) -> Any:
        lowered = value.strip().lower()
        for member in enum_type:
            if member.value == lowered:
                return member
        choices = ", ".join(m.value for m in enum_type)
        raise ValueError(f"expected one of [{choices}], got '{value}'")

    return parse


@dataclass(frozen=True)
class ConfigOption:
    """A typed session option with a default."""

    key: str
    default: Any
    parser: Callable[[str], Any]
    description: str = ""

    def parse(self, raw: str) -> Any:
        try:
            return self.parser(raw)
        except ValueError as e:
            raise SqlExecutionError(f"Invalid value for '{self.key}': {e}") from e

    def default_string(self) -> str | None:
        """The default rendered the way a user would SET it."""
        if self.default is None:
            return None
        if isinstance(self.default, Enum):
            return self.default.value
        if isinstance(self.default, bool):
            return "true" if self.default else "false"
        return str(self.default)


RESULT_MODE = ConfigOption(
    "sql-client.execution.result-mode",
    ResultMode.TABLE,
    _enum_parser(ResultMode),
    "Result presentation: table, changelog or tableau.",
)
MAX_TABLE_RESULT_ROWS = ConfigOption(
    "sql-client.execution.max-table-result.rows",
    1000000,
    _parse_positive_int,
    "Maximum number of rows kept by the materialized table view.",
)
VERBOSE = ConfigOption(
    "sql-client.verbose",
    False,
    _parse_bool,
    "Print full stack traces for errors.",
)
DISPLAY_MAX_COLUMN_WIDTH = ConfigOption(
    "sql-client.display.max-column-width",
    30,
    _parse_positive_int,
    "Column width cap for tableau output.",
)
DML_SYNC = ConfigOption(
    "table.dml-sync",
    False,
    _parse_bool,
    "Wait for INSERT jobs to finish before returning.",
)
RUNTIME_MODE = ConfigOption(
    "execution.runtime-mode",
    RuntimeMode.STREAMING,
    _enum_parser(RuntimeMode),
    "Streaming or batch execution.",
)
SAVEPOINT_DIR = ConfigOption(
    "state.savepoints.dir",
    None,
    str,
    "Target directory for STOP JOB ... WITH SAVEPOINT.",
)

OPTIONS: dict[str, ConfigOption] = {
    option.key: option
    for option in (
        RESULT_MODE,
        MAX_TABLE_RESULT_ROWS,
        VERBOSE,
        DISPLAY_MAX_COLUMN_WIDTH,
        DML_SYNC,
        RUNTIME_MODE,
        SAVEPOINT_DIR,
    )
}


def default_properties() -> dict[str, str]:
    """Defaults of every known option that has one, as strings."""
    defaults = {}
    for key, option in OPTIONS.items():
        rendered = option.default_string()
        if rendered is not None:
            defaults[key] = rendered
    return defaults
