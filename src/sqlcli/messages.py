"""User-facing strings and message formatting."""

from __future__ import annotations

import traceback

CLI_NAME = "sqlcli"

PROMPT = "SQL> "
CONTINUATION_PROMPT = "   > "

MESSAGE_WELCOME = f"""
Welcome to {CLI_NAME}. Statements end with ';'.
Type 'HELP;' to list the available commands and 'QUIT;' to leave.
"""

MESSAGE_QUIT = f"Exiting {CLI_NAME}..."
MESSAGE_SQL_EXECUTION_ERROR = "Could not execute SQL statement."
MESSAGE_INTERNAL_ERROR = "Internal error, this is a bug:"
MESSAGE_INPUT_CLOSED = "Input channel closed."
MESSAGE_EXECUTE_FILE = "Executing SQL from file."
MESSAGE_RESET = "All session properties have been set to their default values."
MESSAGE_RESET_KEY = "Session property has been reset."
MESSAGE_SET_KEY = "Session property has been set."
MESSAGE_EMPTY = "Result was empty."
MESSAGE_RESULT_QUIT = "Result retrieval cancelled."
MESSAGE_SUBMITTING_STATEMENT = "Submitting SQL update statement to the cluster..."
MESSAGE_WAIT_EXECUTE = "Execute statement in sync mode. Please wait for the execution finish..."
MESSAGE_FINISH_STATEMENT = "Complete execution of the SQL update statement."
MESSAGE_STATEMENT_SUBMITTED = "SQL update statement has been successfully submitted to the cluster:"
MESSAGE_EXECUTE_STATEMENT = "Execute statement succeed."
MESSAGE_BEGIN_STATEMENT_SET = "Begin a statement set."
MESSAGE_ADD_STATEMENT_TO_STATEMENT_SET = "Add SQL update statement to the statement set."
MESSAGE_NO_STATEMENT_IN_STATEMENT_SET = "No statement in the statement set, skip submit."
MESSAGE_STATEMENT_SET_SQL_EXECUTION_ERROR = "Only INSERT statement is allowed in Statement Set."
MESSAGE_STATEMENT_SET_END_CALL_ERROR = (
    "No Statement Set to submit, 'END' statement should be used after 'BEGIN STATEMENT SET'."
)
MESSAGE_STATEMENT_SET_ABANDONED = "Statement set was not closed with 'END', {count} pending statement(s) discarded."
MESSAGE_REMOVE_JAR_STATEMENT = "The specified jar is removed from session classloader."
MESSAGE_STOP_JOB_STATEMENT = "The specified job is stopped."
MESSAGE_STOP_JOB_WITH_SAVEPOINT_STATEMENT = "The specified job is stopped with savepoint {path}."
MESSAGE_INIT_UNSUPPORTED = "Unsupported operation in sql init file: {summary}"
MESSAGE_NON_INTERACTIVE_RESULT_MODE = (
    "In non-interactive mode, it only supports to use {mode} as value of {key} when execute query. "
    "Please add 'SET '{key}' = '{mode}';' in the sql file."
)

MESSAGE_HELP = """
The following commands are available:

CLEAR                          Clears the current terminal.
HELP                           Prints the available commands.
QUIT/EXIT                      Quits the SQL client.
SET                            Lists all session properties.
SET 'key' = 'value'            Sets a session property.
RESET                          Resets all session properties to their defaults.
RESET 'key'                    Resets a session property to its default.
ADD JAR '<path>'               Adds a jar to the session.
REMOVE JAR '<path>'            Removes a jar from the session.
SHOW JARS                      Lists the jars of the session.
SHOW JOBS                      Lists the submitted jobs.
STOP JOB '<id>' [WITH SAVEPOINT] [WITH DRAIN]
                               Stops a running job.
BEGIN STATEMENT SET            Starts collecting INSERT statements into a statement set.
END                            Submits the collected statement set.
EXECUTE STATEMENT SET BEGIN <inserts> END
                               Submits a statement set in one statement.
EXPLAIN <statement>            Describes the execution plan of a statement.
SHOW CREATE TABLE|VIEW <name>  Prints the DDL of a table or view.

Every other statement (SELECT, INSERT, CREATE, DROP, ALTER, USE, SHOW, ...) is
passed to the executor. Statements end with a semicolon and may span lines.
"""


def message_info(message: str) -> str:
    return f"[INFO] {message}"


def message_warning(message: str) -> str:
    return f"[WARNING] {message}"


def _root_cause(error: BaseException) -> BaseException:
    cause = error
    while cause.__cause__ is not None:
        cause = cause.__cause__
    return cause


def message_error(message: str, error: BaseException | None = None, verbose: bool = False) -> str:
    """Format an error line, with either the root cause or the full traceback."""
    text = f"[ERROR] {message}"
    if error is None:
        return text
    if verbose:
        trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return f"{text}\n{trace.rstrip()}"
    cause = _root_cause(error)
    return f"{text} Reason:\n{type(cause).__name__}: {cause}"
