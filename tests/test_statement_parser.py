"""Tests for the SQL client statement parser."""

import pytest

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
from sqlcli.parsing import StatementLexer, StatementParser


class TestLexer:
    def setup_method(self):
        self.lexer = StatementLexer()
        self.lexer.build()

    def test_keywords_are_case_insensitive(self):
        tokens = self.lexer.tokenize("Select * fRoM t")
        assert [t.type for t in tokens] == ["SELECT", "STAR", "FROM", "IDENTIFIER"]

    def test_string_unescapes_doubled_quotes(self):
        tokens = self.lexer.tokenize("'it''s'")
        assert tokens[0].type == "STRING"
        assert tokens[0].value == "it's"

    def test_qualified_identifier(self):
        tokens = self.lexer.tokenize("cat.`my db`.\"t\"")
        assert len(tokens) == 1
        assert tokens[0].type == "IDENTIFIER"
        assert tokens[0].value == "cat.my db.t"

    def test_quoted_identifier_is_not_a_keyword(self):
        tokens = self.lexer.tokenize("`select`")
        assert tokens[0].type == "IDENTIFIER"

    def test_comments_are_skipped(self):
        tokens = self.lexer.tokenize("SELECT /* a\nb */ 1 -- trailing")
        assert [t.type for t in tokens] == ["SELECT", "INTEGER"]

    def test_numbers(self):
        tokens = self.lexer.tokenize("42 4.5")
        assert [t.value for t in tokens] == [42, 4.5]


class TestClientCommands:
    def setup_method(self):
        self.parser = StatementParser()

    @pytest.mark.parametrize("text", ["QUIT;", "quit", "EXIT;", "exit"])
    def test_quit(self, text):
        assert isinstance(self.parser.parse(text), QuitOperation)

    def test_clear(self):
        assert isinstance(self.parser.parse("CLEAR;"), ClearOperation)

    def test_help(self):
        assert isinstance(self.parser.parse("help;"), HelpOperation)

    def test_empty_statement(self):
        assert self.parser.parse("") is None
        assert self.parser.parse(";") is None

    def test_command_records_text(self):
        self.parser.parse("SHOW TABLES;")
        assert self.parser.command == "SHOW TABLES;"


class TestSetReset:
    def setup_method(self):
        self.parser = StatementParser()

    def test_set_lists_properties(self):
        result = self.parser.parse("SET;")
        assert result == SetOperation()

    def test_set_quoted(self):
        result = self.parser.parse("SET 'sql-client.verbose' = 'true';")
        assert result == SetOperation(key="sql-client.verbose", value="true")

    def test_set_value_with_semicolon(self):
        result = self.parser.parse("SET 'pipeline.name' = 'a;b';")
        assert result == SetOperation(key="pipeline.name", value="a;b")

    def test_set_unquoted(self):
        result = self.parser.parse("SET table.dml-sync=true;")
        assert result == SetOperation(key="table.dml-sync", value="true")

    def test_set_escaped_quote(self):
        result = self.parser.parse("SET 'k' = 'it''s';")
        assert result == SetOperation(key="k", value="it's")

    def test_set_without_value_is_error(self):
        with pytest.raises(SqlParseError):
            self.parser.parse("SET 'key';")

    def test_reset_all(self):
        assert self.parser.parse("RESET;") == ResetOperation()

    def test_reset_key(self):
        assert self.parser.parse("RESET 'table.dml-sync';") == ResetOperation(key="table.dml-sync")


class TestStatementSets:
    def setup_method(self):
        self.parser = StatementParser()

    def test_begin(self):
        assert isinstance(self.parser.parse("BEGIN STATEMENT SET;"), BeginStatementSetOperation)

    def test_end(self):
        assert isinstance(self.parser.parse("END;"), EndStatementSetOperation)

    def test_execute_statement_set(self):
        result = self.parser.parse(
            "EXECUTE STATEMENT SET BEGIN\n"
            "INSERT INTO a VALUES (1);\n"
            "INSERT INTO b SELECT * FROM a;\n"
            "END;"
        )
        assert isinstance(result, StatementSetOperation)
        assert [op.table for op in result.operations] == ["a", "b"]
        assert result.operations[0].values == ((1,),)
        assert result.operations[1].statement == "INSERT INTO b SELECT * FROM a"
        assert result.operations[1].source.table == "a"

    def test_begin_alone_is_error(self):
        with pytest.raises(SqlParseError):
            self.parser.parse("BEGIN;")


class TestQueriesAndInserts:
    def setup_method(self):
        self.parser = StatementParser()

    def test_select_star(self):
        result = self.parser.parse("SELECT * FROM orders;")
        assert result == QueryOperation(statement="SELECT * FROM orders", table="orders")

    def test_select_star_limit(self):
        result = self.parser.parse("SELECT * FROM orders LIMIT 5;")
        assert isinstance(result, QueryOperation)
        assert result.table == "orders"
        assert result.limit == 5

    def test_select_literals(self):
        result = self.parser.parse("SELECT 1, 'x', TRUE, NULL, -2;")
        assert isinstance(result, QueryOperation)
        assert result.literals == (1, "x", True, None, -2)
        assert result.table is None

    def test_general_select(self):
        result = self.parser.parse("SELECT a, b FROM t WHERE a > 1;")
        assert isinstance(result, QueryOperation)
        assert result.statement == "SELECT a, b FROM t WHERE a > 1"
        assert result.table is None
        assert result.literals is None

    def test_with_query(self):
        result = self.parser.parse("WITH x AS (SELECT 1) SELECT * FROM x;")
        assert isinstance(result, QueryOperation)
        assert result.statement.startswith("WITH x AS")

    def test_insert_values(self):
        result = self.parser.parse("INSERT INTO t VALUES (1, 'a'), (2, 'b');")
        assert isinstance(result, SinkModifyOperation)
        assert result.table == "t"
        assert result.overwrite is False
        assert result.values == ((1, "a"), (2, "b"))
        assert result.statement == "INSERT INTO t VALUES (1, 'a'), (2, 'b')"

    def test_insert_with_column_list(self):
        result = self.parser.parse("INSERT INTO t (id, name) VALUES (1, 'a');")
        assert isinstance(result, SinkModifyOperation)
        assert result.values == ((1, "a"),)

    def test_insert_overwrite_select(self):
        result = self.parser.parse("INSERT OVERWRITE t SELECT * FROM s;")
        assert isinstance(result, SinkModifyOperation)
        assert result.overwrite is True
        assert result.values is None
        assert result.source == QueryOperation(statement="SELECT * FROM s", table="s")

    def test_explain_plan_for(self):
        result = self.parser.parse("EXPLAIN PLAN FOR SELECT * FROM t;")
        assert isinstance(result, ExplainOperation)
        assert result.target == "SELECT * FROM t"
        assert result.statement == "EXPLAIN PLAN FOR SELECT * FROM t"

    def test_explain_requires_statement(self):
        with pytest.raises(SqlParseError):
            self.parser.parse("EXPLAIN;")


class TestAdministration:
    def setup_method(self):
        self.parser = StatementParser()

    def test_add_and_remove_jar(self):
        assert self.parser.parse("ADD JAR '/tmp/udf.jar';") == AddJarOperation(path="/tmp/udf.jar")
        assert self.parser.parse("REMOVE JAR '/tmp/udf.jar';") == RemoveJarOperation(path="/tmp/udf.jar")

    @pytest.mark.parametrize(
        "what", ["JARS", "JOBS", "TABLES", "VIEWS", "DATABASES", "CATALOGS", "MODULES", "FUNCTIONS"]
    )
    def test_show(self, what):
        assert self.parser.parse(f"SHOW {what.lower()};") == ShowOperation(what=what)

    def test_show_create(self):
        assert self.parser.parse("SHOW CREATE TABLE t;") == ShowCreateTableOperation(name="t")
        assert self.parser.parse("SHOW CREATE VIEW v;") == ShowCreateViewOperation(name="v")

    def test_stop_job(self):
        assert self.parser.parse("STOP JOB 'abc';") == StopJobOperation(job_id="abc")

    def test_stop_job_with_options(self):
        result = self.parser.parse("STOP JOB 'abc' WITH SAVEPOINT WITH DRAIN;")
        assert result == StopJobOperation(job_id="abc", with_savepoint=True, with_drain=True)

    def test_stop_job_requires_id(self):
        with pytest.raises(SqlParseError):
            self.parser.parse("STOP JOB;")

    def test_create_table_columns(self):
        result = self.parser.parse(
            "CREATE TABLE t (id INT, name STRING, PRIMARY KEY (id) NOT ENFORCED) WITH ('connector' = 'x');"
        )
        assert isinstance(result, CreateOperation)
        assert result.kind == "TABLE"
        assert result.name == "t"
        assert result.columns == ("id", "name")
        assert result.statement.startswith("CREATE TABLE t (id INT")

    def test_create_table_as(self):
        result = self.parser.parse("CREATE TABLE t2 AS SELECT * FROM t;")
        assert isinstance(result, CreateTableAsOperation)
        assert result.table == "t2"
        assert result.query.table == "t"

    def test_create_temporary_view(self):
        result = self.parser.parse("CREATE TEMPORARY VIEW IF NOT EXISTS v AS SELECT * FROM t;")
        assert isinstance(result, CreateOperation)
        assert result.kind == "VIEW"
        assert result.temporary is True
        assert result.if_not_exists is True
        assert result.query.table == "t"

    def test_create_database(self):
        result = self.parser.parse("CREATE DATABASE IF NOT EXISTS db1;")
        assert isinstance(result, CreateOperation)
        assert result.kind == "DATABASE"
        assert result.if_not_exists is True

    def test_drop(self):
        result = self.parser.parse("DROP TEMPORARY TABLE IF EXISTS t;")
        assert result == DropOperation(kind="TABLE", name="t", if_exists=True, temporary=True)

    def test_alter_rename(self):
        result = self.parser.parse("ALTER TABLE t RENAME TO t2;")
        assert isinstance(result, AlterOperation)
        assert result.new_name == "t2"

    def test_alter_options(self):
        result = self.parser.parse("ALTER TABLE t SET ('k' = 'v');")
        assert isinstance(result, AlterOperation)
        assert result.new_name is None

    def test_use(self):
        assert self.parser.parse("USE db1;") == UseOperation(name="db1")
        assert self.parser.parse("USE CATALOG c1;") == UseOperation(name="c1", catalog=True)

    def test_modules(self):
        assert self.parser.parse("LOAD MODULE hive WITH ('version' = '3');") == LoadModuleOperation(name="hive")
        assert self.parser.parse("UNLOAD MODULE hive;") == UnloadModuleOperation(name="hive")

    def test_describe(self):
        assert self.parser.parse("DESCRIBE t;") == DescribeOperation(name="t")
        assert self.parser.parse("DESC t;") == DescribeOperation(name="t")


class TestSyntaxErrors:
    def setup_method(self):
        self.parser = StatementParser()

    def test_unknown_leading_word(self):
        with pytest.raises(SqlParseError) as exc_info:
            self.parser.parse("SELEC 1;")
        assert exc_info.value.position == 0
        assert "SELEC" in str(exc_info.value)

    def test_error_position(self):
        with pytest.raises(SqlParseError) as exc_info:
            self.parser.parse("SHOW NOTHING;")
        assert exc_info.value.position == 5

    def test_end_of_input(self):
        with pytest.raises(SqlParseError) as exc_info:
            self.parser.parse("STOP JOB")
        assert exc_info.value.position is None

    def test_illegal_character(self):
        with pytest.raises(SqlParseError, match="Illegal character"):
            self.parser.parse("SELECT 1 \\ 2;")

    def test_parser_is_reusable_after_error(self):
        with pytest.raises(SqlParseError):
            self.parser.parse("SELEC 1;")
        assert isinstance(self.parser.parse("QUIT;"), QuitOperation)
