"""Tests for splitting scripts and interactive input into statements."""

from sqlcli.parsing import is_statement_complete, iter_statements, split_statements


class TestSplitStatements:
    def test_basic_split(self):
        assert split_statements("SELECT 1; SELECT 2;") == ["SELECT 1;", "SELECT 2;"]

    def test_multiline_statement(self):
        result = split_statements("SELECT *\nFROM t;\nQUIT;")
        assert result == ["SELECT *\nFROM t;", "QUIT;"]

    def test_semicolon_in_string(self):
        assert split_statements("SET 'k' = 'a;b';") == ["SET 'k' = 'a;b';"]

    def test_semicolon_in_backticks(self):
        assert split_statements("SELECT * FROM `a;b`;") == ["SELECT * FROM `a;b`;"]

    def test_line_comment_removed(self):
        result = split_statements("-- first; comment\nSELECT 1;")
        assert result == ["SELECT 1;"]

    def test_block_comment_removed(self):
        result = split_statements("/* header;\nmore */ SELECT 1;")
        assert result == ["SELECT 1;"]

    def test_unterminated_trailing_statement(self):
        assert split_statements("SELECT 1; SELECT 2") == ["SELECT 1;", "SELECT 2"]

    def test_empty_statements_dropped(self):
        assert split_statements(";; SELECT 1;;") == ["SELECT 1;"]

    def test_statement_set_block_kept_whole(self):
        script = (
            "EXECUTE STATEMENT SET BEGIN\n"
            "INSERT INTO a VALUES (1);\n"
            "INSERT INTO b VALUES (2);\n"
            "END;\n"
            "SELECT 1;"
        )
        result = split_statements(script)
        assert len(result) == 2
        assert result[0].startswith("EXECUTE STATEMENT SET BEGIN")
        assert result[0].endswith("END;")
        assert result[1] == "SELECT 1;"

    def test_begin_statement_set_is_not_a_block(self):
        script = "BEGIN STATEMENT SET;\nINSERT INTO a VALUES (1);\nEND;"
        assert split_statements(script) == ["BEGIN STATEMENT SET;", "INSERT INTO a VALUES (1);", "END;"]


class TestIterStatements:
    def test_offsets_point_into_source(self):
        source = "SELECT 1;\n  SELECT 2;"
        result = iter_statements(source)
        assert result == [(0, "SELECT 1;"), (12, "SELECT 2;")]
        for offset, text in result:
            assert source[offset:offset + len(text)] == text

    def test_offset_after_comment(self):
        source = "-- note\nSHOW TABLES;"
        assert iter_statements(source) == [(8, "SHOW TABLES;")]

    def test_trailing_statement_offset(self):
        source = "QUIT; STOP JOB"
        assert iter_statements(source) == [(0, "QUIT;"), (6, "STOP JOB")]


class TestIsStatementComplete:
    def test_incomplete(self):
        assert not is_statement_complete("SELECT 1")

    def test_complete(self):
        assert is_statement_complete("SELECT 1;")

    def test_complete_then_partial(self):
        assert not is_statement_complete("SELECT 1; SELECT")

    def test_semicolon_inside_quotes(self):
        assert not is_statement_complete("SET 'k' = 'a;")

    def test_only_comment(self):
        assert not is_statement_complete("-- just a comment;")

    def test_statement_set_block_needs_end(self):
        assert not is_statement_complete("EXECUTE STATEMENT SET BEGIN INSERT INTO a VALUES (1);")
        assert is_statement_complete("EXECUTE STATEMENT SET BEGIN INSERT INTO a VALUES (1); END;")
