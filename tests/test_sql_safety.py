"""Tests for SQL normalization and the SELECT-only validator."""

import pytest

from sqlai.core.config import ExecutionPolicy
from sqlai.core.exceptions import InputError, UnsafeSqlError
from sqlai.core.sql_safety import (
    DANGEROUS_KEYWORDS,
    ONLY_SELECT_MESSAGE,
    SqlValidator,
    normalize_sql,
    validate_sql,
)

# -- normalize_sql --


@pytest.mark.unit
class TestNormalizeSql:
    def test_plain_statement_unchanged(self):
        assert normalize_sql("SELECT id FROM users") == "SELECT id FROM users"

    def test_removes_whole_comment_line(self):
        assert normalize_sql("-- top users\nSELECT 1") == "SELECT 1"

    def test_removes_indented_comment_line(self):
        assert normalize_sql("   -- note\nSELECT 1") == "SELECT 1"

    def test_removes_trailing_line_comment(self):
        assert normalize_sql("SELECT 1 -- DROP TABLE x") == "SELECT 1"

    def test_removes_block_comment(self):
        assert normalize_sql("SELECT /* hidden */ 1") == "SELECT  1"

    def test_removes_multiline_block_comment(self):
        assert normalize_sql("SELECT /* a\nb\nc */ 1") == "SELECT  1"

    def test_block_comment_match_is_non_greedy(self):
        assert normalize_sql("SELECT /* a */ 1, /* b */ 2") == "SELECT  1,  2"

    def test_line_marker_inside_block_comment(self):
        assert normalize_sql("/* -- */ SELECT 1") == "SELECT 1"

    def test_trims_whitespace(self):
        assert normalize_sql("\n\n  SELECT 1  \n") == "SELECT 1"

    def test_keeps_statement_terminator(self):
        assert normalize_sql("SELECT * FROM t; -- nothing else") == "SELECT * FROM t;"

    def test_only_comments_become_empty(self):
        assert normalize_sql("-- a\n/* b */") == ""

    def test_comment_marker_in_string_literal_is_stripped(self):
        """Known limitation: literals are not tokenized."""
        assert normalize_sql("SELECT '--x' AS v") == "SELECT '"

    def test_trailing_cut_reaches_like_pattern(self):
        sql = "SELECT path FROM files WHERE path LIKE '%--%'"
        assert normalize_sql(sql) == "SELECT path FROM files WHERE path LIKE '%"

    def test_block_comment_exposing_line_comment(self):
        assert normalize_sql("/* x */ -- y\nSELECT 1") == "SELECT 1"

    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT 1",
            "-- c\nSELECT 1 -- d\n/* e */",
            "/* x */ -- y\nSELECT 1",
            "/*/* nested */ */ SELECT 1",
            "SELECT 1\r\n-- windows\r\nFROM t",
            "",
            "   ",
        ],
    )
    def test_idempotent(self, sql):
        once = normalize_sql(sql)
        assert normalize_sql(once) == once


# -- SqlValidator: leading keyword --


@pytest.mark.unit
class TestLeadingKeyword:
    def test_simple_select_passes(self):
        SqlValidator().validate("SELECT id, name FROM users")

    def test_lowercase_select_passes(self):
        SqlValidator().validate("select id from users")

    def test_cte_passes(self):
        SqlValidator().validate(
            "WITH recent AS (SELECT * FROM orders) SELECT count(*) FROM recent"
        )

    def test_drop_rejected(self):
        with pytest.raises(UnsafeSqlError) as exc_info:
            SqlValidator().validate("DROP TABLE users")
        assert exc_info.value.message == "Only SELECT queries are allowed"
        assert exc_info.value.keyword is None

    def test_update_rejected_by_prefix_check(self):
        with pytest.raises(UnsafeSqlError, match="^Only SELECT queries are allowed$"):
            SqlValidator().validate("UPDATE users SET active=true")

    @pytest.mark.parametrize(
        "sql",
        ["SHOW search_path", "EXPLAIN SELECT 1", "VALUES (1)", "(SELECT 1)", "COPY t TO STDOUT"],
    )
    def test_other_leading_tokens_rejected(self, sql):
        with pytest.raises(UnsafeSqlError, match=ONLY_SELECT_MESSAGE):
            SqlValidator().validate(sql)

    def test_commented_out_select_leaves_drop(self):
        with pytest.raises(UnsafeSqlError, match="^Only SELECT queries are allowed$"):
            SqlValidator().validate("-- SELECT 1\nDROP TABLE x")

    def test_leading_block_comment_ignored(self):
        SqlValidator().validate("/* generated */ SELECT 1")


# -- SqlValidator: denylist --


@pytest.mark.unit
class TestDenylist:
    @pytest.mark.parametrize("keyword", DANGEROUS_KEYWORDS)
    def test_keyword_after_select_rejected(self, keyword):
        with pytest.raises(UnsafeSqlError) as exc_info:
            SqlValidator().validate(f"SELECT 1; {keyword} something")
        assert exc_info.value.keyword == keyword
        assert exc_info.value.message == f"Query contains unsafe operation: {keyword}"

    def test_keyword_inside_cte_rejected(self):
        with pytest.raises(UnsafeSqlError, match="unsafe operation: DELETE"):
            SqlValidator().validate(
                "WITH gone AS (DELETE FROM t RETURNING *) SELECT * FROM gone"
            )

    def test_keyword_in_subquery_rejected(self):
        with pytest.raises(UnsafeSqlError, match="unsafe operation: INSERT"):
            SqlValidator().validate("SELECT * FROM (INSERT INTO t VALUES (1)) x")

    def test_lowercase_keyword_rejected(self):
        with pytest.raises(UnsafeSqlError, match="unsafe operation: DROP"):
            SqlValidator().validate("select 1; drop table users")

    def test_keyword_next_to_punctuation_rejected(self):
        with pytest.raises(UnsafeSqlError, match="unsafe operation: DROP"):
            SqlValidator().validate("SELECT 1;DROP(users)")

    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT * FROM executive_table",
            "SELECT update_time, created_at FROM events",
            "SELECT dropped FROM stats",
            "SELECT * FROM callers",
            "SELECT grants_total FROM budget",
        ],
    )
    def test_identifiers_containing_keywords_pass(self, sql):
        SqlValidator().validate(sql)

    def test_keyword_only_in_trailing_comment_passes(self):
        SqlValidator().validate("SELECT 1 -- DROP TABLE x")

    def test_keyword_only_in_block_comment_passes(self):
        SqlValidator().validate("SELECT /* DELETE everything */ 1")

    def test_first_keyword_in_denylist_order_reported(self):
        with pytest.raises(UnsafeSqlError) as exc_info:
            SqlValidator().validate("SELECT 1; GRANT ALL ON t TO x; INSERT INTO t VALUES (1)")
        assert exc_info.value.keyword == "INSERT"

    def test_exec_and_execute_distinguished(self):
        with pytest.raises(UnsafeSqlError) as exc_info:
            SqlValidator().validate("SELECT 1; EXECUTE plan_a")
        assert exc_info.value.keyword == "EXECUTE"


# -- Blank input --


@pytest.mark.unit
class TestBlankInput:
    @pytest.mark.parametrize("sql", ["", "   ", "\n\t"])
    def test_blank_rejected_as_input_error(self, sql):
        with pytest.raises(InputError, match="must not be blank"):
            SqlValidator().validate(sql)

    def test_blank_is_not_unsafe_sql(self):
        with pytest.raises(InputError) as exc_info:
            SqlValidator().validate("   ")
        assert not isinstance(exc_info.value, UnsafeSqlError)

    def test_comment_only_is_unsafe_not_blank(self):
        with pytest.raises(UnsafeSqlError, match=ONLY_SELECT_MESSAGE):
            SqlValidator().validate("-- just a comment")


# -- Policy --


@pytest.mark.unit
def test_validator_with_explicit_policy():
    validator = SqlValidator(ExecutionPolicy())
    validator.validate("WITH a AS (SELECT 1) SELECT * FROM a")


@pytest.mark.unit
def test_validate_sql_helper():
    validate_sql("SELECT 1")
    with pytest.raises(UnsafeSqlError):
        validate_sql("TRUNCATE t")
