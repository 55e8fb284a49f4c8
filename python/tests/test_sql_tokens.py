import pytest

from recordstore.db.sql_tokens import split_placeholders


@pytest.mark.parametrize(
    "sql,count",
    [
        ("SELECT 1", 0),
        ("SELECT * FROM t WHERE a=? AND b=?", 2),
        ("SELECT '?' FROM t WHERE a=?", 1),
        ("SELECT 'it''s ?' WHERE a=?", 1),
        ('SELECT "col?" FROM t', 0),
        ("SELECT `we?rd` FROM t WHERE `id`=?", 1),
        ("SELECT 1 -- why?\nWHERE a=?", 1),
        ("SELECT /* a=? */ 1 WHERE b=?", 1),
        ("SELECT 'unterminated ?", 0),
    ],
)
def test_placeholder_count(sql, count):
    assert split_placeholders(sql).placeholder_count == count


def test_render_for_format_paramstyle_escapes_percent():
    parsed = split_placeholders("SELECT * FROM t WHERE name LIKE 'a%' AND id=?")
    assert parsed.render("%s", escape_percent=True) == "SELECT * FROM t WHERE name LIKE 'a%%' AND id=%s"
    assert parsed.render() == "SELECT * FROM t WHERE name LIKE 'a%' AND id=?"


def test_backticks_rewritten_to_double_quotes():
    parsed = split_placeholders('SELECT * FROM t WHERE `my"id`=?', identifier_quote='"')
    assert parsed.render("%s") == 'SELECT * FROM t WHERE "my""id"=%s'


def test_backticks_kept_by_default():
    parsed = split_placeholders("DELETE FROM t WHERE `id`=?")
    assert parsed.segments == ("DELETE FROM t WHERE `id`=", "")


def test_backslash_escaped_quote_keeps_literal_closed():
    sql = "SELECT * FROM t WHERE a='it\\'s ?' AND b=?"
    # without backslash escapes the literal closes early and the wrong ? is bound
    assert split_placeholders(sql).render("%s") == "SELECT * FROM t WHERE a='it\\'s %s' AND b=?"
    parsed = split_placeholders(sql, backslash_escapes=True)
    assert parsed.placeholder_count == 1
    assert parsed.render("%s") == "SELECT * FROM t WHERE a='it\\'s ?' AND b=%s"


def test_backslash_does_not_escape_identifiers():
    parsed = split_placeholders("SELECT `a\\` FROM t WHERE b=?", backslash_escapes=True)
    assert parsed.placeholder_count == 1
