"""
Positional placeholder handling.

Callers always write SQL with ``?`` placeholders and backtick-quoted
identifiers. Drivers that use the ``format`` paramstyle (PyMySQL, psycopg2)
need ``%s`` instead, and PostgreSQL needs double-quoted identifiers, so the
text is split once at prepare time and rendered per driver.
"""

from __future__ import annotations

from dataclasses import dataclass

_QUOTES = ("'", '"', "`")


@dataclass(frozen=True)
class ParsedSql:
    """SQL text split at its positional placeholders."""

    segments: tuple[str, ...]

    @property
    def placeholder_count(self) -> int:
        return len(self.segments) - 1

    def render(self, placeholder: str = "?", escape_percent: bool = False) -> str:
        parts = self.segments
        if escape_percent:
            parts = tuple(s.replace("%", "%%") for s in parts)
        return placeholder.join(parts)


def _end_of_quoted(sql: str, start: int, backslash_escapes: bool = False) -> int:
    """Index just past the quote closing the one at ``start`` (doubled quotes escape)."""
    quote = sql[start]
    i = start + 1
    n = len(sql)
    while i < n:
        if backslash_escapes and quote != "`" and sql[i] == "\\":
            i += 2
            continue
        if sql[i] == quote:
            if i + 1 < n and sql[i + 1] == quote:
                i += 2
                continue
            return i + 1
        i += 1
    return n


def _requote_identifier(token: str, identifier_quote: str) -> str:
    closed = len(token) > 1 and token.endswith("`")
    inner = token[1:-1] if closed else token[1:]
    inner = inner.replace("``", "`").replace(identifier_quote, identifier_quote * 2)
    return identifier_quote + inner + (identifier_quote if closed else "")


def split_placeholders(
    sql: str, identifier_quote: str = "`", backslash_escapes: bool = False
) -> ParsedSql:
    """
    Split ``sql`` at every ``?`` that is not inside a string literal, a quoted
    identifier or a comment.

    Args:
        sql: Statement text with ``?`` placeholders
        identifier_quote: Quote character backtick identifiers are rewritten to
        backslash_escapes: Treat a backslash inside string literals as an escape (MySQL)

    Returns:
        ParsedSql with placeholder_count + 1 text segments
    """
    segments: list[str] = []
    buf: list[str] = []
    i = 0
    n = len(sql)

    while i < n:
        ch = sql[i]

        if ch in _QUOTES:
            end = _end_of_quoted(sql, i, backslash_escapes)
            token = sql[i:end]
            if ch == "`" and identifier_quote != "`":
                token = _requote_identifier(token, identifier_quote)
            buf.append(token)
            i = end
        elif sql.startswith("--", i):
            end = sql.find("\n", i)
            end = n if end == -1 else end
            buf.append(sql[i:end])
            i = end
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            end = n if end == -1 else end + 2
            buf.append(sql[i:end])
            i = end
        elif ch == "?":
            segments.append("".join(buf))
            buf = []
            i += 1
        else:
            buf.append(ch)
            i += 1

    segments.append("".join(buf))
    return ParsedSql(tuple(segments))
