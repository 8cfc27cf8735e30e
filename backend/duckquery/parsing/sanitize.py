"""SQL sanitization before execution."""

from __future__ import annotations

from typing import List

import sqlglot
from sqlglot.errors import TokenError
from sqlglot.tokens import Token, TokenType

from duckquery.core.request import BatchRequest
from duckquery.errors import SanitizationError
from duckquery.parsing.macros import interpolate_macros


def _split_statements(tokens: List[Token]) -> List[List[Token]]:
    statements: List[List[Token]] = [[]]
    for token in tokens:
        if token.token_type == TokenType.SEMICOLON:
            statements.append([])
        else:
            statements[-1].append(token)
    return [s for s in statements if s]


def sanitize_sql(sql: str, dialect: str = "duckdb") -> str:
    """
    Reject SQL that cannot be sent as one statement.

    Only tokenizes; grammar is left to the backend.
    A single trailing semicolon is removed.

    Args:
        sql: SQL after macro interpolation
        dialect: sqlglot dialect used to tokenize

    Returns:
        SQL ready to execute

    Raises:
        SanitizationError: If the SQL is empty, untokenizable, or holds
            more than one statement

    Examples:
        >>> sanitize_sql("SELECT 1;")
        'SELECT 1'
    """
    if not sql or not sql.strip():
        raise SanitizationError("Query is empty")

    try:
        tokens = sqlglot.tokenize(sql, read=dialect)
    except TokenError as e:
        raise SanitizationError(f"Unable to read SQL: {e}") from e

    statements = _split_statements(tokens)
    if not statements:
        raise SanitizationError("Query is empty")
    if len(statements) > 1:
        raise SanitizationError(
            f"Only one statement per query is allowed, found {len(statements)}"
        )

    cleaned = sql.strip()
    if cleaned.endswith(";"):
        cleaned = cleaned[:-1].rstrip()
    return cleaned


def sanitize_and_interpolate(raw_sql: str, request: BatchRequest) -> str:
    """Default sanitizer: expand macros, then sanitize."""
    return sanitize_sql(interpolate_macros(raw_sql, request))
