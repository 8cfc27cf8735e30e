"""Dashboard macro interpolation."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Callable, Dict, List

from duckquery.core.request import BatchRequest, TimeRange
from duckquery.errors import SanitizationError

_MACRO_NAME = re.compile(r"\$__(\w+)")
_INTERVAL = re.compile(r"^(\d+)(ms|s|m|h|d)?$")
_QUOTES = ("'", '"')

_INTERVAL_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


def _timestamp_literal(moment: datetime) -> str:
    naive = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return f"TIMESTAMP '{naive.isoformat(sep=' ', timespec='milliseconds')}'"


def _require_args(name: str, args: List[str], count: int) -> None:
    if len(args) != count:
        raise SanitizationError(
            f"Macro $__{name} expects {count} argument(s), got {len(args)}"
        )


def _time_filter(args: List[str], tr: TimeRange) -> str:
    _require_args("timeFilter", args, 1)
    return f"{args[0]} BETWEEN {_timestamp_literal(tr.start)} AND {_timestamp_literal(tr.end)}"


def _time_from(args: List[str], tr: TimeRange) -> str:
    _require_args("timeFrom", args, 0)
    return _timestamp_literal(tr.start)


def _time_to(args: List[str], tr: TimeRange) -> str:
    _require_args("timeTo", args, 0)
    return _timestamp_literal(tr.end)


def _unix_epoch_filter(args: List[str], tr: TimeRange) -> str:
    _require_args("unixEpochFilter", args, 1)
    return f"{args[0]} >= {tr.from_epoch_ms // 1000} AND {args[0]} <= {tr.to_epoch_ms // 1000}"


def _unix_epoch_from(args: List[str], tr: TimeRange) -> str:
    _require_args("unixEpochFrom", args, 0)
    return str(tr.from_epoch_ms // 1000)


def _unix_epoch_to(args: List[str], tr: TimeRange) -> str:
    _require_args("unixEpochTo", args, 0)
    return str(tr.to_epoch_ms // 1000)


def parse_interval(interval: str) -> int:
    """
    Parse an interval such as ``5m`` into whole seconds.

    Examples:
        >>> parse_interval("5m")
        300
        >>> parse_interval("90")
        90
    """
    match = _INTERVAL.match(interval.strip().strip("'\""))
    if not match:
        raise SanitizationError(f"Invalid interval '{interval}'")

    amount, unit = int(match.group(1)), match.group(2) or "s"
    if unit == "ms":
        seconds = amount // 1000
    else:
        seconds = amount * _INTERVAL_SECONDS[unit]

    if seconds <= 0:
        raise SanitizationError(f"Interval '{interval}' must be at least one second")
    return seconds


def _time_group(args: List[str], tr: TimeRange) -> str:
    _require_args("timeGroup", args, 2)
    seconds = parse_interval(args[1])
    return f"to_timestamp(floor(epoch({args[0]}) / {seconds}) * {seconds})"


MACROS: Dict[str, Callable[[List[str], TimeRange], str]] = {
    "timeFilter": _time_filter,
    "timeFrom": _time_from,
    "timeTo": _time_to,
    "unixEpochFilter": _unix_epoch_filter,
    "unixEpochFrom": _unix_epoch_from,
    "unixEpochTo": _unix_epoch_to,
    "timeGroup": _time_group,
}


# ─────────────────────────────────────────────────
# Scanning
# ─────────────────────────────────────────────────


def _skip_quoted(sql: str, start: int) -> int:
    """Index just past the quoted span opening at ``start``.

    A doubled quote inside the span is an escaped quote. An unterminated span
    runs to the end of the text.
    """
    quote = sql[start]
    pos = start + 1
    while pos < len(sql):
        if sql[pos] == quote:
            if sql.startswith(quote, pos + 1):
                pos += 2
                continue
            return pos + 1
        pos += 1
    return len(sql)


def _closing_paren(sql: str, open_pos: int) -> int:
    """Index of the ``)`` matching the ``(`` at ``open_pos``, or -1."""
    depth = 0
    pos = open_pos
    while pos < len(sql):
        char = sql[pos]
        if char in _QUOTES:
            pos = _skip_quoted(sql, pos)
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return pos
        pos += 1
    return -1


def split_macro_args(arg_text: str) -> List[str]:
    """
    Split macro arguments on top-level commas.

    Commas inside nested parentheses or quotes belong to the argument.

    Examples:
        >>> split_macro_args("date_trunc('hour', ts), '1h'")
        ["date_trunc('hour', ts)", "'1h'"]
    """
    if not arg_text.strip():
        return []

    args: List[str] = []
    depth = 0
    start = 0
    pos = 0
    while pos < len(arg_text):
        char = arg_text[pos]
        if char in _QUOTES:
            pos = _skip_quoted(arg_text, pos)
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "," and depth == 0:
            args.append(arg_text[start:pos].strip())
            start = pos + 1
        pos += 1
    args.append(arg_text[start:].strip())
    return args


def interpolate_macros(raw_sql: str, request: BatchRequest) -> str:
    """
    Expand ``$__name(args)`` macros using the request's time range.

    Macro names inside quoted strings or identifiers are left alone.

    Args:
        raw_sql: SQL as typed in the query editor
        request: Batch the query belongs to

    Returns:
        SQL with every macro expanded

    Raises:
        SanitizationError: On unknown macros, bad arguments, or time macros
            used without a time range

    Examples:
        >>> interpolate_macros("SELECT * FROM t WHERE $__unixEpochFilter(ts)", req)
        'SELECT * FROM t WHERE ts >= 1700000000 AND ts <= 1700003600'
    """
    parts: List[str] = []
    copied = 0
    pos = 0

    while pos < len(raw_sql):
        char = raw_sql[pos]
        if char in _QUOTES:
            pos = _skip_quoted(raw_sql, pos)
            continue

        match = _MACRO_NAME.match(raw_sql, pos)
        if match is None:
            pos += 1
            continue

        name = match.group(1)
        macro = MACROS.get(name)
        if macro is None:
            raise SanitizationError(f"Unknown macro $__{name}")

        open_pos = match.end()
        if not raw_sql.startswith("(", open_pos):
            raise SanitizationError(f"Macro $__{name} must be called with parentheses")
        close_pos = _closing_paren(raw_sql, open_pos)
        if close_pos < 0:
            raise SanitizationError(f"Macro $__{name} is missing a closing parenthesis")
        if request.time_range is None:
            raise SanitizationError(f"Macro $__{name} requires a time range")

        args = split_macro_args(raw_sql[open_pos + 1 : close_pos])
        parts.append(raw_sql[copied:pos])
        parts.append(macro(args, request.time_range))
        pos = copied = close_pos + 1

    parts.append(raw_sql[copied:])
    return "".join(parts)
