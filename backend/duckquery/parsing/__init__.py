"""SQL macro interpolation and sanitization for duckquery."""

from duckquery.parsing.macros import interpolate_macros, parse_interval, split_macro_args
from duckquery.parsing.sanitize import sanitize_and_interpolate, sanitize_sql

__all__ = [
    "interpolate_macros",
    "parse_interval",
    "sanitize_and_interpolate",
    "sanitize_sql",
    "split_macro_args",
]
