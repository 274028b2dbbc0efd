"""Statement readers.

Only the Swedbank semicolon-delimited export is supported.
"""

from .swedbank_csv import parse_statement, read_statement

__all__ = ["parse_statement", "read_statement"]
