"""
Raw Cell Values

Typed normalization of raw cells and explicit number/date parsing.
A cell is ABSENT (null or missing key), EMPTY (empty string) or PRESENT
(text). Parsers return None when present text cannot be parsed.
"""

import math
import re
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Optional, Sequence

import polars as pl


class RawKind(str, Enum):
    """State of a raw cell."""

    ABSENT = "absent"
    EMPTY = "empty"
    PRESENT = "present"


@dataclass(frozen=True)
class RawValue:
    """A normalized cell: its kind and, when present, its text."""

    kind: RawKind
    text: Optional[str] = None

    @property
    def is_present(self) -> bool:
        return self.kind is RawKind.PRESENT


ABSENT = RawValue(RawKind.ABSENT)
EMPTY = RawValue(RawKind.EMPTY, "")


NUMBER_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")

DATE_PATTERNS = [
    re.compile(r"^\d{4}-\d{2}-\d{2}"),  # YYYY-MM-DD
    re.compile(r"^\d{2}/\d{2}/\d{4}"),  # MM/DD/YYYY
    re.compile(r"^\d{2}-\d{2}-\d{4}"),  # DD-MM-YYYY
]

# Tried in order; the first format that parses a value wins
DATE_FORMATS = [
    "%Y-%m-%d",                 # 2024-01-15
    "%Y-%m-%dT%H:%M:%S%.f",     # 2024-01-15T10:00:00.123
    "%Y-%m-%d %H:%M:%S%.f",     # 2024-01-15 10:00:00
    "%Y-%m-%dT%H:%M",           # 2024-01-15T10:00
    "%Y-%m-%dT%H:%M:%S%.f%z",   # 2024-01-15T10:00:00+02:00
    "%Y-%m-%d %H:%M:%S%.f%z",
    "%m/%d/%Y",                 # 01/15/2024
    "%m/%d/%Y %H:%M:%S",
    "%d-%m-%Y",                 # 15-01-2024
    "%Y/%m/%d",                 # 2024/01/15
    "%B %d, %Y",                # January 15, 2024
    "%b %d, %Y",                # Jan 15, 2024
    "%d %B %Y",                 # 15 January 2024
    "%d %b %Y",                 # 15 Jan 2024
]


def _non_finite_text(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return "Infinity" if value > 0 else "-Infinity"


def format_number(value: float) -> str:
    """Render a number the way it reads in a table: 10.0 -> '10'."""
    if isinstance(value, float):
        if not math.isfinite(value):
            return _non_finite_text(value)
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def to_raw(cell: Any) -> RawValue:
    """Normalize a cell from a parsed row into a RawValue."""
    if cell is None:
        return ABSENT
    if isinstance(cell, RawValue):
        return cell
    if isinstance(cell, bool):
        return RawValue(RawKind.PRESENT, "true" if cell else "false")
    if isinstance(cell, float):
        if math.isnan(cell):
            return ABSENT
        return RawValue(RawKind.PRESENT, format_number(cell))
    text = str(cell)
    if text == "":
        return EMPTY
    return RawValue(RawKind.PRESENT, text)


def present_texts(values: list[RawValue]) -> list[str]:
    """Text of every present value, in order."""
    return [v.text for v in values if v.is_present]


def parse_number(text: str) -> Optional[float]:
    """Parse a finite decimal number; None when the text is not one."""
    stripped = text.strip()
    if not NUMBER_PATTERN.match(stripped):
        return None
    value = float(stripped)
    if not math.isfinite(value):
        return None
    return value


def parse_numbers(texts: Sequence[str]) -> pl.Series:
    """
    Finite numbers among texts, in order.

    Texts outside the decimal grammar are dropped before the cast, so
    the result agrees with parse_number.
    """
    stripped = pl.Series("value", list(texts), dtype=pl.String).str.strip_chars()
    numbers = (
        stripped.filter(stripped.str.contains(NUMBER_PATTERN.pattern))
        .cast(pl.Float64, strict=False)
        .drop_nulls()
    )
    return numbers.filter(numbers.is_finite())


def matches_date_pattern(text: str) -> bool:
    return any(pattern.match(text) for pattern in DATE_PATTERNS)


def _datetime_expr(fmt: str) -> pl.Expr:
    parsed = pl.col("text").str.to_datetime(fmt, time_unit="us", strict=False)
    if "%z" in fmt:
        # Offsets are converted to UTC; drop the zone so all results compare
        parsed = parsed.dt.replace_time_zone(None)
    return parsed


def parse_dates(texts: Sequence[str]) -> pl.Series:
    """
    Parse dates and datetimes, one result per text.

    Each text gets the first of DATE_FORMATS that parses it; texts that
    match none are null.
    """
    frame = pl.DataFrame({"text": list(texts)}, schema={"text": pl.String})
    return (
        frame.with_columns(
            pl.col("text").str.strip_chars().str.replace(r"Z$", "+00:00")
        )
        .select(pl.coalesce([_datetime_expr(fmt) for fmt in DATE_FORMATS]).alias("date"))
        .to_series()
    )


def parse_date(text: str) -> Optional[datetime]:
    """Parse a single date or datetime; None when no format applies."""
    return parse_dates([text])[0]


def to_fixed(value: float, digits: int) -> str:
    """Fixed-decimal text, rounding half up on the exact binary value."""
    if not math.isfinite(value):
        return _non_finite_text(value)
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
