"""
Field Analyzer

Type-specific descriptive statistics for a classified field.
Values that fail to parse for the field's type are dropped before any
statistic is computed; a field with nothing parseable gets an empty payload.
"""

import math
from typing import Any, Callable, Optional, Sequence

import polars as pl

from api.schemas.responses import (
    NUMERIC_FIELD_TYPES,
    DomainCount,
    FieldAnalysis,
    FieldClassification,
    FieldType,
    TopValue,
)
from config import AnalyzerSettings, get_settings
from core.values import parse_dates, parse_numbers, present_texts, to_fixed, to_raw


SECONDS_PER_DAY = 60 * 60 * 24


def value_counts(values: pl.Series) -> pl.DataFrame:
    """
    Frequency table of a text series.

    Columns are "value" and "len", most frequent first; ties keep
    first-seen order.
    """
    return (
        values.to_frame("value")
        .group_by("value", maintain_order=True)
        .len()
        .sort("len", descending=True, maintain_order=True)
    )


class FieldAnalyzer:
    """Computes per-field statistics from raw values and a classification."""

    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or get_settings().analyzer
        self.payload_builders: dict[FieldType, Callable[..., dict[str, Any]]] = {
            FieldType.DATE: self._date_stats,
            FieldType.CATEGORY: self._category_stats,
            FieldType.ID: self._id_stats,
            FieldType.EMAIL: self._email_stats,
            FieldType.TEXT: self._text_stats,
        }
        for numeric_type in NUMERIC_FIELD_TYPES:
            self.payload_builders[numeric_type] = self._numeric_stats

    def analyze(
        self,
        values: Sequence[Any],
        field_name: str,
        classification: FieldClassification,
    ) -> FieldAnalysis:
        """
        Analyze a single field.

        Args:
            values: Raw cells of the column
            field_name: Column name
            classification: Result of the field classifier

        Returns:
            FieldAnalysis with counts, completeness and type payload
        """
        present = pl.Series(
            "value", present_texts([to_raw(v) for v in values]), dtype=pl.String
        )
        total_count = len(values)
        unique_count = present.n_unique()

        completeness = (
            to_fixed(len(present) / total_count * 100, 1) if total_count else "0.0"
        )

        builder = self.payload_builders.get(classification.type)
        payload = (
            builder(present, total_count=total_count, unique_count=unique_count)
            if builder is not None
            else {}
        )

        return FieldAnalysis(
            field_name=field_name,
            type=classification.type,
            confidence=classification.confidence,
            total_count=total_count,
            null_count=total_count - len(present),
            unique_count=unique_count,
            completeness=completeness,
            **payload,
        )

    def _numeric_stats(self, present: pl.Series, **_) -> dict[str, Any]:
        numbers = parse_numbers(present)
        if numbers.is_empty():
            return {}

        ordered = numbers.sort()
        return {
            "min": float(numbers.min()),
            "max": float(numbers.max()),
            "avg": float(numbers.mean()),
            "sum": float(numbers.sum()),
            # Upper-middle element for even counts, not the mean of the two middles
            "median": float(ordered[len(ordered) // 2]),
        }

    def _date_stats(self, present: pl.Series, **_) -> dict[str, Any]:
        dates = parse_dates(present).drop_nulls()
        if dates.is_empty():
            return {}

        earliest, latest = dates.min(), dates.max()
        return {
            "earliest": earliest.strftime("%Y-%m-%d"),
            "latest": latest.strftime("%Y-%m-%d"),
            "range": math.ceil((latest - earliest).total_seconds() / SECONDS_PER_DAY),
        }

    def _category_stats(self, present: pl.Series, **_) -> dict[str, Any]:
        counts = value_counts(present)
        distribution = (
            present.to_frame("value").group_by("value", maintain_order=True).len()
        )
        return {
            "top_values": self._top_values(counts, len(present)),
            "distribution": dict(distribution.iter_rows()),
        }

    def _text_stats(self, present: pl.Series, unique_count: int, **_) -> dict[str, Any]:
        if unique_count >= self.settings.text_top_values_max_unique:
            return {}
        return {"top_values": self._top_values(value_counts(present), len(present))}

    def _id_stats(
        self,
        present: pl.Series,
        total_count: int,
        unique_count: int,
    ) -> dict[str, Any]:
        return {
            "duplicates": total_count - unique_count,
            "unique_ratio": to_fixed(unique_count / total_count * 100, 1),
        }

    def _email_stats(self, present: pl.Series, **_) -> dict[str, Any]:
        domains = present.str.split("@").list.get(1, null_on_oob=True).drop_nulls()
        domains = domains.filter(domains != "")

        counts = value_counts(domains).head(self.settings.top_values)
        return {
            "top_domains": [
                DomainCount(domain=row["value"], count=row["len"])
                for row in counts.iter_rows(named=True)
            ]
        }

    def _top_values(self, counts: pl.DataFrame, present_count: int) -> list[TopValue]:
        """Most frequent values with their share of present values."""
        return [
            TopValue(
                value=row["value"],
                count=row["len"],
                percentage=to_fixed(row["len"] / present_count * 100, 1),
            )
            for row in counts.head(self.settings.top_values).iter_rows(named=True)
        ]


# Global analyzer instance
field_analyzer = FieldAnalyzer()
