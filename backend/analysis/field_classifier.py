"""
Field Classifier

Infers the semantic type of a column from its values and its name.

Rules are an ordered table; the first rule whose match ratio clears its
threshold decides the type, so earlier rules win ties.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from api.schemas.responses import FieldClassification, FieldType
from config import ClassifierSettings, get_settings
from core.values import (
    matches_date_pattern,
    parse_dates,
    parse_numbers,
    present_texts,
    to_raw,
)


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Name fragments refining the numeric family, checked in order
NUMERIC_NAME_HINTS: list[tuple[tuple[str, ...], FieldType, float]] = [
    (("price", "amount", "cost", "salary"), FieldType.CURRENCY, 0.95),
    (("percent", "rate"), FieldType.PERCENTAGE, 0.95),
    (("quantity", "count"), FieldType.INTEGER, 0.9),
]


@dataclass
class ColumnSample:
    """Present values of a column plus facts shared by several rules."""

    field_name: str
    values: list[str]
    lower_name: str = field(init=False)
    unique_count: int = field(init=False)

    def __post_init__(self):
        self.lower_name = self.field_name.lower()
        self.unique_count = len(set(self.values))

    @property
    def unique_ratio(self) -> float:
        return self.unique_count / len(self.values)

    def match_ratio(self, predicate: Callable[[str], bool]) -> float:
        return sum(1 for v in self.values if predicate(v)) / len(self.values)


Rule = Callable[[ColumnSample], Optional[tuple[FieldType, float]]]


class FieldClassifier:
    """Priority-ordered field type classifier."""

    def __init__(self, settings: Optional[ClassifierSettings] = None):
        self.settings = settings or get_settings().classifier
        self.rules: list[tuple[str, Rule]] = [
            ("id", self._id_rule),
            ("date", self._date_rule),
            ("numeric", self._numeric_rule),
            ("email", self._email_rule),
            ("category", self._category_rule),
            ("text", self._text_rule),
        ]

    def classify(
        self,
        values: Sequence[Any],
        field_name: str,
    ) -> FieldClassification:
        """
        Classify a column.

        Args:
            values: Raw cells of the column (any scalar or RawValue)
            field_name: Column name

        Returns:
            FieldClassification with type and confidence
        """
        raw = [to_raw(v) for v in values]
        present = present_texts(raw)

        if not present:
            return FieldClassification(
                field_name=field_name,
                type=FieldType.EMPTY,
                confidence=1.0,
            )

        sample = ColumnSample(field_name, present)
        for _, rule in self.rules:
            result = rule(sample)
            if result is not None:
                field_type, confidence = result
                return FieldClassification(
                    field_name=field_name,
                    type=field_type,
                    confidence=confidence,
                )

        # Unreachable: the text rule always matches
        raise AssertionError("no classification rule matched")

    def _id_rule(self, sample: ColumnSample):
        if "id" not in sample.lower_name and sample.lower_name != "sku":
            return None
        if sample.unique_ratio > self.settings.id_unique_ratio:
            return FieldType.ID, 0.9
        return None

    def _date_rule(self, sample: ColumnSample):
        parsed = parse_dates(sample.values).to_list()
        matches = sum(
            1 for text, date in zip(sample.values, parsed)
            if matches_date_pattern(text) or date is not None
        )
        ratio = matches / len(sample.values)
        if ratio > self.settings.date_match_ratio:
            return FieldType.DATE, ratio
        return None

    def _numeric_rule(self, sample: ColumnSample):
        ratio = len(parse_numbers(sample.values)) / len(sample.values)
        if ratio <= self.settings.numeric_match_ratio:
            return None

        for fragments, field_type, confidence in NUMERIC_NAME_HINTS:
            if any(fragment in sample.lower_name for fragment in fragments):
                return field_type, confidence
        return FieldType.NUMERIC, ratio

    def _email_rule(self, sample: ColumnSample):
        ratio = sample.match_ratio(lambda v: EMAIL_PATTERN.match(v) is not None)
        if ratio > self.settings.email_match_ratio:
            return FieldType.EMAIL, ratio
        return None

    def _category_rule(self, sample: ColumnSample):
        if (
            sample.unique_ratio < self.settings.category_unique_ratio
            and sample.unique_count < self.settings.category_max_unique
        ):
            return FieldType.CATEGORY, 1 - sample.unique_ratio
        return None

    def _text_rule(self, sample: ColumnSample):
        return FieldType.TEXT, 0.5


# Global classifier instance
field_classifier = FieldClassifier()
