"""
Business Pattern Detector

Matches a dataset against a small taxonomy of business patterns using
field names and inferred types. Rules are checked in order; the first
match wins.
"""

from typing import Callable, Mapping

from api.schemas.responses import BusinessPattern, FieldClassification, FieldType


class FieldSet:
    """Lowercased field names and their types, with substring queries."""

    def __init__(self, classifications: Mapping[str, FieldClassification]):
        self.names = [name.lower() for name in classifications]
        self.types = {c.type for c in classifications.values()}

    def has(self, *fragments: str) -> bool:
        """True if any field name contains any of the fragments."""
        return any(f in name for name in self.names for f in fragments)

    def has_type(self, field_type: FieldType) -> bool:
        return field_type in self.types


PatternRule = Callable[[FieldSet], bool]

PATTERN_RULES: list[tuple[BusinessPattern, PatternRule]] = [
    (
        BusinessPattern.ECOMMERCE_ORDERS,
        lambda f: f.has("order") and f.has("customer") and f.has("product", "category"),
    ),
    (
        BusinessPattern.SALES_DATA,
        lambda f: f.has("sale") or (f.has("amount", "revenue") and f.has_type(FieldType.DATE)),
    ),
    (
        BusinessPattern.CUSTOMER_DATA,
        lambda f: f.has("customer") and f.has("email", "name"),
    ),
    (
        BusinessPattern.INVENTORY_DATA,
        lambda f: f.has("product", "sku") and f.has("quantity", "stock"),
    ),
    (
        BusinessPattern.TRANSACTION_LOGS,
        lambda f: f.has("transaction") or (f.has("timestamp", "date") and f.has("amount")),
    ),
]


def detect_pattern(classifications: Mapping[str, FieldClassification]) -> BusinessPattern:
    """
    Detect the business pattern of a dataset.

    Args:
        classifications: Field name to classification, in column order

    Returns:
        The first matching BusinessPattern, or GENERIC
    """
    fields = FieldSet(classifications)
    for pattern, rule in PATTERN_RULES:
        if rule(fields):
            return pattern
    return BusinessPattern.GENERIC
