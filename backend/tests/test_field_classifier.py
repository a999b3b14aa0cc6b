"""
Test Field Classifier

Unit tests for rule-ordered field type inference.
"""

import pytest

from analysis.field_classifier import FieldClassifier
from api.schemas.responses import FieldType
from config import ClassifierSettings


@pytest.fixture
def classifier():
    return FieldClassifier(ClassifierSettings())


class TestEmptyFields:
    def test_all_empty_is_empty(self, classifier):
        result = classifier.classify(["", None, ""], "order_id")

        assert result.type == FieldType.EMPTY
        assert result.confidence == 1.0
        assert result.field_name == "order_id"

    def test_no_values_is_empty(self, classifier):
        assert classifier.classify([], "amount").type == FieldType.EMPTY


class TestIdentifiers:
    def test_unique_id_column(self, classifier):
        result = classifier.classify([1, 2, 3, 4, 5], "order_id")

        assert result.type == FieldType.ID
        assert result.confidence == 0.9

    def test_sku_name(self, classifier):
        result = classifier.classify(["A-1", "A-2", "A-3"], "SKU")
        assert result.type == FieldType.ID

    def test_id_wins_over_dates(self, classifier):
        result = classifier.classify(["2024-01-01", "2024-01-02", "2024-01-03"], "sku")
        assert result.type == FieldType.ID

    def test_low_uniqueness_falls_through_to_numeric(self, classifier):
        values = ["1", "1", "2", "2", "3", "1", "2", "3", "1", "2"]
        result = classifier.classify(values, "user_id")

        assert result.type == FieldType.NUMERIC
        assert result.confidence == 1.0

    def test_uniqueness_ignores_empty_values(self, classifier):
        result = classifier.classify(["a", "b", "", None, "c"], "ref_id")
        assert result.type == FieldType.ID


class TestDates:
    def test_mixed_date_formats(self, classifier):
        values = ["2024-01-01", "01/15/2024", "15-01-2024", "2024-02-01"]
        result = classifier.classify(values, "created")

        assert result.type == FieldType.DATE
        assert result.confidence == 1.0

    def test_ratio_must_exceed_threshold(self, classifier):
        values = ["2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04", "n/a"]
        result = classifier.classify(values, "created")

        assert result.type != FieldType.DATE

    def test_confidence_is_match_ratio(self, classifier):
        values = ["2024-01-0%d" % d for d in range(1, 10)] + ["unknown"]
        result = classifier.classify(values, "created")

        assert result.type == FieldType.DATE
        assert result.confidence == pytest.approx(0.9)


class TestNumericFamily:
    @pytest.mark.parametrize("name,expected,confidence", [
        ("unit_price", FieldType.CURRENCY, 0.95),
        ("Total Amount", FieldType.CURRENCY, 0.95),
        ("salary", FieldType.CURRENCY, 0.95),
        ("discount_rate", FieldType.PERCENTAGE, 0.95),
        ("percent_done", FieldType.PERCENTAGE, 0.95),
        ("quantity", FieldType.INTEGER, 0.9),
        ("item_count", FieldType.INTEGER, 0.9),
        ("score", FieldType.NUMERIC, 1.0),
    ])
    def test_name_refines_numeric_type(self, classifier, name, expected, confidence):
        result = classifier.classify(["1.5", "2", "3.25", "4"], name)

        assert result.type == expected
        assert result.confidence == confidence

    def test_mostly_numeric_is_not_currency(self, classifier):
        result = classifier.classify(["10.50", "20.00", "invalid", "30.25"], "amount")

        assert result.type not in (FieldType.CURRENCY, FieldType.NUMERIC)
        assert result.type == FieldType.TEXT

    def test_mixed_python_scalars(self, classifier):
        result = classifier.classify([1, 2.5, "3", None], "score")
        assert result.type == FieldType.NUMERIC


class TestEmailCategoryText:
    def test_emails(self, classifier):
        values = ["a@x.com", "b@y.org", "c@z.net", "d@x.com", "e@y.org"]
        result = classifier.classify(values, "contact")

        assert result.type == FieldType.EMAIL
        assert result.confidence == 1.0

    def test_email_ratio_must_exceed_threshold(self, classifier):
        values = ["a@x.com", "b@y.org", "c@z.net", "d@x.com", "not-an-email"]
        assert classifier.classify(values, "contact").type == FieldType.TEXT

    def test_category(self, classifier):
        values = ["A", "B"] * 15
        result = classifier.classify(values, "segment")

        assert result.type == FieldType.CATEGORY
        assert result.confidence == pytest.approx(1 - 2 / 30)

    def test_category_ratio_is_strict(self, classifier):
        values = ["A", "B"] * 10
        assert classifier.classify(values, "segment").type == FieldType.TEXT

    def test_text_default(self, classifier):
        result = classifier.classify(["red", "green", "blue"], "colour")

        assert result.type == FieldType.TEXT
        assert result.confidence == 0.5


class TestRuleOrder:
    def test_rules_are_listed_in_priority_order(self, classifier):
        names = [name for name, _ in classifier.rules]
        assert names == ["id", "date", "numeric", "email", "category", "text"]

    def test_thresholds_come_from_settings(self):
        strict = FieldClassifier(ClassifierSettings(numeric_match_ratio=0.99))
        values = [str(i) for i in range(19)] + ["x"]

        assert strict.classify(values, "score").type == FieldType.TEXT
