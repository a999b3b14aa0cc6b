"""
Shared fixtures.

Settings are read once and cached, so storage locations are pointed at a
temporary directory before any application module is imported.
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="csv-insights-tests-")
os.environ.setdefault("UPLOAD_DIR", os.path.join(_TMP_DIR, "uploads"))
os.environ.setdefault("LOG_DIR", os.path.join(_TMP_DIR, "logs"))

import pytest  # noqa: E402

from api.schemas.responses import FieldAnalysis, FieldClassification, FieldType  # noqa: E402


CATEGORIES = ["Electronics", "Books", "Electronics", "Toys"]
COUNTRIES = ["US", "UK", "DE", "FR"]


@pytest.fixture
def orders_rows():
    """40 e-commerce orders: id, text, category, date and currency fields."""
    return [
        {
            "order_id": f"ORD-{1000 + i}",
            "customer_name": f"Customer {i % 25}",
            "product_category": CATEGORIES[i % 4],
            "country": COUNTRIES[i % 4],
            "order_date": f"2024-01-{(i % 28) + 1:02d}",
            "amount": f"{10 + i * 2.5:.2f}",
        }
        for i in range(40)
    ]


@pytest.fixture
def orders_csv(orders_rows):
    header = ",".join(orders_rows[0].keys())
    lines = [",".join(row.values()) for row in orders_rows]
    return ("\n".join([header, *lines]) + "\n").encode()


@pytest.fixture
def sales_rows():
    return [
        {"sale_id": "S1", "sale_date": "2024-03-01", "amount": "10.50"},
        {"sale_id": "S2", "sale_date": "2024-03-02", "amount": "20.00"},
        {"sale_id": "S3", "sale_date": "2024-03-05", "amount": "30.25"},
    ]


@pytest.fixture
def customer_rows():
    return [
        {"customer_id": "C1", "customer_name": "Alice", "email": "alice@example.com"},
        {"customer_id": "C2", "customer_name": "Bob", "email": "bob@example.com"},
        {"customer_id": "C3", "customer_name": "Carol", "email": "carol@test.org"},
    ]


def make_classifications(**types: FieldType) -> dict[str, FieldClassification]:
    return {
        name: FieldClassification(field_name=name, type=field_type, confidence=1.0)
        for name, field_type in types.items()
    }


def make_analysis(name: str, field_type: FieldType, **extra) -> FieldAnalysis:
    values = {
        "field_name": name,
        "type": field_type,
        "confidence": 1.0,
        "total_count": 10,
        "null_count": 0,
        "unique_count": 10,
        "completeness": "100.0",
    }
    values.update(extra)
    return FieldAnalysis(**values)
