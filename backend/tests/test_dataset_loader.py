"""
Test Dataset Loader

Unit tests for CSV/JSON parsing and session persistence.
"""

import json
import warnings

import pytest

from config import Settings
from core.dataset_loader import (
    DatasetLoader,
    DatasetParseError,
    flatten_record,
    load_file,
    normalize_cell,
)


@pytest.fixture
def loader(tmp_path):
    loader = DatasetLoader()
    loader.settings = Settings(upload_dir=str(tmp_path / "uploads"))
    return loader


class TestCSV:
    def test_cells_stay_text(self, loader):
        data = b"id,amount,note\n001,10.50,\n002,20,hello\n"
        rows = loader.parse(data, "orders.csv")

        assert rows == [
            {"id": "001", "amount": "10.50", "note": ""},
            {"id": "002", "amount": "20", "note": "hello"},
        ]

    def test_quoted_fields(self, loader):
        data = b'name,city\n"Smith, Jane","New York"\n'
        rows = loader.parse(data, "people.CSV")

        assert rows == [{"name": "Smith, Jane", "city": "New York"}]

    def test_header_only(self, loader):
        assert loader.parse(b"a,b\n", "empty.csv") == []

    def test_empty_file(self, loader):
        assert loader.parse(b"", "empty.csv") == []

    def test_blank_lines_skipped(self, loader):
        rows = loader.parse(b"a,b\n1,2\n\n3,4\n\n", "data.csv")
        assert [row["a"] for row in rows] == ["1", "3"]

    def test_delimiter_only_rows_are_kept(self, loader):
        rows = loader.parse(b"a,b\n1,x\n,\n3,y\n", "data.csv")

        assert len(rows) == 3
        assert rows[1] == {"a": "", "b": ""}

    def test_single_delimiter_row_is_data(self, loader):
        assert loader.parse(b"a,b\n,\n", "data.csv") == [{"a": "", "b": ""}]

    def test_no_deprecation_warnings(self, loader):
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            rows = loader.parse(b"a,b\n1,\n", "data.csv")

        assert rows == [{"a": "1", "b": ""}]

    def test_latin1_content(self, loader):
        data = "city\nMünchen\nKöln\nDüsseldorf\n".encode("latin-1")
        rows = loader.parse(data, "cities.csv")

        assert len(rows) == 3
        assert rows[0]["city"].startswith("M")


class TestJSON:
    def test_array_of_objects(self, loader):
        data = json.dumps([
            {"id": 1, "price": 9.5, "active": True},
            {"id": 2, "price": None},
        ]).encode()
        rows = loader.parse(data, "items.json")

        assert rows == [
            {"id": "1", "price": "9.5", "active": "true"},
            {"id": "2", "price": None, "active": None},
        ]

    def test_data_wrapper(self, loader):
        data = json.dumps({"data": [{"a": "x"}]}).encode()
        assert loader.parse(data, "wrapped.json") == [{"a": "x"}]

    def test_single_object(self, loader):
        data = json.dumps({"a": "x", "b": ""}).encode()
        assert loader.parse(data, "one.json") == [{"a": "x", "b": ""}]

    def test_nested_objects_are_flattened(self, loader):
        data = json.dumps([{"customer": {"name": "Ann", "tags": ["a", "b"]}}]).encode()
        rows = loader.parse(data, "nested.json")

        assert rows == [{"customer.name": "Ann", "customer.tags": '["a", "b"]'}]

    def test_malformed(self, loader):
        with pytest.raises(DatasetParseError, match="Failed to parse JSON"):
            loader.parse(b"{not json", "broken.json")

    def test_scalar_items_rejected(self, loader):
        with pytest.raises(DatasetParseError):
            loader.parse(b"[1, 2, 3]", "numbers.json")


class TestParse:
    def test_unsupported_extension(self, loader):
        with pytest.raises(DatasetParseError, match="Unsupported file type"):
            loader.parse(b"a,b", "data.xlsx")

    def test_load_file(self, tmp_path):
        path = tmp_path / "small.csv"
        path.write_text("a,b\n1,2\n")

        assert load_file(path) == [{"a": "1", "b": "2"}]


class TestHelpers:
    def test_normalize_cell(self):
        assert normalize_cell(None) is None
        assert normalize_cell("") == ""
        assert normalize_cell(3) == "3"
        assert normalize_cell(2.5) == "2.5"

    def test_flatten_record(self):
        assert flatten_record({"a": {"b": {"c": 1}}, "d": 2}) == {"a.b.c": 1, "d": 2}


class TestSessionStorage:
    def test_save_and_load_round_trip(self, loader):
        rows = [{"a": "1", "b": None}, {"a": "", "b": "x"}]
        path = loader.save_rows(rows, "abc123")

        assert path.exists()
        assert loader.load_rows("abc123") == rows

    def test_load_missing_session(self, loader):
        with pytest.raises(FileNotFoundError):
            loader.load_rows("missing")

    def test_delete_and_clear(self, loader):
        loader.save_rows([{"a": "1"}], "one")
        loader.save_rows([{"a": "2"}], "two")

        assert loader.delete_session("one") is True
        assert loader.delete_session("one") is False
        assert loader.clear_sessions() == 1

    def test_session_ids_are_short_hex(self, loader):
        session_id = loader.generate_session_id("orders.csv")

        assert len(session_id) == 16
        int(session_id, 16)
