"""
Dataset Loader

Parses uploaded CSV and JSON files into rows of text cells and persists
them per session. Every cell is text, an empty string, or None.
"""

import hashlib
import io
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

import chardet
import polars as pl

from config import get_settings
from core.logging_config import upload_logger as logger
from core.values import RawKind, to_raw


Rows = list[dict[str, Optional[str]]]

SUPPORTED_EXTENSIONS = (".csv", ".json")


class DatasetParseError(ValueError):
    """Raised when an uploaded file cannot be turned into rows."""


def normalize_cell(cell: Any) -> Optional[str]:
    """Text of a cell; '' for empty strings and None for missing values."""
    raw = to_raw(cell)
    if raw.kind is RawKind.ABSENT:
        return None
    return raw.text


def flatten_record(record: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested objects into dotted keys; arrays become JSON text."""
    flat: dict[str, Any] = {}
    for key, value in record.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(flatten_record(value, full_key))
        elif isinstance(value, list):
            flat[full_key] = json.dumps(value)
        else:
            flat[full_key] = value
    return flat


class DatasetLoader:
    """Loads CSV/JSON uploads and stores datasets as Parquet."""

    def __init__(self):
        self.settings = get_settings()

    def detect_encoding_from_bytes(self, data: bytes) -> str:
        """Detect encoding from bytes."""
        # Use first 100KB for detection
        sample = data[:102400]
        result = chardet.detect(sample)
        encoding = result.get("encoding", "utf-8")
        return encoding or "utf-8"

    def decode(self, data: bytes) -> str:
        encoding = self.detect_encoding_from_bytes(data)
        try:
            return data.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            # Fallback to latin-1 which accepts any byte
            return data.decode("latin-1")

    def parse(self, data: bytes, filename: str) -> Rows:
        """
        Parse an uploaded file by extension.

        Raises:
            DatasetParseError: unsupported extension or malformed content
        """
        lower = filename.lower()
        if lower.endswith(".csv"):
            return self.parse_csv_bytes(data)
        if lower.endswith(".json"):
            return self.parse_json_bytes(data)
        raise DatasetParseError(
            f"Unsupported file type: {filename}. Only CSV and JSON files are supported"
        )

    def parse_csv_bytes(self, data: bytes) -> Rows:
        """
        Parse CSV with a header row.

        All columns are read as text. Empty fields are empty strings,
        including rows made only of delimiters; physically blank lines
        are skipped.
        """
        text = self.decode(data)
        lines = [line for line in text.splitlines() if line]
        if not lines:
            return []

        try:
            df = pl.read_csv(
                io.StringIO("\n".join(lines)),
                infer_schema_length=0,
                truncate_ragged_lines=True,
            )
        except pl.exceptions.PolarsError as e:
            raise DatasetParseError(f"Malformed CSV: {e}") from e

        # Every null read from text is an empty field
        rows = df.with_columns(pl.all().fill_null("")).to_dicts()
        logger.info(f"Parsed CSV: {len(rows):,} rows x {len(df.columns)} columns")
        return rows

    def parse_json_bytes(self, data: bytes) -> Rows:
        """
        Parse JSON records.

        Accepts an array of objects, an object with a "data" array, or a
        single object. Columns appear in first-seen order.
        """
        try:
            payload = json.loads(self.decode(data))
        except json.JSONDecodeError as e:
            raise DatasetParseError(f"Failed to parse JSON: {e}") from e

        if isinstance(payload, list):
            records = payload
        elif isinstance(payload, dict):
            records = payload["data"] if isinstance(payload.get("data"), list) else [payload]
        else:
            raise DatasetParseError("JSON must contain an object or an array of objects")

        flat_records = []
        for record in records:
            if not isinstance(record, dict):
                raise DatasetParseError("JSON array items must be objects")
            flat_records.append(flatten_record(record))

        columns: dict[str, None] = {}
        for record in flat_records:
            for key in record:
                columns.setdefault(key, None)

        rows = [
            {column: normalize_cell(record.get(column)) for column in columns}
            for record in flat_records
        ]
        logger.info(f"Parsed JSON: {len(rows):,} rows x {len(columns)} columns")
        return rows

    def _session_path(self, session_id: str) -> Path:
        return Path(self.settings.upload_dir) / f"{session_id}.parquet"

    def save_rows(self, rows: Rows, session_id: str) -> Path:
        """
        Save rows to disk for session persistence.

        Uses Parquet format with every column stored as text.
        """
        upload_dir = Path(self.settings.upload_dir)
        upload_dir.mkdir(parents=True, exist_ok=True)

        columns = list(rows[0].keys()) if rows else []
        df = pl.from_dicts(rows, schema={column: pl.String for column in columns})

        file_path = self._session_path(session_id)
        df.write_parquet(file_path, compression="zstd")
        return file_path

    def load_rows(self, session_id: str) -> Rows:
        """
        Load rows from session storage.

        Raises:
            FileNotFoundError: no data stored for the session
        """
        file_path = self._session_path(session_id)
        if not file_path.exists():
            raise FileNotFoundError(f"Session {session_id} not found")

        return pl.read_parquet(file_path).to_dicts()

    def generate_session_id(self, filename: str) -> str:
        """Generate unique session ID based on filename and timestamp."""
        timestamp = datetime.now().isoformat()
        content = f"{filename}_{timestamp}"
        return hashlib.sha256(content.encode()).hexdigest()[:16]

    def delete_session(self, session_id: str) -> bool:
        """Delete session data. Returns False if nothing was stored."""
        file_path = self._session_path(session_id)
        if file_path.exists():
            file_path.unlink()
            return True
        return False

    def clear_sessions(self) -> int:
        """Delete all stored datasets and return how many were removed."""
        upload_dir = Path(self.settings.upload_dir)
        if not upload_dir.exists():
            return 0

        deleted = 0
        for file in upload_dir.glob("*.parquet"):
            file.unlink()
            deleted += 1
        return deleted


def load_file(path: Union[str, Path]) -> Rows:
    """Read and parse a CSV or JSON file from disk."""
    path = Path(path)
    return dataset_loader.parse(path.read_bytes(), path.name)


# Global loader instance
dataset_loader = DatasetLoader()
