"""
API Request Schemas

Pydantic models for API request validation.
"""

from typing import Any

from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    """Inline dataset to analyze without creating a session."""

    rows: list[dict[str, Any]] = Field(
        ...,
        description="Rows of the dataset; the first row defines the columns"
    )
