"""
API Response Schemas

Pydantic models for the analysis report and API responses.
Report models are frozen and serialize with camelCase keys.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FieldType(str, Enum):
    """Semantic type inferred for a field."""

    EMPTY = "empty"
    ID = "id"
    DATE = "date"
    NUMERIC = "numeric"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    INTEGER = "integer"
    EMAIL = "email"
    CATEGORY = "category"
    TEXT = "text"


NUMERIC_FIELD_TYPES = frozenset({
    FieldType.NUMERIC,
    FieldType.CURRENCY,
    FieldType.PERCENTAGE,
    FieldType.INTEGER,
})


class BusinessPattern(str, Enum):
    """Business pattern detected from field names and types."""

    ECOMMERCE_ORDERS = "ecommerce_orders"
    SALES_DATA = "sales_data"
    CUSTOMER_DATA = "customer_data"
    INVENTORY_DATA = "inventory_data"
    TRANSACTION_LOGS = "transaction_logs"
    GENERIC = "generic"


class InsightType(str, Enum):
    """Alert style of an insight."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class InsightPriority(str, Enum):
    """Insight importance level."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ChartType(str, Enum):
    """Chart kinds the rendering layer can draw."""

    TIME_SERIES = "timeSeries"
    PIE = "pie"
    BAR = "bar"
    HISTOGRAM = "histogram"
    SCATTER = "scatter"


class ReportModel(BaseModel):
    """Base for immutable report values."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class FieldClassification(ReportModel):
    """Inferred type of a field."""

    field_name: str
    type: FieldType
    confidence: float = Field(..., ge=0, le=1)


class TopValue(ReportModel):
    """Frequency table entry."""

    value: str
    count: int
    percentage: Optional[str] = None


class DomainCount(ReportModel):
    """Email domain frequency entry."""

    domain: str
    count: int


class FieldAnalysis(FieldClassification):
    """Descriptive statistics of a single field."""

    total_count: int
    null_count: int
    unique_count: int
    completeness: str

    # Numeric family
    min: Optional[float] = None
    max: Optional[float] = None
    avg: Optional[float] = None
    sum: Optional[float] = None
    median: Optional[float] = None

    # Dates
    earliest: Optional[str] = None
    latest: Optional[str] = None
    range: Optional[int] = None

    # Categories and low-cardinality text
    top_values: Optional[list[TopValue]] = None
    distribution: Optional[dict[str, int]] = None

    # Emails
    top_domains: Optional[list[DomainCount]] = None

    # Identifiers
    duplicates: Optional[int] = None
    unique_ratio: Optional[str] = None


class Insight(ReportModel):
    """A single human-readable finding."""

    type: InsightType
    icon: str
    text: str
    priority: InsightPriority


class ChartBindings(ReportModel):
    """Which fields feed which chart axes."""

    date_field: Optional[str] = None
    category_field: Optional[str] = None
    value_field: Optional[str] = None
    x_field: Optional[str] = None
    y_field: Optional[str] = None


class VisualizationRecommendation(ReportModel):
    """Declarative chart spec."""

    type: ChartType
    name: str
    purpose: str
    fields: list[str]
    bindings: ChartBindings


class DataQuality(ReportModel):
    """Cell-level completeness of the dataset."""

    total_cells: int
    complete_cells: int
    null_cells: int
    completeness: float
    fields: int


class ReportSummary(ReportModel):
    """Headline numbers of a report."""

    row_count: int
    column_count: int
    pattern: BusinessPattern
    completeness: float
    processing_time_ms: float


class Report(ReportModel):
    """Complete analysis report of one dataset."""

    summary: ReportSummary
    field_analyses: dict[str, FieldAnalysis]
    insights: list[Insight]
    visualization_recommendations: list[VisualizationRecommendation]
    data_quality: DataQuality


class AnalysisError(ReportModel):
    """Result returned instead of a report when there is nothing to analyze."""

    error: str


class SessionInfo(ReportModel):
    """Session information."""

    session_id: str
    filename: str
    created_at: datetime
    row_count: int
    column_count: int
    columns: list[str]
    status: str


class UploadResponse(ReportModel):
    """File upload response."""

    session_id: str
    filename: str
    row_count: int
    column_count: int
    columns: list[str]
    message: str


class ReportResponse(ReportModel):
    """Report of a stored session."""

    session_id: str
    generated_at: datetime
    cached: bool = False
    report: Report


class ChartDataResponse(ReportModel):
    """Plotting data for one recommended chart, with a color per point."""

    session_id: str
    chart_type: ChartType
    bindings: ChartBindings
    data: list[dict[str, Any]]
    colors: list[str]


class ErrorResponse(BaseModel):
    """Error body raised through HTTPException."""

    detail: str


ERROR_RESPONSES: dict[int, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Unsupported or malformed input"},
    404: {"model": ErrorResponse, "description": "Session or chart not found"},
    413: {"model": ErrorResponse, "description": "File too large"},
    422: {"model": ErrorResponse, "description": "No data to analyze"},
    500: {"model": ErrorResponse, "description": "Internal error"},
}
