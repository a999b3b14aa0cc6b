"""
CSV Insights - Configuration

Configuration using Pydantic Settings.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClassifierSettings(BaseSettings):
    """Field type classification thresholds."""

    model_config = SettingsConfigDict(env_prefix="CLASSIFIER_")

    id_unique_ratio: float = Field(
        default=0.8,
        description="Unique ratio an id-named field must exceed"
    )
    date_match_ratio: float = Field(
        default=0.8,
        description="Share of values that must look like dates"
    )
    numeric_match_ratio: float = Field(
        default=0.9,
        description="Share of values that must parse as numbers"
    )
    email_match_ratio: float = Field(
        default=0.8,
        description="Share of values that must look like emails"
    )
    category_unique_ratio: float = Field(
        default=0.1,
        description="Unique ratio a category field must stay below"
    )
    category_max_unique: int = Field(
        default=50,
        description="Unique count a category field must stay below"
    )


class AnalyzerSettings(BaseSettings):
    """Field analysis and report configuration."""

    model_config = SettingsConfigDict(env_prefix="ANALYZER_")

    top_values: int = Field(default=5, description="Entries in frequency tables")
    text_top_values_max_unique: int = Field(
        default=20,
        description="Text fields below this unique count get a frequency table"
    )
    quality_success_threshold: float = Field(
        default=90.0,
        description="Average completeness (%) reported as excellent"
    )
    max_recommendations: int = Field(
        default=4,
        description="Maximum chart recommendations per report"
    )


class ChartSettings(BaseSettings):
    """Chart data preparation limits."""

    model_config = SettingsConfigDict(env_prefix="CHART_")

    max_pie_slices: int = Field(default=10, description="Pie chart slices")
    max_bars: int = Field(default=15, description="Bar chart bars")
    histogram_bins: int = Field(default=10, description="Histogram bins")
    max_scatter_points: int = Field(default=1000, description="Scatter plot points")


class CacheSettings(BaseSettings):
    """Caching configuration."""

    model_config = SettingsConfigDict(env_prefix="CACHE_")

    enabled: bool = Field(default=True, description="Enable caching")
    max_size: int = Field(default=128, description="LRU cache max size")
    ttl_seconds: int = Field(default=3600, description="Cache TTL in seconds")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Application
    app_name: str = "CSV Insights"
    app_version: str = "1.0.0"
    debug: bool = Field(default=False, description="Debug mode")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port")

    # File Upload
    max_file_size_mb: int = Field(
        default=50,
        description="Maximum file size in MB"
    )
    upload_dir: str = Field(
        default="./uploads",
        description="Directory for uploaded datasets"
    )

    # Session
    session_ttl_hours: int = Field(
        default=24,
        description="Session time-to-live in hours"
    )

    # Logging
    log_dir: str = Field(default="logs", description="Directory for log files")
    log_level: str = Field(default="DEBUG", description="Minimum log level")

    # Nested settings
    classifier: ClassifierSettings = Field(default_factory=ClassifierSettings)
    analyzer: AnalyzerSettings = Field(default_factory=AnalyzerSettings)
    charts: ChartSettings = Field(default_factory=ChartSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
