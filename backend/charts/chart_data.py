"""
Chart Data Preparation

Pivots raw rows into the plotting shape of each chart kind. A
recommendation's type selects the preparation function and its bindings
name the fields to read.
"""

import math
from collections import Counter
from typing import Any, Callable, Mapping, Optional, Sequence

import numpy as np

from api.schemas.responses import ChartType, VisualizationRecommendation
from config import ChartSettings, get_settings
from core.logging_config import charts_logger as logger
from core.values import parse_dates, parse_number, to_fixed, to_raw


Row = Mapping[str, Any]

UNKNOWN_CATEGORY = "Unknown"

COLOR_PALETTE = [
    "#667eea",  # Purple
    "#764ba2",  # Dark purple
    "#f093fb",  # Pink
    "#4facfe",  # Blue
    "#00f2fe",  # Cyan
    "#43e97b",  # Green
    "#38f9d7",  # Teal
    "#fa709a",  # Rose
    "#fee140",  # Yellow
    "#30cfd0",  # Turquoise
    "#a8edea",  # Light cyan
    "#fed6e3",  # Light pink
    "#ff9a9e",  # Coral
    "#fecfef",  # Light purple
    "#ffecd2",  # Peach
]


class UnsupportedChartError(ValueError):
    """Raised when no preparation function exists for a chart type."""


def chart_type_from_name(name: str) -> ChartType:
    """Resolve a chart type name such as 'timeSeries' or 'pie'."""
    try:
        return ChartType(name)
    except ValueError:
        raise UnsupportedChartError(f"Unsupported chart type: {name}") from None


def _text(row: Row, field: str) -> Optional[str]:
    raw = to_raw(row.get(field))
    return raw.text if raw.is_present else None


def _number(row: Row, field: str) -> Optional[float]:
    text = _text(row, field)
    return parse_number(text) if text is not None else None


def _category(row: Row, field: str) -> str:
    return _text(row, field) or UNKNOWN_CATEGORY


def prepare_time_series(
    rows: Sequence[Row],
    date_field: str,
    value_field: str,
) -> list[dict[str, Any]]:
    """
    Aggregate values per date.

    Rows without a parseable date are skipped; unparseable values count
    as 0. Points are keyed by the raw date text and sorted by date.
    """
    date_texts = [_text(row, date_field) or "" for row in rows]
    parsed_dates = parse_dates(date_texts).to_list()

    aggregated: dict[str, dict[str, Any]] = {}
    for row, date_text, parsed in zip(rows, date_texts, parsed_dates):
        if parsed is None:
            continue

        value = _number(row, value_field) or 0.0
        point = aggregated.setdefault(
            date_text, {"parsed": parsed, "total": 0.0, "count": 0}
        )
        point["total"] += value
        point["count"] += 1

    ordered = sorted(aggregated.items(), key=lambda item: item[1]["parsed"])
    return [
        {
            "date": date_text,
            "value": point["total"],
            "average": point["total"] / point["count"],
            "count": point["count"],
        }
        for date_text, point in ordered
    ]


def prepare_pie(
    rows: Sequence[Row],
    category_field: str,
    max_slices: int = 10,
) -> list[dict[str, Any]]:
    """Most frequent categories with their share of the slices shown."""
    frequencies = Counter(_category(row, category_field) for row in rows)
    slices = frequencies.most_common(max_slices)
    total = sum(count for _, count in slices)

    return [
        {
            "name": name,
            "value": count,
            "percentage": to_fixed(count / total * 100, 1),
        }
        for name, count in slices
    ]


def prepare_bar(
    rows: Sequence[Row],
    category_field: str,
    value_field: Optional[str] = None,
    max_bars: int = 15,
) -> list[dict[str, Any]]:
    """Totals per category, or category frequencies without a value field."""
    if not value_field:
        return prepare_pie(rows, category_field, max_bars)

    aggregated: dict[str, dict[str, float]] = {}
    for row in rows:
        bucket = aggregated.setdefault(
            _category(row, category_field), {"total": 0.0, "count": 0}
        )
        bucket["total"] += _number(row, value_field) or 0.0
        bucket["count"] += 1

    bars = [
        {
            "name": name,
            "value": bucket["total"],
            "average": bucket["total"] / bucket["count"],
            "count": bucket["count"],
        }
        for name, bucket in aggregated.items()
    ]
    bars.sort(key=lambda bar: bar["value"], reverse=True)
    return bars[:max_bars]


def prepare_histogram(
    rows: Sequence[Row],
    value_field: str,
    bins: int = 10,
) -> list[dict[str, Any]]:
    """
    Equal-width bins between the minimum and maximum value.

    The maximum falls in the last bin. A constant column has zero-width
    bins and every value lands in the first one.
    """
    numbers = [n for n in (_number(row, value_field) for row in rows) if n is not None]
    if not numbers:
        return []

    values = np.sort(np.asarray(numbers, dtype=float))
    low, high = float(values[0]), float(values[-1])
    bin_size = (high - low) / bins

    if bin_size > 0:
        indices = np.floor((values - low) / bin_size).astype(int)
        indices = np.clip(indices, 0, bins - 1)
    else:
        indices = np.zeros(len(values), dtype=int)
    counts = np.bincount(indices, minlength=bins)

    histogram = []
    for i in range(bins):
        start = low + i * bin_size
        end = low + (i + 1) * bin_size
        histogram.append({
            "range": f"{to_fixed(start, 2)} - {to_fixed(end, 2)}",
            "rangeStart": start,
            "rangeEnd": end,
            "count": int(counts[i]),
        })
    return histogram


def prepare_scatter(
    rows: Sequence[Row],
    x_field: str,
    y_field: str,
    max_points: int = 1000,
) -> list[dict[str, float]]:
    """Numeric (x, y) pairs, evenly sampled above max_points."""
    points = []
    for row in rows:
        x, y = _number(row, x_field), _number(row, y_field)
        if x is not None and y is not None:
            points.append({"x": x, "y": y})

    if len(points) > max_points:
        step = math.ceil(len(points) / max_points)
        return points[::step]
    return points


def generate_color_palette(count: int) -> list[str]:
    """Colors for count series, cycling the base palette."""
    return [COLOR_PALETTE[i % len(COLOR_PALETTE)] for i in range(count)]


class ChartDataPreparer:
    """Dispatches a recommendation to the matching preparation function."""

    def __init__(self, settings: Optional[ChartSettings] = None):
        self.settings = settings or get_settings().charts
        self.preparers: dict[ChartType, Callable[..., list[dict[str, Any]]]] = {
            ChartType.TIME_SERIES: lambda rows, b: prepare_time_series(
                rows, b.date_field, b.value_field
            ),
            ChartType.PIE: lambda rows, b: prepare_pie(
                rows, b.category_field, self.settings.max_pie_slices
            ),
            ChartType.BAR: lambda rows, b: prepare_bar(
                rows, b.category_field, b.value_field, self.settings.max_bars
            ),
            ChartType.HISTOGRAM: lambda rows, b: prepare_histogram(
                rows, b.value_field, self.settings.histogram_bins
            ),
            ChartType.SCATTER: lambda rows, b: prepare_scatter(
                rows, b.x_field, b.y_field, self.settings.max_scatter_points
            ),
        }

    def prepare(
        self,
        rows: Sequence[Row],
        recommendation: VisualizationRecommendation,
    ) -> list[dict[str, Any]]:
        preparer = self.preparers.get(recommendation.type)
        if preparer is None:
            raise UnsupportedChartError(f"Unsupported chart type: {recommendation.type}")

        data = preparer(rows, recommendation.bindings)
        logger.debug(f"Prepared {len(data)} {recommendation.type.value} points")
        return data


# Global preparer instance
chart_data_preparer = ChartDataPreparer()
