"""
Visualization Recommender

Proposes chart specs from field analyses. Each chart kind has a
precondition on the available field types; only the first eligible field
of each kind is bound into a recommendation.
"""

from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from api.schemas.responses import (
    NUMERIC_FIELD_TYPES,
    ChartBindings,
    ChartType,
    FieldAnalysis,
    FieldType,
    VisualizationRecommendation,
)
from config import AnalyzerSettings, get_settings


@dataclass
class FieldGroups:
    """Field names grouped by chartable kind, in column order."""

    dates: list[str]
    numerics: list[str]
    categories: list[str]

    @classmethod
    def from_analyses(cls, analyses: Mapping[str, FieldAnalysis]) -> "FieldGroups":
        return cls(
            dates=[n for n, a in analyses.items() if a.type == FieldType.DATE],
            numerics=[n for n, a in analyses.items() if a.type in NUMERIC_FIELD_TYPES],
            categories=[n for n, a in analyses.items() if a.type == FieldType.CATEGORY],
        )


def _time_series(groups: FieldGroups) -> Optional[VisualizationRecommendation]:
    if not (groups.dates and groups.numerics):
        return None
    date, value = groups.dates[0], groups.numerics[0]
    return VisualizationRecommendation(
        type=ChartType.TIME_SERIES,
        name="Line Chart",
        purpose=f"Track {value} trends over time",
        fields=[date, value],
        bindings=ChartBindings(date_field=date, value_field=value),
    )


def _pie(groups: FieldGroups) -> Optional[VisualizationRecommendation]:
    if not groups.categories:
        return None
    category = groups.categories[0]
    return VisualizationRecommendation(
        type=ChartType.PIE,
        name="Pie Chart",
        purpose=f"Show distribution of {category}",
        fields=[category],
        bindings=ChartBindings(category_field=category),
    )


def _bar(groups: FieldGroups) -> Optional[VisualizationRecommendation]:
    if not groups.categories:
        return None
    category = groups.categories[0]
    value = groups.numerics[0] if groups.numerics else None
    return VisualizationRecommendation(
        type=ChartType.BAR,
        name="Bar Chart",
        purpose=f"Compare values across {category}",
        fields=[category],
        bindings=ChartBindings(category_field=category, value_field=value),
    )


def _histogram(groups: FieldGroups) -> Optional[VisualizationRecommendation]:
    if not groups.numerics:
        return None
    value = groups.numerics[0]
    return VisualizationRecommendation(
        type=ChartType.HISTOGRAM,
        name="Histogram",
        purpose=f"Analyze distribution of {value}",
        fields=[value],
        bindings=ChartBindings(value_field=value),
    )


def _scatter(groups: FieldGroups) -> Optional[VisualizationRecommendation]:
    if len(groups.numerics) < 2:
        return None
    x, y = groups.numerics[0], groups.numerics[1]
    return VisualizationRecommendation(
        type=ChartType.SCATTER,
        name="Scatter Plot",
        purpose=f"Explore relationship between {x} and {y}",
        fields=[x, y],
        bindings=ChartBindings(x_field=x, y_field=y),
    )


CHART_RULES: list[Callable[[FieldGroups], Optional[VisualizationRecommendation]]] = [
    _time_series,
    _pie,
    _bar,
    _histogram,
    _scatter,
]


class VisualizationRecommender:
    """Chart recommendation engine."""

    def __init__(self, settings: Optional[AnalyzerSettings] = None):
        self.settings = settings or get_settings().analyzer

    def recommend(
        self,
        analyses: Mapping[str, FieldAnalysis],
    ) -> list[VisualizationRecommendation]:
        """Recommend charts in fixed order, capped at max_recommendations."""
        groups = FieldGroups.from_analyses(analyses)
        recommendations = []
        for rule in CHART_RULES:
            recommendation = rule(groups)
            if recommendation is not None:
                recommendations.append(recommendation)
        return recommendations[: self.settings.max_recommendations]


# Global recommender instance
visualization_recommender = VisualizationRecommender()
