"""
Report Composer

Runs the analysis pipeline over a dataset and assembles the report:
classify each column, analyze it, detect the business pattern, generate
insights and recommend charts.
"""

import time
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from analysis.field_analyzer import FieldAnalyzer, field_analyzer
from analysis.field_classifier import FieldClassifier, field_classifier
from analysis.pattern_detector import detect_pattern
from api.schemas.responses import (
    AnalysisError,
    DataQuality,
    FieldAnalysis,
    Report,
    ReportSummary,
)
from core.logging_config import analyzer_logger as logger
from core.values import to_fixed
from insights.insight_generator import InsightGenerator, insight_generator
from insights.visualization_recommender import (
    VisualizationRecommender,
    visualization_recommender,
)


NO_DATA_ERROR = "No data to analyze"

Row = Mapping[str, Any]


def dataset_columns(rows: Sequence[Row]) -> list[str]:
    """Column names, taken from the first row."""
    return list(rows[0].keys()) if rows else []


def column_values(rows: Sequence[Row], column: str) -> list[Any]:
    """Cells of one column; a missing key is an absent cell."""
    return [row.get(column) for row in rows]


class ReportComposer:
    """
    Orchestrates the analysis pipeline.

    Stateless between calls; the clock only feeds the processing time
    recorded in the summary.
    """

    def __init__(
        self,
        classifier: Optional[FieldClassifier] = None,
        analyzer: Optional[FieldAnalyzer] = None,
        insights: Optional[InsightGenerator] = None,
        recommender: Optional[VisualizationRecommender] = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.classifier = classifier or field_classifier
        self.analyzer = analyzer or field_analyzer
        self.insights = insights or insight_generator
        self.recommender = recommender or visualization_recommender
        self.clock = clock

    def compose(self, rows: Sequence[Row]) -> Union[Report, AnalysisError]:
        """
        Build a report for a dataset.

        Args:
            rows: Rows sharing the column set of the first row

        Returns:
            Report, or AnalysisError when there are no rows
        """
        if not rows:
            logger.warning("Empty dataset, nothing to analyze")
            return AnalysisError(error=NO_DATA_ERROR)

        start = self.clock()
        columns = dataset_columns(rows)
        logger.info(f"Composing report for {len(rows):,} rows x {len(columns)} columns")

        classifications = {}
        analyses: dict[str, FieldAnalysis] = {}
        for column in columns:
            values = column_values(rows, column)
            classification = self.classifier.classify(values, column)
            logger.debug(
                f"{column}: {classification.type.value} "
                f"(confidence {classification.confidence:.2f})"
            )
            classifications[column] = classification
            analyses[column] = self.analyzer.analyze(values, column, classification)

        pattern = detect_pattern(classifications)
        insights = self.insights.generate(analyses, pattern)
        recommendations = self.recommender.recommend(analyses)
        data_quality = self._data_quality(len(rows), columns, analyses)

        elapsed_ms = round((self.clock() - start) * 1000, 2)
        logger.info(
            f"Report ready: pattern={pattern.value}, {len(insights)} insights, "
            f"{len(recommendations)} charts in {elapsed_ms}ms"
        )

        return Report(
            summary=ReportSummary(
                row_count=len(rows),
                column_count=len(columns),
                pattern=pattern,
                completeness=data_quality.completeness,
                processing_time_ms=elapsed_ms,
            ),
            field_analyses=analyses,
            insights=insights,
            visualization_recommendations=recommendations,
            data_quality=data_quality,
        )

    def _data_quality(
        self,
        row_count: int,
        columns: list[str],
        analyses: Mapping[str, FieldAnalysis],
    ) -> DataQuality:
        total_cells = row_count * len(columns)
        null_cells = sum(a.null_count for a in analyses.values())
        completeness = (
            float(to_fixed((total_cells - null_cells) / total_cells * 100, 1))
            if total_cells
            else 0.0
        )
        return DataQuality(
            total_cells=total_cells,
            complete_cells=total_cells - null_cells,
            null_cells=null_cells,
            completeness=completeness,
            fields=len(columns),
        )


# Global composer instance
report_composer = ReportComposer()
