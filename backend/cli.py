"""
Command-line interface for CSV Insights.

Provides commands for:
- Printing the analysis report of a CSV/JSON file
- Printing the plotting data of a recommended chart
"""

import json
import sys
from pathlib import Path

import click

from api.schemas.responses import AnalysisError, NUMERIC_FIELD_TYPES, FieldAnalysis, FieldType, Report
from charts.chart_data import UnsupportedChartError, chart_data_preparer, chart_type_from_name
from core.dataset_loader import DatasetParseError, load_file
from core.values import format_number, to_fixed
from insights.report_composer import report_composer


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _load_report(path: str):
    try:
        rows = load_file(path)
    except DatasetParseError as e:
        _fail(str(e))

    result = report_composer.compose(rows)
    if isinstance(result, AnalysisError):
        _fail(result.error)
    return rows, result


def _field_lines(analysis: FieldAnalysis) -> list[str]:
    lines = [
        f"Field: {analysis.field_name}",
        f"  Type: {analysis.type.value} (confidence {analysis.confidence:.2f})",
        f"  Completeness: {analysis.completeness}%",
        f"  Unique Values: {analysis.unique_count}",
        f"  Null/Empty Count: {analysis.null_count}",
    ]

    if analysis.type in NUMERIC_FIELD_TYPES and analysis.avg is not None:
        lines += [
            f"  Min: {format_number(analysis.min)}",
            f"  Max: {format_number(analysis.max)}",
            f"  Average: {to_fixed(analysis.avg, 2)}",
            f"  Median: {format_number(analysis.median)}",
            f"  Sum: {format_number(analysis.sum)}",
        ]
    elif analysis.type == FieldType.DATE and analysis.earliest:
        lines.append(f"  Range: {analysis.earliest} to {analysis.latest} ({analysis.range} days)")
    elif analysis.type == FieldType.ID:
        lines.append(f"  Duplicates: {analysis.duplicates} ({analysis.unique_ratio}% unique)")
    elif analysis.type == FieldType.EMAIL and analysis.top_domains:
        domains = ", ".join(f"{d.domain} ({d.count})" for d in analysis.top_domains)
        lines.append(f"  Top Domains: {domains}")

    if analysis.top_values:
        values = ", ".join(f"{v.value} ({v.percentage}%)" for v in analysis.top_values)
        lines.append(f"  Top Values: {values}")

    return lines


def render_report(report: Report) -> str:
    """Human-readable text rendering of a report."""
    summary = report.summary
    lines = [
        "=== Dataset Report ===",
        "",
        f"Total Rows: {summary.row_count}",
        f"Total Columns: {summary.column_count}",
        f"Pattern: {summary.pattern.value}",
        f"Completeness: {summary.completeness}%",
        "",
        "=== Fields ===",
        "",
    ]
    for analysis in report.field_analyses.values():
        lines += _field_lines(analysis)
        lines.append("")

    lines += ["=== Insights ===", ""]
    for insight in report.insights:
        lines.append(f"[{insight.priority.value}] {insight.type.value}: {insight.text}")

    lines += ["", "=== Recommended Charts ===", ""]
    for recommendation in report.visualization_recommendations:
        lines.append(f"{recommendation.name}: {recommendation.purpose}")

    return "\n".join(lines)


@click.group()
@click.version_option(version="1.0.0")
def cli():
    """
    CSV Insights - Automatic reports for tabular data.

    Infers field types, computes statistics, detects the business pattern
    of a dataset and recommends charts.
    """
    pass


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--json', 'as_json', is_flag=True, help='Print the report as JSON')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Write output to a file')
def analyze(path, as_json, output):
    """
    Analyze a CSV or JSON file and print its report.

    Example:

        csv-insights analyze data/orders.csv
    """
    _, report = _load_report(path)

    if as_json:
        text = report.model_dump_json(by_alias=True, exclude_none=True, indent=2)
    else:
        text = render_report(report)

    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        click.echo(f"Report written to {output}")
    else:
        click.echo(text)


@cli.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.argument('chart_type')
def chart(path, chart_type):
    """
    Print plotting data of a recommended chart as JSON.

    CHART_TYPE is one of timeSeries, pie, bar, histogram, scatter.
    """
    try:
        kind = chart_type_from_name(chart_type)
    except UnsupportedChartError as e:
        _fail(str(e))

    rows, report = _load_report(path)
    recommendation = next(
        (r for r in report.visualization_recommendations if r.type == kind),
        None,
    )
    if recommendation is None:
        _fail(f"No {chart_type} chart recommended for this dataset")

    data = chart_data_preparer.prepare(rows, recommendation)
    click.echo(json.dumps(data, indent=2))


if __name__ == '__main__':
    cli()
