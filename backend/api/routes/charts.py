"""
Chart API Routes

Plotting data for the charts recommended in a session's report.
"""

from fastapi import APIRouter, HTTPException

from api.routes.reports import load_session_report
from api.schemas.responses import ChartDataResponse
from charts.chart_data import (
    UnsupportedChartError,
    chart_data_preparer,
    chart_type_from_name,
    generate_color_palette,
)


router = APIRouter()


@router.get(
    "/charts/{session_id}/{chart_type}",
    response_model=ChartDataResponse,
    response_model_exclude_none=True,
)
async def get_chart_data(session_id: str, chart_type: str) -> ChartDataResponse:
    """
    Get plotting data for one recommended chart.

    chart_type is one of timeSeries, pie, bar, histogram, scatter.
    """
    try:
        kind = chart_type_from_name(chart_type)
    except UnsupportedChartError as e:
        raise HTTPException(status_code=400, detail=str(e))

    report, rows, _ = load_session_report(session_id)

    recommendation = next(
        (r for r in report.visualization_recommendations if r.type == kind),
        None,
    )
    if recommendation is None:
        raise HTTPException(
            status_code=404,
            detail=f"No {chart_type} chart recommended for this dataset"
        )

    data = chart_data_preparer.prepare(rows, recommendation)
    return ChartDataResponse(
        session_id=session_id,
        chart_type=kind,
        bindings=recommendation.bindings,
        data=data,
        colors=generate_color_palette(len(data)),
    )
