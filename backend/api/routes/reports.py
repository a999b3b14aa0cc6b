"""
Report API Routes

Endpoints returning the analysis report of a session or of inline rows.
"""

from datetime import datetime

from fastapi import APIRouter, HTTPException

from api.schemas.requests import AnalyzeRequest
from api.schemas.responses import AnalysisError, Report, ReportResponse
from core.cache import report_cache, session_store
from core.dataset_loader import Rows, dataset_loader
from core.logging_config import analyzer_logger as logger
from insights.report_composer import report_composer


router = APIRouter()


def load_session_report(session_id: str) -> tuple[Report, Rows, bool]:
    """
    Rows of a session and its report, composing it when not cached.

    Returns:
        (report, rows, cached)
    """
    if session_store.get(session_id) is None:
        raise HTTPException(status_code=404, detail="Session not found")

    try:
        rows = dataset_loader.load_rows(session_id)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail="Session data not found")

    cached = report_cache.get(session_id)
    if cached is not None:
        return cached, rows, True

    result = report_composer.compose(rows)
    if isinstance(result, AnalysisError):
        raise HTTPException(status_code=422, detail=result.error)

    report_cache.set(session_id, result)
    return result, rows, False


@router.get(
    "/reports/{session_id}",
    response_model=ReportResponse,
    response_model_exclude_none=True,
)
async def get_report(session_id: str) -> ReportResponse:
    """
    Get the analysis report of a session.

    Field types, statistics, insights and chart recommendations.
    """
    report, _, cached = load_session_report(session_id)
    logger.info(f"Report for session {session_id} (cached={cached})")

    return ReportResponse(
        session_id=session_id,
        generated_at=datetime.now(),
        cached=cached,
        report=report,
    )


@router.post(
    "/analyze",
    response_model=Report,
    response_model_exclude_none=True,
)
async def analyze_rows(request: AnalyzeRequest) -> Report:
    """Analyze rows sent in the request body without creating a session."""
    result = report_composer.compose(request.rows)
    if isinstance(result, AnalysisError):
        raise HTTPException(status_code=422, detail=result.error)
    return result
