"""
Upload API Routes

Endpoints for CSV/JSON file upload and session management.
"""

from datetime import datetime

from fastapi import APIRouter, File, HTTPException, UploadFile

from api.schemas.responses import SessionInfo, UploadResponse
from config import get_settings
from core.cache import report_cache, session_store
from core.dataset_loader import SUPPORTED_EXTENSIONS, DatasetParseError, dataset_loader
from core.logging_config import upload_logger as logger
from insights.report_composer import NO_DATA_ERROR, dataset_columns


router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: UploadFile = File(...),
) -> UploadResponse:
    """
    Upload a CSV or JSON file for analysis.

    Creates a new session; the report is built on first request.
    """
    settings = get_settings()

    # Validate file type
    if not file.filename or not file.filename.lower().endswith(SUPPORTED_EXTENSIONS):
        raise HTTPException(
            status_code=400,
            detail="Only CSV and JSON files are supported"
        )

    # Read file content
    content = await file.read()

    # Check file size
    file_size_mb = len(content) / (1024 * 1024)
    if file_size_mb > settings.max_file_size_mb:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {settings.max_file_size_mb}MB"
        )

    try:
        rows = dataset_loader.parse(content, file.filename)
    except DatasetParseError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not rows:
        raise HTTPException(status_code=422, detail=NO_DATA_ERROR)

    columns = dataset_columns(rows)

    try:
        session_id = dataset_loader.generate_session_id(file.filename)
        dataset_loader.save_rows(rows, session_id)
    except Exception as e:
        logger.exception(f"Failed to store {file.filename}")
        raise HTTPException(
            status_code=500,
            detail=f"Error processing file: {str(e)}"
        )

    session_store.create(session_id, {
        "filename": file.filename,
        "row_count": len(rows),
        "column_count": len(columns),
        "columns": columns,
        "status": "ready",
        "file_size_mb": file_size_mb,
    })
    logger.info(f"Session {session_id} created for {file.filename}")

    return UploadResponse(
        session_id=session_id,
        filename=file.filename,
        row_count=len(rows),
        column_count=len(columns),
        columns=columns,
        message=f"Successfully uploaded and processed {file.filename}",
    )


@router.get("/sessions/{session_id}", response_model=SessionInfo)
async def get_session(session_id: str) -> SessionInfo:
    """Get session information."""

    session = session_store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")

    return SessionInfo(
        session_id=session_id,
        filename=session.get("filename", "unknown"),
        created_at=datetime.fromtimestamp(session.get("created_at", 0)),
        row_count=session.get("row_count", 0),
        column_count=session.get("column_count", 0),
        columns=session.get("columns", []),
        status=session.get("status", "unknown"),
    )


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str) -> dict:
    """Delete a session, its cached report and its data."""

    if not session_store.delete(session_id):
        raise HTTPException(status_code=404, detail="Session not found")

    report_cache.delete(session_id)
    dataset_loader.delete_session(session_id)

    return {"message": f"Session {session_id} deleted successfully"}


@router.get("/sessions")
async def list_sessions() -> dict:
    """List all active sessions."""

    sessions = []
    for sid in session_store.list_sessions():
        session = session_store.get(sid)
        if session:
            sessions.append({
                "sessionId": sid,
                "filename": session.get("filename"),
                "rowCount": session.get("row_count"),
                "status": session.get("status"),
            })

    return {"sessions": sessions, "count": len(sessions)}


@router.post("/clear-cache")
async def clear_cache() -> dict:
    """
    Clear all cached reports, sessions and stored datasets.

    Use this if you see stale data or want to force fresh analysis.
    """
    report_cache.clear()
    sessions_cleared = session_store.clear_all()
    files_deleted = dataset_loader.clear_sessions()
    logger.info(f"Cleared {sessions_cleared} sessions and {files_deleted} files")

    return {
        "message": "Cache cleared successfully",
        "sessionsCleared": sessions_cleared,
        "filesDeleted": files_deleted,
    }
