"""Server-Sent Events streaming routes."""

from fastapi import APIRouter, Request, HTTPException
from fastapi.responses import StreamingResponse

router = APIRouter()


@router.get("/analysis/{job_id}/stream")
async def stream_analysis_progress(request: Request, job_id: str):
    """
    Stream analysis progress via Server-Sent Events.

    Events:
    - progress: {"percentage": int, "message": str, "scanned_files": int, "total_files": int}
    - complete: {"complete": true, "result": {...}}
    - cancelled: {"cancelled": true}
    - error: {"error": str}
    """
    job_manager = request.app.state.job_manager

    job = job_manager.get_job(job_id)
    if not job:
        raise HTTPException(404, "Job not found")

    return StreamingResponse(
        job_manager.stream_progress(job_id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
