"""
Jobs router for Panelsmith API.

Polling endpoint for clients following a background generation run. Returns
current progress, the items generated so far and, once finished, the result
or the error.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from panelsmith.core.exceptions import JobNotFoundError
from panelsmith.core.logging_config import get_logger
from panelsmith.jobs.store import JobStore

from ..deps import get_job_store

logger = get_logger("api.jobs")

router = APIRouter()


def _require_id(job_id: Optional[str]) -> str:
    if not job_id:
        raise HTTPException(status_code=400, detail="Missing job ID")
    return job_id


@router.get("/jobs")
async def get_job_status(
    job_id: Optional[str] = Query(default=None, alias="id"),
    store: JobStore = Depends(get_job_store),
):
    """Get the status of a job by its ID."""
    job_id = _require_id(job_id)
    job = await store.get(job_id)
    if job is None:
        logger.debug(f"Poll for unknown or expired job {job_id}")
        raise JobNotFoundError(job_id)
    return job.to_dict()


@router.delete("/jobs")
async def delete_job(
    job_id: Optional[str] = Query(default=None, alias="id"),
    store: JobStore = Depends(get_job_store),
):
    """
    Forget a job.

    A run still in progress is not stopped; its remaining writes are dropped.
    """
    job_id = _require_id(job_id)
    if not await store.delete(job_id):
        raise JobNotFoundError(job_id)
    return {"success": True, "jobId": job_id}


@router.get("/jobs/all")
async def list_jobs(request: Request, store: JobStore = Depends(get_job_store)):
    """Debug listing of every stored job (debug mode only)."""
    if not request.app.state.settings.debug:
        raise HTTPException(status_code=404, detail="Not Found")
    jobs = await store.list_jobs()
    return {
        "jobs": [
            {
                "id": job.id,
                "type": job.type.value,
                "status": job.status.value,
                "percent": job.progress.percent,
                "items": len(job.generated_items),
                "createdAt": job.created_at,
            }
            for job in jobs
        ]
    }
