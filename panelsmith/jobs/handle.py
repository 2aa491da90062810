"""
Job Handle

The job-scoped writer a detached pipeline run reports through. Once the job
has been evicted or deleted, writes are dropped so the run can finish
without noticing.
"""

from typing import Any, Dict

from panelsmith.core.logging_config import get_logger

from .store import JobStore

logger = get_logger("jobs.handle")


class JobHandle:
    """Writes for a single job id."""

    def __init__(self, store: JobStore, job_id: str):
        self.store = store
        self.job_id = job_id
        self.alive = True

    def _track(self, job, operation: str) -> bool:
        if job is None:
            if self.alive:
                logger.debug(f"Job {self.job_id} no longer exists; dropping {operation}")
            self.alive = False
            return False
        return True

    async def progress(self, **partial: Any) -> bool:
        return self._track(await self.store.update_progress(self.job_id, **partial), "progress update")

    async def append(self, item: Any) -> bool:
        return self._track(await self.store.append_item(self.job_id, item), "generated item")

    async def complete(self, result: Dict[str, Any]) -> bool:
        return self._track(await self.store.complete(self.job_id, result), "completion")

    async def fail(self, message: str) -> bool:
        return self._track(await self.store.fail(self.job_id, message), "failure")

    def __repr__(self) -> str:
        return f"JobHandle({self.job_id!r}, alive={self.alive})"
