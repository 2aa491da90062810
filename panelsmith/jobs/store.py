"""
Job Store

Keyed, TTL-bounded record of job lifecycles. Every mutating call is one
read-modify-write under the store lock, so concurrent jobs never interleave
on the same key. Mutations on unknown (or evicted) ids are no-ops that return
None; callers translate that into "not found".

Storage goes through the JobBackend interface; the in-memory backend is the
default and lives only as long as the process.
"""

import asyncio
import copy
import random
import string
import time
from abc import ABC, abstractmethod
from dataclasses import fields
from typing import Any, Callable, Dict, List, Optional

from panelsmith.core.constants import JobStatus, JobType
from panelsmith.core.logging_config import get_logger

from .models import Job, JobProgress
from .progress import compute_percent

logger = get_logger("jobs.store")

DEFAULT_TTL_SECONDS = 60 * 60
DEFAULT_SWEEP_INTERVAL_SECONDS = 5 * 60

_PROGRESS_FIELDS = {f.name for f in fields(JobProgress)} - {"percent"}
_RUNNING_STAGES = {JobStatus.PLANNING.value, JobStatus.GENERATING.value}


# =============================================================================
# BACKENDS
# =============================================================================

class JobBackend(ABC):
    """Key-value storage for jobs."""

    @abstractmethod
    async def get(self, job_id: str) -> Optional[Job]:
        pass

    @abstractmethod
    async def put(self, job: Job) -> None:
        pass

    @abstractmethod
    async def delete(self, job_id: str) -> bool:
        pass

    @abstractmethod
    async def items(self) -> List[Job]:
        pass


class InMemoryBackend(JobBackend):
    """Process-lifetime dict backend."""

    def __init__(self):
        self._jobs: Dict[str, Job] = {}

    async def get(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)

    async def put(self, job: Job) -> None:
        self._jobs[job.id] = job

    async def delete(self, job_id: str) -> bool:
        return self._jobs.pop(job_id, None) is not None

    async def items(self) -> List[Job]:
        return list(self._jobs.values())


# =============================================================================
# STORE
# =============================================================================

def _to_item(item: Any) -> Dict[str, Any]:
    return item.to_dict() if hasattr(item, "to_dict") else dict(item)


class JobStore:
    """
    Job lifecycle store.

    Args:
        backend: Storage backend (in-memory by default)
        ttl_seconds: Age after which a job is evicted by the sweep
        sweep_interval_seconds: Period of the background sweeper
        clock: Returns the current time in seconds
    """

    def __init__(
        self,
        backend: Optional[JobBackend] = None,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.backend = backend or InMemoryBackend()
        self.ttl_seconds = ttl_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self._clock = clock
        self._lock = asyncio.Lock()
        self._sweeper: Optional[asyncio.Task] = None

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _new_id(self) -> str:
        suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
        return f"job_{self._now_ms()}_{suffix}"

    async def _mutate(self, job_id: str, mutation: Callable[[Job], None]) -> Optional[Job]:
        async with self._lock:
            job = await self.backend.get(job_id)
            if job is None:
                return None
            mutation(job)
            await self.backend.put(job)
            return copy.deepcopy(job)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def create(self, job_type: JobType, input_data: Dict[str, Any]) -> Job:
        """Create a pending job."""
        now = self._now_ms()
        total_pages = int(input_data.get("pageCount") or 0) if job_type is JobType.COMIC else 1
        async with self._lock:
            job_id = self._new_id()
            while await self.backend.get(job_id) is not None:
                job_id = self._new_id()
            job = Job(
                id=job_id,
                type=job_type,
                input=copy.deepcopy(input_data),
                created_at=now,
                updated_at=now,
                progress=JobProgress(total_pages=total_pages),
            )
            await self.backend.put(job)
        logger.info(f"Job created: {job.id} (type: {job_type.value})")
        return copy.deepcopy(job)

    async def get(self, job_id: str) -> Optional[Job]:
        """Snapshot of a job, or None if unknown or evicted."""
        async with self._lock:
            job = await self.backend.get(job_id)
            return copy.deepcopy(job) if job is not None else None

    async def update_progress(self, job_id: str, **partial: Any) -> Optional[Job]:
        """
        Merge a partial progress update.

        Accepts ``stage``, ``message``, ``current_page``, ``total_pages``,
        ``current_panel`` and ``total_panels``. The percentage is recomputed
        and never decreases; a running stage also becomes the job status.
        Updates to a finished job are ignored.
        """
        unknown = set(partial) - _PROGRESS_FIELDS
        if unknown:
            raise ValueError(f"Unknown progress fields: {sorted(unknown)}")

        def mutation(job: Job) -> None:
            if job.is_terminal:
                return
            progress = job.progress
            for key, value in partial.items():
                if value is not None:
                    setattr(progress, key, value)
            percent = compute_percent(
                progress.current_page, progress.total_pages,
                progress.current_panel, progress.total_panels,
            )
            progress.percent = max(progress.percent, percent)
            if progress.stage in _RUNNING_STAGES:
                job.status = JobStatus(progress.stage)
            job.updated_at = self._now_ms()

        return await self._mutate(job_id, mutation)

    async def append_item(self, job_id: str, item: Any) -> Optional[Job]:
        """Append a generated item; items keep production order."""
        entry = _to_item(item)

        def mutation(job: Job) -> None:
            job.generated_items.append(entry)
            job.updated_at = self._now_ms()

        job = await self._mutate(job_id, mutation)
        if job is not None:
            logger.debug(
                f"Added item to job {job_id}: page {entry.get('pageNumber')} "
                f"panel {entry.get('panelNumber')}"
            )
        return job

    async def complete(self, job_id: str, result: Dict[str, Any]) -> Optional[Job]:
        """Mark a job complete with its final result; percent becomes 100."""
        def mutation(job: Job) -> None:
            if job.is_terminal:
                return
            job.status = JobStatus.COMPLETE
            job.progress.stage = JobStatus.COMPLETE.value
            job.progress.message = "Generation complete!"
            job.progress.percent = 100
            job.result = result
            job.updated_at = self._now_ms()

        job = await self._mutate(job_id, mutation)
        if job is not None and job.status is JobStatus.COMPLETE:
            logger.info(f"Job completed: {job_id}")
        return job

    async def fail(self, job_id: str, message: str) -> Optional[Job]:
        """Mark a job failed; generated items are kept."""
        def mutation(job: Job) -> None:
            if job.is_terminal:
                return
            job.status = JobStatus.ERROR
            job.progress.stage = JobStatus.ERROR.value
            job.progress.message = message
            job.error = message
            job.updated_at = self._now_ms()

        job = await self._mutate(job_id, mutation)
        if job is not None and job.status is JobStatus.ERROR:
            logger.info(f"Job failed: {job_id} - {message}")
        return job

    async def delete(self, job_id: str) -> bool:
        async with self._lock:
            deleted = await self.backend.delete(job_id)
        if deleted:
            logger.info(f"Job deleted: {job_id}")
        return deleted

    async def list_jobs(self) -> List[Job]:
        """Snapshot of every stored job, oldest first."""
        async with self._lock:
            jobs = await self.backend.items()
            return sorted((copy.deepcopy(j) for j in jobs), key=lambda j: j.created_at)

    # -------------------------------------------------------------------------
    # Eviction
    # -------------------------------------------------------------------------

    async def sweep(self) -> List[str]:
        """Evict jobs older than the TTL. Returns the evicted ids."""
        cutoff = self._now_ms() - int(self.ttl_seconds * 1000)
        evicted = []
        async with self._lock:
            for job in await self.backend.items():
                if job.created_at < cutoff and await self.backend.delete(job.id):
                    evicted.append(job.id)
        for job_id in evicted:
            logger.info(f"Cleaned up expired job: {job_id}")
        return evicted

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            try:
                await self.sweep()
            except Exception as e:
                logger.error(f"Job sweep failed: {e}")

    def start_sweeper(self) -> asyncio.Task:
        """Start the periodic sweep on the running loop (idempotent)."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_loop())
            logger.debug(f"Job sweeper started (every {self.sweep_interval_seconds:.0f}s)")
        return self._sweeper

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
