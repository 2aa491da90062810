"""
Tests for the Job Store, progress computation and job handles.
"""

import asyncio
import re

import pytest

from panelsmith.core.constants import JobStatus, JobType
from panelsmith.jobs.handle import JobHandle
from panelsmith.jobs.progress import compute_percent
from panelsmith.jobs.store import JobStore


class TestComputePercent:

    def test_formula(self):
        # Page 2 of 4, 2 of 4 panels done: 25 + 12.5
        assert compute_percent(2, 4, 2, 4) == 37

    def test_exact_page_boundary(self):
        # 1/3 + (3/3)/3 is exactly 2/3
        assert compute_percent(2, 3, 3, 3) == 66
        assert compute_percent(1, 3, 3, 3) == 33

    def test_clamped_below_100(self):
        assert compute_percent(1, 1, 4, 4) == 99

    def test_zero_totals(self):
        assert compute_percent(0, 0, 0, 0) == 0
        assert compute_percent(1, 2, 0, 0) == 0


class TestJobStore:

    @pytest.mark.asyncio
    async def test_create(self, store):
        job = await store.create(JobType.COMIC, {"storyDescription": "x", "pageCount": 3})

        assert re.fullmatch(r"job_\d+_[a-z0-9]{9}", job.id)
        assert job.status is JobStatus.PENDING
        assert job.progress.total_pages == 3
        assert job.progress.message == "Job created, waiting to start..."
        assert job.generated_items == []

        data = job.to_dict()
        assert set(data) == {"id", "type", "status", "progress", "generatedItems",
                             "result", "error", "createdAt", "updatedAt"}
        assert data["progress"]["percent"] == 0

    @pytest.mark.asyncio
    async def test_page_job_has_one_page(self, store):
        job = await store.create(JobType.PAGE, {"pageDescription": "x", "panelCount": 4})

        assert job.progress.total_pages == 1

    @pytest.mark.asyncio
    async def test_get_returns_snapshot(self, store):
        job = await store.create(JobType.PAGE, {})
        snapshot = await store.get(job.id)
        snapshot.generated_items.append({"tampered": True})

        assert (await store.get(job.id)).generated_items == []

    @pytest.mark.asyncio
    async def test_progress_sets_running_status_and_never_decreases(self, store):
        job = await store.create(JobType.COMIC, {"pageCount": 2})

        updated = await store.update_progress(job.id, stage="generating", current_page=2,
                                              current_panel=1, total_panels=2)
        assert updated.status is JobStatus.GENERATING
        assert updated.progress.percent == 75

        updated = await store.update_progress(job.id, current_page=1, current_panel=0)
        assert updated.progress.percent == 75

    @pytest.mark.asyncio
    async def test_unknown_progress_field(self, store):
        job = await store.create(JobType.PAGE, {})

        with pytest.raises(ValueError):
            await store.update_progress(job.id, percent=50)

    @pytest.mark.asyncio
    async def test_append_keeps_order(self, store):
        job = await store.create(JobType.PAGE, {})
        for n in range(1, 4):
            await store.append_item(job.id, {"pageNumber": 1, "panelNumber": n})

        items = (await store.get(job.id)).generated_items
        assert [i["panelNumber"] for i in items] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_complete(self, store):
        job = await store.create(JobType.PAGE, {})

        done = await store.complete(job.id, {"success": True})

        assert done.status is JobStatus.COMPLETE
        assert done.progress.percent == 100
        assert done.progress.message == "Generation complete!"
        assert done.result == {"success": True}

    @pytest.mark.asyncio
    async def test_fail_keeps_items_and_freezes_job(self, store):
        job = await store.create(JobType.PAGE, {})
        await store.append_item(job.id, {"panelNumber": 1})

        failed = await store.fail(job.id, "Shot planning for page 1 failed: boom")
        assert failed.status is JobStatus.ERROR
        assert failed.error == "Shot planning for page 1 failed: boom"
        assert len(failed.generated_items) == 1

        after = await store.update_progress(job.id, stage="generating")
        assert after.status is JobStatus.ERROR
        assert (await store.complete(job.id, {})).status is JobStatus.ERROR

    @pytest.mark.asyncio
    async def test_unknown_ids_are_no_ops(self, store):
        assert await store.get("job_missing") is None
        assert await store.update_progress("job_missing", stage="planning") is None
        assert await store.append_item("job_missing", {}) is None
        assert await store.complete("job_missing", {}) is None
        assert await store.fail("job_missing", "x") is None
        assert await store.delete("job_missing") is False

    @pytest.mark.asyncio
    async def test_delete_and_list(self, store):
        first = await store.create(JobType.PAGE, {})
        second = await store.create(JobType.PAGE, {})

        assert [j.id for j in await store.list_jobs()] == [first.id, second.id]
        assert await store.delete(first.id) is True
        assert [j.id for j in await store.list_jobs()] == [second.id]

    @pytest.mark.asyncio
    async def test_concurrent_appends_are_not_lost(self, store):
        job = await store.create(JobType.PAGE, {})

        await asyncio.gather(*(store.append_item(job.id, {"panelNumber": n}) for n in range(50)))

        assert len((await store.get(job.id)).generated_items) == 50


class TestSweep:

    @pytest.mark.asyncio
    async def test_evicts_jobs_older_than_ttl(self, clock):
        store = JobStore(ttl_seconds=3600, clock=clock)
        old = await store.create(JobType.PAGE, {})
        clock.advance(1800)
        young = await store.create(JobType.PAGE, {})
        clock.advance(1801)

        evicted = await store.sweep()

        assert evicted == [old.id]
        assert await store.get(old.id) is None
        assert await store.get(young.id) is not None

    @pytest.mark.asyncio
    async def test_sweeper_runs_periodically(self, clock):
        store = JobStore(ttl_seconds=10, sweep_interval_seconds=0.01, clock=clock)
        job = await store.create(JobType.PAGE, {})
        clock.advance(11)

        store.start_sweeper()
        try:
            for _ in range(100):
                if await store.get(job.id) is None:
                    break
                await asyncio.sleep(0.01)
        finally:
            await store.stop_sweeper()

        assert await store.get(job.id) is None


class TestJobHandle:

    @pytest.mark.asyncio
    async def test_writes_dropped_after_eviction(self, store):
        job = await store.create(JobType.PAGE, {})
        handle = JobHandle(store, job.id)
        assert await handle.progress(stage="planning") is True

        await store.delete(job.id)

        assert await handle.append({"panelNumber": 1}) is False
        assert await handle.complete({"success": True}) is False
        assert handle.alive is False
        assert await store.get(job.id) is None
