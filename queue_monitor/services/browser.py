"""One page of jobs, whatever the backend's retrieval mechanism.

Successful and failed jobs are only reachable as full id lists, so those
pages are built client side: fetch the id list(s), slice the page window,
then fetch each job's detail. Pending jobs live in a queue the backend can
paginate itself, so those pages are a single offset/limit request.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List

from ..config import Settings, settings as default_settings
from ..models import JobRecord, PageRequest, PageResult
from .backend import BackendClient
from .normalizer import Normalizer

logger = logging.getLogger(__name__)

# filter value -> id lists merged for it, in concatenation order
MERGED_STATUSES = {
    "": ("successful", "failed"),
    "successful": ("successful",),
    "failed": ("failed",),
}


class JobBrowser:
    def __init__(self, backend: BackendClient, settings: Settings | None = None):
        self.backend = backend
        self.settings = settings or default_settings

    @property
    def page_size(self) -> int:
        return self.settings.page_size

    async def fetch_page(self, status: str, queue: str | None, page_index: int) -> PageResult:
        req = PageRequest(status=status, queue=queue or self.settings.default_queue, page_index=page_index)
        if req.status in MERGED_STATUSES:
            return await self._merged_page(req)
        return await self._queue_page(req)

    async def _merged_page(self, req: PageRequest) -> PageResult:
        statuses = MERGED_STATUSES[req.status]
        id_lists = await asyncio.gather(*(self.backend.get_job_ids(s) for s in statuses))
        job_ids: List[str] = [job_id for ids in id_lists for job_id in ids]

        start = req.page_index * self.page_size
        window = job_ids[start:start + self.page_size]
        logger.debug(
            "status=%r: %d ids, page %d -> %d details", req.status, len(job_ids), req.page_index, len(window)
        )

        # gather keeps input order; the first failure aborts the whole page
        raw_jobs = await asyncio.gather(*(self.backend.get_job(job_id) for job_id in window))
        records = [Normalizer.normalize_job(raw) for raw in raw_jobs]
        return PageResult(
            records=records, total_count=len(job_ids), page_index=req.page_index, page_size=self.page_size
        )

    async def _queue_page(self, req: PageRequest) -> PageResult:
        data = await self.backend.get_pending_page(
            req.queue, offset=req.page_index * self.page_size, limit=self.page_size
        )
        records: List[JobRecord] = [Normalizer.normalize_job(raw) for raw in data.get("jobs") or []]
        return PageResult(
            records=records,
            total_count=int(data.get("total") or 0),
            page_index=req.page_index,
            page_size=self.page_size,
        )
