from __future__ import annotations

import logging
from typing import Union

from ..models import ChainRecord, GroupRecord, JobRecord, RecordKind, SearchResult, StatsSnapshot
from .backend import BackendClient
from .normalizer import Normalizer

logger = logging.getLogger(__name__)

NormalizedRecord = Union[JobRecord, ChainRecord, GroupRecord]


class DetailResolver:
    """Single-attempt lookups of one job, chain or group by id."""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def fetch_one(self, kind: RecordKind, record_id: str) -> NormalizedRecord:
        if kind == "job":
            return Normalizer.normalize_job(await self.backend.get_job(record_id))
        if kind == "chain":
            return Normalizer.normalize_chain(await self.backend.get_chain(record_id))
        if kind == "group":
            return Normalizer.normalize_group(await self.backend.get_group(record_id))
        raise ValueError(f"Unsupported record kind: {kind}")

    async def fetch_stats(self) -> StatsSnapshot:
        return Normalizer.normalize_stats(await self.backend.get_stats())

    async def search(self, record_id: str) -> SearchResult:
        """Let the backend figure out whether ``record_id`` is a job, chain or group."""
        data = await self.backend.search(record_id)
        kind = data.get("type") or "not_found"
        logger.debug("search %s resolved to %s", record_id, kind)
        if kind == "job" and data.get("job"):
            return SearchResult(kind="job", job=Normalizer.normalize_job(data["job"]))
        if kind == "chain" and data.get("chain"):
            return SearchResult(kind="chain", chain=Normalizer.normalize_chain(data["chain"]))
        if kind == "group" and data.get("group"):
            return SearchResult(kind="group", group=Normalizer.normalize_group(data["group"]))
        return SearchResult()
