from __future__ import annotations

from ..models import ChainRecord, ChainStep, ChainView, GroupRecord, GroupView
from .resolver import DetailResolver


class RelationView:
    """Chains are shown as an ordered pipeline, groups as a flat set."""

    def __init__(self, resolver: DetailResolver):
        self.resolver = resolver

    async def load_chain(self, chain_id: str) -> ChainView:
        return self.chain_view(await self.resolver.fetch_one("chain", chain_id))

    async def load_group(self, group_id: str) -> GroupView:
        return self.group_view(await self.resolver.fetch_one("group", group_id))

    @staticmethod
    def chain_view(chain: ChainRecord) -> ChainView:
        last = len(chain.jobs) - 1
        steps = [
            ChainStep(job=job, position=idx, connects_to_next=idx < last)
            for idx, job in enumerate(chain.jobs)
        ]
        return ChainView(
            id=chain.id,
            status=chain.status,
            current_job_id=chain.current_job_id or "N/A",
            completed_jobs=len(chain.previous_jobs),
            steps=steps,
        )

    @staticmethod
    def group_view(group: GroupRecord) -> GroupView:
        # job_status and jobs are fetched separately; the status map is the source of truth for the count
        return GroupView(
            id=group.id,
            status=group.status,
            total_jobs=len(group.job_status),
            jobs=list(group.jobs),
        )
