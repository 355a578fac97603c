from datetime import datetime
from math import ceil
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, computed_field

JobStatusFilter = Literal["", "successful", "failed", "pending"]
RecordKind = Literal["job", "chain", "group"]


class JobRecord(BaseModel):
    id: str
    status: str = "queued"  # queued | successful | failed | backend-defined
    task: str = "Unknown"
    queue: str = "default"
    retried: int = Field(default=0, ge=0)
    max_retry: int = Field(default=0, ge=0)
    payload: Any = None
    result_data: Any = None
    processed_at: Optional[str] = None
    previous_error: Optional[str] = None


class ChainRecord(BaseModel):
    id: str
    status: str = "queued"
    current_job_id: Optional[str] = None
    previous_jobs: List[str] = Field(default_factory=list)
    jobs: List[JobRecord] = Field(default_factory=list)  # execution order


class GroupRecord(BaseModel):
    id: str
    status: str = "queued"
    job_status: Dict[str, str] = Field(default_factory=dict)
    jobs: List[JobRecord] = Field(default_factory=list)


class StatsSnapshot(BaseModel):
    pending: int = 0
    success: int = 0
    failed: int = 0
    registered_tasks: List[str] = Field(default_factory=list)
    queue_stats: Dict[str, int] = Field(default_factory=dict)
    fetched_at: datetime = Field(default_factory=datetime.now)


class PageRequest(BaseModel):
    status: JobStatusFilter = ""
    queue: str
    page_index: int = Field(default=0, ge=0)


class PageResult(BaseModel):
    records: List[JobRecord]
    total_count: int
    page_index: int = 0
    page_size: int = 20

    @property
    def total_pages(self) -> int:
        return ceil(self.total_count / self.page_size) if self.page_size else 0

    @property
    def has_previous(self) -> bool:
        return self.page_index > 0

    @property
    def has_next(self) -> bool:
        return self.page_index < self.total_pages - 1

    def describe(self) -> str:
        if self.total_count == 0:
            return "No jobs found"
        if self.page_index >= self.total_pages:
            return f"Page {self.page_index + 1} is past the last page ({self.total_pages}) of {self.total_count} jobs"
        first = self.page_index * self.page_size + 1
        last = min((self.page_index + 1) * self.page_size, self.total_count)
        return (
            f"Showing {first}-{last} of {self.total_count} jobs "
            f"(Page {self.page_index + 1}/{self.total_pages})"
        )


class SearchResult(BaseModel):
    kind: Literal["job", "chain", "group", "not_found"] = "not_found"
    job: Optional[JobRecord] = None
    chain: Optional[ChainRecord] = None
    group: Optional[GroupRecord] = None


# View models returned by the HTTP surface

class Pagination(BaseModel):
    page_index: int
    total_pages: int
    total_count: int
    summary: str
    has_previous: bool
    has_next: bool


class JobsPage(BaseModel):
    status: JobStatusFilter
    queue: str
    records: List[JobRecord]
    pagination: Optional[Pagination] = None  # hidden when there is nothing to page through
    message: Optional[str] = None


class JobDetail(BaseModel):
    job: JobRecord
    payload_text: Optional[str] = None
    result_text: Optional[str] = None


class ChainStep(BaseModel):
    job: JobRecord
    position: int
    connects_to_next: bool


class ChainView(BaseModel):
    id: str
    status: str
    current_job_id: str
    completed_jobs: int
    steps: List[ChainStep]

    @computed_field
    @property
    def flow(self) -> str:
        return " -> ".join(step.job.task for step in self.steps)


class GroupView(BaseModel):
    id: str
    status: str
    total_jobs: int
    jobs: List[JobRecord]


class DashboardView(BaseModel):
    stats: Optional[StatsSnapshot] = None
    last_updated: Optional[str] = None
    polling: str
