import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ..errors import MonitorError, NotFoundError, StaleResponseError
from ..models import (
    ChainView,
    DashboardView,
    GroupView,
    JobDetail,
    JobsPage,
    JobStatusFilter,
    Pagination,
    SearchResult,
)
from ..monitor import Monitor
from ..utils.payload import PayloadCodec

logger = logging.getLogger(__name__)

router = APIRouter()


def get_monitor(request: Request) -> Monitor:
    return request.app.state.monitor


def _failed(what: str, exc: MonitorError) -> HTTPException:
    if isinstance(exc, StaleResponseError):
        return HTTPException(status_code=409, detail=str(exc))
    logger.error("Failed to load %s: %s", what, exc)
    return HTTPException(status_code=502, detail=f"Failed to load {what}: {exc}")


def _required(value: str, what: str) -> str:
    value = value.strip()
    if not value:
        raise HTTPException(status_code=400, detail=f"Please enter a {what}")
    return value


@router.get("/health")
async def health():
    return {"status": "healthy"}


@router.post("/views/{view}")
async def switch_view(view: str, monitor: Monitor = Depends(get_monitor)):
    try:
        monitor.switch_view(view)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return {"view": monitor.state.current_view, "polling": monitor.poller.status}


@router.get("/dashboard", response_model=DashboardView)
async def dashboard(monitor: Monitor = Depends(get_monitor)):
    if monitor.state.stats is None:
        await monitor.poller.refresh()
    return _dashboard_view(monitor)


@router.post("/dashboard/refresh", response_model=DashboardView)
async def refresh_dashboard(monitor: Monitor = Depends(get_monitor)):
    await monitor.poller.refresh()
    return _dashboard_view(monitor)


def _dashboard_view(monitor: Monitor) -> DashboardView:
    stats = monitor.state.stats
    return DashboardView(
        stats=stats,
        last_updated=stats.fetched_at.strftime("%H:%M:%S") if stats else None,
        polling=monitor.poller.status,
    )


@router.get("/jobs", response_model=JobsPage)
async def list_jobs(
    status: JobStatusFilter = "",
    queue: str = "",
    page: int = Query(0, ge=0),
    monitor: Monitor = Depends(get_monitor),
):
    queue = queue.strip() or monitor.settings.default_queue
    selection = monitor.state.jobs
    selection.status, selection.queue, selection.page_index = status, queue, page

    seq = monitor.state.begin("jobs")
    try:
        result = await monitor.browser.fetch_page(status, queue, page)
        if not monitor.state.is_current("jobs", seq):
            raise StaleResponseError(f"Jobs page {page} was superseded by a newer request")
    except MonitorError as exc:
        raise _failed("jobs", exc)

    if result.total_count == 0:
        return JobsPage(status=status, queue=queue, records=[], message="No jobs found")
    return JobsPage(
        status=status,
        queue=queue,
        records=result.records,
        message=None if result.records else "No jobs found",
        pagination=Pagination(
            page_index=result.page_index,
            total_pages=result.total_pages,
            total_count=result.total_count,
            summary=result.describe(),
            has_previous=result.has_previous,
            has_next=result.has_next,
        ),
    )


@router.get("/jobs/{job_id}", response_model=JobDetail)
async def job_detail(job_id: str, monitor: Monitor = Depends(get_monitor)):
    try:
        job = await monitor.resolver.fetch_one("job", _required(job_id, "Job ID"))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    except MonitorError as exc:
        raise _failed("job details", exc)
    return JobDetail(
        job=job,
        payload_text=PayloadCodec.render(job.payload) if job.payload is not None else None,
        result_text=PayloadCodec.render(job.result_data) if job.result_data is not None else None,
    )


@router.delete("/jobs/{job_id}")
async def delete_job(job_id: str, monitor: Monitor = Depends(get_monitor)):
    try:
        return await monitor.backend.delete_job(_required(job_id, "Job ID"))
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Job not found")
    except MonitorError as exc:
        raise HTTPException(status_code=502, detail=f"Failed to delete job: {exc}")


@router.get("/search", response_model=SearchResult)
async def search(
    q: str = "",
    any_kind: bool = Query(False, alias="any"),
    monitor: Monitor = Depends(get_monitor),
):
    record_id = _required(q, "Job ID")
    missing = f"No job, chain, or group found with ID: {record_id}" if any_kind else f"Job not found: {record_id}"
    try:
        if any_kind:
            result = await monitor.resolver.search(record_id)
        else:
            result = SearchResult(kind="job", job=await monitor.resolver.fetch_one("job", record_id))
    except NotFoundError:
        raise HTTPException(status_code=404, detail=missing)
    except MonitorError as exc:
        raise _failed("search results", exc)
    if result.kind == "not_found":
        raise HTTPException(status_code=404, detail=missing)
    return result


@router.get("/chains/{chain_id}", response_model=ChainView)
async def chain(chain_id: str, monitor: Monitor = Depends(get_monitor)):
    chain_id = _required(chain_id, "chain ID")
    try:
        return await monitor.relations.load_chain(chain_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail=f"Chain not found: {chain_id}")
    except MonitorError as exc:
        raise _failed("chain", exc)


@router.get("/groups/{group_id}", response_model=GroupView)
async def group(group_id: str, monitor: Monitor = Depends(get_monitor)):
    group_id = _required(group_id, "group ID")
    try:
        return await monitor.relations.load_group(group_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail=f"Group not found: {group_id}")
    except MonitorError as exc:
        raise _failed("group", exc)


@router.get("/queues/{queue}/count")
async def pending_count(queue: str, monitor: Monitor = Depends(get_monitor)):
    try:
        count = await monitor.backend.get_pending_count(queue)
    except MonitorError as exc:
        raise _failed("pending count", exc)
    return {"queue": queue, "count": count}
