from pathlib import Path
import sys
from urllib.parse import unquote

import httpx
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from queue_monitor.config import Settings
from queue_monitor.services.backend import BackendClient

API_ROOT = "http://backend.test/api"


def broker_job(job_id, status="successful", task="send_email", queue="tasqueue:tasks", **extra):
    """A job as the broker serializes it (capitalized fields)."""
    job = {
        "ID": job_id,
        "Status": status,
        "Queue": queue,
        "Retried": 0,
        "MaxRetry": 3,
        "Job": {"Task": task, "Payload": None},
        "ProcessedAt": "2024-05-01T10:00:00Z",
        "PrevErr": "",
    }
    job.update(extra)
    return job


class FakeBackend:
    """In-memory stand-in for the job queue REST API."""

    def __init__(self):
        self.successful = []
        self.failed = []
        self.jobs = {}
        self.pending = {}
        self.chains = {}
        self.groups = {}
        self.stats = {
            "total_pending": 0,
            "total_success": 0,
            "total_failed": 0,
            "registered_tasks": [],
            "queue_stats": {},
        }
        self.broken = set()  # paths answering with a transport failure
        self.errors = {}  # path -> message returned as an error payload with HTTP 200
        self.requests = []

    def add_jobs(self, status, *job_ids):
        target = self.successful if status == "successful" else self.failed
        for job_id in job_ids:
            target.append(job_id)
            self.jobs[job_id] = broker_job(job_id, status=status)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = unquote(request.url.path).removeprefix("/api/")
        self.requests.append((request.method, path, dict(request.url.params)))
        if path in self.broken:
            raise httpx.ConnectError("connection refused", request=request)
        if path in self.errors:
            return httpx.Response(200, json={"error": self.errors[path]})

        parts = path.split("/")
        if path == "stats":
            return httpx.Response(200, json=self.stats)
        if path == "jobs":
            status = request.url.params.get("status")
            ids = {"successful": self.successful, "failed": self.failed}.get(status)
            if ids is None:
                return httpx.Response(400, json={"error": f"unsupported status filter: {status}"})
            return httpx.Response(200, json={"status": status, "job_ids": list(ids), "count": len(ids)})
        if parts[:2] == ["jobs", "pending"] and parts[-1] == "paginated":
            queue = "/".join(parts[2:-1])
            offset = int(request.url.params.get("offset", 0))
            limit = int(request.url.params.get("limit", 20))
            items = self.pending.get(queue, [])
            return httpx.Response(
                200,
                json={"jobs": items[offset:offset + limit], "total": len(items), "offset": offset, "limit": limit},
            )
        if parts[:2] == ["jobs", "pending"] and parts[-1] == "count":
            queue = "/".join(parts[2:-1])
            return httpx.Response(200, json={"queue": queue, "count": len(self.pending.get(queue, []))})
        if parts[0] == "search":
            return self._search(request.url.params.get("q", ""))
        if len(parts) == 2:
            store = {"jobs": self.jobs, "chains": self.chains, "groups": self.groups}.get(parts[0])
            if store is not None:
                if parts[1] not in store:
                    return httpx.Response(404, json={"error": "not found"})
                if request.method == "DELETE":
                    store.pop(parts[1])
                    return httpx.Response(200, json={"message": "job deleted successfully"})
                return httpx.Response(200, json=store[parts[1]])
        return httpx.Response(404, text="404 page not found")

    def _search(self, record_id):
        for kind, store in (("job", self.jobs), ("chain", self.chains), ("group", self.groups)):
            if record_id in store:
                return httpx.Response(200, json={"type": kind, kind: store[record_id]})
        return httpx.Response(
            404, json={"error": f"no job, chain, or group found with ID: {record_id}"}
        )


@pytest.fixture
def settings():
    return Settings(api_root=API_ROOT, page_size=20, refresh_seconds=3600.0, default_queue="tasqueue:tasks")


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def make_client(settings, fake_backend):
    def _make(**overrides):
        cfg = settings.model_copy(update=overrides) if overrides else settings
        return BackendClient(cfg, transport=fake_backend.transport())

    return _make
