from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
import orjson

from ..config import Settings, settings as default_settings
from ..errors import BackendError, NotFoundError, TransportError

logger = logging.getLogger(__name__)


class BackendClient:
    """Thin async wrapper over the job-queue REST surface.

    Every method makes exactly one request; nothing is retried or cached.
    A body with a non-empty ``error`` field is a failure whatever the status
    code says.
    """

    def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings or default_settings
        kwargs: Dict[str, Any] = {"base_url": self.settings.api_root.rstrip("/") + "/"}
        if self.settings.request_timeout is not None:
            kwargs["timeout"] = self.settings.request_timeout
        if transport is not None:
            kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def get_stats(self) -> Dict[str, Any]:
        return await self._request("GET", "stats")

    async def get_job_ids(self, status: str) -> List[str]:
        data = await self._request("GET", "jobs", params={"status": status})
        return [str(job_id) for job_id in data.get("job_ids") or []]

    async def get_job(self, job_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"jobs/{_segment(job_id)}", missing=NotFoundError)

    async def get_pending_page(self, queue: str, offset: int, limit: int) -> Dict[str, Any]:
        return await self._request(
            "GET",
            f"jobs/pending/{_segment(queue)}/paginated",
            params={"offset": offset, "limit": limit},
        )

    async def get_pending_count(self, queue: str) -> int:
        data = await self._request("GET", f"jobs/pending/{_segment(queue)}/count")
        return int(data.get("count") or 0)

    async def get_chain(self, chain_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"chains/{_segment(chain_id)}", missing=NotFoundError)

    async def get_group(self, group_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"groups/{_segment(group_id)}", missing=NotFoundError)

    async def search(self, record_id: str) -> Dict[str, Any]:
        return await self._request("GET", "search", params={"q": record_id}, missing=NotFoundError)

    async def delete_job(self, job_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"jobs/{_segment(job_id)}", missing=NotFoundError)

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        missing: type[BackendError] = BackendError,
    ) -> Dict[str, Any]:
        logger.debug("%s %s %s", method, path, params or "")
        try:
            resp = await self._client.request(method, path, params=params)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {path} failed: {exc}", path) from exc

        try:
            data = orjson.loads(resp.content)
        except orjson.JSONDecodeError as exc:
            raise TransportError(
                f"{method} {path} returned unreadable body (HTTP {resp.status_code})", path
            ) from exc

        if isinstance(data, dict) and data.get("error"):
            raise missing(str(data["error"]), path)
        if resp.is_error:
            raise TransportError(f"{method} {path} returned HTTP {resp.status_code}", path)
        if not isinstance(data, dict):
            raise TransportError(f"{method} {path} returned {type(data).__name__}, expected object", path)
        return data


def _segment(value: str) -> str:
    return quote(value, safe=":")
