from __future__ import annotations

import httpx

from .config import Settings
from .services.backend import BackendClient
from .services.browser import JobBrowser
from .services.poller import PollingController
from .services.relations import RelationView
from .services.resolver import DetailResolver
from .state import AppState


class Monitor:
    """Wires the services around one backend client and one application state."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self.state = AppState()
        self.state.jobs.queue = settings.default_queue
        self.backend = BackendClient(settings, transport=transport)
        self.resolver = DetailResolver(self.backend)
        self.browser = JobBrowser(self.backend, settings)
        self.relations = RelationView(self.resolver)
        self.poller = PollingController(self.resolver, self.state, interval=settings.refresh_seconds)

    def switch_view(self, view: str) -> None:
        self.state.switch_view(view)
        if view == "dashboard":
            self.poller.activate()
        else:
            self.poller.suspend()

    async def close(self) -> None:
        await self.poller.stop()
        await self.backend.aclose()
