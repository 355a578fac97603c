import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from .config import Settings, settings as default_settings
from .monitor import Monitor
from .routers import views


def create_app(settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        monitor = Monitor(settings, transport=transport)
        app.state.monitor = monitor
        monitor.switch_view("dashboard")
        try:
            yield
        finally:
            await monitor.close()

    app = FastAPI(title="Queue Monitor", version="1.0.0", lifespan=lifespan)
    app.include_router(views.router)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("queue_monitor.main:app", host="0.0.0.0", port=8000)
