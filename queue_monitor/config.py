from pydantic import BaseModel
import os


def _optional_float(key: str) -> float | None:
    raw = os.getenv(key)
    return float(raw) if raw else None


class Settings(BaseModel):
    api_root: str = os.getenv("MONITOR_API_ROOT", "http://localhost:8080/api")
    default_queue: str = os.getenv("MONITOR_DEFAULT_QUEUE", "tasqueue:tasks")
    page_size: int = int(os.getenv("MONITOR_PAGE_SIZE", 20))
    refresh_seconds: float = float(os.getenv("MONITOR_REFRESH_SECONDS", 3.0))
    request_timeout: float | None = _optional_float("MONITOR_REQUEST_TIMEOUT")  # None keeps the httpx default
    log_level: str = os.getenv("MONITOR_LOG_LEVEL", "INFO")

settings = Settings()
