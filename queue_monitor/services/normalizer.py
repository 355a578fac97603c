"""Reconcile the backend's two field-naming schemes into canonical records.

Job objects come either straight from the broker (``ID``, ``Status``,
``Job.Task``...) or from endpoints that re-serialize them in lowercase
(``id``, ``status``, ``task``...). Every attribute is resolved through an
ordered list of candidate paths; the first present value wins, otherwise the
attribute default applies.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from ..errors import MalformedRecordError
from ..models import ChainRecord, GroupRecord, JobRecord, StatsSnapshot

Path = Tuple[str, ...]

JOB_FIELDS: Dict[str, Sequence[Path]] = {
    "id": [("ID",), ("id",)],
    "status": [("Status",), ("status",)],
    "task": [("Job", "Task"), ("task",), ("job", "task")],
    "queue": [("Queue",), ("queue",)],
    "retried": [("Retried",), ("retried",)],
    "max_retry": [("MaxRetry",), ("max_retry",)],
    "payload": [("Job", "Payload"), ("payload",), ("job", "payload")],
    "result_data": [("ResultData",), ("result_data",)],
    "processed_at": [("ProcessedAt",), ("processed_at",)],
    "previous_error": [("PrevErr",), ("prev_err",), ("previous_error",)],
}

CHAIN_FIELDS: Dict[str, Sequence[Path]] = {
    "id": [("ID",), ("id",)],
    "status": [("Status",), ("status",)],
    "current_job_id": [("JobID",), ("job_id",), ("current_job_id",)],
    "previous_jobs": [("PrevJobs",), ("prev_jobs",), ("previous_jobs",)],
    "jobs": [("Jobs",), ("jobs",)],
}

GROUP_FIELDS: Dict[str, Sequence[Path]] = {
    "id": [("ID",), ("id",)],
    "status": [("Status",), ("status",)],
    "job_status": [("JobStatus",), ("job_status",)],
    "jobs": [("Jobs",), ("jobs",)],
}

_MISSING = object()


def resolve(raw: Dict[str, Any], paths: Iterable[Path], default: Any = None) -> Any:
    """Return the value at the first present path, else ``default``.

    ``None`` and empty strings count as absent.
    """
    for path in paths:
        value: Any = raw
        for key in path:
            if not isinstance(value, dict) or key not in value:
                value = _MISSING
                break
            value = value[key]
        if value is _MISSING or value is None or value == "":
            continue
        return value
    return default


class Normalizer:
    @staticmethod
    def normalize_job(raw: Any) -> JobRecord:
        fields = Normalizer._collect(raw, JOB_FIELDS, "job")
        try:
            return JobRecord(**fields)
        except ValidationError as exc:
            raise MalformedRecordError(f"Malformed job record {fields['id']}: {exc}", raw) from exc

    @staticmethod
    def normalize_chain(raw: Any) -> ChainRecord:
        fields = Normalizer._collect(raw, CHAIN_FIELDS, "chain")
        fields["jobs"] = Normalizer._jobs(fields.get("jobs"))
        try:
            return ChainRecord(**fields)
        except ValidationError as exc:
            raise MalformedRecordError(f"Malformed chain record {fields['id']}: {exc}", raw) from exc

    @staticmethod
    def normalize_group(raw: Any) -> GroupRecord:
        fields = Normalizer._collect(raw, GROUP_FIELDS, "group")
        fields["jobs"] = Normalizer._jobs(fields.get("jobs"))
        try:
            return GroupRecord(**fields)
        except ValidationError as exc:
            raise MalformedRecordError(f"Malformed group record {fields['id']}: {exc}", raw) from exc

    @staticmethod
    def normalize_stats(raw: Dict[str, Any]) -> StatsSnapshot:
        try:
            snapshot = StatsSnapshot(
                pending=raw.get("total_pending") or 0,
                success=raw.get("total_success") or 0,
                failed=raw.get("total_failed") or 0,
                registered_tasks=raw.get("registered_tasks") or [],
                queue_stats=raw.get("queue_stats") or {},
            )
        except ValidationError as exc:
            raise MalformedRecordError(f"Malformed stats payload: {exc}", raw) from exc
        # validated as strings above, so deduplication is safe
        snapshot.registered_tasks = list(dict.fromkeys(snapshot.registered_tasks))
        return snapshot

    @staticmethod
    def _collect(raw: Any, spec: Dict[str, Sequence[Path]], kind: str) -> Dict[str, Any]:
        if not isinstance(raw, dict):
            raise MalformedRecordError(f"Expected a {kind} object, got {type(raw).__name__}", raw)
        fields: Dict[str, Any] = {}
        for name, paths in spec.items():
            value = resolve(raw, paths)
            if value is not None:
                fields[name] = value
        if "id" not in fields:
            raise MalformedRecordError(f"Malformed {kind} record: no ID or id field", raw)
        fields["id"] = str(fields["id"])
        return fields

    @staticmethod
    def _jobs(raw_jobs: Optional[List[Any]]) -> List[JobRecord]:
        return [Normalizer.normalize_job(item) for item in raw_jobs or []]
