"""In-process push channel for job status changes.

A WebSocket handler subscribes to a job id and the orchestrator publishes
every status transition. The channel also keeps the merged payloads of a job
that is still running so a late subscriber can catch up; the snapshot is
dropped once a terminal stage goes out, after which the database row is the
only source of truth.
"""

import asyncio

from .models import TERMINAL_STATUSES


class StatusChannel:
    def __init__(self):
        self._subscribers: dict[str, list[asyncio.Queue]] = {}
        self._snapshots: dict[str, dict] = {}

    def subscribe(self, job_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.setdefault(job_id, []).append(queue)
        return queue

    def unsubscribe(self, job_id: str, queue: asyncio.Queue):
        remaining = [q for q in self._subscribers.get(job_id, []) if q is not queue]
        if remaining:
            self._subscribers[job_id] = remaining
        else:
            self._subscribers.pop(job_id, None)

    def has_subscribers(self, job_id: str) -> bool:
        return job_id in self._subscribers

    def snapshot(self, job_id: str) -> dict | None:
        snapshot = self._snapshots.get(job_id)
        return dict(snapshot) if snapshot is not None else None

    def publish(self, job_id: str, payload: dict):
        if payload.get("stage") in TERMINAL_STATUSES:
            self._snapshots.pop(job_id, None)
        else:
            self._snapshots[job_id] = {**self._snapshots.get(job_id, {}), **payload}
        for queue in self._subscribers.get(job_id, []):
            queue.put_nowait(payload)
