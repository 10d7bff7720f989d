"""Display helpers for a finished transcript.

None of this is transcription output. Speaker labels and timestamps are a
fallback heuristic for laying out plain text: speakers alternate by line and
every line is spaced a fixed 30 seconds apart.
"""

import asyncio
import html
import re
import time
from dataclasses import dataclass

from fastapi.concurrency import run_in_threadpool

from .errors import NotFound
from .models import TranscriptionJob
from .store import JobStore

LINE_SPACING_SECONDS = 30
SPEAKER_COUNT = 2

EXPORT_FORMATS = [
    {"name": "SRT", "description": "SubRip subtitles", "available": False},
    {"name": "VTT", "description": "WebVTT", "available": False},
    {"name": "TXT", "description": "Plain text", "available": False},
    {"name": "PDF", "description": "PDF document", "available": False},
]


@dataclass
class TranscriptLine:
    index: int
    speaker: str
    start_seconds: int
    timestamp: str
    text: str


def format_timestamp(seconds: int) -> str:
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def split_lines(text: str | None) -> list[TranscriptLine]:
    if not text:
        return []
    stripped = [raw.strip() for raw in text.splitlines()]
    lines = []
    for index, line in enumerate(s for s in stripped if s):
        start = index * LINE_SPACING_SECONDS
        lines.append(
            TranscriptLine(
                index=index,
                speaker=f"Speaker {index % SPEAKER_COUNT + 1}",
                start_seconds=start,
                timestamp=format_timestamp(start),
                text=line,
            )
        )
    return lines


def filter_lines(lines: list[TranscriptLine], term: str | None) -> list[TranscriptLine]:
    if not term or not term.strip():
        return list(lines)
    needle = term.lower()
    return [
        line
        for line in lines
        if needle in line.text.lower() or needle in line.speaker.lower()
    ]


def highlight(text: str, term: str | None) -> str:
    """Escape ``text`` for HTML and wrap case-insensitive hits of ``term`` in <mark>."""
    if not term or not term.strip():
        return html.escape(text)
    pattern = re.compile(re.escape(term), re.IGNORECASE)
    parts = []
    last = 0
    for match in pattern.finditer(text):
        parts.append(html.escape(text[last : match.start()]))
        parts.append(f"<mark>{html.escape(match.group(0))}</mark>")
        last = match.end()
    parts.append(html.escape(text[last:]))
    return "".join(parts)


async def wait_for_terminal(
    store: JobStore, job_id: str, interval: float, timeout: float
) -> TranscriptionJob:
    """Poll until the job is completed or failed.

    Fallback for clients that cannot hold a WebSocket open. Stops as soon as a
    terminal state is read, or raises TimeoutError once ``timeout`` elapses.
    """
    deadline = time.monotonic() + timeout
    while True:
        job = await run_in_threadpool(store.read, job_id)
        if job is None:
            raise NotFound(job_id=job_id)
        if job.is_terminal:
            return job
        if time.monotonic() >= deadline:
            raise TimeoutError(f"job {job_id} still {job.status} after {timeout}s")
        await asyncio.sleep(interval)
