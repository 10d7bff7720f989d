import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from .config import Settings
from .errors import (
    InvalidInput,
    InvalidVideoReference,
    JobStateError,
    StoreUnavailable,
    TranscriptionFailed,
)
from .models import JobStatus
from .providers import ProviderError
from .store import JobStore
from .video_id import extract_video_id, watch_url

STAGE_MESSAGES = {
    JobStatus.processing: "Transcribing",
    JobStatus.completed: "Done",
    JobStatus.failed: "Transcription failed",
}


class TranscriptionProvider(Protocol):
    async def transcribe(self, video_url: str, job_id: str) -> str: ...


@dataclass
class SubmitResult:
    job_id: str
    status: JobStatus
    transcript: Optional[str] = None


class TranscriptionOrchestrator:
    """Runs one submission end to end inside the caller's request.

    The job row is created before anything else can fail, so every failure
    after that point leaves an inspectable ``failed`` job behind. Nothing is
    retried and nothing is deduplicated.
    """

    def __init__(
        self,
        store: JobStore,
        provider: TranscriptionProvider,
        settings: Settings,
        notifier: Optional[Callable[[str, dict], None]] = None,
    ):
        self.store = store
        self.provider = provider
        self.settings = settings
        self._notifier = notifier

    async def submit(
        self, source_url: Optional[str], owner_id: Optional[str] = None
    ) -> SubmitResult:
        if not source_url or not source_url.strip():
            raise InvalidInput()

        job_id = self.store.create(source_url, owner_id)
        self._notify(job_id, JobStatus.processing)

        video_id = extract_video_id(source_url)
        if not video_id:
            logging.warning("job %s has no recognizable video id: %s", job_id, source_url)
            self._mark_failed(job_id)
            raise InvalidVideoReference(
                job_id=job_id, detail=f"no video id in {source_url!r}"
            )

        try:
            transcript = await self.provider.transcribe(watch_url(video_id), job_id)
            if not isinstance(transcript, str) or not transcript.strip():
                raise ProviderError("provider returned no transcription text")
            self.store.update(
                job_id,
                status=JobStatus.completed,
                transcript_text=transcript,
                language=self.settings.default_language,
            )
        except Exception as exc:  # broad catch to mark failed
            logging.exception("job %s transcription failed", job_id)
            self._mark_failed(job_id)
            raise TranscriptionFailed(job_id=job_id, detail=str(exc)) from exc

        self._notify(job_id, JobStatus.completed)
        logging.info("job %s completed, length=%d", job_id, len(transcript))
        return SubmitResult(
            job_id=job_id, status=JobStatus.completed, transcript=transcript
        )

    def _mark_failed(self, job_id: str):
        try:
            self.store.update(job_id, status=JobStatus.failed)
        except (StoreUnavailable, JobStateError):
            # the caller still gets the original error; the row stays processing
            logging.exception("job %s could not be marked failed", job_id)
            return
        self._notify(job_id, JobStatus.failed)

    def _notify(self, job_id: str, status: JobStatus):
        if self._notifier is not None:
            self._notifier(
                job_id,
                {"stage": status, "job_id": job_id, "message": STAGE_MESSAGES[status]},
            )
