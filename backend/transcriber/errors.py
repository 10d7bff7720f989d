"""Error taxonomy for transcription submissions.

Every error carries the HTTP status it maps to and a generic message that is
safe to show to end users. ``detail`` holds the underlying diagnostic and is
only ever logged.
"""

from typing import Optional


class TranscriptionError(Exception):
    status_code = 500
    public_message = "Internal server error"

    def __init__(self, job_id: Optional[str] = None, detail: Optional[str] = None):
        super().__init__(detail or self.public_message)
        self.job_id = job_id
        self.detail = detail


class InvalidInput(TranscriptionError):
    status_code = 400
    public_message = "YouTube URL is required"


class InvalidVideoReference(TranscriptionError):
    status_code = 400
    public_message = "Invalid YouTube URL"


class StoreUnavailable(TranscriptionError):
    status_code = 500
    public_message = "Failed to create transcription record"


class TranscriptionFailed(TranscriptionError):
    status_code = 500
    public_message = "Transcription failed"


class NotFound(TranscriptionError):
    status_code = 404
    public_message = "Transcription not found"


class JobStateError(RuntimeError):
    """A write would break the job lifecycle rules."""
