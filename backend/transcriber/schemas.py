from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
from .models import JobStatus


class SubmitRequest(BaseModel):
    # left optional so a missing url is reported as 400, not a validation 422
    source_url: Optional[str] = Field(
        default=None, description="YouTube video link to transcribe"
    )
    owner_id: Optional[str] = Field(
        default=None, description="Submitting user, null for anonymous"
    )


class SubmitResponse(BaseModel):
    job_id: str
    status: JobStatus
    transcript: Optional[str] = None


class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    source_url: str
    owner_id: Optional[str] = None
    status: JobStatus
    transcript_text: Optional[str] = None
    language: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class JobsResponse(BaseModel):
    jobs: list[JobResponse]


class TranscriptLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    index: int
    speaker: str
    start_seconds: int
    timestamp: str
    text: str
    highlighted: str


class ExportFormat(BaseModel):
    name: str
    description: str
    available: bool


class TranscriptView(BaseModel):
    id: str
    status: JobStatus
    language: Optional[str] = None
    query: Optional[str] = None
    total_lines: int
    lines: list[TranscriptLineResponse]
    export_formats: list[ExportFormat]
