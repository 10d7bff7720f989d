from enum import StrEnum
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, Enum, String, Text
from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStatus(StrEnum):
    processing = "processing"
    completed = "completed"
    failed = "failed"


TERMINAL_STATUSES = frozenset({JobStatus.completed, JobStatus.failed})


class TranscriptionJob(Base):
    __tablename__ = "transcriptions"

    id = Column(String, primary_key=True, index=True)
    source_url = Column(String, nullable=False)
    owner_id = Column(String, nullable=True, index=True)
    status = Column(Enum(JobStatus), default=JobStatus.processing, nullable=False)
    transcript_text = Column(Text, nullable=True)
    language = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
