"""Persistence for transcription jobs.

Each call opens its own session and commits at most one record write, so the
store never holds a transaction across the provider call.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from .errors import JobStateError, NotFound, StoreUnavailable
from .models import JobStatus, TranscriptionJob

UPDATABLE_FIELDS = frozenset({"status", "transcript_text", "language"})


def check_invariants(job: TranscriptionJob) -> None:
    has_text = job.transcript_text is not None
    if has_text != (job.status == JobStatus.completed):
        raise JobStateError(
            f"job {job.id}: transcript_text must be set iff status is completed "
            f"(status={job.status}, has_text={has_text})"
        )


class JobStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def create(self, source_url: str, owner_id: Optional[str] = None) -> str:
        job = TranscriptionJob(
            id=str(uuid.uuid4()),
            source_url=source_url,
            owner_id=owner_id,
            status=JobStatus.processing,
        )
        try:
            with self._session_factory() as db:
                db.add(job)
                db.commit()
        except SQLAlchemyError as exc:
            raise StoreUnavailable(detail=str(exc)) from exc
        logging.info("job %s created, url=%s", job.id, source_url)
        return job.id

    def read(self, job_id: str) -> Optional[TranscriptionJob]:
        try:
            with self._session_factory() as db:
                return db.get(TranscriptionJob, job_id)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(job_id=job_id, detail=str(exc)) from exc

    def update(self, job_id: str, **fields) -> TranscriptionJob:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise JobStateError(f"fields not updatable: {sorted(unknown)}")
        if "status" in fields:
            fields["status"] = JobStatus(fields["status"])
        try:
            with self._session_factory() as db:
                job = db.get(TranscriptionJob, job_id)
                if not job:
                    raise NotFound(job_id=job_id)
                if job.is_terminal:
                    raise JobStateError(f"job {job_id} is already {job.status}")
                for name, value in fields.items():
                    setattr(job, name, value)
                check_invariants(job)
                db.commit()
                db.refresh(job)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(job_id=job_id, detail=str(exc)) from exc
        logging.info("job %s updated, status=%s", job_id, job.status)
        return job

    def list_jobs(
        self, owner_id: Optional[str] = None, limit: int = 50
    ) -> list[TranscriptionJob]:
        try:
            with self._session_factory() as db:
                query = db.query(TranscriptionJob)
                if owner_id is not None:
                    query = query.filter(TranscriptionJob.owner_id == owner_id)
                return query.order_by(TranscriptionJob.created_at.desc()).limit(limit).all()
        except SQLAlchemyError as exc:
            raise StoreUnavailable(detail=str(exc)) from exc
