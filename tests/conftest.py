"""
Test configuration and fixtures
"""
import pytest
from fastapi.testclient import TestClient

from transcriber.config import Settings
from transcriber.db import Base, make_engine, make_session_factory
from transcriber.main import create_app
from transcriber.store import JobStore

SAMPLE_TRANSCRIPT = (
    "Olá a todos, bem-vindos ao canal.\n"
    "\n"
    "Hoje vamos falar sobre Python.\n"
    "Python é uma linguagem muito popular.\n"
)


class FakeProvider:
    """Stands in for the Gemini provider and records every call."""

    def __init__(self, text=SAMPLE_TRANSCRIPT, error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def transcribe(self, video_url, job_id):
        self.calls.append((video_url, job_id))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        google_api_key="test-key",
        poll_interval=0.01,
        poll_timeout=0.2,
    )


@pytest.fixture
def store(settings):
    engine = make_engine(settings)
    Base.metadata.create_all(bind=engine)
    yield JobStore(make_session_factory(engine))
    engine.dispose()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def client(settings, provider):
    app = create_app(settings=settings, provider=provider)
    with TestClient(app) as test_client:
        yield test_client
