import logging
import os
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Optional

from dotenv import load_dotenv
from fastapi import (
    APIRouter,
    Depends,
    FastAPI,
    HTTPException,
    Request,
    WebSocket,
    WebSocketDisconnect,
)
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .db import Base, make_engine, make_session_factory
from .errors import NotFound, TranscriptionError
from .events import StatusChannel
from .models import TERMINAL_STATUSES, TranscriptionJob
from .orchestrator import TranscriptionOrchestrator, TranscriptionProvider
from .presentation import (
    EXPORT_FORMATS,
    filter_lines,
    highlight,
    split_lines,
    wait_for_terminal,
)
from .providers import GeminiProvider
from .schemas import (
    JobResponse,
    JobsResponse,
    SubmitRequest,
    SubmitResponse,
    TranscriptLineResponse,
    TranscriptView,
)
from .store import JobStore

load_dotenv()
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

router = APIRouter()


def get_store(request: Request) -> JobStore:
    return request.app.state.store


def get_orchestrator(request: Request) -> TranscriptionOrchestrator:
    return request.app.state.orchestrator


def _read_or_404(store: JobStore, job_id: str) -> TranscriptionJob:
    job = store.read(job_id)
    if not job:
        raise NotFound(job_id=job_id)
    return job


@router.post("/api/transcriptions", response_model=SubmitResponse)
async def submit_transcription(
    body: SubmitRequest,
    orchestrator: TranscriptionOrchestrator = Depends(get_orchestrator),
):
    result = await orchestrator.submit(body.source_url, body.owner_id)
    return SubmitResponse(
        job_id=result.job_id, status=result.status, transcript=result.transcript
    )


@router.get("/api/transcriptions", response_model=JobsResponse)
def list_transcriptions(
    owner_id: Optional[str] = None, store: JobStore = Depends(get_store)
):
    return JobsResponse(jobs=store.list_jobs(owner_id=owner_id))


@router.get("/api/transcriptions/{job_id}", response_model=JobResponse)
def get_transcription(job_id: str, store: JobStore = Depends(get_store)):
    return _read_or_404(store, job_id)


@router.get("/api/transcriptions/{job_id}/wait", response_model=JobResponse)
async def wait_transcription(job_id: str, request: Request):
    settings: Settings = request.app.state.settings
    try:
        return await wait_for_terminal(
            request.app.state.store,
            job_id,
            interval=settings.poll_interval,
            timeout=settings.poll_timeout,
        )
    except TimeoutError as exc:
        logging.warning("wait for job %s timed out: %s", job_id, exc)
        raise HTTPException(
            status_code=504, detail="Timed out waiting for transcription"
        ) from exc


@router.get("/api/transcriptions/{job_id}/view", response_model=TranscriptView)
def view_transcription(
    job_id: str, q: Optional[str] = None, store: JobStore = Depends(get_store)
):
    job = _read_or_404(store, job_id)
    lines = split_lines(job.transcript_text)
    matched = filter_lines(lines, q)
    return TranscriptView(
        id=job.id,
        status=job.status,
        language=job.language,
        query=q,
        total_lines=len(lines),
        lines=[
            TranscriptLineResponse(**asdict(line), highlighted=highlight(line.text, q))
            for line in matched
        ],
        export_formats=EXPORT_FORMATS,
    )


@router.websocket("/api/ws/transcriptions/{job_id}")
async def transcription_ws(websocket: WebSocket, job_id: str):
    await websocket.accept()
    channel: StatusChannel = websocket.app.state.channel
    queue = channel.subscribe(job_id)
    try:
        job = websocket.app.state.store.read(job_id)
        if not job:
            await websocket.send_json({"error": NotFound.public_message})
            await websocket.close()
            return

        # current snapshot: progress merged from the channel, status from the row
        snapshot = channel.snapshot(job_id) or {}
        await websocket.send_json({**snapshot, "stage": job.status, "job_id": job_id})
        if job.is_terminal:
            await websocket.close()
            return

        while True:
            payload = await queue.get()
            await websocket.send_json(payload)
            if payload.get("stage") in TERMINAL_STATUSES:
                await websocket.close()
                return
    except WebSocketDisconnect:
        logging.info("websocket for job %s disconnected", job_id)
    finally:
        channel.unsubscribe(job_id, queue)


@router.get("/")
async def root():
    return {"message": "YouTube transcriber backend running"}


async def transcription_error_handler(request: Request, exc: TranscriptionError):
    if exc.detail:
        logging.error(
            "%s for job %s: %s", type(exc).__name__, exc.job_id, exc.detail
        )
    content = {"error": exc.public_message}
    if exc.job_id:
        content["job_id"] = exc.job_id
    return JSONResponse(status_code=exc.status_code, content=content)


async def unhandled_error_handler(request: Request, exc: Exception):
    logging.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[TranscriptionProvider] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    engine = make_engine(settings)
    store = JobStore(make_session_factory(engine))
    if provider is None:
        provider = GeminiProvider(
            api_key=settings.google_api_key,
            model=settings.gemini_model,
            base_url=settings.gemini_base_url,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Base.metadata.create_all(bind=engine)
        yield
        engine.dispose()

    app = FastAPI(title="YouTube Transcriber", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.channel = StatusChannel()
    app.state.orchestrator = TranscriptionOrchestrator(
        store, provider, settings, notifier=app.state.channel.publish
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(TranscriptionError, transcription_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router)
    return app


app = create_app()
