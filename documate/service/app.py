"""FastAPI application entrypoint for documate service mode."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, List, Optional, Set

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..cancellation import CancellationToken
from ..config import DocumateConfig
from ..errors import OperationCancelled, PipelineError
from ..orchestrator import Orchestrator, RunSummary

# nginx's "client closed request"; used for cancelled runs.
STATUS_CANCELLED = 499
# Seconds between client-disconnect checks while a run is in flight.
DISCONNECT_POLL_INTERVAL = 0.5


class RunRequest(BaseModel):
    path: str


class RunResponse(BaseModel):
    project: str
    bucket: str
    extracted: int
    documented: List[str]
    skipped: List[str]
    uploaded: List[str]

    @classmethod
    def from_summary(cls, summary: RunSummary) -> "RunResponse":
        return cls(
            project=summary.project,
            bucket=summary.bucket,
            extracted=summary.extracted,
            documented=summary.documented,
            skipped=summary.skipped,
            uploaded=summary.uploaded,
        )


class ErrorResponse(BaseModel):
    code: str
    detail: str
    type: str
    invalid_field: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


async def await_run(
    future: "asyncio.Future[RunSummary]",
    token: CancellationToken,
    is_disconnected: Callable[[], Awaitable[bool]],
    *,
    poll_interval: float = DISCONNECT_POLL_INTERVAL,
) -> RunSummary:
    """Wait for a run executing in a worker thread, cancelling it if the client goes away.

    The worker observes ``token`` at its next suspension point and raises
    ``OperationCancelled``, which surfaces here once the thread returns.
    """
    try:
        while True:
            done, _ = await asyncio.wait({future}, timeout=poll_interval)
            if done:
                return future.result()
            if not token.cancelled and await is_disconnected():
                token.cancel("client disconnected")
    except asyncio.CancelledError:
        token.cancel("request aborted")
        raise


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing documentation runs."""

    active_runs: Set[CancellationToken] = set()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        for token in list(active_runs):
            token.cancel("service shutting down")

    app = FastAPI(title="Documate Service", version="1.0.0", lifespan=lifespan)
    app.state.active_runs = active_runs

    async def get_orchestrator() -> Orchestrator:
        # Lazy-instantiate per request to keep state predictable.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/runs", response_model=RunResponse)
    async def create_run(
        payload: RunRequest,
        request: Request,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> RunResponse:
        token = CancellationToken()
        active_runs.add(token)
        try:
            loop = asyncio.get_running_loop()
            future = loop.run_in_executor(None, orchestrator.run, payload.path, token)
            summary = await await_run(future, token, request.is_disconnected)
        finally:
            active_runs.discard(token)
        return RunResponse.from_summary(summary)

    @app.exception_handler(PipelineError)
    async def pipeline_error_handler(_: Any, exc: PipelineError) -> JSONResponse:
        status_code = 404 if exc.is_not_found else 502
        body = ErrorResponse(
            code=exc.error.code,
            detail=exc.error.message,
            type=exc.error.type.value,
            invalid_field=exc.error.invalid_field,
        )
        return JSONResponse(status_code=status_code, content=body.model_dump())

    @app.exception_handler(OperationCancelled)
    async def cancelled_handler(_: Any, exc: OperationCancelled) -> JSONResponse:
        return JSONResponse(status_code=STATUS_CANCELLED, content={"detail": str(exc)})

    return app


def run_service(
    config: DocumateConfig | None = None, *, host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    settings = config or DocumateConfig()
    app = create_app(lambda: Orchestrator(settings))
    uvicorn.run(app, host=host, port=port)
