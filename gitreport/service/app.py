"""FastAPI application entrypoint for gitreport service mode."""

from __future__ import annotations

from typing import Any, Callable, Optional

from fastapi import Depends, FastAPI, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from ..logging import get_logger
from ..orchestrator import ReportError, ReportOrchestrator, RepositoryNotFoundError

MISSING_REPOSITORY_MESSAGE = "You must provide an owner and repo name."

_LOGGER = get_logger("service")


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> ReportOrchestrator:
    return ReportOrchestrator()


def create_app(
    orchestrator_factory: Callable[[], ReportOrchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application serving activity reports."""

    app = FastAPI(title="gitreport", version="0.1.0")

    async def get_orchestrator() -> ReportOrchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/report", response_class=PlainTextResponse)
    async def report(
        owner: Optional[str] = Query(default=None),
        repo: Optional[str] = Query(default=None),
        username: Optional[str] = Query(default=None),
        token: Optional[str] = Query(default=None),
        days: Optional[int] = Query(default=None, ge=1),
        orchestrator: ReportOrchestrator = Depends(get_orchestrator),
    ) -> PlainTextResponse:
        owner = (owner or "").strip()
        repo = (repo or "").strip()
        if not owner or not repo:
            return PlainTextResponse(MISSING_REPOSITORY_MESSAGE, status_code=400)
        text = await orchestrator.generate(
            owner,
            repo,
            username=(username or "").strip() or None,
            token=token or None,
            days=days,
        )
        return PlainTextResponse(text)

    @app.exception_handler(RepositoryNotFoundError)
    async def not_found_handler(_: Any, exc: RepositoryNotFoundError) -> PlainTextResponse:
        return PlainTextResponse(str(exc), status_code=404)

    @app.exception_handler(ReportError)
    async def report_error_handler(_: Any, exc: ReportError) -> PlainTextResponse:
        return PlainTextResponse(str(exc), status_code=502)

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: Any, exc: RuntimeError) -> PlainTextResponse:
        _LOGGER.error("Report request failed: %s", exc)
        return PlainTextResponse(f"Report generation failed: {exc}", status_code=502)

    return app


def run_service(host: str = "0.0.0.0", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
