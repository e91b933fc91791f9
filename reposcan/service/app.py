"""FastAPI application entrypoint for reposcan service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..models import AnalysisReport
from ..orchestrator import Orchestrator
from ..renderer import ReportRenderer
from ..walker import FatalInputError


class AnalyzeRequest(BaseModel):
    path: str
    include_text: bool = False
    include_dependency_map: bool = False


class AnalyzeResponse(BaseModel):
    report: Dict[str, Any]
    text: Optional[str] = None
    dependency_map: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    # External tools are resolved per process; the service keeps to the walker.
    return Orchestrator(use_external_tools=False)


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing repository analysis."""

    app = FastAPI(title="reposcan", version="0.1.0")
    renderer = ReportRenderer()

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze", response_model=AnalyzeResponse)
    async def analyze(
        payload: AnalyzeRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> AnalyzeResponse:
        def _run() -> AnalysisReport:
            return orchestrator.run(payload.path)

        loop = asyncio.get_running_loop()
        report = await loop.run_in_executor(None, _run)

        return AnalyzeResponse(
            report=report.to_dict(),
            text=renderer.render(report) if payload.include_text else None,
            dependency_map=(
                renderer.render_dependency_map(report) if payload.include_dependency_map else None
            ),
        )

    @app.exception_handler(FatalInputError)
    async def fatal_input_handler(_: Any, exc: FatalInputError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)
