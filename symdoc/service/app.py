"""FastAPI application entrypoint for symdoc service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict

try:  # pragma: no cover - optional dependency
    from fastapi import Depends, FastAPI
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel

    _FASTAPI_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - service mode optional
    FastAPI = None  # type: ignore[assignment]
    Depends = None  # type: ignore[assignment]
    JSONResponse = None  # type: ignore[assignment]
    BaseModel = object  # type: ignore[assignment]
    _FASTAPI_AVAILABLE = False

from ..dump import result_to_payload
from ..errors import SymdocError
from ..extractor import ExtractionResult, Extractor
from ..models import Language, SourceUnit


class ExtractRequest(BaseModel):
    language: Language
    text: str
    origin: str = "<request>"


class HealthResponse(BaseModel):
    status: str


def _default_extractor() -> Extractor:
    return Extractor()


def create_app(
    extractor_factory: Callable[[], Extractor] = _default_extractor,
) -> FastAPI:
    """Create the FastAPI application exposing symbol extraction."""

    if not _FASTAPI_AVAILABLE:  # pragma: no cover - validated via unit tests
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install symdoc[service]`."
        )

    app = FastAPI(title="Symdoc Service", version="1.0.0")

    async def get_extractor() -> Extractor:
        return extractor_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/extract")
    async def extract_source(
        payload: ExtractRequest,
        extractor: Extractor = Depends(get_extractor),
    ) -> Dict[str, Any]:
        unit = SourceUnit(language=payload.language, text=payload.text, origin=payload.origin)

        def _run_extract() -> ExtractionResult:
            return extractor.extract(unit)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run_extract)
        return result_to_payload(result)

    @app.exception_handler(SymdocError)
    async def symdoc_error_handler(_: Any, exc: SymdocError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    if not _FASTAPI_AVAILABLE:
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install symdoc[service]`."
        )

    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install uvicorn`."
        ) from exc

    app = create_app()
    uvicorn.run(app, host=host, port=port)
