"""FastAPI application entrypoint for uiforge service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TypeVar

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..logging import get_logger
from ..models import to_payload
from ..parser import RepositoryParser
from ..writeback import SourceWriter, WriteResult

_LOGGER = get_logger("service")

T = TypeVar("T")


class ParseRequest(BaseModel):
    path: str


class CSSChangeRequest(BaseModel):
    file_path: str
    selector: str
    property: str
    value: str
    media_query: Optional[str] = None


class PropDefaultRequest(BaseModel):
    manifest_path: str
    component_name: str
    prop_name: str
    value: Any = None


class TokenRequest(BaseModel):
    file_path: str
    token_name: str
    value: str


class WriteResponse(BaseModel):
    success: bool
    new_content: Optional[str] = None
    previous_value: Optional[str] = None
    strategy: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


async def _offload(func: Callable[[], T]) -> T:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:  # pragma: no cover - fallback path when not in async context
        return func()
    return await loop.run_in_executor(None, func)


def _require_file(path: str) -> None:
    if not Path(path).expanduser().is_file():
        raise FileNotFoundError(f"File not found: {path}")


def _to_response(result: WriteResult) -> WriteResponse:
    if not result.success:
        raise HTTPException(status_code=404 if result.not_found else 400, detail=result.error)
    return WriteResponse(
        success=True,
        new_content=result.new_content,
        previous_value=result.previous_value,
        strategy=result.strategy,
    )


def create_app(
    parser_factory: Callable[[], RepositoryParser] = RepositoryParser,
    writer_factory: Callable[[], SourceWriter] = SourceWriter,
) -> FastAPI:
    """Create the FastAPI application exposing parse and writeback operations."""

    app = FastAPI(title="UIForge Service", version="0.1.0")
    # One parser keeps the type cache warm; one writer serializes edits per file.
    repository_parser = parser_factory()
    writer = writer_factory()

    async def get_parser() -> RepositoryParser:
        return repository_parser

    async def get_writer() -> SourceWriter:
        return writer

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/parse")
    async def parse_repo(
        payload: ParseRequest,
        parser: RepositoryParser = Depends(get_parser),
    ) -> Dict[str, Any]:
        model = await _offload(lambda: parser.parse(payload.path))
        return to_payload(model)

    @app.post("/css", response_model=WriteResponse)
    async def write_css(
        payload: CSSChangeRequest,
        source_writer: SourceWriter = Depends(get_writer),
    ) -> WriteResponse:
        _require_file(payload.file_path)
        result = await _offload(
            lambda: source_writer.write_css_change(
                payload.file_path,
                payload.selector,
                payload.property,
                payload.value,
                payload.media_query,
            )
        )
        return _to_response(result)

    @app.post("/prop-default", response_model=WriteResponse)
    async def write_prop_default(
        payload: PropDefaultRequest,
        source_writer: SourceWriter = Depends(get_writer),
    ) -> WriteResponse:
        _require_file(payload.manifest_path)
        result = await _offload(
            lambda: source_writer.write_prop_default(
                payload.manifest_path, payload.component_name, payload.prop_name, payload.value
            )
        )
        return _to_response(result)

    @app.post("/token", response_model=WriteResponse)
    async def write_token(
        payload: TokenRequest,
        source_writer: SourceWriter = Depends(get_writer),
    ) -> WriteResponse:
        _require_file(payload.file_path)
        result = await _offload(
            lambda: source_writer.write_token_value(
                payload.file_path, payload.token_name, payload.value
            )
        )
        return _to_response(result)

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(
        _: Any, exc: NotADirectoryError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(
        _: Any, exc: RuntimeError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    _LOGGER.info("Starting uiforge service on %s:%d", host, port)
    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run_service"]
