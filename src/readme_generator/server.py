"""FastAPI application exposing README generation over HTTP."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from loguru import logger
from starlette.background import BackgroundTask

from readme_generator import __version__
from readme_generator.config import Settings
from readme_generator.core import ReadmeGenerator
from readme_generator.errors import ReadmeGeneratorError
from readme_generator.schemas import (
    ContentResponse,
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
    ImproveRequest,
    RegenerateSectionRequest,
    ScoreRequest,
    ScoreResponse,
)

EVENT_STREAM = "text/event-stream"


def wants_stream(payload: GenerateRequest, request: Request) -> bool:
    """An explicit ``stream`` flag wins; otherwise honour the Accept header."""
    if payload.stream is not None:
        return payload.stream
    return EVENT_STREAM in request.headers.get("accept", "")


def _validation_message(exc: RequestValidationError) -> str:
    for error in exc.errors():
        message = str(error.get("msg", ""))
        location = error.get("loc", ())
        if message.startswith("Value error, "):
            return message[len("Value error, "):]
        if error.get("type") == "missing" and location:
            return f"{location[-1]} is required"
        if message:
            return message
    return "Invalid request body"


def create_app(
    settings: Settings | None = None,
    generator_factory: Callable[[Settings], ReadmeGenerator] = ReadmeGenerator,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Runtime settings. Defaults to ``Settings.from_env()``.
        generator_factory: Builds the generator shared by all requests.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.generator = generator_factory(settings)
        logger.info("README generator service started")
        try:
            yield
        finally:
            await app.state.generator.aclose()

    app = FastAPI(title="README Generator", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def generator(request: Request) -> ReadmeGenerator:
        return request.app.state.generator

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(payload: GenerateRequest, request: Request) -> Any:
        if wants_stream(payload, request):
            stream = await generator(request).open_stream(payload.repo_url, payload.options)
            return StreamingResponse(
                stream.frames(),
                media_type=EVENT_STREAM,
                headers={"Cache-Control": "no-cache"},
                background=BackgroundTask(stream.aclose),
            )

        result = await generator(request).generate(payload.repo_url, payload.options)
        return GenerateResponse(readme=result.readme, repo_info=result.repo_info)

    @app.post("/regenerate-section", response_model=ContentResponse)
    async def regenerate_section(payload: RegenerateSectionRequest, request: Request) -> ContentResponse:
        content = await generator(request).regenerate_section(
            payload.section,
            payload.section_content,
            payload.repo_info,
            payload.instruction,
        )
        return ContentResponse(content=content)

    @app.post("/score", response_model=ScoreResponse)
    async def score(payload: ScoreRequest, request: Request) -> ScoreResponse:
        result = await generator(request).score(payload.readme, payload.repo_name)
        return ScoreResponse(**result.model_dump())

    @app.post("/improve", response_model=ContentResponse)
    async def improve(payload: ImproveRequest, request: Request) -> ContentResponse:
        content = await generator(request).improve(payload.readme)
        return ContentResponse(content=content)

    @app.exception_handler(ReadmeGeneratorError)
    async def readme_error_handler(request: Request, exc: ReadmeGeneratorError) -> JSONResponse:
        logger.error(f"Error in {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=ErrorResponse(error=exc.message).model_dump())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content=ErrorResponse(error=_validation_message(exc)).model_dump())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unexpected error in {request.url.path}: {exc}")
        return JSONResponse(status_code=500, content=ErrorResponse(error="Internal server error").model_dump())

    return app


def run_server(host: str = "0.0.0.0", port: int = 8000, settings: Settings | None = None) -> None:
    """Serve the app with uvicorn."""
    import uvicorn

    app = create_app(settings)
    logger.info(f"Starting README generator on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level=(settings.log_level.lower() if settings else "info"))
