import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

from persona_briefing.core.config import settings
from persona_briefing.core.errors import classify_error, validation_failure
from persona_briefing.middleware.request_id import RequestIdMiddleware, get_request_id
from persona_briefing.plugins.clients.firecrawl import FirecrawlClient
from persona_briefing.plugins.loader import load_plugins
from persona_briefing.routes import persona
from persona_briefing.synthesis.analyst import PersonaAnalyst
from persona_briefing.synthesis.pipeline import PersonaPipeline
from persona_briefing.synthesis.speech import ElevenLabsSpeech


def build_pipeline(http_client: httpx.AsyncClient) -> PersonaPipeline:
    """Construct one client per external service and wire them into a pipeline."""
    scraper = FirecrawlClient(
        api_key=settings.firecrawl_api_key,
        client=http_client,
        base_url=settings.firecrawl_base_url,
    )
    analyst = PersonaAnalyst(
        model=settings.default_llm_model,
        api_key=settings.gemini_api_key,
    )
    speech = ElevenLabsSpeech(
        api_key=settings.elevenlabs_api_key,
        voice_id=settings.elevenlabs_voice_id,
        model_id=settings.elevenlabs_model_id,
        output_format=settings.elevenlabs_output_format,
    )
    return PersonaPipeline(
        sources=load_plugins(scraper, http_client),
        analyst=analyst,
        speech=speech,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    for key in settings.missing_api_keys():
        logger.warning("%s not configured", key)

    from persona_briefing.core.llm import setup_langfuse
    setup_langfuse()

    async with httpx.AsyncClient(
        timeout=settings.scrape_timeout_seconds,
        headers={"User-Agent": "PersonaBriefing/1.0"},
    ) as http_client:
        app.state.pipeline = build_pipeline(http_client)
        yield


app = FastAPI(
    title="Persona Briefing API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

app.add_middleware(RequestIdMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
    expose_headers=["X-Request-ID"],
)

app.include_router(persona.router, prefix="/api")


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value").removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "Validation failed"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    request_id = get_request_id(request)
    details = _format_validation_errors(exc)
    logger.info("[%s] Rejected request: %s", request_id, details)
    body = validation_failure(details).to_response(request_id)
    return JSONResponse(status_code=400, content=body.model_dump(by_alias=True, exclude_none=True))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    request_id = get_request_id(request)
    logger.exception("[%s] Unhandled exception: %s", request_id, exc)
    classification = classify_error(exc, include_internal_details=settings.is_development)
    body = classification.to_response(request_id)
    return JSONResponse(
        status_code=classification.status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


@app.get("/api/health")
async def health():
    return {"status": "ok"}
