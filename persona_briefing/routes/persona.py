import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from persona_briefing.core.config import settings
from persona_briefing.core.errors import classify_error
from persona_briefing.middleware.request_id import get_request_id
from persona_briefing.models.schemas import GeneratePersonaRequest, PipelineResult
from persona_briefing.synthesis.pipeline import PersonaPipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/persona", tags=["persona"])


def get_pipeline(request: Request) -> PersonaPipeline:
    """The process-wide pipeline built during app startup."""
    return request.app.state.pipeline


@router.get("/sources")
async def list_sources(pipeline: PersonaPipeline = Depends(get_pipeline)):
    """List available profile sources."""
    return pipeline.sources.list_sources()


@router.post("/generate", response_model=PipelineResult)
async def generate_persona(
    body: GeneratePersonaRequest,
    request: Request,
    pipeline: PersonaPipeline = Depends(get_pipeline),
):
    """Run the full pipeline and return the persona with its audio briefing."""
    request_id = get_request_id(request)
    source_name, identifier = body.source
    logger.info("[%s] Received persona generation request (source=%s)", request_id, source_name)
    logger.debug(
        "[%s] Source length: %d characters, brief length: %d",
        request_id, len(identifier), len(body.design_brief),
    )

    try:
        result = await pipeline.run(source_name, identifier, body.design_brief)
    except Exception as exc:
        logger.error("[%s] Persona generation failed: %s", request_id, exc, exc_info=True)
        classification = classify_error(exc, include_internal_details=settings.is_development)
        error_body = classification.to_response(request_id)
        return JSONResponse(
            status_code=classification.status_code,
            content=error_body.model_dump(by_alias=True, exclude_none=True),
        )

    logger.info(
        "[%s] Persona generation successful in %dms", request_id, result.processing_time
    )
    return result
