"""Diagram rendering endpoints."""

import asyncio
import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from ...core.renderer import RenderError
from ...utils.config import Config
from ..dependencies import get_rendering_service
from ..models.requests import PlantUMLRequest
from ..models.responses import RenderErrorResponse, SvgResponse, ValidationResponse, now_ms
from ..services.rendering import RenderingService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/plantuml")


@router.post("/svg", response_model=SvgResponse, responses={500: {"model": RenderErrorResponse}})
def generate_svg(
    request: PlantUMLRequest,
    service: RenderingService = Depends(get_rendering_service)
):
    """Render PlantUML markup to SVG on the request thread."""
    start_time = time.perf_counter()
    logger.info("Generating SVG diagram, text length: %d", len(request.plantuml_text))

    try:
        svg = service.render_svg(request.plantuml_text)
    except RenderError as e:
        return JSONResponse(
            status_code=500,
            content=RenderErrorResponse(
                error=f"Failed to generate diagram: {e}",
                method=Config.METHOD_SYNC,
                timestamp=now_ms()
            ).model_dump()
        )

    duration_ms = int((time.perf_counter() - start_time) * 1000)
    return SvgResponse(
        svg=svg,
        method=Config.METHOD_SYNC,
        license=Config.LICENSE_LABEL,
        performance=f"{duration_ms}ms",
        timestamp=now_ms()
    )


@router.post("/png", response_class=Response, responses={200: {"content": {"image/png": {}}}})
def generate_png(
    request: PlantUMLRequest,
    service: RenderingService = Depends(get_rendering_service)
):
    """Render PlantUML markup to PNG; the body is the raw image."""
    logger.info("Generating PNG diagram, text length: %d", len(request.plantuml_text))

    try:
        png = service.render_png(request.plantuml_text)
    except RenderError:
        return Response(status_code=500)

    # Response sets Content-Length from the body
    return Response(content=png, media_type="image/png")


@router.post("/svg/async", response_model=SvgResponse, responses={500: {"model": RenderErrorResponse}},
             response_model_exclude_none=True)
async def generate_svg_async(
    request: PlantUMLRequest,
    service: RenderingService = Depends(get_rendering_service)
):
    """Render PlantUML markup to SVG on the service worker pool."""
    future = service.render_svg_async(request.plantuml_text)

    try:
        svg = await asyncio.wrap_future(future)
    except RenderError as e:
        logger.error("Async SVG generation failed: %s", e)
        return JSONResponse(
            status_code=500,
            content=RenderErrorResponse(
                error=f"Async generation failed: {e}",
                method=Config.METHOD_ASYNC
            ).model_dump(exclude_none=True)
        )

    return SvgResponse(
        svg=svg,
        method=Config.METHOD_ASYNC,
        license=Config.LICENSE_LABEL,
        timestamp=now_ms()
    )


@router.post("/validate", response_model=ValidationResponse)
def validate_syntax(
    request: PlantUMLRequest,
    service: RenderingService = Depends(get_rendering_service)
):
    """Check whether the engine can render the markup."""
    return ValidationResponse(
        valid=service.validate(request.plantuml_text),
        text=request.plantuml_text,
        timestamp=now_ms()
    )
