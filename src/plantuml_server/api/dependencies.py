"""FastAPI dependencies shared by the routers."""

from typing import Optional

from fastapi import HTTPException, Request

from ..core.self_test import SelfTestReport
from .services.rendering import RenderingService


def get_rendering_service(request: Request) -> RenderingService:
    """Get the rendering service created at startup."""
    service = getattr(request.app.state, "rendering_service", None)
    if service is None:
        raise HTTPException(
            status_code=503,
            detail={
                "code": "SERVICE_NOT_READY",
                "message": "Rendering service is not initialized",
                "details": None
            }
        )
    return service


def get_self_test_report(request: Request) -> Optional[SelfTestReport]:
    """Get the startup self-test report, if the self-test has run."""
    return getattr(request.app.state, "self_test_report", None)
