"""Health check and service info endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends

from ... import __version__
from ...core.self_test import SelfTestReport
from ...utils.config import Config
from ..dependencies import get_rendering_service, get_self_test_report
from ..models.responses import GraphvizStats, HealthResponse, InfoResponse, StatsResponse, now_ms
from ..services.rendering import RenderingService

router = APIRouter(prefix="/api/plantuml")

FEATURES = [
    "High-performance diagram generation",
    "Commercial-safe MIT license",
    "Thread-safe concurrent processing",
    "Async generation support",
    "Syntax validation",
    "Multiple output formats (SVG, PNG)",
]


@router.get("/health", response_model=HealthResponse)
def health_check(
    service: RenderingService = Depends(get_rendering_service),
    report: Optional[SelfTestReport] = Depends(get_self_test_report)
):
    """Health check that renders a probe diagram, not just a liveness ping."""
    is_healthy = service.health_check()
    stats = service.get_stats()

    return HealthResponse(
        status="OK",
        message="PlantUML Server - Commercial Safe",
        license=Config.LICENSE_SHORT,
        commercial=Config.COMMERCIAL_USE,
        timestamp=now_ms(),
        plantuml="available" if is_healthy else "error",
        stats=StatsResponse(
            version=stats.plantuml_version,
            license=stats.license,
            commercial=stats.commercial_use,
            threadPool=stats.thread_pool_info,
            graphviz=GraphvizStats(
                available=stats.graphviz_available,
                path=stats.graphviz_path or Config.NOT_CONFIGURED
            )
        ),
        diagnostics=report.to_dict() if report else None
    )


@router.get("/info", response_model=InfoResponse)
def info(service: RenderingService = Depends(get_rendering_service)):
    """Static capability and version descriptor."""
    return InfoResponse(
        server="PlantUML Server",
        version=__version__,
        license=Config.LICENSE_SHORT,
        plantuml_version=service.plantuml_version(),
        plantuml_license=Config.LICENSE_SHORT,
        commercial_use=Config.COMMERCIAL_USE,
        performance="Optimized PlantUML engine integration",
        features=FEATURES
    )
