"""Response models for the API."""

import time
from typing import List, Optional, Dict, Any
from pydantic import BaseModel
from datetime import datetime


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class SvgResponse(BaseModel):
    """Rendered SVG diagram."""
    svg: str
    method: str
    license: str
    performance: Optional[str] = None
    timestamp: int


class RenderErrorResponse(BaseModel):
    """Render failure reported by the engine."""
    error: str
    method: str
    timestamp: Optional[int] = None


class ValidationResponse(BaseModel):
    """Syntax validation outcome."""
    valid: bool
    text: str
    timestamp: int


class GraphvizStats(BaseModel):
    available: bool
    path: str


class StatsResponse(BaseModel):
    version: str
    license: str
    commercial: bool
    threadPool: str
    graphviz: GraphvizStats


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    message: str
    license: str
    commercial: bool
    timestamp: int
    plantuml: str  # "available" or "error"
    stats: StatsResponse
    diagnostics: Optional[Dict[str, Any]] = None


class InfoResponse(BaseModel):
    """Static service descriptor."""
    server: str
    version: str
    license: str
    plantuml_version: str
    plantuml_license: str
    commercial_use: bool
    performance: str
    features: List[str]


class ErrorResponse(BaseModel):
    """Error response model."""
    success: bool = False
    error: Dict[str, Any]
    timestamp: datetime
