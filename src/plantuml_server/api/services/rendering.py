"""Rendering service that exposes the PlantUML engine to the API."""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from ...core.layout_locator import LayoutToolSettings
from ...core.renderer import OutputFormat, PlantUMLRenderer, RenderError, RenderResult
from ...utils.config import Config


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation render."""
    valid: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class ServiceStats:
    """Snapshot of service information, recomputed on every call."""
    plantuml_version: str
    license: str
    commercial_use: bool
    thread_pool_info: str
    graphviz_path: Optional[str]
    graphviz_available: bool


class RenderingService:
    """Synchronous, asynchronous and diagnostic rendering operations."""

    def __init__(
        self,
        renderer: PlantUMLRenderer,
        settings: LayoutToolSettings,
        pool_size: int = Config.DEFAULT_POOL_SIZE,
    ):
        self.renderer = renderer
        self.settings = settings
        self.pool_size = pool_size
        self._executor = ThreadPoolExecutor(max_workers=pool_size, thread_name_prefix="plantuml-render")
        self._active = 0
        self._submitted = 0
        self._counter_lock = threading.Lock()

    def _render(self, source: str, fmt: OutputFormat) -> RenderResult:
        logger.debug("Generating %s diagram, text length: %d", fmt.value.upper(), len(source))
        start_time = time.perf_counter()

        try:
            result = self.renderer.render(source, fmt)
        except RenderError:
            logger.error("Failed to generate %s diagram", fmt.value.upper(), exc_info=True)
            raise
        except Exception as e:
            logger.error("Failed to generate %s diagram", fmt.value.upper(), exc_info=True)
            raise RenderError(fmt, str(e), e) from e

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info("%s generated successfully in %.0fms, size: %d bytes, description: %s",
                    fmt.value.upper(), duration_ms, len(result.data),
                    result.description or "No description available")
        return result

    def render_svg(self, source: str) -> str:
        """Render ``source`` to SVG text. Raises RenderError on failure."""
        return self._render(source, OutputFormat.SVG).text

    def render_png(self, source: str) -> bytes:
        """Render ``source`` to PNG bytes. Raises RenderError on failure."""
        return self._render(source, OutputFormat.PNG).data

    def _tracked_render_svg(self, source: str) -> str:
        with self._counter_lock:
            self._active += 1
        try:
            return self.render_svg(source)
        finally:
            with self._counter_lock:
                self._active -= 1

    def render_svg_async(self, source: str) -> "Future[str]":
        """
        Submit an SVG render to the worker pool.

        Tasks start in submission order as workers free up; completion order
        is not guaranteed. A failed render rejects the future with RenderError.
        """
        with self._counter_lock:
            self._submitted += 1
        return self._executor.submit(self._tracked_render_svg, source)

    def check(self, source: str) -> ValidationResult:
        """Render ``source`` to SVG and discard the output."""
        try:
            self.renderer.render(source, OutputFormat.SVG)
        except Exception as e:
            logger.debug("Syntax validation failed: %s", e)
            return ValidationResult(valid=False, reason=str(e))
        return ValidationResult(valid=True)

    def validate(self, source: str) -> bool:
        return self.check(source).valid

    def health_check(self) -> bool:
        """Render a trivial diagram to prove the render path works."""
        try:
            self.render_svg(Config.SEQUENCE_PROBE)
            return True
        except Exception:
            logger.error("Health check failed", exc_info=True)
            return False

    def plantuml_version(self) -> str:
        try:
            return self.renderer.engine_version()
        except Exception:
            return Config.UNKNOWN_VERSION

    def thread_pool_info(self) -> str:
        with self._counter_lock:
            active, submitted = self._active, self._submitted
        return f"FixedThreadPool[size = {self.pool_size}, active = {active}, submitted tasks = {submitted}]"

    def get_stats(self) -> ServiceStats:
        location = self.settings.location
        return ServiceStats(
            plantuml_version=self.plantuml_version(),
            license=Config.LICENSE,
            commercial_use=Config.COMMERCIAL_USE,
            thread_pool_info=self.thread_pool_info(),
            graphviz_path=str(location.path) if location else None,
            graphviz_available=self.settings.available,
        )

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting async work; in-flight renders run to completion."""
        self._executor.shutdown(wait=wait)
