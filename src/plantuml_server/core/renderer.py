"""
PlantUML engine adapter.

Each render starts a fresh engine session: the PlantUML jar is run in pipe
mode, the diagram source is written to its stdin and the image is read back
from stdout into memory. The Graphviz location comes from the injected
``LayoutToolSettings`` and is passed to the engine through the child
environment.
"""

import enum
import logging
import os
import re
import subprocess
import threading
from dataclasses import dataclass
from typing import List, Optional

from ..utils.config import Config, find_layout_tool_error
from .layout_locator import LayoutToolSettings


logger = logging.getLogger(__name__)

START_MARK = re.compile(r"^\s*@start\w+", re.MULTILINE)
END_MARK = re.compile(r"^\s*@end\w+", re.MULTILINE)


class OutputFormat(str, enum.Enum):
    """Image formats supported by the adapter."""
    SVG = "svg"
    PNG = "png"


class RenderError(Exception):
    """The engine failed to render a diagram."""

    def __init__(self, fmt: OutputFormat, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.format = fmt
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return f"Failed to generate {self.format.value.upper()} diagram: {self.message}"


@dataclass(frozen=True)
class RenderResult:
    """Output of a single render."""
    data: bytes
    format: OutputFormat
    description: Optional[str] = None

    @property
    def text(self) -> str:
        return self.data.decode("utf-8")


class PlantUMLRenderer:
    """Runs the PlantUML jar for one diagram at a time."""

    def __init__(
        self,
        settings: LayoutToolSettings,
        jar_path: str = "plantuml.jar",
        java_executable: str = "java",
    ):
        self.settings = settings
        self.jar_path = jar_path
        self.java_executable = java_executable
        self._version: Optional[str] = None
        self._version_lock = threading.Lock()

    def _base_command(self) -> List[str]:
        return [self.java_executable, "-Djava.awt.headless=true", "-jar", self.jar_path]

    def _environment(self) -> dict:
        env = dict(os.environ)
        env.update(self.settings.engine_environment())
        return env

    def _layout_tool_usable(self) -> bool:
        location = self.settings.location
        return location is not None and location.executable

    def _run_engine(self, source: str, fmt: OutputFormat) -> subprocess.CompletedProcess:
        cmd = self._base_command() + ["-pipe", f"-t{fmt.value}", "-charset", "UTF-8"]

        try:
            result = subprocess.run(
                cmd,
                input=source.encode("utf-8"),
                capture_output=True,
                env=self._environment(),
            )
        except OSError as e:
            raise RenderError(fmt, f"could not start PlantUML engine: {e}", e) from e

        stderr = result.stderr.decode("utf-8", errors="replace").strip()

        if result.returncode != 0:
            raise RenderError(fmt, stderr or f"PlantUML exited with status {result.returncode}")

        if not result.stdout:
            raise RenderError(fmt, stderr or "PlantUML produced no output")

        dot_error = find_layout_tool_error(stderr)
        if not dot_error and fmt is OutputFormat.SVG:
            dot_error = find_layout_tool_error(result.stdout.decode("utf-8", errors="replace"))
        if dot_error:
            raise RenderError(fmt, dot_error)

        return result

    def render(self, source: str, fmt: OutputFormat) -> RenderResult:
        """
        Render ``source`` in the requested format.

        Args:
            source: PlantUML markup
            fmt: Output format

        Returns:
            RenderResult with the raw image bytes

        Raises:
            RenderError: if the engine cannot be started or reports a failure
        """
        # Pipe mode wraps marker-less input in @startuml/@enduml; a diagram block is required
        if not (START_MARK.search(source) and END_MARK.search(source)):
            raise RenderError(fmt, "No @startuml/@enduml found")

        result = self._run_engine(source, fmt)

        if fmt is OutputFormat.PNG and not self._layout_tool_usable():
            # The Graphviz error image is only readable as SVG
            try:
                self._run_engine(source, OutputFormat.SVG)
            except RenderError as e:
                raise RenderError(fmt, e.message, e.cause) from e

        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        return RenderResult(data=result.stdout, format=fmt, description=stderr or None)

    def engine_version(self) -> str:
        """First line of the engine's ``-version`` output, memoised on success."""
        if self._version is not None:
            return self._version

        with self._version_lock:
            if self._version is None:
                try:
                    result = subprocess.run(
                        self._base_command() + ["-version"],
                        capture_output=True,
                        text=True,
                        env=self._environment(),
                    )
                except OSError as e:
                    logger.debug("Could not query PlantUML version: %s", e)
                    return Config.UNKNOWN_VERSION

                lines = (result.stdout or "").strip().splitlines()
                if result.returncode != 0 or not lines:
                    return Config.UNKNOWN_VERSION
                self._version = lines[0].strip()

        return self._version
