"""
Graphviz discovery for the PlantUML engine.

At startup the locator probes an ordered list of candidate paths for the
``dot`` executable and publishes the first one that exists into a
write-once ``LayoutToolSettings`` holder. Every component that needs the
location receives that holder explicitly; nothing is written to process-wide
state. A missing Graphviz is not an error: diagrams that do not need it keep
working, the rest fail at render time with the engine's own message.
"""

import logging
import os
import shutil
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..utils.config import Config


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutToolLocation:
    """Resolved location of the Graphviz ``dot`` executable."""
    path: Path
    bin_dir: Path
    executable: bool = True


class LayoutToolSettings:
    """Write-once holder for the layout-tool location."""

    def __init__(self, location: Optional[LayoutToolLocation] = None):
        self._location = location
        self._lock = threading.Lock()

    @property
    def location(self) -> Optional[LayoutToolLocation]:
        return self._location

    @property
    def available(self) -> bool:
        if self._location is None:
            return False
        try:
            return self._location.path.exists()
        except OSError:
            return False

    def publish(self, location: LayoutToolLocation) -> LayoutToolLocation:
        """Publish ``location`` unless one is already set; return the effective value."""
        with self._lock:
            if self._location is None:
                self._location = location
            elif self._location != location:
                logger.debug("Layout tool already configured at %s, ignoring %s",
                             self._location.path, location.path)
            return self._location

    def engine_environment(self) -> dict:
        """Environment variables the engine reads to find Graphviz."""
        if self._location is None:
            return {}
        return {
            "GRAPHVIZ_DOT": str(self._location.path),
            "GRAPHVIZ_BIN": str(self._location.bin_dir),
        }


class LayoutToolLocator:
    """Finds the Graphviz ``dot`` executable and publishes it to the settings holder."""

    def __init__(self, settings: LayoutToolSettings):
        self.settings = settings

    def candidates(self, configured_path: Optional[str] = None) -> List[str]:
        """Ordered candidate list: configured path, conventional defaults, then PATH."""
        paths = [configured_path or ""]
        paths.extend(Config.default_layout_candidates())
        on_path = shutil.which("dot")
        if on_path:
            paths.append(on_path)
        return paths

    def locate(self, configured_path: Optional[str] = None) -> Optional[LayoutToolLocation]:
        """
        Probe candidates in order and publish the first one that exists.

        Args:
            configured_path: Explicitly configured ``dot`` path, may be blank

        Returns:
            The published location, or None if Graphviz was not found
        """
        logger.info("Starting Graphviz configuration...")
        logger.info("Configuration value: %s", configured_path or "<empty>")

        for candidate in self.candidates(configured_path):
            if not candidate or not candidate.strip():
                continue

            dot_path = Path(candidate)
            try:
                logger.debug("Checking path: %s (%s)", candidate, dot_path.absolute())
                if not dot_path.exists():
                    logger.debug("Path does not exist: %s", candidate)
                    continue
                executable = os.access(dot_path, os.X_OK)
                bin_dir = dot_path.absolute().parent
            except OSError as e:
                logger.warning("Could not probe Graphviz candidate %s: %s", candidate, e)
                continue

            location = self.settings.publish(LayoutToolLocation(
                path=dot_path,
                bin_dir=bin_dir,
                executable=executable,
            ))

            logger.info("Graphviz configured at: %s", location.path)
            logger.info("Graphviz bin directory: %s", location.bin_dir)
            if executable:
                logger.info("Graphviz executable confirmed")
            else:
                logger.warning("Graphviz file exists but may not be executable: %s", dot_path)
            return location

        logger.warning("Graphviz not found in any location. State diagrams may not work properly.")
        logger.info("To use state diagrams, please:")
        logger.info("1. Download Graphviz from https://graphviz.org/download/")
        logger.info("2. Extract to project root or set GRAPHVIZ_DOT / PLANTUML_GRAPHVIZ_PATH")
        logger.info("3. Restart the application")
        return None
