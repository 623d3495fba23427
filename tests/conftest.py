"""
Shared test fixtures.

Provides: a fake PlantUML renderer that mimics the engine's behaviour for
well-formed, malformed and Graphviz-dependent diagrams, plus service and
HTTP client fixtures built on top of it.
"""

import threading
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from plantuml_server.api.dependencies import get_rendering_service
from plantuml_server.api.main import create_app
from plantuml_server.api.models.config import APIConfig
from plantuml_server.api.services.rendering import RenderingService
from plantuml_server.core.layout_locator import LayoutToolLocation, LayoutToolSettings
from plantuml_server.core.renderer import OutputFormat, RenderError, RenderResult


SEQUENCE_SOURCE = "@startuml\nAlice -> Bob: Test\n@enduml"
STATE_SOURCE = "@startuml\n[*] --> State1\nState1 --> State2 : Event\nState2 --> [*]\n@enduml"
MALFORMED_SOURCE = "Alice -> Bob: Test"

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
DOT_MISSING_MESSAGE = (
    "Dot Executable: /opt/local/bin/dot File does not exist Cannot find Graphviz. "
    "You should try @startuml testdot @enduml"
)


class FakeRenderer:
    """Deterministic stand-in for PlantUMLRenderer."""

    def __init__(self, settings: LayoutToolSettings, version: str = "PlantUML version 1.2024.7 (fake)"):
        self.settings = settings
        self.version = version
        self.calls = []
        self.threads = set()
        self._lock = threading.Lock()

    def render(self, source: str, fmt: OutputFormat) -> RenderResult:
        with self._lock:
            self.calls.append((source, fmt))
            self.threads.add(threading.current_thread().name)

        if "@startuml" not in source or "@enduml" not in source:
            raise RenderError(fmt, "No @startuml/@enduml found")
        if "[*]" in source and self.settings.location is None:
            raise RenderError(fmt, DOT_MISSING_MESSAGE)

        body = "".join(
            f"<text>{line}</text>" for line in source.splitlines()[1:-1]
        )
        if fmt is OutputFormat.SVG:
            data = f"<svg xmlns=\"http://www.w3.org/2000/svg\">{body}</svg>".encode("utf-8")
        else:
            data = PNG_SIGNATURE + body.encode("utf-8")
        return RenderResult(data=data, format=fmt, description="(fake diagram)")

    def engine_version(self) -> str:
        return self.version


@pytest.fixture
def settings():
    """Settings with no Graphviz published."""
    return LayoutToolSettings()


@pytest.fixture
def dot_file(tmp_path: Path) -> Path:
    """An executable file standing in for Graphviz dot."""
    dot = tmp_path / "graphviz" / "bin" / "dot"
    dot.parent.mkdir(parents=True)
    dot.write_text("#!/bin/sh\nexit 0\n")
    dot.chmod(0o755)
    return dot


@pytest.fixture
def settings_with_dot(dot_file: Path):
    return LayoutToolSettings(LayoutToolLocation(path=dot_file, bin_dir=dot_file.parent))


@pytest.fixture
def fake_renderer(settings):
    return FakeRenderer(settings)


@pytest.fixture
def service(fake_renderer, settings):
    svc = RenderingService(fake_renderer, settings, pool_size=4)
    yield svc
    svc.shutdown()


@pytest.fixture
def service_with_dot(settings_with_dot):
    svc = RenderingService(FakeRenderer(settings_with_dot), settings_with_dot, pool_size=4)
    yield svc
    svc.shutdown()


@pytest.fixture
def client(service):
    """HTTP client wired to the fake-backed service; startup is not run."""
    app = create_app(APIConfig())
    app.dependency_overrides[get_rendering_service] = lambda: service
    return TestClient(app)
