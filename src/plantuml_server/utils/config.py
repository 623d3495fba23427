"""Engine-level constants for the PlantUML rendering service."""

import re
import sys
from typing import Tuple


class Config:
    """Constants shared by the renderer, the layout-tool locator and the self-test."""

    # Probe diagrams
    SEQUENCE_PROBE = "@startuml\nAlice -> Bob: Test\n@enduml"
    STATE_PROBE = (
        "@startuml\n"
        "[*] --> State1\n"
        "State1 --> State2 : Event\n"
        "State2 --> [*]\n"
        "@enduml"
    )

    # Licensing (static, PlantUML MIT distribution)
    LICENSE = "MIT License"
    LICENSE_SHORT = "MIT"
    LICENSE_LABEL = "MIT - Commercial Safe"
    COMMERCIAL_USE = True

    # Response tags
    METHOD_SYNC = "java-plantuml-library"
    METHOD_ASYNC = "java-plantuml-library-async"

    UNKNOWN_VERSION = "Unknown version"
    NOT_CONFIGURED = "not configured"

    # Worker pool for async rendering
    DEFAULT_POOL_SIZE = 10

    # Text the engine puts into its error image when Graphviz cannot be run
    DOT_EXECUTABLE_MARKER = "dot executable"
    DOT_MISSING_MARKER = "cannot find graphviz"

    @staticmethod
    def dot_name() -> str:
        return "dot.exe" if sys.platform.startswith("win") else "dot"

    @classmethod
    def default_layout_candidates(cls) -> Tuple[str, ...]:
        """Conventional Graphviz locations for the host platform, relative ones first."""
        dot = cls.dot_name()
        relative = (
            f"./graphviz/bin/{dot}",   # Relative to working directory
            f"../graphviz/bin/{dot}",  # Parent directory
            f"graphviz/bin/{dot}",
        )
        if sys.platform.startswith("win"):
            absolute = (
                "C:\\graphviz\\bin\\dot.exe",
                "C:\\Program Files\\Graphviz\\bin\\dot.exe",
            )
        else:
            absolute = (
                "/usr/bin/dot",
                "/usr/local/bin/dot",
                "/opt/homebrew/bin/dot",
                "/opt/local/bin/dot",
            )
        return relative + absolute


def find_layout_tool_error(text: str) -> str:
    """Return the engine's Graphviz error snippet found in ``text``, or an empty string."""
    if not text:
        return ""
    match = re.search(Config.DOT_EXECUTABLE_MARKER, text, re.IGNORECASE)
    if match is None or not re.search(Config.DOT_MISSING_MARKER, text, re.IGNORECASE):
        return ""
    start = match.start()
    # SVG error images wrap each line in <text> elements; keep it short
    snippet = text[start:start + 200]
    end = snippet.find("<")
    return snippet[:end].strip() if end > 0 else snippet.strip()
