"""
HTTP service that renders PlantUML diagrams to SVG and PNG.

Rendering is delegated to the PlantUML engine; Graphviz is located at startup
and used for the diagram types that need automatic layout.
"""

__version__ = "1.0.0"
