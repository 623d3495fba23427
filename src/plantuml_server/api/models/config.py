"""Configuration models for the API."""

import os
from pydantic import BaseModel, Field

from ...utils.config import Config


DEFAULT_CORS_ORIGINS = "http://localhost:*,http://127.0.0.1:*"


class APIConfig(BaseModel):
    """API configuration settings."""

    # Server settings
    host: str = Field(default="0.0.0.0", description="Host to bind to")
    port: int = Field(default=8080, description="Port to bind to")

    # Engine
    plantuml_jar: str = Field(default="plantuml.jar", description="Path to the PlantUML jar")
    java_executable: str = Field(default="java", description="Java runtime used to run the jar")
    graphviz_path: str = Field(default="", description="Path to the Graphviz dot executable (optional)")

    # Processing limits
    worker_pool_size: int = Field(default=Config.DEFAULT_POOL_SIZE, ge=1,
                                  description="Workers for asynchronous rendering")

    # Security
    cors_origins: list = Field(default=DEFAULT_CORS_ORIGINS.split(","), description="CORS allowed origin patterns")

    log_level: str = Field(default="INFO", description="Root log level")

    @classmethod
    def from_env(cls) -> "APIConfig":
        """Create config from environment variables."""
        return cls(
            host=os.getenv("API_HOST", "0.0.0.0"),
            port=int(os.getenv("API_PORT", "8080")),
            plantuml_jar=os.getenv("PLANTUML_JAR", "plantuml.jar"),
            java_executable=os.getenv("JAVA_EXECUTABLE", "java"),
            graphviz_path=os.getenv("PLANTUML_GRAPHVIZ_PATH", os.getenv("GRAPHVIZ_DOT", "")),
            worker_pool_size=int(os.getenv("RENDER_WORKERS", str(Config.DEFAULT_POOL_SIZE))),
            cors_origins=os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(","),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
