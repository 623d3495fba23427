"""Request models for the API."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PlantUMLRequest(BaseModel):
    """Diagram markup submitted for rendering or validation."""
    model_config = ConfigDict(populate_by_name=True)

    plantuml_text: str = Field(..., alias="plantumlText", description="PlantUML markup")

    @field_validator("plantuml_text")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("PlantUML text is required")
        return value
