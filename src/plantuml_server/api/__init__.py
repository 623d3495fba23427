"""FastAPI application exposing the PlantUML rendering service."""
