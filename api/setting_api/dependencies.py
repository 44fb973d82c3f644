"""Shared FastAPI dependencies."""

from fastapi import Request

from .config import Settings, get_settings


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with, falling back to globals."""
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()
