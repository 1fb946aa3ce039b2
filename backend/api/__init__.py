"""
HouseHelp API package.

Provides the FastAPI application for the HouseHelp marketplace backend.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
