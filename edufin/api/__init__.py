"""
API Package

FastAPI application exposing the EduFin flows over HTTP.
"""

from edufin.api.app import create_app

__all__ = ["create_app"]
