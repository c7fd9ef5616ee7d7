"""
HTTP surface of the lending-library email service.

This package provides the FastAPI application that exposes one POST endpoint
per lending-library event plus a health check.
"""

from api.main import app

__all__ = ["app"]
