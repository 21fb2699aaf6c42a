# app/api/v1/__init__.py
"""
Versioned API v1, aggregates all sub-routers under ``/api/v1``.

Usage in ``main.py``::

    from app.api.v1 import v1_router
    app.include_router(v1_router)
"""

from fastapi import APIRouter

from app.api.v1.routes.documents import router as documents_router
from app.api.v1.routes.duties_taxes import router as duties_taxes_router

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(documents_router)
v1_router.include_router(duties_taxes_router)

__all__ = ["v1_router"]
