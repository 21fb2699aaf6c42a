# app/api/v1/deps.py
"""
FastAPI dependencies for the v1 API layer.

Sign-in happens in front of this service; requests arrive with the active
workspace in ``X-Company-Id`` (and optionally the user in ``X-User-Id``).
Every query is scoped to that company.
"""

from __future__ import annotations

import logging

from fastapi import Header, HTTPException, status

from app.domain.services.formatting import DisplaySettings

logger = logging.getLogger("api.v1.deps")


async def get_company_id(x_company_id: str | None = Header(None)) -> str:
    """Return the tenant id from ``X-Company-Id`` or fail with HTTP 400."""
    if not x_company_id or not x_company_id.strip():
        logger.warning("Request without X-Company-Id header")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing X-Company-Id header",
        )
    return x_company_id.strip()


async def get_user_id(x_user_id: str | None = Header(None)) -> str | None:
    return x_user_id.strip() if x_user_id else None


async def get_display_settings(
    x_currency: str | None = Header(None),
    x_date_format: str | None = Header(None),
) -> DisplaySettings:
    """Per-request display preferences, defaulting to the app settings."""
    defaults = DisplaySettings.from_app_settings()
    return DisplaySettings(
        currency=(x_currency or defaults.currency).upper(),
        date_format=x_date_format or defaults.date_format,
    )
