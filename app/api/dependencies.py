"""
app/api/dependencies.py

Shared FastAPI dependencies and response helpers.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

from fastapi import HTTPException, Query, status
from fastapi.responses import JSONResponse

from app.scraping.config import get_catalog_scraping_settings


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    """
    JSON failure body: ``{"success": false, "error": ..., **extra}``.
    """

    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, **extra},
    )


def validate_category_url(category_url: str) -> str:
    """
    Accept only http(s) URLs on the configured listing site.
    """

    candidate = category_url.strip()
    parts = urlsplit(candidate)
    host = (parts.hostname or "").lower()
    suffix = get_catalog_scraping_settings().allowed_host_suffix
    if parts.scheme not in {"http", "https"} or not (host == suffix or host.endswith("." + suffix)):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"category_url must be a {suffix} URL.",
        )
    return candidate


def get_category_url(
    category_url: str = Query(..., min_length=1, description="Listing category URL"),
) -> str:
    return validate_category_url(category_url)
