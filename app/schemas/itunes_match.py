"""
app/schemas/itunes_match.py

Request and response schemas for iTunes matching.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class MatchSingleRequest(BaseModel):
    app_id: UUID
    auto_apply: bool = True


class MatchBulkRequest(BaseModel):
    app_ids: list[UUID] | None = None
    auto_apply: bool = True
    limit: int | None = Field(default=None, ge=1)


class MatchOutcomeResponse(BaseModel):
    success: bool = True
    error: str | None = None
    app_id: str
    app_name: str
    found: bool
    confidence: float = Field(..., ge=0.0, le=1.0)
    mas_id: str | None = None
    mas_url: str | None = None
    auto_applied: bool = False
    attempt_status: str


class BulkMatchResponse(BaseModel):
    success: bool = True
    total: int = Field(..., ge=0)
    found: int = Field(..., ge=0)
    auto_applied: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    results: list[MatchOutcomeResponse] = Field(default_factory=list)


class MatchAttemptResponse(BaseModel):
    id: UUID
    app_id: UUID
    search_term: str
    developer_name: str | None = None
    status: str
    confidence_score: float
    mas_id: str | None = None
    mas_url: str | None = None
    error_message: str | None = None
    itunes_response: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime


class MatchAttemptListResponse(BaseModel):
    success: bool = True
    attempts: list[MatchAttemptResponse] = Field(default_factory=list)
