"""
app/api/routers/itunes_match.py

iTunes matching endpoints.
"""

from __future__ import annotations

from dataclasses import asdict
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.dependencies import error_response
from app.schemas.itunes_match import (
    BulkMatchResponse,
    MatchAttemptListResponse,
    MatchAttemptResponse,
    MatchBulkRequest,
    MatchOutcomeResponse,
    MatchSingleRequest,
)
from app.services.itunes_match_service import ItunesMatchService, get_itunes_match_service
from db.repositories.errors import AppNotFoundError, StoreError
from db.session import get_db

router = APIRouter(prefix="/itunes-match", tags=["itunes-match"])


@router.post("/single", response_model=MatchOutcomeResponse)
def match_single(
    payload: MatchSingleRequest,
    db: Session = Depends(get_db),
    match_service: ItunesMatchService = Depends(get_itunes_match_service),
) -> MatchOutcomeResponse | JSONResponse:
    """
    Match one catalog app and auto-apply a confident result.
    """

    try:
        outcome = match_service.match_single(db=db, app_id=payload.app_id, auto_apply=payload.auto_apply)
    except AppNotFoundError as exc:
        return error_response(status.HTTP_404_NOT_FOUND, str(exc))
    except StoreError as exc:
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    return MatchOutcomeResponse.model_validate(asdict(outcome))


@router.post("", response_model=BulkMatchResponse)
def match_bulk(
    payload: MatchBulkRequest,
    db: Session = Depends(get_db),
    match_service: ItunesMatchService = Depends(get_itunes_match_service),
) -> BulkMatchResponse:
    """
    Match catalog apps that still lack store identifiers.
    """

    summary = match_service.match_bulk(
        db=db,
        app_ids=payload.app_ids,
        auto_apply=payload.auto_apply,
        limit=payload.limit,
    )
    return BulkMatchResponse.model_validate(asdict(summary))


@router.get("/attempts", response_model=MatchAttemptListResponse)
def list_attempts(
    app_id: UUID | None = Query(default=None),
    attempt_status: str | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    match_service: ItunesMatchService = Depends(get_itunes_match_service),
) -> MatchAttemptListResponse:
    attempts = match_service.list_attempts(db=db, app_id=app_id, status=attempt_status, limit=limit)
    return MatchAttemptListResponse(
        attempts=[MatchAttemptResponse.model_validate(attempt, from_attributes=True) for attempt in attempts]
    )
