"""
app/api/routers/duplicates.py

Duplicate detection and cleanup endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.schemas.catalog import DuplicateGroupResponse, DuplicateListResponse, DuplicateRemovalResponse
from app.services.duplicate_resolver_service import DuplicateResolverService, get_duplicate_resolver_service
from db.session import get_db

router = APIRouter(prefix="/catalog/duplicates", tags=["catalog-duplicates"])


@router.get("", response_model=DuplicateListResponse)
def find_duplicates(
    db: Session = Depends(get_db),
    resolver: DuplicateResolverService = Depends(get_duplicate_resolver_service),
) -> DuplicateListResponse:
    groups = resolver.find_duplicates(db=db)
    return DuplicateListResponse(
        groups=[
            DuplicateGroupResponse(
                signature=group.signature,
                name=group.name,
                developer=group.developer,
                count=group.count,
                keep_id=group.keep_id,
                remove_ids=group.remove_ids,
            )
            for group in groups
        ],
        total_groups=len(groups),
        total_duplicates=sum(len(group.remove_ids) for group in groups),
    )


@router.post("/remove", response_model=DuplicateRemovalResponse)
def remove_duplicates(
    db: Session = Depends(get_db),
    resolver: DuplicateResolverService = Depends(get_duplicate_resolver_service),
) -> DuplicateRemovalResponse:
    """
    Keep the earliest record of each duplicate group and delete the rest.
    """

    summary = resolver.remove_duplicates(db=db)
    return DuplicateRemovalResponse(
        success=not summary.errors,
        removed=summary.removed,
        kept=summary.kept,
        errors=summary.errors,
    )
