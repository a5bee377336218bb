"""
app/api/routers/catalog_import.py

Batch import endpoints.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.dependencies import error_response, validate_category_url
from app.domain.errors import ImportTimeoutError
from app.schemas.catalog import BatchImportRequest, BatchImportResponse, ImportStatsResponse
from app.services.catalog_import_service import CatalogImportService, get_catalog_import_service
from db.session import get_db

router = APIRouter(prefix="/catalog/import", tags=["catalog-import"])


@router.post("/batch", response_model=BatchImportResponse)
def import_batch(
    payload: BatchImportRequest,
    db: Session = Depends(get_db),
    import_service: CatalogImportService = Depends(get_catalog_import_service),
) -> BatchImportResponse | JSONResponse:
    """
    Import scraped apps; each item succeeds or fails on its own.
    """

    category_url = validate_category_url(payload.category_url) if payload.category_url else None
    try:
        summary = import_service.import_batch(
            db=db,
            apps=[item.to_domain() for item in payload.apps],
            category_url=category_url,
        )
    except ValueError as exc:
        return error_response(status.HTTP_400_BAD_REQUEST, str(exc))
    except ImportTimeoutError as exc:
        return error_response(
            status.HTTP_504_GATEWAY_TIMEOUT,
            str(exc),
            **BatchImportResponse.model_validate(asdict(exc.partial)).model_dump(exclude={"success", "error"}),
        )

    return BatchImportResponse.model_validate(asdict(summary))


@router.get("/stats", response_model=ImportStatsResponse)
def import_stats(
    db: Session = Depends(get_db),
    import_service: CatalogImportService = Depends(get_catalog_import_service),
) -> ImportStatsResponse:
    stats = import_service.get_import_stats(db=db)
    return ImportStatsResponse.model_validate(asdict(stats))
