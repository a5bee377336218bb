"""
app/api/routers/catalog_scraping.py

Listing category crawl, detail extraction and category progress endpoints.
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.dependencies import error_response, get_category_url, validate_category_url
from app.domain.errors import FetchError, ParseError
from app.schemas.catalog import (
    CategoryProgressResponse,
    CategoryScrapeResponse,
    ResetProgressResponse,
    ScrapeAppRequest,
    ScrapeAppResponse,
    ScrapeCategoryRequest,
    ScrapedAppPayload,
)
from app.services.catalog_scraping_service import CatalogScrapingService, get_catalog_scraping_service
from app.services.category_progress_service import CategoryProgressService, get_category_progress_service
from db.repositories.errors import CatalogRepositoryError
from db.session import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog", tags=["catalog-scraping"])


@router.post("/scrape-category", response_model=CategoryScrapeResponse)
def scrape_category(
    payload: ScrapeCategoryRequest,
    db: Session = Depends(get_db),
    scraping_service: CatalogScrapingService = Depends(get_catalog_scraping_service),
) -> CategoryScrapeResponse | JSONResponse:
    """
    Crawl the next unscraped pages of a category and preview new apps.
    """

    category_url = validate_category_url(payload.category_url)
    try:
        result = scraping_service.scrape_category(
            db=db,
            category_url=category_url,
            page_limit=payload.limit,
            reset=payload.reset,
        )
    except CatalogRepositoryError as exc:
        logger.error("Category scrape failed category_url=%s error=%s", category_url, exc)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    response = CategoryScrapeResponse.model_validate(asdict(result))
    if not result.pagination.processed_pages and result.errors:
        response.success = False
        response.error = result.errors[0]
    return response


@router.post("/scrape-app", response_model=ScrapeAppResponse)
def scrape_app(
    payload: ScrapeAppRequest,
    scraping_service: CatalogScrapingService = Depends(get_catalog_scraping_service),
) -> ScrapeAppResponse | JSONResponse:
    """
    Extract one app detail page without storing it.
    """

    try:
        app = scraping_service.scrape_app(url=payload.url.strip())
    except FetchError as exc:
        return error_response(status.HTTP_502_BAD_GATEWAY, str(exc))
    except ParseError as exc:
        return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, str(exc))

    return ScrapeAppResponse(app=ScrapedAppPayload.model_validate(app.to_dict()))


@router.get("/category-progress", response_model=CategoryProgressResponse)
def get_category_progress(
    category_url: str = Depends(get_category_url),
    db: Session = Depends(get_db),
    progress_service: CategoryProgressService = Depends(get_category_progress_service),
) -> CategoryProgressResponse:
    progress = progress_service.get_category_progress(db=db, category_url=category_url)
    return CategoryProgressResponse.model_validate(asdict(progress))


@router.delete("/category-progress", response_model=ResetProgressResponse)
def reset_category_progress(
    category_url: str = Depends(get_category_url),
    db: Session = Depends(get_db),
    progress_service: CategoryProgressService = Depends(get_category_progress_service),
) -> ResetProgressResponse | JSONResponse:
    try:
        removed = progress_service.reset_category_progress(db=db, category_url=category_url)
    except CatalogRepositoryError as exc:
        db.rollback()
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))
    return ResetProgressResponse(category_url=category_url, removed=removed)
