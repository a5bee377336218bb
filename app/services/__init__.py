"""
app/services package marker.
"""

from app.services.catalog_import_service import CatalogImportService, get_catalog_import_service
from app.services.catalog_scraping_service import CatalogScrapingService, get_catalog_scraping_service
from app.services.category_progress_service import CategoryProgressService, get_category_progress_service
from app.services.duplicate_resolver_service import DuplicateResolverService, get_duplicate_resolver_service
from app.services.itunes_match_service import ItunesMatchService, get_itunes_match_service

__all__ = [
    "CatalogImportService",
    "get_catalog_import_service",
    "CatalogScrapingService",
    "get_catalog_scraping_service",
    "CategoryProgressService",
    "get_category_progress_service",
    "DuplicateResolverService",
    "get_duplicate_resolver_service",
    "ItunesMatchService",
    "get_itunes_match_service",
]
