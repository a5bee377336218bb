"""
app/api/routers package marker.
"""

from app.api.routers.catalog_import import router as catalog_import_router
from app.api.routers.catalog_scraping import router as catalog_scraping_router
from app.api.routers.duplicates import router as duplicates_router
from app.api.routers.itunes_match import router as itunes_match_router

__all__ = [
    "catalog_import_router",
    "catalog_scraping_router",
    "duplicates_router",
    "itunes_match_router",
]
