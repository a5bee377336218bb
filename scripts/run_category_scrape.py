"""
Run a listing category crawl from CLI.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict

from app.services.catalog_scraping_service import CatalogScrapingService
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Crawl the next unscraped pages of a listing category.")
    parser.add_argument("category_url", help="Listing category URL.")
    parser.add_argument(
        "--limit",
        dest="limit",
        type=int,
        default=None,
        help="Maximum number of pages to crawl in this run.",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Delete recorded page progress for the category before crawling.",
    )
    args = parser.parse_args()

    service = CatalogScrapingService()
    with SessionLocal() as db:
        result = service.scrape_category(
            db=db,
            category_url=args.category_url,
            page_limit=args.limit,
            reset=args.reset,
        )

    print(json.dumps(asdict(result), indent=2, default=str))
    return 0 if result.pagination.processed_pages or not result.errors else 1


if __name__ == "__main__":
    raise SystemExit(main())
