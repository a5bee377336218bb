"""
Import scraped apps from a JSON file into the catalog.

The file holds either a list of app objects or ``{"apps": [...],
"category_url": "..."}``.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict
from pathlib import Path

from app.domain.errors import ImportTimeoutError
from app.schemas.catalog import BatchImportRequest
from app.services.catalog_import_service import CatalogImportService
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Import scraped apps into the catalog.")
    parser.add_argument("input_path", type=Path, help="JSON file with the apps to import.")
    parser.add_argument(
        "--category-url",
        dest="category_url",
        default=None,
        help="Category whose newest scraped page is marked imported on success.",
    )
    args = parser.parse_args()

    raw = json.loads(args.input_path.read_text(encoding="utf-8"))
    if isinstance(raw, list):
        raw = {"apps": raw}
    if args.category_url:
        raw["category_url"] = args.category_url
    request = BatchImportRequest.model_validate(raw)

    service = CatalogImportService()
    with SessionLocal() as db:
        try:
            summary = service.import_batch(
                db=db,
                apps=[item.to_domain() for item in request.apps],
                category_url=request.category_url,
            )
        except ImportTimeoutError as exc:
            print(json.dumps({"error": str(exc), **asdict(exc.partial)}, indent=2, default=str))
            return 2

    print(json.dumps(asdict(summary), indent=2, default=str))
    return 0 if summary.failed == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
