"""
Match catalog apps against the iTunes lookup API from CLI.
"""

from __future__ import annotations

import argparse
import json
import uuid
from dataclasses import asdict

from app.services.itunes_match_service import get_itunes_match_service
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Match catalog apps against the iTunes lookup API.")
    parser.add_argument(
        "--app-id",
        dest="app_ids",
        action="append",
        type=uuid.UUID,
        default=None,
        help="Catalog app id to match; repeatable. Defaults to apps without store identifiers.",
    )
    parser.add_argument("--limit", dest="limit", type=int, default=None, help="Maximum apps to match.")
    parser.add_argument(
        "--no-auto-apply",
        dest="auto_apply",
        action="store_false",
        help="Record attempts without writing confident matches to the catalog.",
    )
    args = parser.parse_args()

    service = get_itunes_match_service()
    with SessionLocal() as db:
        summary = service.match_bulk(
            db=db,
            app_ids=args.app_ids,
            auto_apply=args.auto_apply,
            limit=args.limit,
        )

    print(json.dumps(asdict(summary), indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
