"""
List or remove duplicate catalog apps from CLI.
"""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict

from app.services.duplicate_resolver_service import DuplicateResolverService
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Find and remove duplicate catalog apps.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only list duplicate groups; nothing is deleted.",
    )
    args = parser.parse_args()

    resolver = DuplicateResolverService()
    with SessionLocal() as db:
        if args.dry_run:
            groups = resolver.find_duplicates(db=db)
            payload = [
                {**asdict(group), "keep_id": group.keep_id, "remove_ids": group.remove_ids}
                for group in groups
            ]
            print(json.dumps(payload, indent=2))
            return 0
        summary = resolver.remove_duplicates(db=db)

    print(json.dumps(asdict(summary), indent=2))
    return 0 if not summary.errors else 1


if __name__ == "__main__":
    raise SystemExit(main())
