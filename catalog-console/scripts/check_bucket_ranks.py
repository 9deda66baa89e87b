"""
Check bucket ranks - which sell-date buckets hold non-canonical stored ranks.

Usage:
    python scripts/check_bucket_ranks.py
    python scripts/check_bucket_ranks.py --repair
    python scripts/check_bucket_ranks.py --repair --save
"""

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.grouping import group_by_bucket
from domain.ranking import ordered_ids, repair_ranking, stored_ranks_are_canonical
from domain.time import civil_date
from repositories.catalog_repository import list_catalog_items, update_product_order

logger = logging.getLogger(__name__)


def check_bucket_ranks(repair: bool = False, save: bool = False) -> int:
    """
    Print every bucket with its size and rank status.

    Returns:
        Number of buckets whose stored ranks are not a permutation of 1..N
    """
    now = datetime.now(timezone.utc)
    items = list_catalog_items()
    groups = group_by_bucket(items, now)

    print("=" * 50)
    print(f"BUCKET RANKS (business date {civil_date(now).isoformat()})")
    print("=" * 50)
    print(f"Catalog items: {len(items)}")
    print(f"Buckets:       {len(groups)}")
    print("-" * 50)

    conflicted = 0
    for bucket, bucket_items in groups.items():
        canonical = stored_ranks_are_canonical(bucket_items)
        status = "ok" if canonical else "CONFLICT"
        print(f"{bucket.to_token():<12} {len(bucket_items):>4} items  {status}")

        if canonical:
            continue
        conflicted += 1

        if not repair:
            continue

        ranking = repair_ranking(bucket_items)
        by_id = {item.id: item for item in bucket_items}
        for item_id in ordered_ids(ranking):
            item = by_id[item_id]
            print(f"    {ranking[item_id]:>3}  (stored {item.rank})  #{item.id} {item.name}")

        if save:
            update_product_order(ordered_ids(ranking))
            logger.info("Saved repaired order for bucket %s", bucket.to_token())

    print("-" * 50)
    print(f"Buckets with rank conflicts: {conflicted}")
    return conflicted


def main() -> int:
    parser = argparse.ArgumentParser(description="Report sell-date buckets with invalid stored ranks")
    parser.add_argument("--repair", action="store_true", help="Print the repaired order for conflicting buckets")
    parser.add_argument("--save", action="store_true", help="Persist repaired orders (requires --repair)")
    args = parser.parse_args()

    if args.save and not args.repair:
        parser.error("--save requires --repair")

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    conflicted = check_bucket_ranks(repair=args.repair, save=args.save)
    return 1 if conflicted and not args.save else 0


if __name__ == "__main__":
    sys.exit(main())
