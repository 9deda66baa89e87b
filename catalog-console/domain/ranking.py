"""
Domain: Exposure-order rankings within a single bucket.

A ranking maps item id -> rank. It is canonical iff, restricted to one
bucket of N items, it is a bijection onto {1, ..., N}. Ranks are meaningful
only inside their bucket.

Contract excerpts implemented here:
- `repair_ranking` turns arbitrary persisted ranks (missing, zero, negative,
  out of range, duplicated) into a canonical ranking. Items holding a valid,
  non-conflicting rank keep it. Every item sharing a duplicated rank is
  reassigned, not only the later ones. Reassigned items take the lowest free
  ranks in their input order.
- `shift_rank` moves one item to a new rank and cascades the shift over
  exactly the items between the old and new rank, keeping the ranking
  canonical after every edit.

Every function here is pure: inputs are never mutated and a new mapping is
returned.
"""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Mapping, Sequence

from .catalog_item import CatalogItem

Ranking = Dict[int, int]


def repair_ranking(items: Sequence[CatalogItem]) -> Ranking:
    """
    Produce a canonical ranking for one bucket.

    `items` must be in the relative order established by `group_by_bucket`;
    that order decides which reassigned item gets the lower rank.

    Total over any input: the result is always a permutation of 1..N.
    """

    size = len(items)
    provisional: Ranking = {item.id: item.rank if item.rank is not None else 0 for item in items}
    counts = Counter(provisional.values())

    def is_problematic(rank: int) -> bool:
        return not 1 <= rank <= size or counts[rank] > 1

    result: Ranking = {}
    used: set[int] = set()
    problematic: List[int] = []
    for item in items:
        rank = provisional[item.id]
        if is_problematic(rank):
            problematic.append(item.id)
        else:
            result[item.id] = rank
            used.add(rank)

    next_rank = 1
    for item_id in problematic:
        while next_rank in used:
            next_rank += 1
        result[item_id] = next_rank
        used.add(next_rank)
        next_rank += 1

    # Keys in input order.
    return {item.id: result[item.id] for item in items}


def is_canonical(ranking: Mapping[int, int], bucket_item_ids: Iterable[int]) -> bool:
    """True iff the ranking restricted to the bucket is a bijection onto 1..N."""

    ids = list(bucket_item_ids)
    if any(item_id not in ranking for item_id in ids):
        return False
    return sorted(ranking[item_id] for item_id in ids) == list(range(1, len(ids) + 1))


def stored_ranks_are_canonical(items: Sequence[CatalogItem]) -> bool:
    """True iff the persisted ranks of a bucket already form a permutation of 1..N."""

    ranking = {item.id: item.rank for item in items if item.rank is not None}
    return is_canonical(ranking, [item.id for item in items])


def require_valid_rank_request(
    ranking: Mapping[int, int],
    bucket_item_ids: Sequence[int],
    target_id: int,
    new_rank: int,
) -> None:
    """
    Validate a rank change request before calling `shift_rank`.

    This is the caller's guard; `shift_rank` itself assumes a valid request.
    """

    if target_id not in bucket_item_ids or target_id not in ranking:
        raise ValueError(f"Item {target_id} is not part of this bucket")
    if isinstance(new_rank, bool) or not isinstance(new_rank, int):
        raise ValueError("new_rank must be an integer")
    if not 1 <= new_rank <= len(bucket_item_ids):
        raise ValueError(f"new_rank must be between 1 and {len(bucket_item_ids)}, got {new_rank}")


def shift_rank(
    ranking: Mapping[int, int],
    bucket_item_ids: Sequence[int],
    target_id: int,
    new_rank: int,
) -> Ranking:
    """
    Move `target_id` to `new_rank`, cascading over the items in between.

    Preconditions (see `require_valid_rank_request`):
    - `ranking` is canonical over `bucket_item_ids`;
    - `1 <= new_rank <= len(bucket_item_ids)`.

    Moving earlier (old > new): items ranked in [new, old - 1] move down by one.
    Moving later (old < new): items ranked in (old, new] move up by one.
    Items outside that window keep their rank.
    """

    updated: Ranking = dict(ranking)
    old_rank = ranking[target_id]
    if new_rank == old_rank:
        return updated

    for item_id in bucket_item_ids:
        if item_id == target_id:
            continue
        rank = ranking[item_id]
        if old_rank > new_rank and new_rank <= rank < old_rank:
            updated[item_id] = rank + 1
        elif old_rank < new_rank and old_rank < rank <= new_rank:
            updated[item_id] = rank - 1

    updated[target_id] = new_rank
    return updated


def ordered_ids(ranking: Mapping[int, int]) -> List[int]:
    """Item ids in rank order: the payload persisted when an order is saved."""

    return sorted(ranking, key=lambda item_id: ranking[item_id])


def sort_by_ranking(items: Iterable[CatalogItem], ranking: Mapping[int, int]) -> List[CatalogItem]:
    return sorted(items, key=lambda item: ranking[item.id])
