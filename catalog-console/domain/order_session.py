"""
Domain: Order edit session for one bucket.

An operator opens a bucket, renumbers items one at a time and either saves
or abandons the session. Each edit returns a new session value; earlier
rankings are kept so edits can be undone and redone. Nothing here persists
anything: the caller saves `ordered_ids()` as a whole, or drops the session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .catalog_item import CatalogItem
from .ranking import (
    Ranking,
    ordered_ids,
    repair_ranking,
    require_valid_rank_request,
    shift_rank,
    sort_by_ranking,
)
from .sell_bucket import BucketKey


@dataclass(frozen=True, slots=True)
class RankEditSession:
    """
    Immutable state of an order edit session.

    Invariant: `ranking` is canonical over `items` at every step.
    """

    bucket: BucketKey
    items: Tuple[CatalogItem, ...]
    ranking: Ranking
    initial_ranking: Ranking
    _undo: Tuple[Ranking, ...] = field(default=(), repr=False)
    _redo: Tuple[Ranking, ...] = field(default=(), repr=False)

    @staticmethod
    def open(bucket: BucketKey, items: Sequence[CatalogItem]) -> "RankEditSession":
        """
        Start a session from a bucket's items in grouper order.

        Persisted ranks are repaired here, not before.
        """

        ranking = repair_ranking(items)
        return RankEditSession(
            bucket=bucket,
            items=tuple(items),
            ranking=ranking,
            initial_ranking=dict(ranking),
        )

    @property
    def size(self) -> int:
        return len(self.items)

    @property
    def item_ids(self) -> List[int]:
        return [item.id for item in self.items]

    @property
    def is_dirty(self) -> bool:
        """True iff the current ranking differs from the one the session opened with."""

        return self.ranking != self.initial_ranking

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def rank_of(self, item_id: int) -> int:
        try:
            return self.ranking[item_id]
        except KeyError:
            raise ValueError(f"Item {item_id} is not part of this bucket") from None

    def change_rank(self, item_id: int, new_rank: int) -> "RankEditSession":
        """
        Move one item to `new_rank`.

        Raises ValueError for items outside the bucket or ranks outside 1..N.
        Choosing the current rank returns the same session.
        """

        ids = self.item_ids
        require_valid_rank_request(self.ranking, ids, item_id, new_rank)
        if self.ranking[item_id] == new_rank:
            return self

        return RankEditSession(
            bucket=self.bucket,
            items=self.items,
            ranking=shift_rank(self.ranking, ids, item_id, new_rank),
            initial_ranking=self.initial_ranking,
            _undo=self._undo + (self.ranking,),
            _redo=(),
        )

    def undo(self) -> "RankEditSession":
        if not self._undo:
            raise ValueError("Nothing to undo")
        return RankEditSession(
            bucket=self.bucket,
            items=self.items,
            ranking=self._undo[-1],
            initial_ranking=self.initial_ranking,
            _undo=self._undo[:-1],
            _redo=self._redo + (self.ranking,),
        )

    def redo(self) -> "RankEditSession":
        if not self._redo:
            raise ValueError("Nothing to redo")
        return RankEditSession(
            bucket=self.bucket,
            items=self.items,
            ranking=self._redo[-1],
            initial_ranking=self.initial_ranking,
            _undo=self._undo + (self.ranking,),
            _redo=self._redo[:-1],
        )

    def sorted_items(self) -> List[CatalogItem]:
        """Items re-derived in the current rank order, for rendering."""

        return sort_by_ranking(self.items, self.ranking)

    def ranked_items(self) -> List[CatalogItem]:
        """Copies of `sorted_items()` carrying the session's current rank."""

        return [item.with_rank(self.ranking[item.id]) for item in self.sorted_items()]

    def ordered_ids(self) -> List[int]:
        """Full ordered id list to persist on save (rank = position + 1)."""

        return ordered_ids(self.ranking)

    def find_item(self, item_id: int) -> Optional[CatalogItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None
