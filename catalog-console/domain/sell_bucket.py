"""
Domain: Sell-date buckets and bucket classification.

Contract excerpts implemented here:
- An item without a sell date is UNASSIGNED.
- Cutoffs are computed from the civil date of "now" in the business zone
  (UTC+9), once per classification batch:
    cutoff_7  = today - 7 days
    cutoff_30 = today - 30 days
- Buckets are defined strictly as:
  - AGED_30:    sell_date <  cutoff_30
  - AGED_7:     cutoff_30 <= sell_date < cutoff_7
  - EXACT_DATE: sell_date >= cutoff_7 (one bucket per distinct date)
- Display order: exact dates newest first, then AGED_7, then AGED_30,
  then UNASSIGNED.

Bucket membership is never persisted; it is recomputed whenever the item set
or "now" changes. "now" is always passed explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional

from .time import civil_date

AGED_7_DAYS = 7
AGED_30_DAYS = 30


class BucketKind(str, Enum):
    EXACT_DATE = "EXACT_DATE"
    AGED_7 = "AGED_7"
    AGED_30 = "AGED_30"
    UNASSIGNED = "UNASSIGNED"


class SellStatus(str, Enum):
    """Sell status of an exact-date bucket relative to the civil today."""

    UPCOMING = "UPCOMING"
    TODAY = "TODAY"
    ENDED = "ENDED"


# Position of each kind in the bucket display order.
_KIND_ORDER = {
    BucketKind.EXACT_DATE: 0,
    BucketKind.AGED_7: 1,
    BucketKind.AGED_30: 2,
    BucketKind.UNASSIGNED: 3,
}


@dataclass(frozen=True, slots=True)
class BucketKey:
    """
    Tagged bucket identifier.

    `sell_date` is set iff `kind` is EXACT_DATE.
    """

    kind: BucketKind
    sell_date: Optional[date] = None

    def __post_init__(self) -> None:
        if self.kind is BucketKind.EXACT_DATE and self.sell_date is None:
            raise ValueError("EXACT_DATE bucket requires a sell_date")
        if self.kind is not BucketKind.EXACT_DATE and self.sell_date is not None:
            raise ValueError(f"{self.kind.value} bucket must not carry a sell_date")

    @staticmethod
    def exact(sell_date: date) -> "BucketKey":
        return BucketKey(BucketKind.EXACT_DATE, sell_date)

    @property
    def is_exact_date(self) -> bool:
        return self.kind is BucketKind.EXACT_DATE

    def sort_key(self) -> tuple[int, int]:
        """
        Ordering key for the bucket list.

        Exact dates sort by descending date (future and most recent first),
        followed by AGED_7, AGED_30 and finally UNASSIGNED.
        """

        if self.sell_date is not None:
            return (_KIND_ORDER[self.kind], -self.sell_date.toordinal())
        return (_KIND_ORDER[self.kind], 0)

    def to_token(self) -> str:
        """Stable string form used in URLs and payloads."""

        if self.sell_date is not None:
            return self.sell_date.isoformat()
        return self.kind.value

    @staticmethod
    def from_token(token: str) -> "BucketKey":
        """
        Parse a token produced by `to_token`.

        Raises ValueError for anything that is neither a known kind nor an
        ISO date.
        """

        text = token.strip()
        if text in (BucketKind.AGED_7.value, BucketKind.AGED_30.value, BucketKind.UNASSIGNED.value):
            return BucketKey(BucketKind(text))
        try:
            return BucketKey.exact(date.fromisoformat(text))
        except ValueError:
            raise ValueError(f"Unknown bucket key: {token!r}") from None

    def status(self, today: date) -> Optional[SellStatus]:
        """Sell status for exact-date buckets; None for aged and unassigned buckets."""

        if self.sell_date is None:
            return None
        if self.sell_date > today:
            return SellStatus.UPCOMING
        if self.sell_date == today:
            return SellStatus.TODAY
        return SellStatus.ENDED


AGED_7 = BucketKey(BucketKind.AGED_7)
AGED_30 = BucketKey(BucketKind.AGED_30)
UNASSIGNED = BucketKey(BucketKind.UNASSIGNED)


@dataclass(frozen=True, slots=True)
class BucketCutoffs:
    """
    Cutoff dates for one classification batch.

    Build once per batch with `for_now` so every item in the batch is
    classified against the same civil date.
    """

    today: date
    aged_7: date
    aged_30: date

    @staticmethod
    def for_now(now: datetime) -> "BucketCutoffs":
        today = civil_date(now)
        return BucketCutoffs(
            today=today,
            aged_7=today - timedelta(days=AGED_7_DAYS),
            aged_30=today - timedelta(days=AGED_30_DAYS),
        )

    def classify(self, sell_date: Optional[date]) -> BucketKey:
        if sell_date is None:
            return UNASSIGNED
        if sell_date < self.aged_30:
            return AGED_30
        if sell_date < self.aged_7:
            return AGED_7
        return BucketKey.exact(sell_date)


def classify(sell_date: Optional[date], now: datetime) -> BucketKey:
    """Classify a single sell date. Prefer `BucketCutoffs` for batches."""

    return BucketCutoffs.for_now(now).classify(sell_date)
