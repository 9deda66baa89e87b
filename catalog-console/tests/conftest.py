"""
Pytest configuration for catalog console tests.

This file adds the parent directory to the Python path so that tests
can import from the domain, repositories, services and api modules.
"""

import sys
from datetime import date
from pathlib import Path
from typing import Optional

import pytest

# Add the catalog-console directory to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.catalog_item import CatalogItem  # noqa: E402


@pytest.fixture
def make_item():
    """Factory for CatalogItem values with sensible defaults."""

    def _make(item_id: int, rank: Optional[int] = None, sell_date: Optional[date] = None, **kwargs) -> CatalogItem:
        kwargs.setdefault("name", f"item-{item_id}")
        kwargs.setdefault("price", 3000)
        kwargs.setdefault("stock", 10)
        return CatalogItem(id=item_id, rank=rank, sell_date=sell_date, **kwargs)

    return _make
