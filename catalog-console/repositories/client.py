"""
Supabase client initialization.

This module contains *only* the database connection setup. The client is
created on first use and cached, so modules that never touch the database
(domain code, tests with patched repositories) import without credentials.

Environment variables required:
- SUPABASE_URL: Your Supabase project URL
- SUPABASE_KEY: Your Supabase API key (use a server-side key only on the backend)
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# The dependency is `supabase` (supabase-py). If your editor can't resolve it,
# install it in your environment: `pip install supabase`.
from supabase import Client, create_client  # type: ignore[import-not-found]

# Load environment variables from .env file
# Look for .env in the catalog-console directory
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


def _require_env(name: str, hint: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing environment variable: {name}. {hint}")
    return value


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """Return the shared Supabase client, creating it on first call."""

    url = _require_env("SUPABASE_URL", "Set SUPABASE_URL to your Supabase project URL.")
    key = _require_env("SUPABASE_KEY", "Set SUPABASE_KEY to your Supabase API key.")
    return create_client(url, key)


__all__ = ["get_supabase"]
