from __future__ import annotations

from pathlib import Path

from loadsmoke.storage.duckdb_store import Storage


def default_storage() -> Storage:
    return Storage(Path(".loadsmoke/loadsmoke.duckdb"))


__all__ = ["Storage", "default_storage"]
