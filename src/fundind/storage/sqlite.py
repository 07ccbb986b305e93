"""SQLite implementation of the IDocumentStore protocol."""

from __future__ import annotations

import functools
import json
import sqlite3
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, ParamSpec, TypeVar

import aiosqlite

from fundind.core.errors import StoreError
from fundind.core.models import Document

SCHEMA = """
-- One row per document; version starts at 1 and grows on every write
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,
    id TEXT NOT NULL,
    version INTEGER NOT NULL,
    data TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (collection, id)
);
"""

P = ParamSpec("P")
R = TypeVar("R")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _wrap_errors(fn: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
    """Surface sqlite failures as StoreError."""

    @functools.wraps(fn)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await fn(*args, **kwargs)
        except sqlite3.Error as e:
            raise StoreError(f"sqlite: {e}") from e

    return wrapper


class SQLiteDocumentStore:
    """SQLite-backed implementation of the IDocumentStore protocol."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self._db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(SCHEMA)
        await self._db.commit()

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    async def __aenter__(self) -> SQLiteDocumentStore:
        await self.initialize()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    @property
    def db(self) -> aiosqlite.Connection:
        assert self._db is not None, "Store not initialized. Call initialize() first."
        return self._db

    # ── Reads ──────────────────────────────────────────────

    @_wrap_errors
    async def get(self, collection: str, doc_id: str) -> Document | None:
        async with self.db.execute(
            "SELECT version, data FROM documents WHERE collection=? AND id=?",
            (collection, doc_id),
        ) as cur:
            row = await cur.fetchone()
            if row is None:
                return None
            return Document(id=doc_id, version=row["version"], data=json.loads(row["data"]))

    @_wrap_errors
    async def list(self, collection: str) -> list[Document]:
        async with self.db.execute(
            "SELECT id, version, data FROM documents WHERE collection=? ORDER BY id",
            (collection,),
        ) as cur:
            rows = await cur.fetchall()
        return [Document(id=r["id"], version=r["version"], data=json.loads(r["data"])) for r in rows]

    @_wrap_errors
    async def collections(self) -> list[str]:
        async with self.db.execute("SELECT DISTINCT collection FROM documents ORDER BY collection") as cur:
            rows = await cur.fetchall()
        return [r["collection"] for r in rows]

    # ── Writes ─────────────────────────────────────────────

    @_wrap_errors
    async def create(self, collection: str, doc_id: str, data: dict[str, Any]) -> bool:
        cur = await self.db.execute(
            "INSERT OR IGNORE INTO documents (collection, id, version, data, updated_at)"
            " VALUES (?, ?, 1, ?, ?)",
            (collection, doc_id, json.dumps(data), _now()),
        )
        await self.db.commit()
        return cur.rowcount == 1

    @_wrap_errors
    async def compare_and_set(
        self,
        collection: str,
        doc_id: str,
        data: dict[str, Any],
        *,
        expected_version: int,
    ) -> bool:
        if expected_version == 0:
            cur = await self.db.execute(
                "INSERT OR IGNORE INTO documents (collection, id, version, data, updated_at)"
                " VALUES (?, ?, 1, ?, ?)",
                (collection, doc_id, json.dumps(data), _now()),
            )
        else:
            cur = await self.db.execute(
                "UPDATE documents SET data=?, version=version+1, updated_at=?"
                " WHERE collection=? AND id=? AND version=?",
                (json.dumps(data), _now(), collection, doc_id, expected_version),
            )
        await self.db.commit()
        return cur.rowcount == 1
