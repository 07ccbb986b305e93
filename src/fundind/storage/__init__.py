"""Document store adapters.

- `InMemoryDocumentStore`: dict-backed, for tests and dry runs
- `SQLiteDocumentStore`: durable local store on aiosqlite
"""

from fundind.storage.memory import InMemoryDocumentStore
from fundind.storage.sqlite import SQLiteDocumentStore

__all__ = ["InMemoryDocumentStore", "SQLiteDocumentStore"]
