"""
Entity Store

Generic indexed persistence over a flat key-value backend: typed CRUD per
entity kind, an insertion-ordered index per kind, cursor pagination and
demo seeding. Backends: SQLite (local) and S3.
"""

from .errors import AlreadyExists, EntityNotFound, InvalidCursor, StorageUnavailable, StoreError
from .kv_adapter import KVAdapter, SQLiteKVAdapter
from .local import get_kv_adapter
from .s3_adapter import S3KVAdapter
from .store import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, EntityKind, IndexedEntityStore, Page

__all__ = [
    'AlreadyExists', 'EntityNotFound', 'InvalidCursor', 'StorageUnavailable', 'StoreError',
    'KVAdapter', 'SQLiteKVAdapter', 'S3KVAdapter', 'get_kv_adapter',
    'EntityKind', 'IndexedEntityStore', 'Page',
    'DEFAULT_PAGE_SIZE', 'MAX_PAGE_SIZE',
]
