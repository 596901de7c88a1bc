"""Services: storage backends, currency table, catalogs and preferences."""

from finance_tracker.services.catalog import (
    LabelCatalog,
    account_catalog,
    category_catalog,
)
from finance_tracker.services.preferences import Preferences
from finance_tracker.services.storage import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStoreInterface,
    StorageError,
)

__all__ = [
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStoreInterface",
    "LabelCatalog",
    "Preferences",
    "StorageError",
    "account_catalog",
    "category_catalog",
]
