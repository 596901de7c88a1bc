"""
Category and Account Catalogs

User-editable label lists. Each catalog is stored as one JSON array of
{id, label, icon} under its own key and falls back to built-in defaults
when nothing usable is stored.

Transactions reference catalog entries by label (older data) and by id
(newer data). `resolve()` prefers the id so renaming an entry keeps its
history attached.
"""

import json
from typing import Optional

import structlog
from pydantic import ValidationError as SchemaError

from finance_tracker.models.catalog import DEFAULT_ACCOUNTS, DEFAULT_CATEGORIES, LabelItem
from finance_tracker.models.transaction import Transaction
from finance_tracker.services.storage import KeyValueStoreInterface, StorageError
from finance_tracker.store.ids import IdAllocator
from finance_tracker.validation import ValidationError, validate_label


logger = structlog.get_logger(__name__)


class LabelCatalog:
    """
    A persisted list of LabelItems.

    Changes are written immediately; write failures are raised as
    StorageError so the caller can tell the user the change was not saved.
    """

    def __init__(
        self,
        storage: KeyValueStoreInterface,
        storage_key: str,
        defaults: list[LabelItem],
        kind: str,
        id_allocator: Optional[IdAllocator] = None,
    ):
        self._storage = storage
        self._key = storage_key
        self._defaults = [item.model_copy() for item in defaults]
        self._kind = kind
        self._ids = id_allocator or IdAllocator()
        self._items: list[LabelItem] = list(self._defaults)

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def items(self) -> list[LabelItem]:
        return list(self._items)

    async def load(self) -> list[LabelItem]:
        """Load stored items; defaults on a missing, unreadable or invalid list."""
        try:
            raw = await self._storage.get(self._key)
        except StorageError as e:
            logger.error("catalog_load_failed", kind=self._kind, error=str(e))
            self._items = list(self._defaults)
            return self.items

        if not raw:
            self._items = list(self._defaults)
            return self.items

        try:
            records = json.loads(raw)
            self._items = [LabelItem.model_validate(record) for record in records]
        except (ValueError, TypeError, SchemaError) as e:
            logger.error("catalog_data_invalid", kind=self._kind, error=str(e))
            self._items = list(self._defaults)

        return self.items

    def get(self, item_id: int) -> Optional[LabelItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def find_by_label(self, label: str) -> Optional[LabelItem]:
        lowered = label.strip().lower()
        for item in self._items:
            if item.label.lower() == lowered:
                return item
        return None

    def search(self, text: str) -> list[LabelItem]:
        """Items whose label contains `text`, case-insensitive."""
        needle = text.strip().lower()
        return [item for item in self._items if needle in item.label.lower()]

    def resolve(self, transaction: Transaction) -> Optional[LabelItem]:
        """The catalog entry a transaction refers to, by id then by label."""
        item_id = (
            transaction.category_id if self._kind == "category" else transaction.account_id
        )
        if item_id is not None:
            item = self.get(item_id)
            if item is not None:
                return item

        label = transaction.category if self._kind == "category" else transaction.account
        return self.find_by_label(label) if label else None

    async def add(self, label: str, icon: str = "ellipse-outline") -> LabelItem:
        """
        Add a new entry.

        Raises:
            ValidationError: Blank or duplicate label
            StorageError: The list could not be saved
        """
        cleaned = validate_label(label, self._items, kind=self._kind)
        item = LabelItem(
            id=self._ids.allocate({i.id for i in self._items}),
            label=cleaned,
            icon=icon,
        )
        await self._save([*self._items, item])
        return item

    async def rename(
        self,
        item_id: int,
        label: str,
        icon: Optional[str] = None,
    ) -> LabelItem:
        """
        Change an entry's label (and optionally its icon).

        Raises:
            ValidationError: Unknown id, blank or duplicate label
            StorageError: The list could not be saved
        """
        current = self.get(item_id)
        if current is None:
            raise ValidationError.single(
                "id", "not_found", f"This {self._kind} no longer exists."
            )

        cleaned = validate_label(label, self._items, exclude_id=item_id, kind=self._kind)
        updated = current.model_copy(update={
            "label": cleaned,
            "icon": icon if icon is not None else current.icon,
        })
        await self._save([updated if i.id == item_id else i for i in self._items])
        return updated

    async def delete(self, item_id: int) -> bool:
        """Remove an entry. Returns False if it did not exist."""
        remaining = [i for i in self._items if i.id != item_id]
        if len(remaining) == len(self._items):
            return False
        await self._save(remaining)
        return True

    async def _save(self, items: list[LabelItem]) -> None:
        payload = json.dumps([i.model_dump() for i in items], ensure_ascii=False)
        try:
            await self._storage.set(self._key, payload)
        except StorageError as e:
            logger.error("catalog_save_failed", kind=self._kind, error=str(e))
            raise
        self._items = items


def category_catalog(
    storage: KeyValueStoreInterface,
    storage_key: str = "@categories",
    id_allocator: Optional[IdAllocator] = None,
) -> LabelCatalog:
    return LabelCatalog(storage, storage_key, DEFAULT_CATEGORIES, "category", id_allocator)


def account_catalog(
    storage: KeyValueStoreInterface,
    storage_key: str = "@accounts",
    id_allocator: Optional[IdAllocator] = None,
) -> LabelCatalog:
    return LabelCatalog(storage, storage_key, DEFAULT_ACCOUNTS, "account", id_allocator)
