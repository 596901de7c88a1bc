"""
Transaction Store

Owns the authoritative, ordered list of transactions for the running
session.

GUARANTEES:
- Mutations update memory first; a read right after add/update/remove
  always sees the change
- Every effective mutation writes the WHOLE list back to storage
- Writes land in the order the mutations happened
- A failed write is logged and announced to subscribers, never raised;
  memory stays the source of truth until the next successful write

Subscribers are plain callables receiving a StoreEvent after each change.
"""

import asyncio
import json
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

import structlog
from pydantic import ValidationError as SchemaError

from finance_tracker.models.events import StoreEvent, StoreEventBuilder
from finance_tracker.models.transaction import Transaction
from finance_tracker.services.storage import KeyValueStoreInterface, StorageError
from finance_tracker.store.ids import IdAllocator
from finance_tracker.store.recurrence import (
    DEFAULT_HORIZON_MONTHS,
    generate_occurrences,
)


logger = structlog.get_logger(__name__)

Listener = Callable[[StoreEvent], None]


class TransactionStore:
    """
    In-memory transaction list backed by a key-value store.

    Usage:
        store = TransactionStore(storage)
        await store.load()
        store.add(transaction)
        await store.flush()
    """

    def __init__(
        self,
        storage: KeyValueStoreInterface,
        storage_key: str = "@transactions",
        clock: Optional[Callable[[], datetime]] = None,
        id_allocator: Optional[IdAllocator] = None,
        horizon_months: int = DEFAULT_HORIZON_MONTHS,
    ):
        self._storage = storage
        self._key = storage_key
        self._clock = clock or datetime.now
        self._ids = id_allocator or IdAllocator()
        self._horizon_months = horizon_months

        self._transactions: list[Transaction] = []
        self._listeners: list[Listener] = []
        self._pending: set[asyncio.Task] = set()
        self._write_lock = asyncio.Lock()
        self._last_persist_error: Optional[str] = None

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    @property
    def transactions(self) -> list[Transaction]:
        """Snapshot of all transactions in insertion order."""
        return list(self._transactions)

    def __len__(self) -> int:
        return len(self._transactions)

    def get(self, transaction_id: int) -> Optional[Transaction]:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def occurrences_of(self, origin_id: int) -> list[Transaction]:
        """Generated occurrences linked to an origin."""
        return [t for t in self._transactions if t.original_id == origin_id]

    def next_id(self) -> int:
        """Allocate an id not used by any stored transaction."""
        return self._ids.allocate({t.id for t in self._transactions})

    @property
    def last_persist_error(self) -> Optional[str]:
        """Error of the most recent write, None once a write succeeds."""
        return self._last_persist_error

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> list[Transaction]:
        """
        Load the stored list, replacing whatever is in memory.

        Read failures and unreadable data fall back to an empty list.
        Individual records that do not match the schema are skipped.
        """
        try:
            raw = await self._storage.get(self._key)
            records = json.loads(raw) if raw else []
            if not isinstance(records, list):
                raise ValueError(f"expected a list, got {type(records).__name__}")
        except (StorageError, ValueError) as e:
            logger.error("transactions_load_failed", key=self._key, error=str(e))
            self._transactions = []
            self._notify(StoreEventBuilder.load_failed(str(e)))
            return []

        loaded = []
        skipped = 0
        for record in records:
            try:
                loaded.append(Transaction.model_validate(record))
            except SchemaError as e:
                skipped += 1
                logger.warning(
                    "transaction_record_skipped",
                    record_id=record.get("id") if isinstance(record, dict) else None,
                    error=str(e),
                )

        self._transactions = loaded
        self._notify(StoreEventBuilder.loaded(len(loaded), skipped))
        return self.transactions

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def generate_occurrences(self, candidate: Transaction) -> list[Transaction]:
        """Future occurrences of `candidate`, with ids unused by the store."""
        taken = {t.id for t in self._transactions}
        taken.add(candidate.id)

        def next_id() -> int:
            new_id = self._ids.allocate(taken)
            taken.add(new_id)
            return new_id

        return generate_occurrences(
            candidate,
            now=self._clock(),
            next_id=next_id,
            horizon_months=self._horizon_months,
        )

    def add(self, candidate: Transaction) -> None:
        """
        Append a transaction and its generated occurrences as one batch.

        The candidate's id is used as given; collisions are not checked.
        """
        occurrences = self.generate_occurrences(candidate)
        self._transactions = [*self._transactions, candidate, *occurrences]

        self._schedule_persist()
        self._notify(StoreEventBuilder.transaction_added(
            candidate.id, [o.id for o in occurrences]
        ))

    def remove(self, transaction_id: int) -> None:
        """
        Remove a transaction and everything generated from it.

        Removing a generated occurrence removes only that occurrence.
        Unknown ids are ignored.
        """
        kept = []
        removed_ids = []
        for transaction in self._transactions:
            if transaction.id == transaction_id or transaction.original_id == transaction_id:
                removed_ids.append(transaction.id)
            else:
                kept.append(transaction)

        if not removed_ids:
            logger.debug("transaction_remove_noop", transaction_id=transaction_id)
            return

        self._transactions = kept
        self._schedule_persist()
        self._notify(StoreEventBuilder.transaction_removed(transaction_id, removed_ids))

    def update(self, transaction_id: int, patch: Mapping[str, Any]) -> None:
        """
        Merge `patch` into one transaction.

        Keys may be field names or stored names ("categoryId"). Nothing
        cascades to occurrences and recurrence is never re-run, even when
        `date` or `repeating` change. Unknown ids are ignored.

        Raises:
            KeyError: If the patch names an unknown field
            ValueError: If the patch tries to change the id or the origin
                link, or a value does not fit the schema; nothing is changed
        """
        fields = {Transaction.field_name(key): value for key, value in patch.items()}
        if "id" in fields and fields["id"] != transaction_id:
            raise ValueError("Transaction id cannot be changed")
        if "original_id" in fields:
            raise ValueError("Occurrence links cannot be changed")

        for index, current in enumerate(self._transactions):
            if current.id == transaction_id:
                break
        else:
            logger.debug("transaction_update_noop", transaction_id=transaction_id)
            return

        try:
            updated = Transaction.model_validate({**current.model_dump(), **fields})
        except SchemaError as e:
            raise ValueError(f"Invalid update for transaction {transaction_id}: {e}") from e

        transactions = list(self._transactions)
        transactions[index] = updated
        self._transactions = transactions

        self._schedule_persist()
        self._notify(StoreEventBuilder.transaction_updated(transaction_id, sorted(fields)))

    def clear(self) -> None:
        """Drop every transaction and persist the empty list."""
        count = len(self._transactions)
        self._transactions = []
        self._schedule_persist()
        self._notify(StoreEventBuilder.cleared(count))

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                # A broken listener must not undo a completed mutation
                logger.exception(
                    "store_listener_failed",
                    event_type=event.event_type.value,
                )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _serialize(self) -> str:
        return json.dumps(
            [t.to_record() for t in self._transactions],
            ensure_ascii=False,
        )

    def _schedule_persist(self) -> None:
        """
        Write a snapshot of the current list without blocking the caller.

        Inside an event loop the write runs as a task; outside of one it
        runs to completion before returning.
        """
        payload = self._serialize()
        count = len(self._transactions)

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self._persist(payload, count))
            return

        task = loop.create_task(self._persist(payload, count))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _persist(self, payload: str, count: int) -> None:
        async with self._write_lock:
            try:
                await self._storage.set(self._key, payload)
            except StorageError as e:
                self._last_persist_error = str(e)
                logger.error(
                    "transactions_persist_failed",
                    key=self._key,
                    count=count,
                    error=str(e),
                )
                self._notify(StoreEventBuilder.persist_failed(str(e), count))
                return

            self._last_persist_error = None
            logger.debug("transactions_persisted", key=self._key, count=count)

    async def flush(self) -> None:
        """Wait until every scheduled write has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
