"""
Main Orchestrator for Finance Tracker

This module ties the components together and defines the flows the
screens use:
1. Record (validate amount → assign id → fill defaults → add + recur)
2. Summarise (month → aggregate in the default currency → ratios)
3. Browse (filter and sort the list)
4. Reset (wipe transactions, password and currency)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches the store without passing input validation
- Every store change is logged through the event logger
- Writes are flushed before shutdown
"""

from datetime import date, datetime
from typing import Callable, Optional

import structlog

from finance_tracker.audit import StoreEventLogger, configure_logging
from finance_tracker.config import Settings, get_settings
from finance_tracker.models.summary import MonthlySummary
from finance_tracker.models.transaction import (
    Repeating,
    Transaction,
    TransactionType,
    format_transaction_date,
)
from finance_tracker.queries import TransactionQuery, aggregate, filter_transactions
from finance_tracker.services.catalog import LabelCatalog, account_catalog, category_catalog
from finance_tracker.services.preferences import Preferences
from finance_tracker.services.storage import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStoreInterface,
)
from finance_tracker.store import IdAllocator, TransactionStore
from finance_tracker.validation import validate_amount


logger = structlog.get_logger(__name__)


class FinanceTracker:
    """
    Application facade over the store, catalogs and preferences.

    Usage:
        tracker = create_finance_tracker()
        await tracker.start()
        await tracker.record_transaction("expense", "12.50", "Lebensmittel", "Personal")
        summary = await tracker.monthly_summary(2024, 1)
        await tracker.shutdown()
    """

    def __init__(
        self,
        storage: KeyValueStoreInterface,
        settings: Optional[Settings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        settings = settings or get_settings()
        storage_settings = settings.storage
        tracker_settings = settings.tracker

        self._clock = clock or datetime.now
        self._storage = storage
        ids = IdAllocator()

        self.store = TransactionStore(
            storage,
            storage_key=storage_settings.transactions_key,
            clock=self._clock,
            id_allocator=ids,
            horizon_months=tracker_settings.recurrence_horizon_months,
        )
        self.categories: LabelCatalog = category_catalog(
            storage, storage_settings.categories_key, ids
        )
        self.accounts: LabelCatalog = account_catalog(
            storage, storage_settings.accounts_key, ids
        )
        self.preferences = Preferences(storage, storage_settings, tracker_settings)

        self.event_logger = StoreEventLogger()
        self.store.subscribe(self.event_logger)

    @property
    def storage(self) -> KeyValueStoreInterface:
        return self._storage

    async def start(self) -> None:
        """Load transactions and both catalogs."""
        await self.store.load()
        await self.categories.load()
        await self.accounts.load()
        logger.info(
            "tracker_started",
            transactions=len(self.store),
            categories=len(self.categories.items),
            accounts=len(self.accounts.items),
        )

    async def shutdown(self) -> None:
        """Wait for pending writes."""
        await self.store.flush()

    # =========================================================================
    # RECORDING
    # =========================================================================

    async def record_transaction(
        self,
        type_: TransactionType | str,
        amount: str,
        category: str,
        account: str,
        on: Optional[date] = None,
        repeating: Repeating | str = Repeating.NO,
        notes: str = "",
        currency: Optional[str] = None,
    ) -> Transaction:
        """
        Validate and add a transaction (plus its occurrences).

        Args:
            type_: "income" or "expense"
            amount: Amount as typed by the user
            category: Category label
            account: Account label
            on: Transaction date; today when omitted
            repeating: Recurrence setting
            notes: Free text
            currency: Symbol or code; the default currency symbol when omitted

        Returns:
            The stored origin transaction

        Raises:
            ValidationError: If the amount is rejected
        """
        validate_amount(amount)

        if currency is None:
            currency = await self.preferences.get_default_currency_symbol()

        category_item = self.categories.find_by_label(category)
        account_item = self.accounts.find_by_label(account)

        transaction = Transaction(
            id=self.store.next_id(),
            type=TransactionType(type_),
            amount=amount.strip(),
            category=category,
            date=format_transaction_date(on or self._clock().date()),
            account=account,
            repeating=Repeating(repeating),
            notes=notes,
            currency=currency,
            category_id=category_item.id if category_item else None,
            account_id=account_item.id if account_item else None,
        )

        self.store.add(transaction)
        return transaction

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction; deleting an origin deletes its occurrences."""
        self.store.remove(transaction_id)

    def update_notes(self, transaction_id: int, notes: str) -> None:
        self.store.update(transaction_id, {"notes": notes})

    # =========================================================================
    # READING
    # =========================================================================

    async def monthly_summary(self, year: int, month: int) -> MonthlySummary:
        """Totals for one month in the user's default currency."""
        code = await self.preferences.get_default_currency_code()
        return aggregate(self.store.transactions, year, month, code)

    def list_transactions(self, query: Optional[TransactionQuery] = None) -> list[Transaction]:
        return filter_transactions(self.store.transactions, query or TransactionQuery())

    # =========================================================================
    # RESET
    # =========================================================================

    async def wipe_user_data(self) -> None:
        """
        Delete all transactions, the password and the default currency.

        Categories and accounts are kept.
        """
        self.store.clear()
        await self.store.flush()
        await self.preferences.wipe()
        logger.warning("user_data_wiped")


def create_finance_tracker(
    settings: Optional[Settings] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FinanceTracker:
    """
    Factory function to create the tracker from settings.

    The storage backend is chosen by FINANCE_STORAGE_BACKEND
    ("memory" or "file").
    """
    settings = settings or get_settings()
    storage_settings = settings.storage

    configure_logging(settings.tracker.log_level)

    if storage_settings.backend == "memory":
        storage: KeyValueStoreInterface = InMemoryKeyValueStore()
    else:
        storage = FileKeyValueStore(storage_settings.data_dir)

    logger.info("storage_backend_selected", backend=storage_settings.backend)
    return FinanceTracker(storage, settings=settings, clock=clock)
