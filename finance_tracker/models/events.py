"""
Store Event Models

Every change to the transaction store is announced to subscribers as a
StoreEvent. The dashboard uses these to refresh, the event logger uses
them to keep a structured trail of what happened.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class StoreEventType(str, Enum):
    """Types of store events."""
    # Lifecycle
    LOADED = "loaded"
    LOAD_FAILED = "load_failed"
    CLEARED = "cleared"

    # Mutations
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_REMOVED = "transaction_removed"

    # Persistence
    PERSIST_FAILED = "persist_failed"


class EventSeverity(str, Enum):
    """Severity level for store events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class StoreEvent(BaseModel):
    """A single change notification from the transaction store."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=datetime.now)

    event_type: StoreEventType
    severity: EventSeverity = EventSeverity.INFO

    transaction_ids: list[int] = Field(
        default_factory=list,
        description="Ids of the transactions the event is about"
    )
    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "transaction_ids": self.transaction_ids,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class StoreEventBuilder:
    """
    Helper class to build store events with common patterns.

    Usage:
        event = StoreEventBuilder.transaction_added(origin, occurrence_ids)
        event = StoreEventBuilder.persist_failed(error)
    """

    @staticmethod
    def loaded(count: int, skipped: int = 0) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.LOADED,
            description=f"Loaded {count} transactions",
            details={"count": count, "skipped": skipped},
            severity=EventSeverity.WARNING if skipped else EventSeverity.INFO,
        )

    @staticmethod
    def load_failed(error_message: str) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.LOAD_FAILED,
            severity=EventSeverity.ERROR,
            description="Could not load transactions, starting empty",
            error_message=error_message,
        )

    @staticmethod
    def cleared(count: int) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.CLEARED,
            description=f"Cleared {count} transactions",
            details={"count": count},
        )

    @staticmethod
    def transaction_added(origin_id: int, occurrence_ids: list[int]) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.TRANSACTION_ADDED,
            transaction_ids=[origin_id, *occurrence_ids],
            description=(
                f"Transaction {origin_id} added with "
                f"{len(occurrence_ids)} generated occurrences"
            ),
            details={"origin_id": origin_id, "occurrences": len(occurrence_ids)},
        )

    @staticmethod
    def transaction_updated(transaction_id: int, fields: list[str]) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.TRANSACTION_UPDATED,
            transaction_ids=[transaction_id],
            description=f"Transaction {transaction_id} updated",
            details={"fields": fields},
        )

    @staticmethod
    def transaction_removed(requested_id: int, removed_ids: list[int]) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.TRANSACTION_REMOVED,
            transaction_ids=removed_ids,
            description=f"Removed {len(removed_ids)} transactions for id {requested_id}",
            details={"requested_id": requested_id},
        )

    @staticmethod
    def persist_failed(error_message: str, count: int) -> StoreEvent:
        return StoreEvent(
            event_type=StoreEventType.PERSIST_FAILED,
            severity=EventSeverity.ERROR,
            description="Could not write transactions, changes kept in memory",
            error_message=error_message,
            details={"count": count},
        )
