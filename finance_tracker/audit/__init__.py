"""Event logging package."""

from finance_tracker.audit.logger import StoreEventLogger, configure_logging

__all__ = ["StoreEventLogger", "configure_logging"]
