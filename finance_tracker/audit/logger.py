"""
Store Event Logger

Every change to the transaction store is logged as a structured event.
This provides:
1. A trail of what was added, edited and removed
2. Visibility into storage failures (which never reach the user)
3. Debugging capability when totals look wrong

The logger subscribes to the store like any other listener and never
raises back into it.
"""

import logging

import structlog

from finance_tracker.models.events import EventSeverity, StoreEvent


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))
    logging.getLogger().setLevel(getattr(logging, level.upper()))


class StoreEventLogger:
    """
    Logs store events at a level matching their severity.

    Usage:
        store.subscribe(StoreEventLogger())
    """

    def __init__(self):
        self._logger = structlog.get_logger("finance_tracker.events")
        self._counts: dict[str, int] = {}

    def __call__(self, event: StoreEvent) -> None:
        self.log(event)

    def log(self, event: StoreEvent) -> None:
        log_dict = event.to_log_dict()

        if event.severity == EventSeverity.ERROR:
            self._logger.error("store_event", **log_dict)
        elif event.severity == EventSeverity.WARNING:
            self._logger.warning("store_event", **log_dict)
        elif event.severity == EventSeverity.DEBUG:
            self._logger.debug("store_event", **log_dict)
        else:
            self._logger.info("store_event", **log_dict)

        key = event.event_type.value
        self._counts[key] = self._counts.get(key, 0) + 1

    @property
    def counts(self) -> dict[str, int]:
        """Number of events seen per event type."""
        return dict(self._counts)
