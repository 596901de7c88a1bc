"""
Finance Tracker - Source Package

The core of a personal finance tracker: income/expense transactions with
recurring occurrences, monthly summaries across currencies, category and
account catalogs, and app-level preferences, all persisted through a small
asynchronous key-value store.

DESIGN PRINCIPLES:
1. In-memory state is the source of truth for the running session
2. Every mutation writes the whole collection back to storage
3. Storage failures are logged, never fatal
4. User input is validated at the edge, not inside the store
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
