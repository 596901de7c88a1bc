"""
User Preferences

The app lock password and the default display currency, each stored as
a plain string under its own key.

Passwords are stored as bcrypt hashes ("$2b$..."). Values written before
hashing was introduced are plaintext; they are still accepted and
upgraded to a hash on the next successful unlock.

Storage failures never lock the user out: reads fall back to the
configured defaults and a failed hash upgrade is only logged.
"""

import hmac
from typing import Optional

import bcrypt
import structlog

from finance_tracker.config.settings import StorageSettings, TrackerSettings
from finance_tracker.services.currency import code_of, rate_of, symbol_of
from finance_tracker.services.storage import KeyValueStoreInterface, StorageError
from finance_tracker.validation import ValidationError, validate_new_password


logger = structlog.get_logger(__name__)


def hash_password(password: str, rounds: int = 12) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def is_hashed(stored: str) -> bool:
    return stored.startswith("$2")


def check_password(candidate: str, stored: str) -> bool:
    """Compare a candidate against a stored bcrypt hash or legacy plaintext value."""
    if not is_hashed(stored):
        return hmac.compare_digest(candidate.encode("utf-8"), stored.encode("utf-8"))

    try:
        return bcrypt.checkpw(candidate.encode("utf-8"), stored.encode("utf-8"))
    except ValueError:
        logger.error("stored_password_malformed")
        return False


class Preferences:
    """Password lock and default currency, backed by the key-value store."""

    def __init__(
        self,
        storage: KeyValueStoreInterface,
        storage_settings: Optional[StorageSettings] = None,
        tracker_settings: Optional[TrackerSettings] = None,
    ):
        self._storage = storage
        self._keys = storage_settings or StorageSettings()
        self._settings = tracker_settings or TrackerSettings()

    # =========================================================================
    # PASSWORD
    # =========================================================================

    async def _read(self, key: str) -> Optional[str]:
        try:
            return await self._storage.get(key)
        except StorageError as e:
            logger.error("preference_load_failed", key=key, error=str(e))
            return None

    async def is_password_set(self) -> bool:
        return bool(await self._read(self._keys.password_key))

    async def set_password(
        self,
        new_password: str,
        confirm_password: str,
        current_password: Optional[str] = None,
    ) -> None:
        """
        Set or change the app password.

        When a password already exists, `current_password` must match it.

        Raises:
            ValidationError: Wrong current password, mismatch or too short
            StorageError: The password could not be saved
        """
        if await self.is_password_set():
            if current_password is None or not await self.verify_password(current_password):
                raise ValidationError.single(
                    "current_password", "invalid_value", "Current password is incorrect."
                )

        validate_new_password(
            new_password,
            confirm_password,
            self._settings.min_password_length,
        )

        await self._storage.set(
            self._keys.password_key,
            hash_password(new_password, self._settings.password_hash_rounds),
        )
        logger.info("password_set")

    async def verify_password(self, candidate: str) -> bool:
        """
        Check a password attempt.

        With no password set (or an unreadable one) every attempt succeeds.
        """
        stored = await self._read(self._keys.password_key)
        if not stored:
            return True

        ok = check_password(candidate, stored)
        if ok and not is_hashed(stored):
            try:
                await self._storage.set(
                    self._keys.password_key,
                    hash_password(candidate, self._settings.password_hash_rounds),
                )
            except StorageError as e:
                logger.error("legacy_password_upgrade_failed", error=str(e))
            else:
                logger.info("legacy_password_upgraded")
        elif not ok:
            logger.warning("password_rejected")
        return ok

    async def emergency_unlock(self) -> None:
        """Forget the password so the app opens without one."""
        await self._storage.remove(self._keys.password_key)
        logger.warning("emergency_unlock")

    # =========================================================================
    # DEFAULT CURRENCY
    # =========================================================================

    async def get_default_currency_symbol(self) -> str:
        stored = await self._read(self._keys.default_currency_key)
        return stored or self._settings.default_currency_symbol

    async def get_default_currency_code(self) -> str:
        """Code of the stored default symbol, or the configured code."""
        symbol = await self.get_default_currency_symbol()
        return code_of(symbol) or self._settings.default_currency_code

    async def set_default_currency(self, value: str) -> str:
        """
        Store a new default currency, given as a symbol or a code.

        Returns the stored symbol.
        """
        if rate_of(value) is not None:
            symbol = symbol_of(value)
        elif code_of(value) is not None:
            symbol = value
        else:
            raise ValidationError.single(
                "currency", "invalid_value", f"Unsupported currency: {value}"
            )

        await self._storage.set(self._keys.default_currency_key, symbol)
        logger.info("default_currency_set", symbol=symbol)
        return symbol

    # =========================================================================
    # RESET
    # =========================================================================

    async def wipe(self) -> None:
        """Remove the password and default currency."""
        await self._storage.remove(self._keys.password_key)
        await self._storage.remove(self._keys.default_currency_key)
