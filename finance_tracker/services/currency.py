"""
Static Currency Conversion Table

Rates are "units of the currency per 1 US dollar". They are a fixed
snapshot, not fetched from anywhere.

Conversion goes through the base unit:
    amount / rate(from) * rate(to)
and is the identity whenever either currency is missing from the table.
"""

from typing import NamedTuple, Optional


class CurrencyInfo(NamedTuple):
    code: str
    symbol: str
    name: str
    rate: float


# Table order matters: code_of() returns the first code for a symbol,
# so "¥" resolves to JPY, not CNY.
CURRENCIES: tuple[CurrencyInfo, ...] = (
    CurrencyInfo("USD", "$", "US Dollar", 1.00),
    CurrencyInfo("EUR", "€", "Euro", 0.92),
    CurrencyInfo("GBP", "£", "British Pound Sterling", 0.77),
    CurrencyInfo("JPY", "¥", "Japanese Yen", 156.93),
    CurrencyInfo("INR", "₹", "Indian Rupee", 83.97),
    CurrencyInfo("RUB", "₽", "Russian Ruble", 88.31),
    CurrencyInfo("MXN", "MX$", "Mexican Peso", 19.17),
    CurrencyInfo("CHF", "CHF", "Swiss Franc", 0.89),
    CurrencyInfo("CNY", "¥", "Chinese Yuan", 7.09),
    CurrencyInfo("SEK", "kr", "Swedish Krona", 10.18),
    CurrencyInfo("NZD", "NZ$", "New Zealand Dollar", 1.49),
    CurrencyInfo("KRW", "₩", "South Korean Won", 1363.94),
    CurrencyInfo("BRL", "R$", "Brazilian Real", 5.04),
    CurrencyInfo("ZAR", "R", "South African Rand", 18.95),
)

BASE_CURRENCY = "USD"

EXCHANGE_RATES: dict[str, float] = {c.code: c.rate for c in CURRENCIES}
CURRENCY_SYMBOLS: dict[str, str] = {c.code: c.symbol for c in CURRENCIES}


def rate_of(code: str) -> Optional[float]:
    """Units of `code` per base unit, or None if unknown."""
    return EXCHANGE_RATES.get(code)


def symbol_of(code: str) -> str:
    """Display symbol for a code; unknown codes are displayed as-is."""
    return CURRENCY_SYMBOLS.get(code, code)


def code_of(symbol: str) -> Optional[str]:
    """
    Reverse lookup of a display symbol.

    Several codes can share a symbol (JPY and CNY are both "¥"); the first
    one in table order wins.
    """
    for currency in CURRENCIES:
        if currency.symbol == symbol:
            return currency.code
    return None


def resolve_code(value: Optional[str]) -> Optional[str]:
    """
    Turn a transaction's currency field into a code.

    Transactions written by the app store the display symbol, newer ones
    may store the code itself.
    """
    if not value:
        return None
    if value in EXCHANGE_RATES:
        return value
    return code_of(value)


def convert(amount: float, from_code: str, to_code: str) -> float:
    from_rate = rate_of(from_code)
    to_rate = rate_of(to_code)

    if from_rate is None or to_rate is None:
        return amount

    amount_in_base = amount / from_rate
    return amount_in_base * to_rate


def supported_currencies() -> list[CurrencyInfo]:
    """All currencies, in table order, for settings pickers."""
    return list(CURRENCIES)


def format_amount(amount: float, code: str) -> str:
    """Format like the dashboard does, e.g. '1234.50 €'."""
    return f"{amount:.2f} {symbol_of(code)}"
