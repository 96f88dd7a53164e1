# smartsplit/domain/money.py
from __future__ import annotations

import re
from decimal import ROUND_HALF_EVEN, ROUND_HALF_UP, Decimal, InvalidOperation, getcontext, localcontext
from typing import Optional, Union

Number = Union[Decimal, int, float, str]


class MoneyError(ValueError):
    """Raised when amount parsing, coercion or formatting fails."""


ZERO = Decimal("0")

# Working precision for bill arithmetic. The default context keeps 28 digits,
# which is not enough to quantize very large amounts to cents.
MONEY_PRECISION = 60

# £10,000,000.00 safety bound for amounts coming in through the API
MAX_AMOUNT = Decimal("10000000.00")

_CURRENCY_SYMBOLS = {
    "GBP": "£",
    "USD": "$",
    "EUR": "€",
    "JPY": "¥",
    "INR": "₹",
    "AUD": "A$",
    "CAD": "C$",
}


def _quantum(places: int) -> Decimal:
    return Decimal(1).scaleb(-places)


def to_decimal(value: Number) -> Decimal:
    """
    Coerce a numeric value to an exact Decimal.

    Floats go through str() so 10.5 becomes Decimal("10.5") rather than the
    binary expansion of 10.5.
    """
    if isinstance(value, bool):
        raise MoneyError("booleans are not amounts")
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, int):
        d = Decimal(value)
    elif isinstance(value, (float, str)):
        try:
            d = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise MoneyError(f"invalid decimal value: {value!r}") from e
    else:
        raise MoneyError(f"unsupported amount type: {type(value).__name__}")

    if not d.is_finite():
        raise MoneyError(f"amount must be finite: {value!r}")
    return d


def money_context():
    """
    Context manager for bill arithmetic: the current decimal context with at
    least MONEY_PRECISION significant digits.
    """
    ctx = getcontext().copy()
    ctx.prec = max(ctx.prec, MONEY_PRECISION)
    return localcontext(ctx)


def _round(value: Number, places: int, rounding: str) -> Decimal:
    d = to_decimal(value)
    ctx = getcontext().copy()
    # quantize needs room for every integer digit plus the requested places
    ctx.prec = max(ctx.prec, MONEY_PRECISION, d.adjusted() + places + 2)
    return d.quantize(_quantum(places), rounding=rounding, context=ctx)


def round_bankers(value: Number, places: int = 2) -> Decimal:
    """Round half-to-even. Used for every externally visible total."""
    return _round(value, places, ROUND_HALF_EVEN)


def round_plain(value: Number, places: int = 2) -> Decimal:
    """Round half away from zero. Used for per-share intermediate steps."""
    return _round(value, places, ROUND_HALF_UP)


def check_amount_bound(value: Decimal, *, max_amount: Decimal = MAX_AMOUNT) -> Decimal:
    if abs(value) > max_amount:
        raise MoneyError("amount exceeds safety limit")
    return value


# Conservative price-token parsing:
# - Optional currency symbol prefix, optional spaces, decimal "." or ","
# - Rejects thousands separators to avoid guessing ("1,234.56")
_AMOUNT_TOKEN_RE = re.compile(r"^\s*(?:[£$€¥₹])?\s*(\d{1,9})(?:[.,](\d{1,2}))?\s*$")


def parse_amount(token: Optional[str]) -> Optional[Decimal]:
    """
    Parse a typed price into a Decimal.

    Accepts examples:
      "12" -> Decimal("12")
      "12.5" -> Decimal("12.5")
      "£12.50" -> Decimal("12.50")
      "12,50" -> Decimal("12.50")  (decimal comma)
      "" -> None  (price not entered yet)

    Rejects:
      "1,234.56" (thousands separator ambiguity)
      "12.345"
      "-3.00"
      "abc"
    """
    if token is None:
        return None
    if not isinstance(token, str):
        raise MoneyError("token must be a string")

    s = token.strip()
    if s == "":
        return None

    if re.search(r"\d,\d{3}", s):
        raise MoneyError(f"ambiguous thousands separator format: {token}")

    m = _AMOUNT_TOKEN_RE.match(s)
    if not m:
        raise MoneyError(f"invalid amount: {token}")

    whole, fraction = m.group(1), m.group(2)
    if fraction is None:
        return Decimal(whole)
    return Decimal(f"{whole}.{fraction}")


def currency_symbol(currency: str) -> str:
    if not isinstance(currency, str) or not currency.strip():
        raise MoneyError("currency must be a non-empty string")
    code = currency.strip().upper()
    return _CURRENCY_SYMBOLS.get(code, f"{code} ")


def format_amount(value: Optional[Number], currency: str = "GBP") -> str:
    """
    Format an amount as a display string like "£12.34".

    None is shown as zero, the same way an unpriced item is totalled.
    """
    amount = round_bankers(ZERO if value is None else value)
    sign = "-" if amount < 0 else ""
    return f"{sign}{currency_symbol(currency)}{abs(amount):.2f}"
