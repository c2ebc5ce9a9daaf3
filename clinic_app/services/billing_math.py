# clinic_app/services/billing_math.py
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

CURRENCY_SYMBOL = "₹"


def D(x: Any) -> Decimal:
    try:
        return Decimal(str(x or 0))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def money2(x: Any) -> Decimal:
    # str() first so float noise (99.995 -> 99.99499...) does not leak into rounding
    return D(x).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_money(x: Any, symbol: str | None = None) -> str:
    """100 -> '₹100.00', 99.995 -> '₹100.00' (half-up)."""
    sym = CURRENCY_SYMBOL if symbol is None else symbol
    return f"{sym}{money2(x):.2f}"
