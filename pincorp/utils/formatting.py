# pincorp/utils/formatting.py

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

CURRENCY_SYMBOL = "₫"


def _group_thousands(value: Decimal) -> str:
    # vi-VN style: dot between thousands
    return f"{value:,.0f}".replace(",", ".")


def format_currency(amount: Optional[Any], with_symbol: bool = True) -> str:
    """1234567 -> '1.234.567 ₫'. VND has no minor unit, so amounts are rounded to whole dong."""
    if amount is None:
        return "-"
    value = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    text = _group_thousands(value)
    return f"{text} {CURRENCY_SYMBOL}" if with_symbol else text


def format_quantity(quantity: Optional[Any]) -> str:
    if quantity is None:
        return "-"
    value = Decimal(str(quantity))
    if value == value.to_integral_value():
        return _group_thousands(value)
    text = f"{value.normalize():f}"
    whole, _, fraction = text.partition(".")
    return f"{_group_thousands(Decimal(whole))},{fraction}"


def format_percent(value: Optional[Any], decimals: int = 1) -> str:
    if value is None:
        return "-"
    quantized = Decimal(str(value)).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    return f"{quantized}%".replace(".", ",")
