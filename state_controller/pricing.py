from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Final, Optional, Sequence

UNIT_PRICE: Final[Decimal] = Decimal("2.00")
SAME_DAY_SURCHARGE: Final[Decimal] = Decimal("3.00")
NUM_PICKUP_OPTIONS: Final[int] = 4
CURRENCY_SYMBOL: Final[str] = "$"


def format_pickup_label(day: date) -> str:
    """日付を "Sat Oct 17" 形式のラベルにする。"""
    return f"{day:%a} {day:%b} {day.day}"


def pickup_options(today: date, count: int = NUM_PICKUP_OPTIONS) -> tuple[str, ...]:
    """today から count 日分の受け取り候補を昇順で返す。先頭が当日受け取り。"""
    return tuple(format_pickup_label(today + timedelta(days=i)) for i in range(count))


def calculate_price(
    quantity: Optional[int],
    pickup_date: Optional[str],
    options: Sequence[str],
) -> Decimal:
    price = (quantity or 0) * UNIT_PRICE
    if pickup_date is not None and options and pickup_date == options[0]:
        price += SAME_DAY_SURCHARGE
    return price


def format_price(price: Decimal) -> str:
    return f"{CURRENCY_SYMBOL}{price:,.2f}"
