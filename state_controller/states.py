from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from .pricing import calculate_price, format_price, pickup_options

ORDER_SUBJECT = "New Cupcake Order"


class WizardContractError(RuntimeError):
    """UI 側が渡してはいけない値やイベントを渡したときに送出する。"""


class WizardStep(Enum):
    """注文ウィザードの画面。定義順がそのまま進行順。"""

    START = "Cupcake"
    FLAVOR = "Choose Flavor"
    PICKUP = "Choose Pickup Date"
    SUMMARY = "Order Summary"

    @property
    def title(self) -> str:
        return self.value


@dataclass(frozen=True)
class OrderState:
    """作成中の1注文。更新系は常に新しいインスタンスを返す。"""

    pickup_options: tuple[str, ...]
    quantity: Optional[int] = None
    flavor: Optional[str] = None
    pickup_date: Optional[str] = None

    @classmethod
    def new(cls, today: date) -> "OrderState":
        return cls(pickup_options=pickup_options(today))

    @property
    def price(self) -> Decimal:
        return calculate_price(self.quantity, self.pickup_date, self.pickup_options)

    @property
    def formatted_price(self) -> str:
        return format_price(self.price)

    @property
    def is_same_day(self) -> bool:
        return self.pickup_date is not None and self.pickup_date == self.pickup_options[0]

    @property
    def is_complete(self) -> bool:
        return None not in (self.quantity, self.flavor, self.pickup_date)

    def set_quantity(self, quantity: int) -> "OrderState":
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise WizardContractError(f"quantity must be a positive integer: {quantity!r}")
        return replace(self, quantity=quantity)

    def set_flavor(self, flavor: str) -> "OrderState":
        if not flavor:
            raise WizardContractError("flavor must not be empty")
        return replace(self, flavor=flavor)

    def set_date(self, pickup_date: str) -> "OrderState":
        if pickup_date not in self.pickup_options:
            raise WizardContractError(f"pickup date is not offered: {pickup_date!r}")
        return replace(self, pickup_date=pickup_date)

    def reset(self, today: date) -> "OrderState":
        # 「今日」は注文ごとにずれるので候補は必ず作り直す
        return OrderState.new(today)

    def quantity_text(self) -> str:
        if self.quantity is None:
            return ""
        noun = "cupcake" if self.quantity == 1 else "cupcakes"
        return f"{self.quantity} {noun}"

    def summary_subject(self) -> str:
        return ORDER_SUBJECT

    def summary_text(self) -> str:
        """共有用の注文サマリー。表示専用で、パースして戻すことはしない。"""
        return (
            f"Quantity: {self.quantity_text()}\n"
            f"Flavor: {self.flavor or ''}\n"
            f"Pickup date: {self.pickup_date or ''}\n"
            f"Total: {self.formatted_price}\n"
            "\n"
            "Thank you!"
        )
