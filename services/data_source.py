from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

QUANTITY_OPTIONS: Tuple[Tuple[str, int], ...] = (
    ("One Cupcake", 1),
    ("Six Cupcakes", 6),
    ("Twelve Cupcakes", 12),
)

FLAVORS: Tuple[str, ...] = (
    "Vanilla",
    "Chocolate",
    "Red Velvet",
    "Salted Caramel",
    "Coffee",
)


@dataclass(frozen=True)
class DataSource:
    """選択肢の供給元。ウィザード側はどちらも順序付きの有効値として扱うだけ。"""

    quantity_options: Tuple[Tuple[str, int], ...] = QUANTITY_OPTIONS
    flavors: Tuple[str, ...] = FLAVORS

    @property
    def quantities(self) -> Tuple[int, ...]:
        return tuple(value for _, value in self.quantity_options)
