from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field


class QuantityRequest(BaseModel):
    """POST /wizard/quantity のリクエストボディ。"""

    # true や "12" を数量として受け付けない
    quantity: int = Field(gt=0, strict=True)


class OptionRequest(BaseModel):
    """POST /wizard/option のリクエストボディ。フレーバーか受け取り日。"""

    value: str = Field(min_length=1)


class OrderSnapshot(BaseModel):
    quantity: Optional[int] = None
    flavor: Optional[str] = None
    pickup_date: Optional[str] = None
    pickup_options: List[str]
    price: Decimal = Field(ge=0)
    formatted_price: str


class ScreenOption(BaseModel):
    label: str
    value: Union[int, str]
    selected: bool = False


class WizardScreen(BaseModel):
    """GET /wizard のレスポンス。描画側はこれだけを見れば画面を組める。"""

    step: str  # START, FLAVOR, PICKUP, SUMMARY
    title: str
    can_go_back: bool
    subtotal: str
    options: List[ScreenOption] = Field(default_factory=list)
    order: OrderSnapshot
    summary: Optional[str] = None  # SUMMARY のときだけ


class SendResponse(BaseModel):
    """POST /wizard/send のレスポンス。共有に渡した内容そのもの。"""

    subject: str
    body: str


class EventType(str, Enum):
    STEP_CHANGED = "step_changed"
    ORDER_UPDATED = "order_updated"
    ORDER_SENT = "order_sent"


class StepChangedEvent(BaseModel):
    type: Literal[EventType.STEP_CHANGED] = EventType.STEP_CHANGED
    from_step: str
    to_step: str
    can_go_back: bool


class OrderUpdatedEvent(BaseModel):
    type: Literal[EventType.ORDER_UPDATED] = EventType.ORDER_UPDATED
    order: OrderSnapshot


class OrderSentEvent(BaseModel):
    type: Literal[EventType.ORDER_SENT] = EventType.ORDER_SENT
    subject: str
    body: str


WizardEvent = StepChangedEvent | OrderUpdatedEvent | OrderSentEvent
