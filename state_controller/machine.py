from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Tuple

from api.schemas import OrderSentEvent, OrderSnapshot, OrderUpdatedEvent, StepChangedEvent

from .events import EventCallback, EventHub
from .states import OrderState, WizardContractError, WizardStep

if TYPE_CHECKING:
    from share_controller.share_adapter import ShareTarget

logger = logging.getLogger(__name__)


def snapshot(order: OrderState) -> OrderSnapshot:
    return OrderSnapshot(
        quantity=order.quantity,
        flavor=order.flavor,
        pickup_date=order.pickup_date,
        pickup_options=list(order.pickup_options),
        price=order.price,
        formatted_price=order.formatted_price,
    )


class WizardController:
    """注文ウィザードの画面遷移と注文内容を管理する。

    画面はナビゲーションのバックスタックで持ち、底は常に START。
    1セッションに1つ作って描画側に渡す。単一スレッド前提でロックは置かない。
    """

    def __init__(
        self,
        share_target: "ShareTarget",
        *,
        quantity_options: Sequence[int],
        flavors: Sequence[str],
        hub: Optional[EventHub] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._share_target = share_target
        self._quantity_options = tuple(quantity_options)
        self._flavors = tuple(flavors)
        self._hub = hub or EventHub()
        self._today = today
        self._order = OrderState.new(today())
        self._back_stack: List[WizardStep] = [WizardStep.START]

    @property
    def hub(self) -> EventHub:
        return self._hub

    @property
    def order(self) -> OrderState:
        return self._order

    @property
    def current_step(self) -> WizardStep:
        return self._back_stack[-1]

    @property
    def back_stack(self) -> Tuple[WizardStep, ...]:
        return tuple(self._back_stack)

    @property
    def can_go_back(self) -> bool:
        return self.current_step is not WizardStep.START

    def subscribe(self, callback: EventCallback) -> Callable[[], None]:
        return self._hub.subscribe(callback)

    # --- wizard events -------------------------------------------------

    def select_quantity(self, quantity: int) -> None:
        """START だけは選択と同時に次の画面へ進む。"""
        self._require_step(WizardStep.START, "select_quantity")
        if quantity not in self._quantity_options:
            raise WizardContractError(f"quantity is not offered: {quantity!r}")
        self._set_order(self._order.set_quantity(quantity))
        self._push(WizardStep.FLAVOR)

    def select_option(self, value: str) -> None:
        step = self.current_step
        if step is WizardStep.FLAVOR:
            if value not in self._flavors:
                raise WizardContractError(f"flavor is not offered: {value!r}")
            self._set_order(self._order.set_flavor(value))
        elif step is WizardStep.PICKUP:
            self._set_order(self._order.set_date(value))
        else:
            raise WizardContractError(f"select_option is not valid on {step.name}")

    def next(self) -> None:
        step = self.current_step
        if step is WizardStep.FLAVOR:
            if self._order.flavor is None:
                raise WizardContractError("select a flavor before moving on")
            self._push(WizardStep.PICKUP)
        elif step is WizardStep.PICKUP:
            if self._order.pickup_date is None:
                raise WizardContractError("select a pickup date before moving on")
            self._push(WizardStep.SUMMARY)
        else:
            raise WizardContractError(f"next is not valid on {step.name}")

    def navigate_up(self) -> None:
        """1画面だけ戻る。注文内容はそのまま残す（cancel とは別物）。"""
        if not self.can_go_back:
            raise WizardContractError("already on the first step")
        previous = self._back_stack.pop()
        self._publish_step(previous)

    def cancel(self) -> None:
        if not self.can_go_back:
            raise WizardContractError("cancel is not valid on START")
        logger.info("[WIZARD] Order canceled on %s", self.current_step.name)
        self._reset_order()
        self._pop_to_start()

    def send(self) -> Tuple[str, str]:
        """サマリーを共有先に渡し、注文をリセットして START に戻る。"""
        self._require_step(WizardStep.SUMMARY, "send")
        if not self._order.is_complete:
            raise WizardContractError("order is incomplete")

        subject = self._order.summary_subject()
        body = self._order.summary_text()
        try:
            self._share_target.share(subject, body)
        except Exception as e:
            # 共有は投げっぱなし。失敗しても注文フローは続ける
            logger.error(f"[WIZARD] Share target failed: {e}", exc_info=True)
        self._hub.publish(OrderSentEvent(subject=subject, body=body))
        logger.info("[WIZARD] Order sent: %s", self._order.formatted_price)

        self._reset_order()
        self._pop_to_start()
        return subject, body

    # --- internals -----------------------------------------------------

    def _require_step(self, step: WizardStep, event: str) -> None:
        if self.current_step is not step:
            raise WizardContractError(
                f"{event} is only valid on {step.name}, current step is {self.current_step.name}"
            )

    def _set_order(self, order: OrderState) -> None:
        self._order = order
        self._hub.publish(OrderUpdatedEvent(order=snapshot(order)))

    def _reset_order(self) -> None:
        self._set_order(self._order.reset(self._today()))

    def _push(self, step: WizardStep) -> None:
        previous = self.current_step
        self._back_stack.append(step)
        self._publish_step(previous)

    def _pop_to_start(self) -> None:
        previous = self.current_step
        del self._back_stack[1:]
        self._publish_step(previous)

    def _publish_step(self, previous: WizardStep) -> None:
        current = self.current_step
        logger.info("[WIZARD] %s -> %s", previous.name, current.name)
        self._hub.publish(
            StepChangedEvent(
                from_step=previous.name,
                to_step=current.name,
                can_go_back=self.can_go_back,
            )
        )
