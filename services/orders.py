from __future__ import annotations

from api.schemas import ScreenOption, SendResponse, WizardScreen
from share_controller.share_adapter import create_share_adapter
from state_controller.machine import WizardController, snapshot
from state_controller.states import WizardStep

from .data_source import DataSource


class OrderService:
    """Bridges UI requests to the wizard controller and builds screen views."""

    def __init__(
        self,
        controller: WizardController | None = None,
        data_source: DataSource | None = None,
    ) -> None:
        self._data_source = data_source or DataSource()
        self._controller = controller or WizardController(
            create_share_adapter(),
            quantity_options=self._data_source.quantities,
            flavors=self._data_source.flavors,
        )

    @property
    def controller(self) -> WizardController:
        return self._controller

    @property
    def data_source(self) -> DataSource:
        return self._data_source

    def screen(self) -> WizardScreen:
        """Build the view of the current step.

        START offers the quantity buttons, FLAVOR and PICKUP offer radio
        options with the current selection marked, SUMMARY carries the text
        that will be shared.
        """

        controller = self._controller
        order = controller.order
        step = controller.current_step

        options: list[ScreenOption] = []
        if step is WizardStep.START:
            options = [
                ScreenOption(label=label, value=value, selected=value == order.quantity)
                for label, value in self._data_source.quantity_options
            ]
        elif step is WizardStep.FLAVOR:
            options = [
                ScreenOption(label=flavor, value=flavor, selected=flavor == order.flavor)
                for flavor in self._data_source.flavors
            ]
        elif step is WizardStep.PICKUP:
            options = [
                ScreenOption(label=label, value=label, selected=label == order.pickup_date)
                for label in order.pickup_options
            ]

        return WizardScreen(
            step=step.name,
            title=step.title,
            can_go_back=controller.can_go_back,
            subtotal=order.formatted_price,
            options=options,
            order=snapshot(order),
            summary=order.summary_text() if step is WizardStep.SUMMARY else None,
        )

    def select_quantity(self, quantity: int) -> WizardScreen:
        self._controller.select_quantity(quantity)
        return self.screen()

    def select_option(self, value: str) -> WizardScreen:
        self._controller.select_option(value)
        return self.screen()

    def next(self) -> WizardScreen:
        self._controller.next()
        return self.screen()

    def back(self) -> WizardScreen:
        self._controller.navigate_up()
        return self.screen()

    def cancel(self) -> WizardScreen:
        self._controller.cancel()
        return self.screen()

    def send(self) -> SendResponse:
        subject, body = self._controller.send()
        return SendResponse(subject=subject, body=body)
