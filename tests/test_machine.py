"""
Tests for the wizard controller: step transitions, cancel/back and send.
"""

from decimal import Decimal

import pytest

from api.schemas import EventType
from state_controller.machine import WizardController
from state_controller.pricing import SAME_DAY_SURCHARGE, UNIT_PRICE
from state_controller.states import WizardContractError, WizardStep

from conftest import FIXED_OPTIONS, FIXED_TODAY, FailingShareTarget


def _walk_to(controller, step):
    """Drive the controller forward to the given step with valid selections."""
    if step is WizardStep.START:
        return
    controller.select_quantity(6)
    if step is WizardStep.FLAVOR:
        return
    controller.select_option("Chocolate")
    controller.next()
    if step is WizardStep.PICKUP:
        return
    controller.select_option(FIXED_OPTIONS[1])
    controller.next()


class TestTransitions:
    def test_starts_on_start(self, controller):
        assert controller.current_step is WizardStep.START
        assert controller.can_go_back is False
        assert controller.back_stack == (WizardStep.START,)

    def test_quantity_selection_advances_immediately(self, controller):
        controller.select_quantity(12)
        assert controller.current_step is WizardStep.FLAVOR
        assert controller.can_go_back is True
        assert controller.order.price == 12 * UNIT_PRICE

    def test_option_selection_stays_on_step(self, controller):
        _walk_to(controller, WizardStep.FLAVOR)
        controller.select_option("Vanilla")
        controller.select_option("Coffee")
        assert controller.current_step is WizardStep.FLAVOR
        assert controller.order.flavor == "Coffee"

    def test_strict_forward_sequence(self, controller):
        seen = [controller.current_step]
        controller.select_quantity(1)
        seen.append(controller.current_step)
        controller.select_option("Red Velvet")
        controller.next()
        seen.append(controller.current_step)
        controller.select_option(FIXED_OPTIONS[3])
        controller.next()
        seen.append(controller.current_step)
        assert seen == list(WizardStep)
        assert controller.back_stack == tuple(WizardStep)

    def test_next_from_summary_is_rejected(self, controller):
        _walk_to(controller, WizardStep.SUMMARY)
        with pytest.raises(WizardContractError):
            controller.next()
        assert controller.current_step is WizardStep.SUMMARY

    def test_next_from_start_is_rejected(self, controller):
        with pytest.raises(WizardContractError):
            controller.next()

    def test_next_requires_flavor(self, controller):
        _walk_to(controller, WizardStep.FLAVOR)
        with pytest.raises(WizardContractError):
            controller.next()
        assert controller.current_step is WizardStep.FLAVOR

    def test_next_requires_pickup_date(self, controller):
        _walk_to(controller, WizardStep.PICKUP)
        with pytest.raises(WizardContractError):
            controller.next()
        assert controller.current_step is WizardStep.PICKUP


class TestContractViolations:
    def test_quantity_not_offered(self, controller):
        with pytest.raises(WizardContractError):
            controller.select_quantity(24)
        assert controller.current_step is WizardStep.START
        assert controller.order.quantity is None

    def test_quantity_only_on_start(self, controller):
        _walk_to(controller, WizardStep.FLAVOR)
        with pytest.raises(WizardContractError):
            controller.select_quantity(12)

    def test_flavor_not_offered(self, controller):
        _walk_to(controller, WizardStep.FLAVOR)
        with pytest.raises(WizardContractError):
            controller.select_option("Pistachio")

    def test_date_not_offered(self, controller):
        _walk_to(controller, WizardStep.PICKUP)
        with pytest.raises(WizardContractError):
            controller.select_option("Vanilla")

    def test_option_on_start_or_summary(self, controller):
        with pytest.raises(WizardContractError):
            controller.select_option("Vanilla")
        _walk_to(controller, WizardStep.SUMMARY)
        with pytest.raises(WizardContractError):
            controller.select_option("Vanilla")

    def test_send_only_on_summary(self, controller, share_target):
        _walk_to(controller, WizardStep.PICKUP)
        with pytest.raises(WizardContractError):
            controller.send()
        assert share_target.shared == []


class TestCancelAndBack:
    @pytest.mark.parametrize(
        "step", [WizardStep.FLAVOR, WizardStep.PICKUP, WizardStep.SUMMARY]
    )
    def test_cancel_returns_to_start_and_resets(self, controller, step):
        _walk_to(controller, step)
        controller.cancel()
        assert controller.current_step is WizardStep.START
        assert controller.back_stack == (WizardStep.START,)
        order = controller.order
        assert (order.quantity, order.flavor, order.pickup_date) == (None, None, None)
        assert order.price == Decimal("0")
        assert order.pickup_options == FIXED_OPTIONS

    def test_cancel_on_start_is_rejected(self, controller):
        with pytest.raises(WizardContractError):
            controller.cancel()

    def test_back_pops_one_step_and_keeps_order(self, controller):
        _walk_to(controller, WizardStep.SUMMARY)
        order = controller.order
        controller.navigate_up()
        assert controller.current_step is WizardStep.PICKUP
        assert controller.order == order
        controller.navigate_up()
        controller.navigate_up()
        assert controller.current_step is WizardStep.START
        assert controller.order.quantity == 6
        with pytest.raises(WizardContractError):
            controller.navigate_up()

    def test_back_then_change_selection(self, controller):
        _walk_to(controller, WizardStep.PICKUP)
        controller.navigate_up()
        controller.select_option("Salted Caramel")
        controller.next()
        assert controller.current_step is WizardStep.PICKUP
        assert controller.order.flavor == "Salted Caramel"


class TestSend:
    def test_end_to_end(self, controller, share_target):
        controller.select_quantity(12)
        assert controller.current_step is WizardStep.FLAVOR
        assert controller.order.price == 12 * UNIT_PRICE

        controller.select_option("Vanilla")
        assert controller.current_step is WizardStep.FLAVOR

        controller.next()
        assert controller.current_step is WizardStep.PICKUP
        assert controller.order.price == 12 * UNIT_PRICE

        controller.select_option(controller.order.pickup_options[0])
        assert controller.order.price == 12 * UNIT_PRICE + SAME_DAY_SURCHARGE

        controller.next()
        assert controller.current_step is WizardStep.SUMMARY

        subject, body = controller.send()
        assert share_target.shared == [(subject, body)]
        assert subject == "New Cupcake Order"
        for fragment in ("12", "Vanilla", FIXED_OPTIONS[0], "$27.00"):
            assert fragment in body

        assert controller.current_step is WizardStep.START
        assert controller.order.quantity is None
        assert controller.order.price == Decimal("0")

    def test_send_regenerates_pickup_options(self, share_target, data_source):
        days = iter([FIXED_TODAY, FIXED_TODAY.replace(day=18)])
        controller = WizardController(
            share_target,
            quantity_options=data_source.quantities,
            flavors=data_source.flavors,
            today=lambda: next(days),
        )
        _walk_to(controller, WizardStep.SUMMARY)
        controller.send()
        assert controller.order.pickup_options[0] == "Sun Oct 18"

    def test_share_failure_still_resets(self, data_source):
        controller = WizardController(
            FailingShareTarget(),
            quantity_options=data_source.quantities,
            flavors=data_source.flavors,
            today=lambda: FIXED_TODAY,
        )
        _walk_to(controller, WizardStep.SUMMARY)
        controller.send()
        assert controller.current_step is WizardStep.START
        assert controller.order.quantity is None


class TestEvents:
    def test_quantity_selection_publishes_update_then_step(self, controller, events):
        controller.select_quantity(6)
        assert [e.type for e in events] == [
            EventType.ORDER_UPDATED,
            EventType.STEP_CHANGED,
        ]
        assert events[0].order.quantity == 6
        assert events[0].order.formatted_price == "$12.00"
        assert (events[1].from_step, events[1].to_step) == ("START", "FLAVOR")
        assert events[1].can_go_back is True

    def test_send_publishes_sent_event(self, controller, events):
        _walk_to(controller, WizardStep.SUMMARY)
        events.clear()
        subject, body = controller.send()
        assert [e.type for e in events] == [
            EventType.ORDER_SENT,
            EventType.ORDER_UPDATED,
            EventType.STEP_CHANGED,
        ]
        assert events[0].body == body
        assert events[2].to_step == "START"

    def test_failing_subscriber_does_not_break_wizard(self, controller):
        def broken(event):
            raise ValueError("render failed")

        controller.subscribe(broken)
        controller.select_quantity(6)
        assert controller.current_step is WizardStep.FLAVOR

    def test_unsubscribe(self, controller):
        received = []
        unsubscribe = controller.subscribe(received.append)
        unsubscribe()
        controller.select_quantity(6)
        assert received == []
