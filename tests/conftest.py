from datetime import date

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from services.data_source import DataSource
from services.orders import OrderService
from state_controller.machine import WizardController

# 2026-10-17 is a Saturday
FIXED_TODAY = date(2026, 10, 17)
FIXED_OPTIONS = ("Sat Oct 17", "Sun Oct 18", "Mon Oct 19", "Tue Oct 20")


class RecordingShareTarget:
    """Export collaborator double that remembers every (subject, body) pair."""

    def __init__(self):
        self.shared = []

    def share(self, subject, body):
        self.shared.append((subject, body))


class FailingShareTarget:
    def share(self, subject, body):
        raise OSError("share sheet unavailable")


@pytest.fixture
def share_target():
    return RecordingShareTarget()


@pytest.fixture
def data_source():
    return DataSource()


@pytest.fixture
def controller(share_target, data_source):
    return WizardController(
        share_target,
        quantity_options=data_source.quantities,
        flavors=data_source.flavors,
        today=lambda: FIXED_TODAY,
    )


@pytest.fixture
def events(controller):
    """All events published by the controller, in order."""
    received = []
    controller.subscribe(received.append)
    return received


@pytest.fixture
def service(controller, data_source):
    return OrderService(controller=controller, data_source=data_source)


@pytest.fixture
def client(service):
    app = create_app(order_service=service)
    with TestClient(app) as test_client:
        yield test_client
