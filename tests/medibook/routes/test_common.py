from types import SimpleNamespace

from medibook.routes.common import get_event_bus
from medibook.services.notifications import NullBus, RecordingBus


def _request(**state):
    return SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(**state)))


def test_event_bus_comes_from_app_state() -> None:
    bus = RecordingBus()

    assert get_event_bus(_request(event_bus=bus)) is bus


def test_app_without_bus_gets_null_bus() -> None:
    assert isinstance(get_event_bus(_request()), NullBus)
