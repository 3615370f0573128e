import logging

import pytest

import dataentry.log  # noqa: F401  registers TRACE
from dataentry.config import EntryConfig
from dataentry.core.context import init_context
from dataentry.core.event_bus import EventBus
from dataentry.core.events import EventType


class FakeClock:
    """Manually advanced monotonic clock for timer tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class EventRecorder:
    """Collects every event of the given types published on a bus."""

    def __init__(self, bus: EventBus, *types: EventType):
        self.events = []
        for event_type in types:
            bus.subscribe(event_type, self.events.append)

    def of(self, event_type: EventType) -> list:
        return [e for e in self.events if e.type is event_type]

    def data(self, event_type: EventType) -> list:
        return [e.data for e in self.of(event_type)]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def recorder(bus):
    return EventRecorder(
        bus,
        EventType.ENTRY_CHANGED,
        EventType.ENTRY_COMMITTED,
        EventType.MODIFIER_CHANGED,
    )


@pytest.fixture
def make_context(bus, clock):
    """Factory: ``make_context(auto_length_raw=True, enter_length_raw=3)``."""

    def _make(**conf):
        return init_context(EntryConfig.from_dict(conf), bus=bus, clock=clock)

    return _make


@pytest.fixture
def ctx(make_context):
    return make_context()


@pytest.fixture(autouse=True)
def _trace_logging(caplog):
    caplog.set_level(logging.DEBUG, logger="dataentry")
    yield


@pytest.fixture
def config_file(tmp_path):
    """Path of a not yet existing config file inside a temp dir."""
    return str(tmp_path / "config.json")
