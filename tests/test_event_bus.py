"""EventBus dispatch, depth limit and duplicate suppression."""

from src.core.event_bus import MAX_DEPTH, EventBus, PlannerEvent
from src.core.event_types import EventTypes


def _reloaded(source: str = "catalog_service") -> PlannerEvent:
    return PlannerEvent(event_type=EventTypes.CATALOG_RELOADED, data={}, source=source)


class TestDispatch:
    def test_handler_receives_payload(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.TOOL_STATE_SAVED, received.append)
        bus.emit(
            PlannerEvent(
                event_type=EventTypes.TOOL_STATE_SAVED,
                data={"tool": "upgrade_planner", "sequence": 3},
                source="tool_state_service",
            )
        )
        assert len(received) == 1
        assert received[0].data == {"tool": "upgrade_planner", "sequence": 3}

    def test_handlers_run_in_subscription_order(self):
        bus = EventBus()
        order = []
        bus.subscribe(EventTypes.CATALOG_RELOADED, lambda e: order.append("optimizer"))
        bus.subscribe(EventTypes.CATALOG_RELOADED, lambda e: order.append("upgrade"))
        bus.emit(_reloaded())
        assert order == ["optimizer", "upgrade"]

    def test_event_without_subscribers(self):
        EventBus().emit(_reloaded())

    def test_handlers_are_kept_per_event_type(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.TOOL_STATE_SAVED, received.append)
        bus.emit(_reloaded())
        assert received == []


class TestChainGuards:
    def test_depth_limit(self):
        bus = EventBus()
        calls = 0

        def relay(event: PlannerEvent):
            nonlocal calls
            calls += 1
            bus.emit(_reloaded(source=f"relay_{calls}"))

        bus.subscribe(EventTypes.CATALOG_RELOADED, relay)
        bus.emit(_reloaded())
        assert calls == MAX_DEPTH

    def test_same_source_suppressed_within_chain(self):
        bus = EventBus()
        calls = 0

        def echo(event: PlannerEvent):
            nonlocal calls
            calls += 1
            bus.emit(_reloaded())

        bus.subscribe(EventTypes.CATALOG_RELOADED, echo)
        bus.emit(_reloaded())
        assert calls == 1

    def test_reset_chain_allows_repeat(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.CATALOG_RELOADED, received.append)
        bus.emit(_reloaded())
        bus.emit(_reloaded())
        assert len(received) == 1
        bus.reset_chain()
        bus.emit(_reloaded())
        assert len(received) == 2

    def test_failing_handler_does_not_stop_others(self):
        bus = EventBus()
        cleared = []

        def broken(event: PlannerEvent):
            raise RuntimeError("cache backend gone")

        bus.subscribe(EventTypes.CATALOG_RELOADED, broken)
        bus.subscribe(EventTypes.CATALOG_RELOADED, lambda e: cleared.append(True))
        bus.emit(_reloaded())
        assert cleared == [True]


def test_clear_drops_handlers():
    bus = EventBus()
    received = []
    bus.subscribe(EventTypes.CATALOG_RELOADED, received.append)
    bus.clear()
    bus.emit(_reloaded())
    assert received == []
