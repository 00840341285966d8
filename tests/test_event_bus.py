from __future__ import annotations

import json

import pytest

from cpu_sim.events import EventBus, EventType


def test_bus_assigns_sequence_and_deterministic_ids() -> None:
    bus = EventBus()
    seen = []
    bus.subscribe(seen.append)
    first = bus.publish(event_type=EventType.IDLE, time=0)
    second = bus.publish(event_type=EventType.RUN, time=1, pid=3, payload={"age": 1})

    assert [event.seq for event in seen] == [0, 1]
    assert first.event_id == "evt-00000000"
    assert second.event_id == "evt-00000001"
    assert bus.published == 2
    assert json.loads(second.to_json())["type"] == "Run"


def test_seeded_random_ids_repeat_for_same_seed() -> None:
    ids = []
    for _ in range(2):
        bus = EventBus(event_id_mode="seeded_random", event_id_seed=5)
        ids.append([bus.publish(event_type=EventType.IDLE, time=t).event_id for t in range(3)])
    assert ids[0] == ids[1]
    assert len(set(ids[0])) == 3


def test_reset_drops_handlers_and_sequence() -> None:
    bus = EventBus()
    seen = []
    bus.subscribe(seen.append)
    bus.publish(event_type=EventType.IDLE, time=0)
    bus.reset()
    event = bus.publish(event_type=EventType.IDLE, time=1)
    assert event.seq == 0
    assert len(seen) == 1


def test_typed_subscription_only_sees_selected_types() -> None:
    bus = EventBus()
    runs = []
    everything = []
    bus.subscribe(runs.append, types={EventType.RUN})
    bus.subscribe(everything.append)
    bus.publish(event_type=EventType.IDLE, time=0)
    bus.publish(event_type=EventType.RUN, time=1, pid=0)
    bus.publish(event_type=EventType.PROCESS_EXIT, time=2, pid=0)

    assert [event.time for event in runs] == [1]
    assert len(everything) == 3


def test_unknown_id_mode_is_rejected() -> None:
    with pytest.raises(ValueError, match="unknown event id mode"):
        EventBus(event_id_mode="sequential")
