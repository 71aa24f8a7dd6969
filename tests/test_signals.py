"""Unit tests for SignalBus."""
from __future__ import annotations

import pytest

from saas_defense import signals
from saas_defense.signals import SIGNAL_FIELDS, SIGNALS, SignalBus
from saas_defense.types import CustomerStatus


def placed(tower_id: str = "tower_0") -> dict:
    return {"tower_id": tower_id, "type": None, "cost": 75_000}


def test_subscribe_and_flush():
    bus = SignalBus()
    received = []

    def handler(signal_name: str, data: dict) -> None:
        received.append((signal_name, data))

    bus.subscribe(signals.TOWER_PLACED, handler)
    bus.publish(signals.TOWER_PLACED, **placed())
    assert received == []
    bus.flush()
    assert received == [(signals.TOWER_PLACED, placed())]


def test_flush_empties_queue():
    bus = SignalBus()
    bus.publish(signals.GAME_OVER, tick=3, capital=0)
    assert bus.pending() == 1
    bus.flush()
    assert bus.pending() == 0


def test_handlers_only_get_their_signal():
    bus = SignalBus()
    received = []
    bus.subscribe(signals.CUSTOMER_CHURNED, lambda n, d: received.append(n))
    bus.publish(signals.CUSTOMER_CONVERTED, customer_id="a", previous=CustomerStatus.PROSPECT)
    bus.publish(signals.CUSTOMER_CHURNED, customer_id="b", previous=CustomerStatus.ACTIVE)
    bus.flush()
    assert received == [signals.CUSTOMER_CHURNED]


def test_multiple_handlers_in_registration_order():
    bus = SignalBus()
    order = []
    bus.subscribe(signals.CUSTOMER_LAP, lambda n, d: order.append("a"))
    bus.subscribe(signals.CUSTOMER_LAP, lambda n, d: order.append("b"))
    bus.publish(signals.CUSTOMER_LAP, customer_id="c", lap=1)
    bus.flush()
    assert order == ["a", "b"]


def test_unsubscribe():
    bus = SignalBus()
    received = []

    def handler(signal_name: str, data: dict) -> None:
        received.append(signal_name)

    bus.subscribe(signals.TOWER_SOLD, handler)
    bus.unsubscribe(signals.TOWER_SOLD, handler)
    bus.unsubscribe(signals.TOWER_SOLD, handler)
    bus.unsubscribe(signals.GAME_OVER, handler)
    bus.publish(signals.TOWER_SOLD, tower_id="t", value=52_500)
    bus.flush()
    assert received == []


def test_unknown_signal_rejected():
    bus = SignalBus()
    with pytest.raises(ValueError):
        bus.subscribe("tower_exploded", lambda n, d: None)
    with pytest.raises(ValueError):
        bus.publish("tower_exploded", tower_id="t")
    assert bus.pending() == 0


# --- payloads ---

def test_every_signal_declares_its_fields():
    assert set(SIGNAL_FIELDS) == SIGNALS
    assert all(SIGNAL_FIELDS[name] for name in SIGNALS)


def test_missing_field_rejected():
    bus = SignalBus()
    with pytest.raises(ValueError):
        bus.publish(signals.TOWER_SOLD, tower_id="t")
    assert bus.pending() == 0


def test_extra_field_rejected():
    bus = SignalBus()
    with pytest.raises(ValueError):
        bus.publish(signals.GAME_OVER, tick=1, capital=0, reason="broke")
    assert bus.pending() == 0


# --- flush ordering ---

def test_publish_during_flush_waits_for_next_flush():
    bus = SignalBus()
    received = []

    def relay(signal_name: str, data: dict) -> None:
        received.append(signal_name)
        bus.publish(signals.METRICS_UPDATED, metrics=None)

    bus.subscribe(signals.TOWER_PLACED, relay)
    bus.subscribe(signals.METRICS_UPDATED, lambda n, d: received.append(n))
    bus.publish(signals.TOWER_PLACED, **placed("t"))
    bus.flush()
    assert received == [signals.TOWER_PLACED]
    bus.flush()
    assert received == [signals.TOWER_PLACED, signals.METRICS_UPDATED]


def test_clear_drops_pending():
    bus = SignalBus()
    received = []
    bus.subscribe(signals.GAME_OVER, lambda n, d: received.append(n))
    bus.publish(signals.GAME_OVER, tick=1, capital=0)
    bus.clear()
    bus.flush()
    assert received == []
