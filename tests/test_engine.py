"""Tests for engine tick counting, system order and halting."""
import pytest

from saas_defense.engine import Engine
from saas_defense.market import Market


# --- step() ---

def test_systems_run_in_order():
    engine = Engine(seed=1)
    order = []

    engine.add_system(lambda m, c: order.append("first"))
    engine.add_system(lambda m, c: order.append("second"))
    engine.add_system(lambda m, c: order.append("third"))
    engine.step()
    assert order == ["first", "second", "third"]


def test_step_advances_one_tick():
    engine = Engine(seed=1)
    seen = []
    engine.add_system(lambda m, c: seen.append(c.tick_number))
    engine.step()
    engine.step()
    assert seen == [1, 2]
    assert engine.tick_number == 2


def test_systems_receive_market_and_rng():
    engine = Engine(seed=1)
    seen = []

    def system(market, ctx):
        seen.append((market, ctx.random))

    engine.add_system(system)
    engine.step()
    assert isinstance(seen[0][0], Market)
    assert seen[0][0] is engine.market
    assert seen[0][1] is engine.random


# --- halting ---

def test_request_stop_finishes_the_tick():
    engine = Engine(seed=1)
    calls = []

    def stopper(market, ctx):
        calls.append("stop")
        ctx.request_stop()

    engine.add_system(stopper)
    engine.add_system(lambda m, c: calls.append("after"))
    assert engine.step()
    assert calls == ["stop", "after"]
    assert engine.halted


def test_halted_engine_is_inert():
    engine = Engine(seed=1)
    engine.add_system(lambda m, c: c.request_stop())
    engine.step()
    assert not engine.step()
    assert engine.tick_number == 1


def test_halt_hooks_called_once():
    engine = Engine(seed=1)
    hooks = []
    engine.on_halt(lambda m, c: hooks.append(c.tick_number))
    engine.add_system(lambda m, c: c.request_stop() if c.tick_number == 3 else None)
    engine.run(10)
    assert hooks == [3]


# --- run() ---

def test_run_counts_ticks():
    engine = Engine(seed=1)
    assert engine.run(5) == 5
    assert engine.tick_number == 5


def test_run_stops_early_on_halt():
    engine = Engine(seed=1)
    engine.add_system(lambda m, c: c.request_stop() if c.tick_number == 2 else None)
    assert engine.run(10) == 2


def test_run_zero():
    engine = Engine(seed=1)
    assert engine.run(0) == 0
    assert engine.tick_number == 0


def test_run_negative_raises():
    with pytest.raises(ValueError):
        Engine(seed=1).run(-1)


def test_advance_runs_speed_ticks():
    engine = Engine(seed=1)
    assert engine.advance(2) == 2
    assert engine.tick_number == 2


# --- seeding ---

def test_seed_reproducible():
    a = Engine(seed=42)
    b = Engine(seed=42)
    assert a.seed == 42
    assert [a.random.random() for _ in range(5)] == [b.random.random() for _ in range(5)]


def test_seed_generated_when_missing():
    engine = Engine()
    assert isinstance(engine.seed, int)
