"""System factories, one per phase of the tick.

Each factory closes over the collaborators its phase needs and returns a
``system(market, ctx)`` callable for :meth:`Engine.add_system`.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from saas_defense import signals
from saas_defense.product import ProductUpgrade, apply_release
from saas_defense.tower import cheapest_tower_cost
from saas_defense.types import CustomerStatus, CustomerType

if TYPE_CHECKING:
    import random

    from saas_defense.config import SimulationConfig
    from saas_defense.economy import Economy
    from saas_defense.market import Market
    from saas_defense.metrics import MetricsCalculator
    from saas_defense.path import Path
    from saas_defense.signals import SignalBus
    from saas_defense.types import TickContext

logger = logging.getLogger(__name__)

_STATUS_SIGNALS = {
    CustomerStatus.ACTIVE: signals.CUSTOMER_CONVERTED,
    CustomerStatus.CHURNED: signals.CUSTOMER_CHURNED,
    CustomerStatus.GOLD: signals.CUSTOMER_RECOVERED,
}


def pick_customer_type(
    weights: tuple[tuple[CustomerType, float], ...], rng: random.Random,
) -> CustomerType:
    """Weighted draw; falls back to the first type on rounding slack."""
    roll = rng.random()
    total = 0.0
    for ctype, weight in weights:
        total += weight
        if roll < total:
            return ctype
    return weights[0][0]


def spawn_prospect(
    market: Market, config: SimulationConfig, rng: random.Random, bus: SignalBus,
) -> None:
    ctype = pick_customer_type(config.type_weights, rng)
    customer = market.spawn_customer(ctype, config.width, config.height, rng)
    bus.publish(signals.CUSTOMER_SPAWNED, customer_id=customer.id, type=ctype)


def publish_status_change(
    bus: SignalBus, customer_id: str, before: CustomerStatus, after: CustomerStatus,
) -> None:
    name = _STATUS_SIGNALS.get(after)
    if name is not None:
        bus.publish(name, customer_id=customer_id, previous=before)


def make_spawn_system(
    config: SimulationConfig, bus: SignalBus,
) -> Callable[[Market, TickContext], None]:
    def spawn_system(market: Market, ctx: TickContext) -> None:
        if ctx.random.random() < config.spawn_rate:
            spawn_prospect(market, config, ctx.random, bus)

    return spawn_system


def make_movement_system(
    path: Path, bus: SignalBus,
) -> Callable[[Market, TickContext], None]:
    """Move every customer; lap completions run the renewal decision."""

    def movement_system(market: Market, ctx: TickContext) -> None:
        for customer in market.customers:
            before = customer.status
            if not customer.move(path, ctx.random):
                continue
            bus.publish(
                signals.CUSTOMER_LAP,
                customer_id=customer.id,
                lap=customer.lap_count,
            )
            if customer.status is not before:
                logger.debug("%s churned at renewal", customer.id)
                publish_status_change(bus, customer.id, before, customer.status)

    return movement_system


def make_tower_system(bus: SignalBus) -> Callable[[Market, TickContext], None]:
    def tower_system(market: Market, ctx: TickContext) -> None:
        for tower in market.towers:
            for customer, before in tower.tick(market.customers, ctx.random):
                publish_status_change(bus, customer.id, before, customer.status)
        # A later tower's upsell can grow a customer an earlier tower holds.
        for tower in market.towers:
            tower.enforce_caps()

    return tower_system


def make_product_system(
    product: ProductUpgrade, rate: float, bus: SignalBus,
) -> Callable[[Market, TickContext], None]:
    def product_system(market: Market, ctx: TickContext) -> None:
        if not product.advance(rate):
            return
        good, bad = apply_release(market.customers, ctx.random)
        for tower in market.towers:
            tower.enforce_caps()
        logger.info("product upgrade landed: %d pleased, %d upset", good, bad)
        bus.publish(signals.PRODUCT_UPGRADE_COMPLETED, pleased=good, upset=bad)

    return product_system


def make_metrics_system(
    calculator: MetricsCalculator, economy: Economy, bus: SignalBus,
) -> Callable[[Market, TickContext], None]:
    def metrics_system(market: Market, ctx: TickContext) -> None:
        metrics = calculator.calculate(market.customers, economy.invested)
        bus.publish(signals.METRICS_UPDATED, metrics=metrics)

    return metrics_system


def make_terminal_system(
    economy: Economy, bus: SignalBus,
) -> Callable[[Market, TickContext], None]:
    """Stop the run once nobody pays and no tower is affordable."""
    floor = cheapest_tower_cost()

    def terminal_system(market: Market, ctx: TickContext) -> None:
        if market.paying_customers() or economy.capital >= floor:
            return
        logger.info(
            "game over at tick %d with capital %.0f", ctx.tick_number, economy.capital,
        )
        bus.publish(signals.GAME_OVER, tick=ctx.tick_number, capital=economy.capital)
        ctx.request_stop()

    return terminal_system


def make_signal_system(bus: SignalBus) -> Callable[[Market, TickContext], None]:
    def signal_system(market: Market, ctx: TickContext) -> None:
        bus.flush()

    return signal_system
