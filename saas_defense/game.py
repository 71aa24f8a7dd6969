"""Game - wires the simulation together and takes player commands."""
from __future__ import annotations

import logging
import math
from enum import Enum
from numbers import Real
from typing import TypeVar

from saas_defense import signals
from saas_defense.config import SimulationConfig
from saas_defense.customer import Customer
from saas_defense.economy import Economy
from saas_defense.engine import Engine
from saas_defense.market import Market
from saas_defense.metrics import Metrics, MetricsCalculator
from saas_defense.path import Path
from saas_defense.product import ProductUpgrade
from saas_defense.signals import Handler, SignalBus
from saas_defense.snapshot import CustomerView, GameSnapshot, TowerView
from saas_defense.systems import (
    make_metrics_system,
    make_movement_system,
    make_product_system,
    make_signal_system,
    make_spawn_system,
    make_terminal_system,
    make_tower_system,
    spawn_prospect,
)
from saas_defense.tower import Tower, base_cost
from saas_defense.types import (
    ActionResult,
    Failure,
    Point,
    TargetingStrategy,
    TowerType,
)

logger = logging.getLogger(__name__)


E = TypeVar("E", bound=Enum)


def _parse_enum(enum_cls: type[E], value: object) -> E | None:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls[value.upper()]
        except KeyError:
            return None
    return None


def _parse_point(value: object) -> Point | None:
    """A finite ``(x, y)`` pair of real numbers as floats, else None."""
    if not isinstance(value, (tuple, list)) or len(value) != 2:
        return None
    if not all(isinstance(v, Real) and not isinstance(v, bool) for v in value):
        return None
    x, y = float(value[0]), float(value[1])
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return (x, y)


class Game:
    """One simulation run and the operations the player can perform on it.

    Player operations never raise for bad input; they return an
    :class:`ActionResult` whose ``reason`` says why nothing changed.
    """

    def __init__(
        self, config: SimulationConfig | None = None, seed: int | None = None,
    ) -> None:
        self._config = (config or SimulationConfig()).validate()
        self._engine = Engine(seed=seed)
        self._path = Path(
            self._config.width,
            self._config.height,
            samples=self._config.path_samples,
            path_width=self._config.path_width,
        )
        self._economy = Economy(capital=self._config.starting_capital)
        self._metrics = MetricsCalculator(history_limit=self._config.history_limit)
        self._product = ProductUpgrade()
        self._bus = SignalBus()
        self._speed = self._config.speed

        engine = self._engine
        engine.add_system(make_spawn_system(self._config, self._bus))
        engine.add_system(make_movement_system(self._path, self._bus))
        engine.add_system(make_tower_system(self._bus))
        engine.add_system(make_product_system(
            self._product, self._config.product_upgrade_rate, self._bus,
        ))
        engine.add_system(make_metrics_system(self._metrics, self._economy, self._bus))
        engine.add_system(make_terminal_system(self._economy, self._bus))
        engine.add_system(make_signal_system(self._bus))

        for _ in range(self._config.initial_prospects):
            spawn_prospect(engine.market, self._config, engine.random, self._bus)

    # -- Read access --

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def seed(self) -> int:
        return self._engine.seed

    @property
    def path(self) -> Path:
        return self._path

    @property
    def tick(self) -> int:
        return self._engine.tick_number

    @property
    def capital(self) -> float:
        return self._economy.capital

    @property
    def invested(self) -> float:
        return self._economy.invested

    @property
    def market(self) -> Market:
        return self._engine.market

    @property
    def customers(self) -> tuple[Customer, ...]:
        return tuple(self._engine.market.customers)

    @property
    def towers(self) -> tuple[Tower, ...]:
        return tuple(self._engine.market.towers)

    @property
    def metrics(self) -> Metrics:
        return self._metrics.current

    @property
    def metrics_calculator(self) -> MetricsCalculator:
        return self._metrics

    @property
    def product_upgrade(self) -> ProductUpgrade:
        return self._product

    @property
    def game_over(self) -> bool:
        return self._engine.halted

    @property
    def speed(self) -> int:
        return self._speed

    @speed.setter
    def speed(self, value: int) -> None:
        if value < 1:
            raise ValueError(f"speed must be >= 1, got {value}")
        self._speed = value

    def subscribe(self, signal_name: str, handler: Handler) -> None:
        self._bus.subscribe(signal_name, handler)

    def unsubscribe(self, signal_name: str, handler: Handler) -> None:
        self._bus.unsubscribe(signal_name, handler)

    def snapshot(self) -> GameSnapshot:
        market = self._engine.market
        return GameSnapshot(
            tick=self._engine.tick_number,
            capital=self._economy.capital,
            customers=tuple(CustomerView.of(c) for c in market.customers),
            towers=tuple(TowerView.of(t) for t in market.towers),
            metrics=self._metrics.current,
            product_upgrade_active=self._product.active,
            product_upgrade_progress=self._product.progress,
            burn_rate=self._product.burn_rate,
            speed=self._speed,
            game_over=self._engine.halted,
        )

    # -- Simulation --

    def advance(self) -> bool:
        """Run exactly one tick. A no-op returning False once the game is over."""
        return self._engine.step()

    def frame(self) -> int:
        """Run ``speed`` ticks, as the renderer does once per frame."""
        return self._engine.advance(self._speed)

    # -- Player operations --

    def _resolve(self, tower: Tower | str) -> Tower | None:
        if isinstance(tower, str):
            tower_id = tower
        elif isinstance(tower, Tower):
            tower_id = tower.id
        else:
            return None
        found = self._engine.market.find_tower(tower_id)
        if found is None or (isinstance(tower, Tower) and found is not tower):
            return None
        return found

    def _reject(self, operation: str, reason: Failure) -> ActionResult:
        logger.debug("%s rejected: %s", operation, reason.name)
        return ActionResult.failure(reason)

    def can_place(self, position: Point) -> bool:
        point = _parse_point(position)
        if point is None:
            return False
        size = self._config.tower_size
        if not self._path.is_valid_placement(*point, size):
            return False
        return self._engine.market.tower_at(point, within=size) is None

    def place_tower(self, tower_type: TowerType | str, position: Point) -> ActionResult:
        if self.game_over:
            return self._reject("place_tower", Failure.GAME_OVER)
        ttype = _parse_enum(TowerType, tower_type)
        if ttype is None:
            return self._reject("place_tower", Failure.UNKNOWN_TYPE)
        point = _parse_point(position)
        if point is None:
            return self._reject("place_tower", Failure.INVALID_PLACEMENT)
        cost = base_cost(ttype)
        if not self._economy.can_afford(cost):
            return self._reject("place_tower", Failure.INSUFFICIENT_FUNDS)
        if not self.can_place(point):
            return self._reject("place_tower", Failure.INVALID_PLACEMENT)

        self._economy.invest(cost)
        tower = self._engine.market.add_tower(ttype, point)
        logger.info("placed %s at (%.0f, %.0f) for %d", tower.id, *tower.position, cost)
        self._bus.publish(signals.TOWER_PLACED, tower_id=tower.id, type=ttype, cost=cost)
        return ActionResult.success(tower)

    def upgrade_tower(self, tower: Tower | str) -> ActionResult:
        if self.game_over:
            return self._reject("upgrade_tower", Failure.GAME_OVER)
        found = self._resolve(tower)
        if found is None:
            return self._reject("upgrade_tower", Failure.NOT_FOUND)
        cost = found.upgrade_cost
        if not self._economy.can_afford(cost):
            return self._reject("upgrade_tower", Failure.INSUFFICIENT_FUNDS)

        self._economy.invest(cost)
        found.upgrade()
        logger.info("upgraded %s to level %d for %d", found.id, found.level, cost)
        self._bus.publish(
            signals.TOWER_UPGRADED, tower_id=found.id, level=found.level, cost=cost,
        )
        return ActionResult.success(found)

    def sell_tower(self, tower: Tower | str) -> ActionResult:
        if self.game_over:
            return self._reject("sell_tower", Failure.GAME_OVER)
        found = self._resolve(tower)
        if found is None:
            return self._reject("sell_tower", Failure.NOT_FOUND)

        value = found.sell_value
        self._engine.market.remove_tower(found)
        found.current_targets.clear()
        self._economy.credit(value)
        logger.info("sold %s for %d", found.id, value)
        self._bus.publish(signals.TOWER_SOLD, tower_id=found.id, value=value)
        return ActionResult.success(found)

    def set_targeting_strategy(
        self, tower: Tower | str, strategy: TargetingStrategy | str,
    ) -> ActionResult:
        if self.game_over:
            return self._reject("set_targeting_strategy", Failure.GAME_OVER)
        found = self._resolve(tower)
        if found is None:
            return self._reject("set_targeting_strategy", Failure.NOT_FOUND)
        parsed = _parse_enum(TargetingStrategy, strategy)
        if parsed is None or not found.set_strategy(parsed):
            return self._reject("set_targeting_strategy", Failure.INVALID_STRATEGY)
        return ActionResult.success(found)

    def start_product_upgrade(self) -> ActionResult:
        if self.game_over:
            return self._reject("start_product_upgrade", Failure.GAME_OVER)
        if self._product.active:
            return self._reject("start_product_upgrade", Failure.ALREADY_ACTIVE)
        cost = ProductUpgrade.quote(
            self._metrics.current.arr,
            self._config.product_upgrade_min_cost,
            self._config.product_upgrade_arr_share,
        )
        if not self._economy.can_afford(cost):
            return self._reject("start_product_upgrade", Failure.INSUFFICIENT_FUNDS)

        self._economy.debit(cost)
        self._product.start(cost)
        logger.info("product upgrade started for %.0f", cost)
        self._bus.publish(signals.PRODUCT_UPGRADE_STARTED, cost=cost)
        return ActionResult.success()
