"""Tower - a placed sales or customer-success capability."""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import Callable, Iterable

from saas_defense.customer import Customer
from saas_defense.types import (
    CustomerStatus,
    CustomerType,
    Point,
    TargetingStrategy,
    TowerType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TowerSpec:
    """Level-1 figures for a tower type."""

    cost: int
    range: float
    attack_speed: float  # cooldown in ticks, higher is slower
    max_targets: int
    max_value_managed: float


TOWER_SPECS: dict[TowerType, TowerSpec] = {
    TowerType.SALES: TowerSpec(
        cost=75_000, range=100.0, attack_speed=60.0,
        max_targets=3, max_value_managed=1_000_000.0,
    ),
    TowerType.CSM: TowerSpec(
        cost=60_000, range=80.0, attack_speed=30.0,
        max_targets=5, max_value_managed=2_000_000.0,
    ),
}

MIN_ATTACK_SPEED = 10.0
UPGRADE_COST_FACTOR = 0.75
SELL_RETURN = 0.7

BURNOUT_RECOVERY = 0.5
BURNOUT_GAIN = 0.1

CONVERSION_CHANCE = 0.01
UPSELL_CHANCE = 0.005
UPSELL_FRACTION = 0.05
WINBACK_CHANCE = 0.002
CSM_HEALTH_BOOST = 1.0
CSM_TRUST_BOOST = 0.5

_Filter = Callable[[Customer], bool]


def _status_is(status: CustomerStatus) -> _Filter:
    return lambda c: c.status is status


def _active_with_health(low: float, high: float) -> _Filter:
    return lambda c: c.status is CustomerStatus.ACTIVE and low < c.health <= high


STRATEGY_FILTERS: dict[TowerType, dict[TargetingStrategy, _Filter]] = {
    TowerType.SALES: {
        TargetingStrategy.DEFAULT: lambda c: True,
        TargetingStrategy.PROSPECTS: _status_is(CustomerStatus.PROSPECT),
        TargetingStrategy.UPSELL: _status_is(CustomerStatus.ACTIVE),
        TargetingStrategy.WINBACK: _status_is(CustomerStatus.CHURNED),
        TargetingStrategy.ENTERPRISE: lambda c: c.type is CustomerType.ENTERPRISE,
        TargetingStrategy.SMB: lambda c: c.type in (CustomerType.SMALL, CustomerType.MEDIUM),
    },
    TowerType.CSM: {
        TargetingStrategy.DEFAULT: _status_is(CustomerStatus.ACTIVE),
        TargetingStrategy.RED: _active_with_health(-math.inf, 25.0),
        TargetingStrategy.YELLOW: _active_with_health(25.0, 75.0),
        TargetingStrategy.GREEN: _active_with_health(75.0, math.inf),
    },
}

# Sales works the richest accounts first, customer success the sickest.
PRIORITY_KEYS: dict[TowerType, Callable[[Customer], float]] = {
    TowerType.SALES: lambda c: -c.spend,
    TowerType.CSM: lambda c: c.health,
}


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def base_cost(ttype: TowerType) -> int:
    return TOWER_SPECS[ttype].cost


def cheapest_tower_cost() -> int:
    return min(spec.cost for spec in TOWER_SPECS.values())


def level_stats(ttype: TowerType, level: int) -> tuple[float, float, int, float]:
    """Return ``(range, attack_speed, max_targets, max_value_managed)`` for a level."""
    spec = TOWER_SPECS[ttype]
    steps = level - 1
    return (
        spec.range * (1 + 0.1 * steps),
        max(MIN_ATTACK_SPEED, spec.attack_speed * (1 - 0.05 * steps)),
        spec.max_targets + steps // 2,
        spec.max_value_managed * (1 + 0.2 * steps),
    )


@dataclass
class Tower:
    """A stationary actor working a bounded set of in-range customers.

    The level-derived figures are cached on the instance and refreshed by
    :meth:`upgrade`. ``current_targets`` never exceeds ``max_targets`` in
    count or ``max_value_managed`` in summed spend.
    """

    id: str
    type: TowerType
    position: Point
    level: int = 1
    targeting_strategy: TargetingStrategy = TargetingStrategy.DEFAULT
    burnout: float = 0.0
    attack_cooldown: int = 0
    current_targets: list[Customer] = field(default_factory=list)
    range: float = field(init=False)
    attack_speed: float = field(init=False)
    max_targets: int = field(init=False)
    max_value_managed: float = field(init=False)

    def __post_init__(self) -> None:
        self._apply_level()

    def _apply_level(self) -> None:
        (
            self.range,
            self.attack_speed,
            self.max_targets,
            self.max_value_managed,
        ) = level_stats(self.type, self.level)

    # -- Economics --

    @property
    def upgrade_cost(self) -> int:
        """Cost of going from the current level to the next."""
        return round_half_up(base_cost(self.type) * UPGRADE_COST_FACTOR * self.level)

    @property
    def total_invested(self) -> int:
        cost = base_cost(self.type)
        return cost + sum(
            round_half_up(cost * UPGRADE_COST_FACTOR * i) for i in range(1, self.level)
        )

    @property
    def sell_value(self) -> int:
        return round_half_up(self.total_invested * SELL_RETURN)

    def upgrade(self) -> None:
        self.level += 1
        self._apply_level()
        logger.debug("%s upgraded to level %d", self.id, self.level)

    # -- Targeting --

    @property
    def managed_value(self) -> float:
        return sum(c.spend for c in self.current_targets)

    @property
    def effectiveness(self) -> float:
        """Multiplier burnout applies to every effect and chance."""
        return 1 - self.burnout / 100

    def in_range(self, customer: Customer) -> bool:
        return math.dist(self.position, customer.position) <= self.range

    def can_handle(self, customer: Customer) -> bool:
        if len(self.current_targets) >= self.max_targets:
            return False
        return self.managed_value + customer.spend <= self.max_value_managed

    def valid_strategies(self) -> frozenset[TargetingStrategy]:
        return frozenset(STRATEGY_FILTERS[self.type])

    def set_strategy(self, strategy: TargetingStrategy) -> bool:
        if strategy not in STRATEGY_FILTERS[self.type]:
            return False
        self.targeting_strategy = strategy
        return True

    def candidates(self, customers: Iterable[Customer]) -> list[Customer]:
        """In-range customers passing the strategy filter, in priority order."""
        keep = STRATEGY_FILTERS[self.type][self.targeting_strategy]
        found = [c for c in customers if self.in_range(c) and keep(c)]
        found.sort(key=PRIORITY_KEYS[self.type])
        return found

    def enforce_caps(self) -> None:
        """Release the most recently added targets until both caps hold."""
        while self.current_targets and (
            len(self.current_targets) > self.max_targets
            or self.managed_value > self.max_value_managed
        ):
            self.current_targets.pop()

    def refresh_targets(self, customers: list[Customer]) -> None:
        live = {c.id for c in customers}
        self.current_targets = [
            c for c in self.current_targets if c.id in live and self.in_range(c)
        ]
        self.enforce_caps()
        if len(self.current_targets) >= self.max_targets:
            return
        held = {c.id for c in self.current_targets}
        for customer in self.candidates(customers):
            if customer.id in held or not self.can_handle(customer):
                continue
            self.current_targets.append(customer)
            held.add(customer.id)
            if len(self.current_targets) >= self.max_targets:
                break

    def update_burnout(self) -> None:
        if not self.current_targets:
            self.burnout = max(0.0, self.burnout - BURNOUT_RECOVERY)
            return
        rate = len(self.current_targets) / self.max_targets * BURNOUT_GAIN
        self.burnout = min(100.0, self.burnout + rate)

    # -- Action --

    def update(self, rng: random.Random) -> list[tuple[Customer, CustomerStatus]]:
        """Count down the cooldown or act.

        Returns ``(customer, previous_status)`` for every target whose
        lifecycle status changed.
        """
        if self.attack_cooldown > 0:
            self.attack_cooldown -= 1
            return []
        if not self.current_targets:
            return []
        changed = self.act(rng)
        self.attack_cooldown = round_half_up(self.attack_speed * (1 + self.burnout / 100))
        return changed

    def act(self, rng: random.Random) -> list[tuple[Customer, CustomerStatus]]:
        factor = self.effectiveness
        changed: list[tuple[Customer, CustomerStatus]] = []
        for customer in self.current_targets:
            customer.engaged = True
            before = customer.status
            if self.type is TowerType.SALES:
                self._sell_to(customer, factor, rng)
            elif customer.status is CustomerStatus.ACTIVE:
                customer.adjust_health(CSM_HEALTH_BOOST * factor)
                customer.adjust_trust(CSM_TRUST_BOOST * factor)
            if customer.status is not before:
                changed.append((customer, before))
        self.enforce_caps()
        return changed

    @staticmethod
    def _sell_to(customer: Customer, factor: float, rng: random.Random) -> None:
        if customer.status is CustomerStatus.PROSPECT:
            if rng.random() < CONVERSION_CHANCE * factor:
                customer.convert()
        elif customer.status is CustomerStatus.ACTIVE:
            if rng.random() < UPSELL_CHANCE * factor:
                customer.increase_spend(UPSELL_FRACTION)
        elif customer.status is CustomerStatus.CHURNED:
            if rng.random() < WINBACK_CHANCE * factor:
                customer.recover_to_gold()

    def tick(
        self, customers: list[Customer], rng: random.Random,
    ) -> list[tuple[Customer, CustomerStatus]]:
        """Refresh targets, update burnout, then count down or act."""
        self.refresh_targets(customers)
        self.update_burnout()
        return self.update(rng)
