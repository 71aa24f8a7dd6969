"""Customer - one account moving through the business lifecycle."""
from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from saas_defense.types import CustomerStatus, CustomerType, Movement, Point

if TYPE_CHECKING:
    from saas_defense.path import Path

logger = logging.getLogger(__name__)

# Allowed lifecycle edges. GOLD is terminal; nothing returns to PROSPECT.
LIFECYCLE: dict[CustomerStatus, frozenset[CustomerStatus]] = {
    CustomerStatus.PROSPECT: frozenset({CustomerStatus.ACTIVE}),
    CustomerStatus.ACTIVE: frozenset({CustomerStatus.CHURNED}),
    CustomerStatus.CHURNED: frozenset({CustomerStatus.GOLD}),
    CustomerStatus.GOLD: frozenset(),
}

# (min, spread) draws per customer type.
SPEND_RANGES: dict[CustomerType, tuple[float, float]] = {
    CustomerType.SMALL: (5_000.0, 5_000.0),
    CustomerType.MEDIUM: (20_000.0, 30_000.0),
    CustomerType.ENTERPRISE: (100_000.0, 400_000.0),
}
SPEED_RANGES: dict[CustomerType, tuple[float, float]] = {
    CustomerType.SMALL: (0.001, 0.0005),
    CustomerType.MEDIUM: (0.0008, 0.0003),
    CustomerType.ENTERPRISE: (0.0005, 0.0002),
}

EDGE_OFFSET = 20.0
WANDER_STEP = 0.5
ARRIVAL_EPSILON = 1e-6
LAP_DECAY = 5.0
RENEWAL_EXPANSION_CHANCE = 0.2

STATUS_COLORS: dict[CustomerStatus, str] = {
    CustomerStatus.PROSPECT: "#4285f4",
    CustomerStatus.CHURNED: "#9e9e9e",
    CustomerStatus.GOLD: "#ffab00",
}
HEALTH_COLORS: tuple[tuple[float, str], ...] = (
    (75.0, "#34a853"),
    (50.0, "#ffd700"),
    (25.0, "#ff9800"),
)
CRITICAL_COLOR = "#ea4335"


def _clamp(value: float) -> float:
    return max(0.0, min(100.0, value))


@dataclass
class Customer:
    """A prospect or account. ``type`` is fixed for life.

    ``health`` and ``trust`` only change through :meth:`adjust_health` and
    :meth:`adjust_trust`, which keep both in [0, 100]. ``trust`` is never
    shown to the player.
    """

    id: str
    type: CustomerType
    position: Point
    spend: float
    movement_speed: float
    approach_speed: float
    status: CustomerStatus = CustomerStatus.PROSPECT
    health: float = 100.0
    trust: float = 50.0
    path_position: float = 0.0
    lap_count: int = 0
    engaged: bool = False
    movement: Movement = Movement.WANDERING
    target_point: Point | None = field(default=None)

    @classmethod
    def create(
        cls,
        customer_id: str,
        ctype: CustomerType,
        position: Point,
        rng: random.Random,
    ) -> Customer:
        """Build a prospect with type-dependent spend and speed draws."""
        spend_min, spend_spread = SPEND_RANGES[ctype]
        speed_min, speed_spread = SPEED_RANGES[ctype]
        return cls(
            id=customer_id,
            type=ctype,
            position=position,
            spend=spend_min + rng.random() * spend_spread,
            movement_speed=speed_min + rng.random() * speed_spread,
            approach_speed=0.5 + rng.random() * 0.5,
        )

    @classmethod
    def spawn_at_edge(
        cls,
        customer_id: str,
        ctype: CustomerType,
        width: float,
        height: float,
        rng: random.Random,
    ) -> Customer:
        """Create a prospect just outside a random edge of the play field."""
        edge = rng.randrange(4)
        if edge == 0:
            position = (rng.random() * width, -EDGE_OFFSET)
        elif edge == 1:
            position = (width + EDGE_OFFSET, rng.random() * height)
        elif edge == 2:
            position = (rng.random() * width, height + EDGE_OFFSET)
        else:
            position = (-EDGE_OFFSET, rng.random() * height)
        return cls.create(customer_id, ctype, position, rng)

    # -- Derived attributes --

    @property
    def is_on_track(self) -> bool:
        return self.movement is Movement.ON_TRACK

    @property
    def is_paying(self) -> bool:
        return self.status in (CustomerStatus.ACTIVE, CustomerStatus.GOLD)

    @property
    def size(self) -> float:
        return 5 + math.log10(self.spend) * 2

    @property
    def color(self) -> str:
        if self.status is not CustomerStatus.ACTIVE:
            return STATUS_COLORS[self.status]
        for floor, color in HEALTH_COLORS:
            if self.health > floor:
                return color
        return CRITICAL_COLOR

    # -- Attribute mutation --

    def adjust_health(self, delta: float) -> None:
        self.health = _clamp(self.health + delta)

    def adjust_trust(self, delta: float) -> None:
        self.trust = _clamp(self.trust + delta)

    def increase_spend(self, fraction: float) -> None:
        self.spend *= 1 + fraction

    # -- Lifecycle --

    def _transition(self, target: CustomerStatus) -> bool:
        if target not in LIFECYCLE[self.status]:
            return False
        logger.debug("%s %s -> %s", self.id, self.status.name, target.name)
        self.status = target
        return True

    def convert(self) -> bool:
        """PROSPECT -> ACTIVE."""
        return self._transition(CustomerStatus.ACTIVE)

    def churn(self) -> bool:
        """ACTIVE -> CHURNED."""
        return self._transition(CustomerStatus.CHURNED)

    def recover_to_gold(self) -> bool:
        """CHURNED -> GOLD, restoring full health and trust."""
        if not self._transition(CustomerStatus.GOLD):
            return False
        self.health = 100.0
        self.trust = 100.0
        return True

    def decide_renewal(self, rng: random.Random) -> bool:
        """Renew or churn an ACTIVE customer. Returns True when it renewed."""
        churn_probability = (1 - self.trust / 100) * (1 - self.health / 100)
        if rng.random() < churn_probability:
            self.churn()
            return False
        if rng.random() < RENEWAL_EXPANSION_CHANCE:
            self.increase_spend(rng.random() * 0.1)
        return True

    def complete_lap(self, rng: random.Random) -> None:
        """Renewal point: decide renewal, then decay trust and health."""
        if self.status is CustomerStatus.PROSPECT:
            return
        if self.status is CustomerStatus.ACTIVE:
            self.decide_renewal(rng)
        self.adjust_trust(-LAP_DECAY)
        self.adjust_health(-LAP_DECAY)

    # -- Movement --

    def move(self, path: Path, rng: random.Random) -> bool:
        """Advance one tick of movement. Returns True when a lap completed."""
        if self.movement is Movement.WANDERING:
            if not self.engaged:
                self._wander(path.width, path.height, rng)
                return False
            t = rng.random()
            self.path_position = t
            self.target_point = path.position_at(t)
            self.movement = Movement.APPROACHING

        if self.movement is Movement.APPROACHING:
            self._approach()
            return False

        self.path_position += self.movement_speed
        lapped = False
        if self.path_position >= 1.0:
            self.path_position = 0.0
            self.lap_count += 1
            self.complete_lap(rng)
            lapped = True
        self.position = path.position_at(self.path_position)
        return lapped

    def _wander(self, width: float, height: float, rng: random.Random) -> None:
        x = self.position[0] + (rng.random() - 0.5) * WANDER_STEP
        y = self.position[1] + (rng.random() - 0.5) * WANDER_STEP
        if x < 0:
            x = EDGE_OFFSET
        elif x > width:
            x = width - EDGE_OFFSET
        if y < 0:
            y = EDGE_OFFSET
        elif y > height:
            y = height - EDGE_OFFSET
        self.position = (x, y)

    def _approach(self) -> None:
        if self.target_point is None:
            return
        tx, ty = self.target_point
        dx = tx - self.position[0]
        dy = ty - self.position[1]
        distance = math.hypot(dx, dy)
        if distance <= ARRIVAL_EPSILON or self.approach_speed >= distance:
            self.position = self.target_point
            self.movement = Movement.ON_TRACK
            return
        self.position = (
            self.position[0] + dx / distance * self.approach_speed,
            self.position[1] + dy / distance * self.approach_speed,
        )
