"""Read-only views handed to the renderer."""
from __future__ import annotations

from dataclasses import dataclass

from saas_defense.customer import Customer
from saas_defense.metrics import Metrics
from saas_defense.tower import Tower
from saas_defense.types import (
    CustomerStatus,
    CustomerType,
    Movement,
    Point,
    TargetingStrategy,
    TowerType,
)


@dataclass(frozen=True)
class CustomerView:
    id: str
    type: CustomerType
    status: CustomerStatus
    position: Point
    size: float
    color: str
    health: float
    spend: float
    lap_count: int
    movement: Movement
    target_point: Point | None

    @classmethod
    def of(cls, customer: Customer) -> CustomerView:
        # trust stays hidden from the player.
        return cls(
            id=customer.id,
            type=customer.type,
            status=customer.status,
            position=customer.position,
            size=customer.size,
            color=customer.color,
            health=customer.health,
            spend=customer.spend,
            lap_count=customer.lap_count,
            movement=customer.movement,
            target_point=customer.target_point,
        )


@dataclass(frozen=True)
class TowerView:
    id: str
    type: TowerType
    position: Point
    level: int
    range: float
    burnout: float
    max_targets: int
    max_value_managed: float
    targeting_strategy: TargetingStrategy
    target_ids: tuple[str, ...]
    upgrade_cost: int
    sell_value: int

    @classmethod
    def of(cls, tower: Tower) -> TowerView:
        return cls(
            id=tower.id,
            type=tower.type,
            position=tower.position,
            level=tower.level,
            range=tower.range,
            burnout=tower.burnout,
            max_targets=tower.max_targets,
            max_value_managed=tower.max_value_managed,
            targeting_strategy=tower.targeting_strategy,
            target_ids=tuple(c.id for c in tower.current_targets),
            upgrade_cost=tower.upgrade_cost,
            sell_value=tower.sell_value,
        )


@dataclass(frozen=True)
class GameSnapshot:
    tick: int
    capital: float
    customers: tuple[CustomerView, ...]
    towers: tuple[TowerView, ...]
    metrics: Metrics
    product_upgrade_active: bool
    product_upgrade_progress: float
    burn_rate: float
    speed: int
    game_over: bool
