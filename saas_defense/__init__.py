"""saas-defense - a tick-driven SaaS tower-defense simulation."""

from saas_defense.config import SimulationConfig
from saas_defense.customer import Customer
from saas_defense.engine import Engine
from saas_defense.game import Game
from saas_defense.market import Market
from saas_defense.metrics import (
    Metrics,
    MetricsCalculator,
    RevenueSample,
    format_currency,
    format_percentage,
)
from saas_defense.path import Path
from saas_defense.signals import SignalBus
from saas_defense.snapshot import CustomerView, GameSnapshot, TowerView
from saas_defense.tower import TOWER_SPECS, Tower, TowerSpec
from saas_defense.types import (
    ActionResult,
    CustomerStatus,
    CustomerType,
    Failure,
    Movement,
    TargetingStrategy,
    TickContext,
    TowerType,
)

__all__ = [
    "Game",
    "Engine",
    "Market",
    "Path",
    "Customer",
    "Tower",
    "TowerSpec",
    "TOWER_SPECS",
    "MetricsCalculator",
    "Metrics",
    "RevenueSample",
    "SignalBus",
    "SimulationConfig",
    "GameSnapshot",
    "CustomerView",
    "TowerView",
    "ActionResult",
    "Failure",
    "CustomerType",
    "CustomerStatus",
    "Movement",
    "TowerType",
    "TargetingStrategy",
    "TickContext",
    "format_currency",
    "format_percentage",
]
