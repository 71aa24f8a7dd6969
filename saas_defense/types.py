"""Shared enums, type aliases and the per-tick context."""
from __future__ import annotations

import random as _random
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

Point = tuple[float, float]


class CustomerType(Enum):
    SMALL = "small"
    MEDIUM = "medium"
    ENTERPRISE = "enterprise"


class CustomerStatus(Enum):
    PROSPECT = "prospect"
    ACTIVE = "active"
    CHURNED = "churned"
    GOLD = "gold"


class Movement(Enum):
    """Movement sub-state of a customer."""

    WANDERING = "wandering"
    APPROACHING = "approaching"
    ON_TRACK = "on_track"


class TowerType(Enum):
    SALES = "sales"
    CSM = "csm"


class TargetingStrategy(Enum):
    DEFAULT = "default"
    # Sales
    PROSPECTS = "prospects"
    UPSELL = "upsell"
    WINBACK = "winback"
    ENTERPRISE = "enterprise"
    SMB = "smb"
    # Customer success
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"


class Failure(Enum):
    """Reason a player operation was rejected."""

    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_PLACEMENT = "invalid_placement"
    NOT_FOUND = "not_found"
    ALREADY_ACTIVE = "already_active"
    INVALID_STRATEGY = "invalid_strategy"
    UNKNOWN_TYPE = "unknown_type"
    GAME_OVER = "game_over"


@dataclass(frozen=True, slots=True)
class TickContext:
    tick_number: int
    random: _random.Random
    request_stop: Callable[[], None]


if TYPE_CHECKING:
    from saas_defense.market import Market
    from saas_defense.tower import Tower

System = Callable[["Market", TickContext], None]


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a player operation. Truthy when the operation succeeded."""

    ok: bool
    reason: Failure | None = None
    tower: Tower | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, tower: Tower | None = None) -> ActionResult:
        return cls(ok=True, tower=tower)

    @classmethod
    def failure(cls, reason: Failure) -> ActionResult:
        return cls(ok=False, reason=reason)
