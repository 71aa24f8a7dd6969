"""Simulation configuration dataclass."""
from __future__ import annotations

import math
from dataclasses import dataclass

from saas_defense.types import CustomerType

DEFAULT_TYPE_WEIGHTS: tuple[tuple[CustomerType, float], ...] = (
    (CustomerType.SMALL, 0.6),
    (CustomerType.MEDIUM, 0.3),
    (CustomerType.ENTERPRISE, 0.1),
)


@dataclass(frozen=True)
class SimulationConfig:
    """Immutable configuration for one simulation run.

    Attributes:
        width: Play-field width in pixels.
        height: Play-field height in pixels.
        starting_capital: Capital balance at tick 0.
        spawn_rate: Per-tick probability of a new prospect appearing.
        initial_prospects: Prospects spawned when the game is built.
        type_weights: Weighted draw for new prospects, weights sum to 1.
        path_samples: Precomputed samples along the track.
        path_width: Drawn width of the track; placement keeps clear of it.
        tower_size: Square footprint of a tower in pixels.
        product_upgrade_rate: Progress added per tick while an upgrade runs.
        product_upgrade_min_cost: Floor on the cost of a product upgrade.
        product_upgrade_arr_share: Fraction of ARR a product upgrade costs.
        history_limit: Revenue samples kept for retention metrics.
        speed: Ticks advanced per rendered frame.
    """

    width: float = 800.0
    height: float = 600.0
    starting_capital: float = 500_000.0
    spawn_rate: float = 0.05
    initial_prospects: int = 10
    type_weights: tuple[tuple[CustomerType, float], ...] = DEFAULT_TYPE_WEIGHTS
    path_samples: int = 500
    path_width: float = 30.0
    tower_size: float = 20.0
    product_upgrade_rate: float = 0.001
    product_upgrade_min_cost: float = 50_000.0
    product_upgrade_arr_share: float = 0.2
    history_limit: int = 12
    speed: int = 1

    def validate(self) -> SimulationConfig:
        """Raise ``ValueError`` on an unusable configuration, else return self."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"play field must be positive, got {self.width}x{self.height}"
            )
        if not 0.0 <= self.spawn_rate <= 1.0:
            raise ValueError(f"spawn_rate must be in [0, 1], got {self.spawn_rate}")
        if self.initial_prospects < 0:
            raise ValueError("initial_prospects must be >= 0")
        if not self.type_weights:
            raise ValueError("type_weights must not be empty")
        total = sum(w for _, w in self.type_weights)
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"type_weights must sum to 1, got {total}")
        if self.path_samples < 10:
            raise ValueError("path_samples must be >= 10")
        if not 0.0 < self.product_upgrade_rate <= 1.0:
            raise ValueError("product_upgrade_rate must be in (0, 1]")
        if self.history_limit < 2:
            raise ValueError("history_limit must be >= 2")
        if self.speed < 1:
            raise ValueError(f"speed must be >= 1, got {self.speed}")
        return self
