"""Product upgrade - a paid release that lands on every paying customer."""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable

from saas_defense.customer import Customer

SUCCESS_CHANCE = 0.8
EXPANSION_CHANCE = 0.3


@dataclass
class ProductUpgrade:
    """Progress of the current release. Only one runs at a time."""

    active: bool = False
    progress: float = 0.0
    cost: float = 0.0

    @property
    def burn_rate(self) -> float:
        return self.cost / 100 if self.active else 0.0

    @staticmethod
    def quote(arr: float, min_cost: float, arr_share: float) -> float:
        return max(min_cost, arr * arr_share)

    def start(self, cost: float) -> None:
        self.active = True
        self.progress = 0.0
        self.cost = cost

    def advance(self, rate: float) -> bool:
        """Add ``rate`` to progress. Returns True on the tick the release lands."""
        if not self.active:
            return False
        self.progress += rate
        if self.progress < 1.0:
            return False
        self.active = False
        self.progress = 0.0
        return True


def apply_release(customers: Iterable[Customer], rng: random.Random) -> tuple[int, int]:
    """Roll the release outcome per paying customer.

    Returns ``(well_received, badly_received)`` counts.
    """
    good = bad = 0
    for customer in customers:
        if not customer.is_paying:
            continue
        if rng.random() < SUCCESS_CHANCE:
            customer.adjust_health(rng.random() * 20)
            customer.adjust_trust(rng.random() * 10)
            if rng.random() < EXPANSION_CHANCE:
                customer.increase_spend(0.05 + rng.random() * 0.1)
            good += 1
        else:
            customer.adjust_health(-rng.random() * 10)
            customer.adjust_trust(-rng.random() * 5)
            bad += 1
    return good, bad
