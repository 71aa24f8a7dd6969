"""Capital balance and cumulative tower investment."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Economy:
    """Signed capital balance owned by the game.

    Attributes:
        capital: Current balance. Debited on placement and upgrades,
            credited on sale.
        invested: Everything ever spent on towers. Never decreases.
    """

    capital: float
    invested: float = 0.0

    def can_afford(self, amount: float) -> bool:
        return self.capital >= amount

    def debit(self, amount: float) -> None:
        if amount < 0:
            raise ValueError(f"amount must be >= 0, got {amount}")
        self.capital -= amount

    def credit(self, amount: float) -> None:
        if amount < 0:
            raise ValueError(f"amount must be >= 0, got {amount}")
        self.capital += amount

    def invest(self, amount: float) -> None:
        """Debit a tower purchase or upgrade and add it to ``invested``."""
        self.debit(amount)
        self.invested += amount
