"""Market - the live customer population and the placed towers."""
from __future__ import annotations

import math
import random

from saas_defense.customer import Customer
from saas_defense.tower import Tower
from saas_defense.types import CustomerStatus, CustomerType, Point, TowerType


class Market:
    """Owns every customer and tower in a run.

    Customers are never removed; the population only grows or changes
    status. Towers come and go through placement and sale.
    """

    def __init__(self) -> None:
        self._customers: list[Customer] = []
        self._towers: list[Tower] = []
        self._next_customer: int = 0
        self._next_tower: int = 0

    @property
    def customers(self) -> list[Customer]:
        return self._customers

    @property
    def towers(self) -> list[Tower]:
        return self._towers

    def spawn_customer(
        self,
        ctype: CustomerType,
        width: float,
        height: float,
        rng: random.Random,
    ) -> Customer:
        customer = Customer.spawn_at_edge(
            f"customer_{self._next_customer}", ctype, width, height, rng,
        )
        self._next_customer += 1
        self._customers.append(customer)
        return customer

    def add_customer(self, customer: Customer) -> None:
        if any(c.id == customer.id for c in self._customers):
            raise ValueError(f"Duplicate customer id {customer.id!r}")
        self._customers.append(customer)

    def add_tower(self, ttype: TowerType, position: Point) -> Tower:
        tower = Tower(id=f"tower_{self._next_tower}", type=ttype, position=position)
        self._next_tower += 1
        self._towers.append(tower)
        return tower

    def remove_tower(self, tower: Tower) -> bool:
        try:
            self._towers.remove(tower)
        except ValueError:
            return False
        return True

    def find_tower(self, tower_id: str) -> Tower | None:
        for tower in self._towers:
            if tower.id == tower_id:
                return tower
        return None

    def tower_at(self, point: Point, within: float) -> Tower | None:
        for tower in self._towers:
            if math.dist(point, tower.position) < within:
                return tower
        return None

    def paying_customers(self) -> list[Customer]:
        return [c for c in self._customers if c.is_paying]

    def status_counts(self) -> dict[CustomerStatus, int]:
        counts = {status: 0 for status in CustomerStatus}
        for customer in self._customers:
            counts[customer.status] += 1
        return counts
