"""Tests for product upgrades and the capital ledger."""
import random

import pytest

from saas_defense.customer import Customer
from saas_defense.economy import Economy
from saas_defense.product import ProductUpgrade, apply_release
from saas_defense.types import CustomerStatus, CustomerType


class FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


def make_customer(cid: str, status: CustomerStatus) -> Customer:
    return Customer(
        id=cid,
        type=CustomerType.SMALL,
        position=(0.0, 0.0),
        spend=10_000.0,
        movement_speed=0.001,
        approach_speed=1.0,
        status=status,
        health=50.0,
        trust=50.0,
    )


# --- ProductUpgrade ---

class TestProductUpgrade:

    def test_quote_has_a_floor(self):
        assert ProductUpgrade.quote(0.0, 50_000, 0.2) == 50_000
        assert ProductUpgrade.quote(1_000_000.0, 50_000, 0.2) == pytest.approx(200_000)

    def test_idle_upgrade_does_not_progress(self):
        product = ProductUpgrade()
        assert not product.advance(0.5)
        assert product.progress == 0.0
        assert product.burn_rate == 0.0

    def test_progress_and_completion(self):
        product = ProductUpgrade()
        product.start(80_000)
        assert product.active
        assert product.burn_rate == 800.0
        assert not product.advance(0.25)
        assert not product.advance(0.25)
        assert not product.advance(0.25)
        assert product.progress == 0.75
        assert product.advance(0.25)
        assert not product.active
        assert product.progress == 0.0

    def test_completes_once(self):
        product = ProductUpgrade()
        product.start(50_000)
        landed = [product.advance(0.5) for _ in range(6)]
        assert landed == [False, True, False, False, False, False]


# --- apply_release ---

class TestRelease:

    def test_good_release_lifts_paying_customers(self):
        active = make_customer("a", CustomerStatus.ACTIVE)
        prospect = make_customer("p", CustomerStatus.PROSPECT)
        churned = make_customer("c", CustomerStatus.CHURNED)
        good, bad = apply_release([active, prospect, churned], FixedRandom(0.1))
        assert (good, bad) == (1, 0)
        assert active.health == pytest.approx(52.0)
        assert active.trust == pytest.approx(51.0)
        # 0.1 < 0.3 expansion chance, spend grows 5% + 0.1 * 10%
        assert active.spend == pytest.approx(10_600.0)
        assert prospect.health == 50.0
        assert churned.health == 50.0

    def test_bad_release_hurts(self):
        gold = make_customer("g", CustomerStatus.GOLD)
        good, bad = apply_release([gold], FixedRandom(0.9))
        assert (good, bad) == (0, 1)
        assert gold.health == pytest.approx(41.0)
        assert gold.trust == pytest.approx(45.5)
        assert gold.spend == 10_000.0

    def test_good_release_without_expansion(self):
        active = make_customer("a", CustomerStatus.ACTIVE)
        apply_release([active], FixedRandom(0.5))
        assert active.health == pytest.approx(60.0)
        assert active.spend == 10_000.0


# --- Economy ---

class TestEconomy:

    def test_invest_tracks_spend(self):
        economy = Economy(capital=500_000)
        economy.invest(75_000)
        economy.invest(56_250)
        assert economy.capital == 368_750
        assert economy.invested == 131_250

    def test_credit_leaves_invested_alone(self):
        economy = Economy(capital=100_000, invested=75_000)
        economy.credit(52_500)
        assert economy.capital == 152_500
        assert economy.invested == 75_000

    def test_can_afford(self):
        economy = Economy(capital=60_000)
        assert economy.can_afford(60_000)
        assert not economy.can_afford(60_001)

    def test_negative_amounts_rejected(self):
        economy = Economy(capital=10)
        with pytest.raises(ValueError):
            economy.debit(-1)
        with pytest.raises(ValueError):
            economy.credit(-1)
