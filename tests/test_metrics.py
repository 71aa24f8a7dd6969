"""Tests for revenue retention, CAC, LTV and display helpers."""
import pytest

from saas_defense.customer import Customer
from saas_defense.metrics import (
    MetricsCalculator,
    RevenueSample,
    churn_rate,
    format_currency,
    format_percentage,
    retention,
)
from saas_defense.types import CustomerStatus, CustomerType


def paying(cid: str, spend: float, status: CustomerStatus = CustomerStatus.ACTIVE) -> Customer:
    return Customer(
        id=cid,
        type=CustomerType.SMALL,
        position=(0.0, 0.0),
        spend=spend,
        movement_speed=0.001,
        approach_speed=1.0,
        status=status,
    )


def sample(*pairs: tuple[str, float]) -> RevenueSample:
    return RevenueSample(arr=sum(s for _, s in pairs), spend=tuple(pairs))


# --- retention ---

def test_full_retention_without_expansion():
    prev = sample(*[(f"c{i}", 10_000.0) for i in range(10)])
    curr = sample(*[(f"c{i}", 10_000.0) for i in range(10)])
    assert retention(prev, curr) == pytest.approx((1.0, 1.0))


def test_expansion_lifts_nrr_but_not_grr():
    prev = sample(("a", 10_000.0), ("b", 10_000.0))
    curr = sample(("a", 15_000.0), ("b", 10_000.0))
    grr, nrr = retention(prev, curr)
    assert grr == 1.0
    assert nrr == pytest.approx(1.25)


def test_churn_with_expansion_offsetting():
    prev = sample(*[(f"c{i}", 10_000.0) for i in range(10)])
    curr = sample(*[(f"c{i}", 11_250.0) for i in range(8)])
    grr, nrr = retention(prev, curr)
    assert grr == pytest.approx(0.8)
    assert nrr == pytest.approx(0.9)


def test_churn_after_expansion():
    prev = sample(
        *[(f"c{i}", 11_250.0) for i in range(8)],
        ("x", 5_000.0),
        ("y", 5_000.0),
    )
    curr = sample(*[(f"c{i}", 11_250.0) for i in range(8)])
    grr, nrr = retention(prev, curr)
    assert grr == pytest.approx(0.9)
    assert nrr == pytest.approx(0.9)


def test_new_customers_do_not_count_toward_retention():
    prev = sample(("a", 10_000.0))
    curr = sample(("a", 10_000.0), ("new", 90_000.0))
    assert retention(prev, curr) == pytest.approx((1.0, 1.0))


def test_retention_zero_without_previous_spend():
    assert retention(sample(), sample(("a", 10_000.0))) == (0.0, 0.0)


# --- churn_rate ---

def test_churn_rate_from_headcount():
    prev = sample(*[(f"c{i}", 1.0) for i in range(4)])
    curr = sample(("c0", 1.0), ("c1", 1.0), ("c2", 1.0))
    assert churn_rate(prev, curr) == 0.25


def test_churn_rate_never_negative():
    prev = sample(("a", 1.0))
    curr = sample(("a", 1.0), ("b", 1.0))
    assert churn_rate(prev, curr) == 0.0
    assert churn_rate(sample(), curr) == 0.0


# --- MetricsCalculator ---

class TestCalculator:

    def test_arr_counts_active_and_gold_only(self):
        calc = MetricsCalculator()
        customers = [
            paying("a", 10_000.0),
            paying("g", 20_000.0, CustomerStatus.GOLD),
            paying("p", 50_000.0, CustomerStatus.PROSPECT),
            paying("x", 70_000.0, CustomerStatus.CHURNED),
        ]
        m = calc.calculate(customers, tower_spend=0)
        assert m.arr == 30_000.0
        assert m.mrr == pytest.approx(2_500.0)
        assert m.customer_count == 2

    def test_first_calculation_has_no_retention(self):
        calc = MetricsCalculator()
        m = calc.calculate([paying("a", 10_000.0)], tower_spend=0)
        assert m.grr == 0.0
        assert m.nrr == 0.0
        assert m.churn_rate == 0.0

    def test_history_skips_unchanged_arr(self):
        calc = MetricsCalculator()
        customers = [paying("a", 10_000.0)]
        calc.calculate(customers, 0)
        calc.calculate(customers, 0)
        assert len(calc.history) == 1
        customers[0].spend = 12_000.0
        calc.calculate(customers, 0)
        assert len(calc.history) == 2

    def test_history_bounded(self):
        calc = MetricsCalculator(history_limit=12)
        customer = paying("a", 1_000.0)
        for i in range(30):
            customer.spend = 1_000.0 + i
            calc.calculate([customer], 0)
        assert len(calc.history) == 12
        assert calc.history[-1].arr == 1_029.0

    def test_retention_uses_last_two_samples(self):
        calc = MetricsCalculator()
        a, b = paying("a", 10_000.0), paying("b", 10_000.0)
        calc.calculate([a, b], 0)
        a.spend = 15_000.0
        m = calc.calculate([a, b], 0)
        assert m.grr == 1.0
        assert m.nrr == pytest.approx(1.25)

    def test_cac_counts_each_customer_once(self):
        calc = MetricsCalculator()
        customers = [paying("a", 10_000.0), paying("b", 10_000.0)]
        for _ in range(5):
            m = calc.calculate(customers, tower_spend=150_000)
        assert calc.customers_acquired == 2
        assert m.cac == 75_000.0

    def test_cac_remembers_churned_customers(self):
        calc = MetricsCalculator()
        a, b = paying("a", 10_000.0), paying("b", 10_000.0)
        calc.calculate([a, b], 0)
        b.status = CustomerStatus.CHURNED
        m = calc.calculate([a, b], tower_spend=100_000)
        assert calc.customers_acquired == 2
        assert m.cac == 50_000.0

    def test_cac_zero_before_any_acquisition(self):
        m = MetricsCalculator().calculate([], tower_spend=75_000)
        assert m.cac == 0.0

    def test_ltv_without_churn_uses_default_lifespan(self):
        m = MetricsCalculator().calculate([paying("a", 10_000.0), paying("b", 30_000.0)], 0)
        assert m.ltv == pytest.approx(20_000.0 * 5)

    def test_ltv_with_churn(self):
        calc = MetricsCalculator()
        customers = [paying(f"c{i}", 10_000.0) for i in range(4)]
        calc.calculate(customers, 0)
        customers[0].status = CustomerStatus.CHURNED
        m = calc.calculate(customers, 0)
        assert m.churn_rate == 0.25
        assert m.ltv == pytest.approx(10_000.0 * 4)

    def test_empty_population(self):
        m = MetricsCalculator().calculate([], 0)
        assert m.arr == 0.0
        assert m.ltv == 0.0
        assert m.customer_count == 0


# --- formatting ---

@pytest.mark.parametrize("value, text", [
    (0, "$0"),
    (999, "$999"),
    (1_000, "$1.0K"),
    (52_500, "$52.5K"),
    (1_260_000, "$1.3M"),
])
def test_format_currency(value, text):
    assert format_currency(value) == text


def test_format_percentage():
    assert format_percentage(0.9) == "90.0%"
    assert format_percentage(1.25) == "125.0%"
