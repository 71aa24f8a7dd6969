"""MetricsCalculator - recurring-revenue KPIs derived from the population."""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterable

from saas_defense.customer import Customer

DEFAULT_LIFESPAN_YEARS = 5.0


@dataclass(frozen=True)
class RevenueSample:
    """One point of revenue history: ARR plus per-customer spend."""

    arr: float
    spend: tuple[tuple[str, float], ...]

    @property
    def customer_count(self) -> int:
        return len(self.spend)

    @property
    def total(self) -> float:
        return sum(s for _, s in self.spend)


@dataclass(frozen=True)
class Metrics:
    arr: float = 0.0
    mrr: float = 0.0
    nrr: float = 0.0
    grr: float = 0.0
    cac: float = 0.0
    ltv: float = 0.0
    customer_count: int = 0
    churn_rate: float = 0.0


def retention(prev: RevenueSample, curr: RevenueSample) -> tuple[float, float]:
    """Return ``(grr, nrr)`` between two samples.

    GRR is capped at 1; NRR is not, so expansion can push it above 1.
    Both are 0 when the earlier sample carries no spend.
    """
    total_prev = prev.total
    if total_prev == 0:
        return 0.0, 0.0
    prev_ids = {cid for cid, _ in prev.spend}
    curr_ids = {cid for cid, _ in curr.spend}
    retained_prev = sum(s for cid, s in prev.spend if cid in curr_ids)
    retained_curr = sum(s for cid, s in curr.spend if cid in prev_ids)
    return min(1.0, retained_prev / total_prev), retained_curr / total_prev


def churn_rate(prev: RevenueSample, curr: RevenueSample) -> float:
    """Fraction of the paying base lost between samples, from headcount alone."""
    prev_count = prev.customer_count
    if prev_count == 0:
        return 0.0
    return max(0, prev_count - curr.customer_count) / prev_count


class MetricsCalculator:
    """Derives ARR, retention, CAC and LTV each tick.

    Keeps at most ``history_limit`` revenue samples; a sample is only
    recorded when ARR moved since the last one.
    """

    def __init__(self, history_limit: int = 12) -> None:
        self._history: deque[RevenueSample] = deque(maxlen=history_limit)
        self._acquired: set[str] = set()
        self._current = Metrics()

    @property
    def current(self) -> Metrics:
        return self._current

    @property
    def history(self) -> tuple[RevenueSample, ...]:
        return tuple(self._history)

    @property
    def customers_acquired(self) -> int:
        return len(self._acquired)

    def record(self, sample: RevenueSample) -> bool:
        """Append ``sample`` unless ARR is unchanged. Returns True if stored."""
        if self._history and self._history[-1].arr == sample.arr:
            return False
        self._history.append(sample)
        return True

    def calculate(self, customers: Iterable[Customer], tower_spend: float) -> Metrics:
        paying = [c for c in customers if c.is_paying]
        arr = sum(c.spend for c in paying)
        self.record(RevenueSample(arr=arr, spend=tuple((c.id, c.spend) for c in paying)))
        # Each paying customer counts toward CAC once, the first time it is seen.
        self._acquired.update(c.id for c in paying)

        grr = nrr = churn = 0.0
        if len(self._history) >= 2:
            prev, curr = self._history[-2], self._history[-1]
            grr, nrr = retention(prev, curr)
            churn = churn_rate(prev, curr)

        acquired = len(self._acquired)
        cac = tower_spend / acquired if acquired else 0.0
        lifespan = 1 / churn if churn > 0 else DEFAULT_LIFESPAN_YEARS
        ltv = arr / max(1, len(paying)) * lifespan

        self._current = Metrics(
            arr=arr,
            mrr=arr / 12,
            nrr=nrr,
            grr=grr,
            cac=cac,
            ltv=ltv,
            customer_count=len(paying),
            churn_rate=churn,
        )
        return self._current


def format_currency(value: float) -> str:
    if value >= 1_000_000:
        return f"${value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"${value / 1_000:.1f}K"
    return f"${value:.0f}"


def format_percentage(value: float) -> str:
    return f"{value * 100:.1f}%"
