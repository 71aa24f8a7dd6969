"""Engine - ordered systems, seeded randomness and the tick counter."""
from __future__ import annotations

import logging
import os
import random
from typing import Callable

from saas_defense.market import Market
from saas_defense.types import System, TickContext

logger = logging.getLogger(__name__)


class Engine:
    """Runs registered systems in order, one synchronous tick at a time.

    A system may call ``ctx.request_stop()``; the tick still finishes, then
    the engine halts for good and every later ``step`` is a no-op.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._market = Market()
        self._systems: list[System] = []
        self._halt_hooks: list[Callable[[Market, TickContext], None]] = []
        self._tick_number: int = 0
        self._stop_requested: bool = False
        self._halted: bool = False

        if seed is None:
            seed = int.from_bytes(os.urandom(8))
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def market(self) -> Market:
        return self._market

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def random(self) -> random.Random:
        return self._rng

    @property
    def tick_number(self) -> int:
        return self._tick_number

    @property
    def halted(self) -> bool:
        return self._halted

    def add_system(self, system: System) -> None:
        self._systems.append(system)

    def on_halt(self, hook: Callable[[Market, TickContext], None]) -> None:
        self._halt_hooks.append(hook)

    def _request_stop(self) -> None:
        self._stop_requested = True

    def _context(self) -> TickContext:
        return TickContext(
            tick_number=self._tick_number,
            random=self._rng,
            request_stop=self._request_stop,
        )

    def step(self) -> bool:
        """Run one tick. Returns False when the engine had already halted."""
        if self._halted:
            return False
        self._tick_number += 1
        ctx = self._context()
        for system in self._systems:
            system(self._market, ctx)
        if self._stop_requested:
            self._halted = True
            logger.info("engine halted at tick %d", self._tick_number)
            for hook in self._halt_hooks:
                hook(self._market, ctx)
        return True

    def run(self, n: int) -> int:
        """Run up to ``n`` ticks, stopping early on halt. Returns ticks run."""
        if n < 0:
            raise ValueError(f"n must be >= 0, got {n}")
        ran = 0
        for _ in range(n):
            if not self.step():
                break
            ran += 1
        return ran

    def advance(self, speed: int = 1) -> int:
        """Speed multiplier: ``speed`` ticks for one rendered frame."""
        return self.run(speed)
