"""SaaS Defense - headless run.

Places a starter set of towers, runs the market for a number of ticks and
prints the metrics panel a renderer would show.

Run:
    python examples/headless.py --ticks 3000 --seed 42
"""
from __future__ import annotations

import argparse
import logging

from saas_defense import (
    Game,
    TargetingStrategy,
    TowerType,
    format_currency,
    format_percentage,
)
from saas_defense import signals

STARTER_TOWERS = [
    (TowerType.SALES, (400.0, 100.0)),
    (TowerType.SALES, (400.0, 500.0)),
    (TowerType.CSM, (250.0, 140.0)),
    (TowerType.CSM, (550.0, 460.0)),
]


def _print_panel(game: Game) -> None:
    snap = game.snapshot()
    m = snap.metrics
    print("-" * 40)
    print(f"  tick {snap.tick}  (x{snap.speed})")
    print(f"  Capital   {format_currency(snap.capital)}")
    print(f"  ARR       {format_currency(m.arr)}")
    print(f"  MRR       {format_currency(m.mrr)}")
    print(f"  NRR       {format_percentage(m.nrr)}")
    print(f"  GRR       {format_percentage(m.grr)}")
    print(f"  CAC       {format_currency(m.cac)}")
    print(f"  LTV       {format_currency(m.ltv)}")
    print(f"  Customers {m.customer_count} paying / {len(snap.customers)} total")
    counts = game.market.status_counts()
    print("  " + "  ".join(f"{s.name.lower()}={n}" for s, n in counts.items()))
    for tower in snap.towers:
        print(
            f"  {tower.id:<8} {tower.type.name:<5} L{tower.level}"
            f"  burnout {tower.burnout:5.1f}  targets {len(tower.target_ids)}"
        )
    if snap.product_upgrade_active:
        print(f"  Release   {snap.product_upgrade_progress:.0%} (burn {format_currency(snap.burn_rate)})")
    if snap.game_over:
        print("  GAME OVER")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--ticks", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--speed", type=int, default=1, help="ticks per frame, at least 1")
    parser.add_argument("--report-every", type=int, default=500)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()
    if args.speed < 1:
        parser.error("--speed must be at least 1")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    game = Game(seed=args.seed)
    game.speed = args.speed
    print(f"seed {game.seed}")

    churned = []
    game.subscribe(signals.CUSTOMER_CHURNED, lambda name, data: churned.append(data["customer_id"]))

    for ttype, position in STARTER_TOWERS:
        result = game.place_tower(ttype, position)
        if not result:
            print(f"could not place {ttype.name} at {position}: {result.reason.name}")
    game.set_targeting_strategy("tower_2", TargetingStrategy.RED)

    frames = 0
    while game.tick < args.ticks and not game.game_over:
        game.frame()
        frames += 1
        if game.tick % 1000 < game.speed and not game.product_upgrade.active:
            game.start_product_upgrade()
        if frames % max(1, args.report_every // game.speed) == 0:
            _print_panel(game)

    _print_panel(game)
    print(f"{len(churned)} churn events")


if __name__ == "__main__":
    main()
