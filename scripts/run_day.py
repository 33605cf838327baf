#!/usr/bin/env python3
"""Simulate one day, propose corridors from the recorded flow and save results."""

import argparse
import json
import logging
import os
import sys
import time

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("run_day")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--agents", type=int, default=800, help="population size")
    parser.add_argument("--seed", type=int, default=1337, help="random seed")
    parser.add_argument("--data-dir", default=None, help="directory with stops.csv and pois.csv")
    parser.add_argument(
        "--output-dir",
        default=os.path.join(os.path.dirname(__file__), "..", "backend", "data", "results", "day"),
    )
    parser.add_argument("--min-count", type=int, default=8, help="minimum edge traversals for a corridor")
    parser.add_argument("--max-routes", type=int, default=8)
    return parser.parse_args(argv)


def main(argv=None):
    import pandas as pd
    from corridorsim.core.config import RouteSynthesisConfig, SimulationConfig
    from corridorsim.core.engine import run_simulation
    from pipeline.city_data import load_city

    args = parse_args(argv)

    config = SimulationConfig(
        agent_count=args.agents,
        random_seed=args.seed,
        synthesis=RouteSynthesisConfig(min_count=args.min_count, max_routes=args.max_routes),
    )
    errors = config.validate()
    if errors:
        for e in errors:
            logger.error(e)
        sys.exit(1)

    try:
        city = load_city(args.data_dir)
    except (FileNotFoundError, ValueError) as e:
        logger.error("%s", e)
        sys.exit(1)

    start = time.time()
    session, snapshots = run_simulation(
        city,
        config,
        progress_callback=lambda step, total: (
            logger.info("Minute %d/%d", step, total) if step % 120 == 0 else None
        ),
    )
    elapsed = time.time() - start
    logger.info("Simulation completed in %.1fs (%d snapshots)", elapsed, len(snapshots))

    routes = session.generate_routes()

    output_dir = os.path.abspath(args.output_dir)
    os.makedirs(output_dir, exist_ok=True)

    metrics_df = pd.DataFrame([{"minute": s["minute"], **s["metrics"]} for s in snapshots])
    metrics_df.to_parquet(os.path.join(output_dir, "metrics.parquet"), index=False)
    session.context.flow.to_frame().to_parquet(os.path.join(output_dir, "flow.parquet"), index=False)

    with open(os.path.join(output_dir, "routes.json"), "w") as f:
        json.dump([r.to_dict() for r in routes], f, indent=2)

    summary = {
        "config": {"agents": args.agents, "seed": args.seed},
        "metrics": session.metrics.to_dict(),
        "baseline": session.baseline.to_dict() if session.baseline else None,
        "proposal": session.proposal.to_dict() if session.proposal else None,
    }
    with open(os.path.join(output_dir, "summary.json"), "w") as f:
        json.dump(summary, f, indent=2)

    logger.info("Results saved to %s/", output_dir)

    logger.info("=== Summary ===")
    for key, value in session.metrics.to_dict().items():
        logger.info("  %s: %s", key, value)
    if session.proposal:
        p = session.proposal
        logger.info(
            "  %d corridor(s), %.2f km, %.1f%% of traversals captured",
            p.routes_count,
            p.route_km,
            p.demand_captured_pct,
        )


if __name__ == "__main__":
    main()
