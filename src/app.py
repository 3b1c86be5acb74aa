import logging
import sys
import time

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

# Internal Imports
from domain import InvalidPlanError
from forecast_engine import ProjectionEngine, snapshots_to_frame, summarize
from load_data import CONFIG, EXPORT, build_monte_carlo_params, build_plan_inputs, load_json
from milestones import standard_milestones
from monte_carlo import run_monte_carlo_simulation
from readiness import plan_readiness_score
from validate import ensure_valid, validate_monte_carlo_params, validate_plan_inputs

# Simulation settings
RUN_MONTE_CARLO = True
MC_WORKERS = None
SHOW_PROGRESS = True

# Export settings
SAVE_PROJECTION = False
SAVE_FLOWS = False
SAVE_BANDS = False


@contextmanager
def timed(label):
    start = time.time()
    yield
    logging.info(f"{label} completed in {(time.time() - start):.1f} seconds.")


def setup_logging(filename: str = "app.log", level: int = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        filename=filename,
    )


def main(config_dir: Optional[Path] = None) -> int:
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    config_dir = Path(config_dir) if config_dir else CONFIG

    try:
        json_data = load_json(config_dir)
        plan = build_plan_inputs(json_data)
        for warning in ensure_valid(validate_plan_inputs(plan)).warnings:
            logging.warning(warning)
        mc_params = build_monte_carlo_params(json_data, plan)
        if mc_params is not None:
            ensure_valid(validate_monte_carlo_params(mc_params))
    except (InvalidPlanError, FileNotFoundError) as exc:
        logging.error(f"Invalid plan configuration: {exc}")
        return 1

    with timed("Projection"):
        engine = ProjectionEngine(plan)
        snapshots = engine.run()
        summary = summarize(snapshots)

    logging.info(
        f"Projected {summary.years_projected} years. "
        f"Ending net worth: ${summary.ending_net_worth:,.0f}. "
        f"Lifetime tax: ${summary.total_lifetime_tax:,.0f}."
    )
    if summary.depleted:
        logging.warning(f"Portfolio depleted at age {summary.depletion_age}")

    logging.info(f"Retirement readiness score: {plan_readiness_score(plan)}/100")

    for milestone in standard_milestones(plan, snapshots):
        logging.info(
            f"Milestone: {milestone.title} at age {milestone.target_age} ({milestone.target_year})"
        )

    if SAVE_PROJECTION or SAVE_FLOWS or SAVE_BANDS:
        EXPORT.mkdir(exist_ok=True)

    if SAVE_PROJECTION:
        snapshots_to_frame(snapshots).to_csv(EXPORT / f"projection_{ts}.csv", index=False)
        logging.info(f"Projection saved to projection_{ts}.csv")

    if SAVE_FLOWS:
        engine.flows_frame().to_csv(EXPORT / f"flows_{ts}.csv", index=False)
        logging.info(f"Flows saved to flows_{ts}.csv")

    if RUN_MONTE_CARLO and mc_params is not None:
        with timed(f"Monte Carlo with {mc_params.simulation_runs} trials"):
            result = run_monte_carlo_simulation(
                mc_params, workers=MC_WORKERS, progress=SHOW_PROGRESS
            )

        logging.info(
            f"Success rate: {result.success_rate:.1%}. "
            f"Ending balance min ${result.minimum_balance:,.0f}, "
            f"median ${result.median_end_balance:,.0f}, "
            f"max ${result.maximum_balance:,.0f}."
        )

        if SAVE_BANDS:
            result.bands_frame().to_csv(EXPORT / f"bands_{ts}.csv", index=False)
            logging.info(f"Confidence bands saved to bands_{ts}.csv")

    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else None))
