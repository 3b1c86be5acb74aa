import logging
import numpy as np
import threading

from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from tqdm import tqdm
from typing import Dict, List, Optional, Sequence

# Internal Imports
from confidence import MonteCarloResult, RunOutcome, aggregate
from domain import InvalidPlanError, PlanInputs
from economic_factors import ReturnSampler
from forecast_engine import advance, initial_state

MIN_SIMULATION_RUNS = 100
SOFT_MAX_SIMULATION_RUNS = 10_000


class SimulationCancelled(RuntimeError):
    """Raised when a batch is abandoned through its CancellationToken."""


class CancellationToken:
    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class MonteCarloParams:
    """
    Monte Carlo settings layered over a plan.

    Attributes:
        plan: plan inputs; its fixed growth rate is replaced by sampled returns
        mean_return: mean of the annual return distribution (decimal)
        return_std: standard deviation of annual returns (decimal)
        simulation_runs: number of independent runs, at least 100
        include_pre_retirement: start at the current age rather than at retirement
        adjust_withdrawals_for_inflation: inflate living expenses each year
        seed: optional seed for reproducible results
    """

    plan: PlanInputs
    mean_return: float = 0.07
    return_std: float = 0.15
    simulation_runs: int = 1000
    include_pre_retirement: bool = True
    adjust_withdrawals_for_inflation: bool = True
    seed: Optional[int] = None

    def __post_init__(self):
        errors = self.plan.structural_errors()
        if self.simulation_runs < MIN_SIMULATION_RUNS:
            errors.append(
                f"simulation_runs must be at least {MIN_SIMULATION_RUNS} (got {self.simulation_runs})"
            )
        if self.return_std < 0:
            errors.append("return_std must not be negative")
        if errors:
            raise InvalidPlanError(errors)

    @property
    def start_age(self) -> int:
        if self.include_pre_retirement:
            return self.plan.current_age
        return self.plan.primary_retire_age

    @property
    def years(self) -> int:
        return self.plan.life_expectancy - self.start_age + 1

    @property
    def spending_inflation(self) -> float:
        return self.plan.inflation_rate if self.adjust_withdrawals_for_inflation else 0.0


def simulate_run(
    run_id: int,
    plan: PlanInputs,
    returns: Sequence[float],
    start_age: int,
    spending_inflation: float,
) -> RunOutcome:
    """
    One independent path: the deterministic year transition with the sampled
    return for each year in place of the fixed growth rate.
    """
    state = initial_state(plan, start_age=start_age)
    values: List[float] = []
    depletion_age = None
    end_balance = state.balances.total

    for year_return in returns:
        snapshot, state = advance(
            state,
            plan,
            growth_rate=float(year_return),
            inflation_rate=spending_inflation,
        )
        values.append(snapshot.total_assets)
        end_balance = snapshot.total_assets
        if snapshot.depleted:
            depletion_age = snapshot.age
            break

    cumulative_inflation = (1 + plan.inflation_rate) ** len(values)

    return RunOutcome(
        run_id=run_id,
        success=depletion_age is None,
        end_balance=end_balance,
        real_end_balance=end_balance / cumulative_inflation,
        portfolio_values=values,
        depletion_age=depletion_age,
    )


def _run_serial(
    params: MonteCarloParams,
    returns: np.ndarray,
    cancel: Optional[CancellationToken],
    progress: bool,
) -> Dict[int, RunOutcome]:
    outcomes: Dict[int, RunOutcome] = {}
    for run_id in tqdm(
        range(params.simulation_runs),
        desc="Running Monte Carlo Simulation",
        disable=not progress,
    ):
        if cancel is not None and cancel.cancelled:
            raise SimulationCancelled(
                f"Cancelled after {len(outcomes)} of {params.simulation_runs} runs"
            )
        outcomes[run_id] = simulate_run(
            run_id,
            params.plan,
            returns[run_id],
            params.start_age,
            params.spending_inflation,
        )
    return outcomes


def _run_parallel(
    params: MonteCarloParams,
    returns: np.ndarray,
    workers: Optional[int],
    cancel: Optional[CancellationToken],
    progress: bool,
) -> Dict[int, RunOutcome]:
    outcomes: Dict[int, RunOutcome] = {}
    with ProcessPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(
                simulate_run,
                run_id,
                params.plan,
                returns[run_id].tolist(),
                params.start_age,
                params.spending_inflation,
            )
            for run_id in range(params.simulation_runs)
        ]

        for future in tqdm(
            as_completed(futures),
            total=params.simulation_runs,
            desc="Running Monte Carlo Simulation",
            disable=not progress,
        ):
            if cancel is not None and cancel.cancelled:
                for pending in futures:
                    pending.cancel()
                raise SimulationCancelled(
                    f"Cancelled after {len(outcomes)} of {params.simulation_runs} runs"
                )
            outcome = future.result()
            outcomes[outcome.run_id] = outcome

    return outcomes


def run_monte_carlo_simulation(
    params: MonteCarloParams,
    rng: Optional[np.random.Generator] = None,
    workers: Optional[int] = None,
    cancel: Optional[CancellationToken] = None,
    progress: bool = False,
) -> MonteCarloResult:
    """
    Run `params.simulation_runs` independent paths and aggregate them.

    All returns are drawn up front from `rng` (or a generator seeded with
    `params.seed`), so the result does not depend on the worker count.
    `workers=1` runs in-process; any other value (None for all cores) uses a
    process pool.
    """
    if params.simulation_runs > SOFT_MAX_SIMULATION_RUNS:
        logging.warning(
            f"[MonteCarlo] {params.simulation_runs} runs exceeds the recommended "
            f"maximum of {SOFT_MAX_SIMULATION_RUNS}; expect a slow response"
        )

    sampler = ReturnSampler(
        params.mean_return, params.return_std, rng=rng, seed=params.seed
    )
    returns = sampler.sample(params.simulation_runs, params.years)

    logging.info(
        f"[MonteCarlo] {params.simulation_runs} runs x {params.years} years, "
        f"return {params.mean_return:.2%} +/- {params.return_std:.2%}"
    )

    if workers == 1:
        outcomes = _run_serial(params, returns, cancel, progress)
    else:
        outcomes = _run_parallel(params, returns, workers, cancel, progress)

    result = aggregate(list(outcomes.values()), start_age=params.start_age)
    logging.info(
        f"[MonteCarlo] success rate {result.success_rate:.1%}, "
        f"median ending balance ${result.median_end_balance:,.0f}"
    )
    return result
