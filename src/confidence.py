import math
import numpy as np
import pandas as pd

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

PESSIMISTIC = "pessimistic"
MEDIAN = "median"
OPTIMISTIC = "optimistic"


@dataclass(frozen=True)
class RunOutcome:
    run_id: int
    success: bool
    end_balance: float
    real_end_balance: float
    portfolio_values: List[float]
    depletion_age: Optional[int] = None


@dataclass(frozen=True)
class BandPoint:
    year_index: int
    age: int
    portfolio_value: float


@dataclass(frozen=True)
class MonteCarloResult:
    success_rate: float
    end_balances: List[float]
    pessimistic: List[BandPoint]
    median: List[BandPoint]
    optimistic: List[BandPoint]
    minimum_balance: float
    median_end_balance: float
    maximum_balance: float
    simulation_runs: int
    runs: List[RunOutcome] = field(default_factory=list, repr=False)

    def bands_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "year_index": [p.year_index for p in self.median],
                "age": [p.age for p in self.median],
                PESSIMISTIC: [p.portfolio_value for p in self.pessimistic],
                MEDIAN: [p.portfolio_value for p in self.median],
                OPTIMISTIC: [p.portfolio_value for p in self.optimistic],
            }
        )


def percentile_indices(n: int) -> Tuple[int, int, int]:
    """
    Order-statistic positions (pessimistic, median, optimistic) in a sorted
    sample of size n.
    """
    p10 = max(0, math.floor(n * 0.1) - 1)
    p50 = math.floor(n * 0.5)
    p90 = min(n - 1, math.floor(n * 0.9))
    return p10, p50, p90


def runs_frame(outcomes: Sequence[RunOutcome]) -> pd.DataFrame:
    """
    Buffer every run's per-year values: rows = year index, columns = run id.
    Runs that stopped early leave NaN in later rows.
    """
    by_run = {o.run_id: pd.Series(o.portfolio_values, dtype=float) for o in outcomes}
    return pd.DataFrame(by_run).sort_index(axis=1)


def aggregate(outcomes: Sequence[RunOutcome], start_age: int) -> MonteCarloResult:
    if not outcomes:
        raise ValueError("Cannot aggregate zero simulation runs")

    outcomes = sorted(outcomes, key=lambda o: o.run_id)
    successes = sum(1 for o in outcomes if o.success)

    pessimistic: List[BandPoint] = []
    median: List[BandPoint] = []
    optimistic: List[BandPoint] = []

    values_df = runs_frame(outcomes)
    for year_index, row in values_df.iterrows():
        # only runs that reached this year contribute
        values = np.sort(row.dropna().to_numpy())
        if values.size == 0:
            continue
        p10, p50, p90 = percentile_indices(values.size)
        age = start_age + int(year_index)
        pessimistic.append(BandPoint(int(year_index), age, float(values[p10])))
        median.append(BandPoint(int(year_index), age, float(values[p50])))
        optimistic.append(BandPoint(int(year_index), age, float(values[p90])))

    end_balances = [o.end_balance for o in outcomes]
    sorted_ends = sorted(end_balances)

    return MonteCarloResult(
        success_rate=successes / len(outcomes),
        end_balances=end_balances,
        pessimistic=pessimistic,
        median=median,
        optimistic=optimistic,
        minimum_balance=sorted_ends[0],
        median_end_balance=sorted_ends[len(sorted_ends) // 2],
        maximum_balance=sorted_ends[-1],
        simulation_runs=len(outcomes),
        runs=list(outcomes),
    )
