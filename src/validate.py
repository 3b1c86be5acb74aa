"""Caller-side range checks applied before invoking the engines."""

from dataclasses import dataclass, field
from typing import List, Tuple

# Internal Imports
from domain import InvalidPlanError, PlanInputs
from monte_carlo import MonteCarloParams, SOFT_MAX_SIMULATION_RUNS

INFLATION_RANGE: Tuple[float, float] = (0.0, 0.20)
GROWTH_RANGE: Tuple[float, float] = (0.0, 0.25)
INCOME_GROWTH_RANGE: Tuple[float, float] = (0.0, 0.20)
MORTGAGE_RATE_RANGE: Tuple[float, float] = (0.0, 0.20)
RETURN_RANGE: Tuple[float, float] = (0.0, 0.15)
VOLATILITY_RANGE: Tuple[float, float] = (0.01, 0.50)
SIMULATION_RUNS_RANGE: Tuple[int, int] = (100, SOFT_MAX_SIMULATION_RUNS)
MAX_AGE = 120


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _check_range(
    result: ValidationResult, label: str, value: float, bounds: Tuple[float, float]
) -> None:
    low, high = bounds
    if not low <= value <= high:
        result.errors.append(f"{label} must be between {low:.0%} and {high:.0%} (got {value:.2%})")


def validate_plan_inputs(inputs: PlanInputs) -> ValidationResult:
    result = ValidationResult(errors=inputs.structural_errors())

    if inputs.current_age < 0:
        result.errors.append("Current age must not be negative")
    if inputs.life_expectancy > MAX_AGE:
        result.errors.append(f"Life expectancy must be at most {MAX_AGE}")

    _check_range(result, "Inflation rate", inputs.inflation_rate, INFLATION_RANGE)
    _check_range(result, "Growth rate", inputs.growth_rate, GROWTH_RANGE)
    _check_range(result, "Salary growth rate", inputs.income_growth_rate, INCOME_GROWTH_RANGE)
    _check_range(result, "Mortgage rate", inputs.mortgage_rate, MORTGAGE_RATE_RANGE)

    if inputs.mortgage_balance > 0 and inputs.mortgage_years_left <= 0:
        result.warnings.append(
            "Mortgage balance is set but no years remain; no payments will be modeled"
        )
    if (
        inputs.mortgage_balance > 0
        and inputs.mortgage_annual_payment <= inputs.mortgage_balance * inputs.mortgage_rate
    ):
        result.warnings.append(
            "Mortgage payment does not cover annual interest; the balance will grow"
        )
    if inputs.initial_annual_spending <= 0:
        result.warnings.append("Initial annual spending is zero")
    if inputs.primary_ss_benefit > 0 and inputs.primary_ss_start_age < 62:
        result.warnings.append("Social Security cannot start before age 62")

    return result


def validate_monte_carlo_params(params: MonteCarloParams) -> ValidationResult:
    result = validate_plan_inputs(params.plan)

    _check_range(result, "Expected return", params.mean_return, RETURN_RANGE)
    _check_range(result, "Volatility", params.return_std, VOLATILITY_RANGE)

    low, high = SIMULATION_RUNS_RANGE
    if not low <= params.simulation_runs <= high:
        result.errors.append(
            f"Simulation runs must be between {low:,} and {high:,} (got {params.simulation_runs:,})"
        )

    return result


def ensure_valid(result: ValidationResult) -> ValidationResult:
    if not result.is_valid:
        raise InvalidPlanError(result.errors)
    return result
