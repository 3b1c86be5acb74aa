from dataclasses import replace

import pytest

from domain import InvalidPlanError
from monte_carlo import MonteCarloParams
from validate import ensure_valid, validate_monte_carlo_params, validate_plan_inputs


def test_reasonable_plan_is_valid(household_plan):
    result = validate_plan_inputs(household_plan)
    assert result.is_valid
    assert result.errors == []


@pytest.mark.parametrize(
    "changes",
    [
        {"inflation_rate": 0.25},
        {"inflation_rate": -0.01},
        {"growth_rate": 0.30},
        {"life_expectancy": 125},
        {"mortgage_rate": -0.01},
        {"mortgage_rate": 1.0},
        {"income_growth_rate": 1.0},
        {"income_growth_rate": -0.05},
        {"primary_retire_age": 55},
    ],
)
def test_out_of_range_plan_values_are_errors(household_plan, changes):
    result = validate_plan_inputs(replace(household_plan, **changes))
    assert not result.is_valid
    with pytest.raises(InvalidPlanError):
        ensure_valid(result)


def test_questionable_values_are_warnings(household_plan):
    plan = replace(
        household_plan,
        mortgage_years_left=0,
        mortgage_annual_payment=1000,
        initial_annual_spending=0,
        primary_ss_start_age=60,
    )
    result = validate_plan_inputs(plan)

    assert result.is_valid
    assert len(result.warnings) == 4


@pytest.mark.parametrize(
    "changes",
    [
        {"mean_return": 0.20},
        {"return_std": 0.005},
        {"return_std": 0.60},
        {"simulation_runs": 20000},
    ],
)
def test_out_of_range_simulation_settings_are_errors(household_plan, changes):
    settings = dict(mean_return=0.07, return_std=0.15, simulation_runs=1000)
    settings.update(changes)
    result = validate_monte_carlo_params(MonteCarloParams(plan=household_plan, **settings))

    assert not result.is_valid


def test_default_simulation_settings_are_valid(household_plan):
    result = validate_monte_carlo_params(MonteCarloParams(plan=household_plan))
    assert ensure_valid(result) is result


def test_invalid_plan_error_lists_every_problem(household_plan):
    result = validate_plan_inputs(
        replace(household_plan, inflation_rate=0.5, growth_rate=0.5)
    )
    with pytest.raises(InvalidPlanError) as exc:
        ensure_valid(result)

    assert len(exc.value.errors) == 2
    assert "Inflation rate" in str(exc.value)
