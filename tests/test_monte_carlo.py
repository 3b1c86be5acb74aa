import logging
from dataclasses import replace

import numpy as np
import pytest

import monte_carlo
from domain import InvalidPlanError
from forecast_engine import run_projection
from monte_carlo import (
    CancellationToken,
    MonteCarloParams,
    SimulationCancelled,
    run_monte_carlo_simulation,
    simulate_run,
)


def _params(plan, **overrides):
    settings = dict(mean_return=0.07, return_std=0.15, simulation_runs=100, seed=7)
    settings.update(overrides)
    return MonteCarloParams(plan=plan, **settings)


def test_success_rate_is_a_fraction(household_plan):
    result = run_monte_carlo_simulation(_params(household_plan), workers=1)

    assert 0.0 <= result.success_rate <= 1.0
    assert result.simulation_runs == 100
    assert len(result.end_balances) == 100
    assert result.minimum_balance <= result.median_end_balance <= result.maximum_balance


def test_strong_returns_always_succeed(salaried_plan):
    params = _params(salaried_plan, mean_return=0.10, return_std=0.01)
    result = run_monte_carlo_simulation(params, workers=1)
    assert result.success_rate == 1.0


def test_collapsing_returns_always_fail(salaried_plan):
    params = _params(salaried_plan, mean_return=-0.30, return_std=0.01)
    result = run_monte_carlo_simulation(params, workers=1)

    assert result.success_rate == 0.0
    assert all(run.depletion_age is not None for run in result.runs)


def test_zero_volatility_matches_deterministic_projection(salaried_plan):
    params = _params(salaried_plan, mean_return=salaried_plan.growth_rate, return_std=0.0)
    result = run_monte_carlo_simulation(params, workers=1)
    expected = run_projection(salaried_plan)[-1].total_assets

    assert result.end_balances == pytest.approx([expected] * 100)


def test_same_seed_reproduces_results(household_plan):
    first = run_monte_carlo_simulation(_params(household_plan, seed=11), workers=1)
    second = run_monte_carlo_simulation(_params(household_plan, seed=11), workers=1)
    other = run_monte_carlo_simulation(_params(household_plan, seed=12), workers=1)

    assert first == second
    assert first.success_rate == second.success_rate
    assert first.end_balances != other.end_balances


def test_injected_generator_matches_seed(household_plan):
    params = _params(household_plan, seed=None)
    injected = run_monte_carlo_simulation(params, rng=np.random.default_rng(3), workers=1)
    seeded = run_monte_carlo_simulation(replace(params, seed=3), workers=1)

    assert injected.end_balances == seeded.end_balances


def test_worker_pool_matches_serial_run(household_plan):
    params = _params(household_plan)
    serial = run_monte_carlo_simulation(params, workers=1)
    pooled = run_monte_carlo_simulation(params, workers=2)

    assert pooled.end_balances == serial.end_balances
    assert pooled.success_rate == serial.success_rate
    assert pooled.bands_frame().equals(serial.bands_frame())


def test_bands_are_ordered(household_plan):
    result = run_monte_carlo_simulation(_params(household_plan), workers=1)

    assert result.median[0].age == 60
    for low, mid, high in zip(result.pessimistic, result.median, result.optimistic):
        assert low.age == mid.age == high.age
        assert low.portfolio_value <= mid.portfolio_value <= high.portfolio_value


def test_bands_start_at_retirement_without_pre_retirement(salaried_plan):
    params = _params(
        salaried_plan, mean_return=0.10, return_std=0.01, include_pre_retirement=False
    )
    result = run_monte_carlo_simulation(params, workers=1)

    assert params.years == 26
    assert result.median[0].age == 65
    assert len(result.median) == 26


def test_real_end_balance_discounts_inflation(household_plan):
    params = _params(household_plan)
    returns = [0.05] * params.years
    outcome = simulate_run(0, household_plan, returns, params.start_age, params.spending_inflation)

    years = len(outcome.portfolio_values)
    assert outcome.real_end_balance == pytest.approx(outcome.end_balance / 1.03**years)


def test_run_without_years_keeps_starting_balance(household_plan):
    outcome = simulate_run(0, household_plan, [], 60, 0.03)

    assert outcome.success
    assert outcome.portfolio_values == []
    assert outcome.end_balance == household_plan.starting_balances.total
    assert outcome.real_end_balance == outcome.end_balance


def test_spending_inflation_can_be_disabled(household_plan):
    assert _params(household_plan).spending_inflation == 0.03
    assert _params(household_plan, adjust_withdrawals_for_inflation=False).spending_inflation == 0.0


def test_too_few_runs_are_rejected(salaried_plan):
    with pytest.raises(InvalidPlanError):
        _params(salaried_plan, simulation_runs=99)


def test_negative_volatility_is_rejected(salaried_plan):
    with pytest.raises(InvalidPlanError):
        _params(salaried_plan, return_std=-0.1)


def test_invalid_plan_is_rejected(salaried_plan):
    with pytest.raises(InvalidPlanError):
        _params(replace(salaried_plan, life_expectancy=62))


def test_runs_above_soft_cap_only_warn(salaried_plan, monkeypatch, caplog):
    monkeypatch.setattr(monte_carlo, "SOFT_MAX_SIMULATION_RUNS", 50)
    with caplog.at_level(logging.WARNING):
        result = run_monte_carlo_simulation(_params(salaried_plan), workers=1)

    assert result.simulation_runs == 100
    assert "exceeds the recommended maximum" in caplog.text


def test_cancelled_serial_run_raises(salaried_plan):
    token = CancellationToken()
    token.cancel()

    assert token.cancelled
    with pytest.raises(SimulationCancelled):
        run_monte_carlo_simulation(_params(salaried_plan), workers=1, cancel=token)


def test_cancelled_pooled_run_raises(salaried_plan):
    token = CancellationToken()
    token.cancel()

    with pytest.raises(SimulationCancelled):
        run_monte_carlo_simulation(_params(salaried_plan), workers=2, cancel=token)
