import pytest

from domain import InvalidPlanError
from load_data import (
    build_monte_carlo_params,
    build_plan_inputs,
    load_json,
    load_plan_inputs,
)


def test_bundled_config_builds_household_plan(config_dict, household_plan):
    assert build_plan_inputs(config_dict) == household_plan


def test_rates_are_read_as_percentages(config_dict):
    config_dict["income"]["Salary Growth Rate"] = 1
    config_dict["mortgage"]["Mortgage APR"] = 1
    config_dict["assumptions"]["Inflation Rate"] = 0.5
    plan = build_plan_inputs(config_dict)

    assert plan.income_growth_rate == pytest.approx(0.01)
    assert plan.mortgage_rate == pytest.approx(0.01)
    assert plan.inflation_rate == pytest.approx(0.005)


def test_monthly_mortgage_payment_is_annualized(config_dict):
    config_dict["mortgage"]["Monthly Principal and Interest"] = 2000
    assert build_plan_inputs(config_dict).mortgage_annual_payment == 24000


def test_optional_sections_default_to_zero(config_dict):
    plan = build_plan_inputs({"profile": config_dict["profile"]})

    assert plan.starting_balances.total == 0.0
    assert plan.mortgage_annual_payment == 0.0
    assert plan.growth_rate == pytest.approx(0.07)


def test_missing_required_key_names_it(config_dict):
    del config_dict["profile"]["Life Expectancy"]
    with pytest.raises(InvalidPlanError, match="Life Expectancy"):
        build_plan_inputs(config_dict)


def test_load_json_reads_every_section(write_config, config_dict):
    config_dir = write_config(config_dict)
    assert load_json(config_dir) == config_dict
    assert load_plan_inputs(config_dir).current_age == 60


def test_load_json_requires_profile(write_config, config_dict):
    del config_dict["profile"]
    with pytest.raises(FileNotFoundError):
        load_json(write_config(config_dict))


def test_monte_carlo_settings(config_dict):
    plan = build_plan_inputs(config_dict)
    params = build_monte_carlo_params(config_dict, plan)

    assert params.plan is plan
    assert params.mean_return == pytest.approx(0.06)
    assert params.return_std == pytest.approx(0.12)
    assert params.simulation_runs == 1000
    assert params.seed == 42


def test_monte_carlo_section_is_optional(config_dict):
    del config_dict["monte_carlo"]
    plan = build_plan_inputs(config_dict)
    assert build_monte_carlo_params(config_dict, plan) is None
