import json
from pathlib import Path

import pytest

from domain import PlanInputs

CONFIG_DIR = Path(__file__).parent.parent / "config"


@pytest.fixture
def salaried_plan() -> PlanInputs:
    return PlanInputs(
        current_age=60,
        life_expectancy=90,
        primary_retire_age=65,
        pretax_deferred=500000,
        roth_tax_free=100000,
        taxable_brokerage=200000,
        cash_savings=50000,
        growth_rate=0.07,
        inflation_rate=0.0,
        initial_annual_spending=60000,
        current_income=100000,
        start_year=2026,
    )


@pytest.fixture
def household_plan() -> PlanInputs:
    return PlanInputs(
        current_age=60,
        life_expectancy=90,
        primary_retire_age=65,
        spouse_retire_age=63,
        pretax_deferred=500000,
        roth_tax_free=100000,
        taxable_brokerage=200000,
        cash_savings=50000,
        growth_rate=0.06,
        inflation_rate=0.03,
        initial_annual_spending=78000,
        mortgage_balance=120000,
        mortgage_rate=0.045,
        mortgage_annual_payment=18000,
        mortgage_years_left=8,
        current_income=90000,
        spouse_current_income=30000,
        income_growth_rate=0.02,
        primary_ss_start_age=67,
        primary_ss_benefit=30000,
        spouse_ss_start_age=67,
        spouse_ss_benefit=15000,
        start_year=2026,
    )


@pytest.fixture
def underfunded_plan() -> PlanInputs:
    return PlanInputs(
        current_age=60,
        life_expectancy=90,
        primary_retire_age=62,
        taxable_brokerage=50000,
        roth_tax_free=20000,
        cash_savings=10000,
        growth_rate=0.03,
        inflation_rate=0.03,
        initial_annual_spending=50000,
        start_year=2026,
    )


@pytest.fixture
def config_dict() -> dict:
    return {f.stem: json.loads(f.read_text()) for f in CONFIG_DIR.glob("*.json")}


@pytest.fixture
def write_config(tmp_path):
    def _write(data: dict) -> Path:
        for name, section in data.items():
            (tmp_path / f"{name}.json").write_text(json.dumps(section))
        return tmp_path

    return _write
