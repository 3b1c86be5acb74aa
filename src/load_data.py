import json
import logging

from pathlib import Path
from typing import Any, Dict, Optional

# Internal Imports
from domain import InvalidPlanError, PlanInputs
from monte_carlo import MonteCarloParams

BASE = Path(__file__).parent.parent
CONFIG = BASE / "config"
EXPORT = BASE / "export"


def load_json(config_dir: Path = CONFIG) -> Dict[str, dict]:
    files = {f.stem: json.loads(f.read_text()) for f in Path(config_dir).glob("*.json")}
    if "profile" not in files:
        logging.error(f"Required: `profile.json` in the `{config_dir}` directory.")
        raise FileNotFoundError(Path(config_dir) / "profile.json")

    return files


def _pct(value: Any) -> float:
    # rate keys are always percentages: 7 means 7%, 0.5 means 0.5%
    return float(value or 0.0) / 100


def _require(section: Dict[str, Any], key: str, source: str) -> Any:
    if key not in section:
        raise InvalidPlanError([f"Missing `{key}` in {source}.json"])
    return section[key]


def build_plan_inputs(json_data: Dict[str, dict]) -> PlanInputs:
    profile = json_data["profile"]
    balances = json_data.get("balances", {})
    income = json_data.get("income", {})
    mortgage = json_data.get("mortgage", {})
    assumptions = json_data.get("assumptions", {})

    primary_ss = income.get("Social Security", {})
    spouse_ss = income.get("Spouse Social Security", {})

    return PlanInputs(
        current_age=int(_require(profile, "Current Age", "profile")),
        life_expectancy=int(_require(profile, "Life Expectancy", "profile")),
        primary_retire_age=int(_require(profile, "Retirement Age", "profile")),
        spouse_retire_age=profile.get("Spouse Retirement Age"),
        start_year=profile.get("Start Year"),
        pretax_deferred=float(balances.get("Pre-Tax Deferred", 0)),
        roth_tax_free=float(balances.get("Roth", 0)),
        taxable_brokerage=float(balances.get("Taxable Brokerage", 0)),
        cash_savings=float(balances.get("Cash Savings", 0)),
        growth_rate=_pct(assumptions.get("Growth Rate", 7)),
        inflation_rate=_pct(assumptions.get("Inflation Rate", 3)),
        initial_annual_spending=float(assumptions.get("Annual Spending", 0)),
        mortgage_balance=float(mortgage.get("Remaining Principal", 0)),
        mortgage_rate=_pct(mortgage.get("Mortgage APR", 0)),
        mortgage_annual_payment=float(
            mortgage.get("Monthly Principal and Interest", 0)
        )
        * 12,
        mortgage_years_left=int(mortgage.get("Years Remaining", 0)),
        current_income=float(income.get("Salary", 0)),
        spouse_current_income=float(income.get("Spouse Salary", 0)),
        income_growth_rate=_pct(income.get("Salary Growth Rate", 0)),
        primary_ss_start_age=int(primary_ss.get("Start Age", 67)),
        primary_ss_benefit=float(primary_ss.get("Annual Benefit", 0)),
        spouse_ss_start_age=int(spouse_ss.get("Start Age", 67)),
        spouse_ss_benefit=float(spouse_ss.get("Annual Benefit", 0)),
        pension_income=float(income.get("Pension", 0)),
        other_retirement_income=float(income.get("Other Retirement Income", 0)),
        spouse_pension_income=float(income.get("Spouse Pension", 0)),
        pension_start_age=income.get("Pension Start Age"),
    )


def build_monte_carlo_params(
    json_data: Dict[str, dict], plan: PlanInputs
) -> Optional[MonteCarloParams]:
    settings = json_data.get("monte_carlo")
    if settings is None:
        return None

    return MonteCarloParams(
        plan=plan,
        mean_return=_pct(settings.get("Mean Return", 7)),
        return_std=_pct(settings.get("Volatility", 15)),
        simulation_runs=int(settings.get("Simulation Runs", 1000)),
        include_pre_retirement=bool(settings.get("Include Pre-Retirement", True)),
        adjust_withdrawals_for_inflation=bool(
            settings.get("Adjust Withdrawals For Inflation", True)
        ),
        seed=settings.get("Seed"),
    )


def load_plan_inputs(config_dir: Path = CONFIG) -> PlanInputs:
    return build_plan_inputs(load_json(config_dir))
