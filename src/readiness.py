import logging
import pandas as pd

from typing import Optional

# Internal Imports
from domain import PlanInputs

SAFE_WITHDRAWAL_RATE = 0.04
SAVINGS_MULTIPLE = 25
READINESS_RETURN = 0.07
INCOME_PROJECTION_RETURN = 0.06
DESIRED_REPLACEMENT_RATE = 0.8

FULL_RETIREMENT_AGE = 67
MAX_MONTHLY_SS_BENEFIT = 3500
EARLY_CLAIM_ADJUSTMENT = 0.93
DELAYED_CLAIM_ADJUSTMENT = 1.08

# (income ceiling, replacement rate); lower incomes replace a larger share
SS_REPLACEMENT_TIERS = (
    (30000, 0.45),
    (60000, 0.40),
    (100000, 0.35),
)
SS_TOP_REPLACEMENT_RATE = 0.30

INCOME_PROJECTION_COLUMNS = ["age", "portfolio_income", "social_security", "total"]


def future_value(
    principal: float,
    annual_rate: float,
    years: int,
    monthly_contribution: float = 0.0,
) -> int:
    """Monthly-compounded value with a contribution added after each month."""
    monthly_rate = annual_rate / 12
    value = principal
    for _ in range(int(years * 12)):
        value = value * (1 + monthly_rate) + monthly_contribution
    return round(value)


def monthly_retirement_income(
    portfolio_value: float, withdrawal_rate: float = SAFE_WITHDRAWAL_RATE
) -> int:
    return round(portfolio_value * withdrawal_rate / 12)


def estimate_social_security_benefit(
    current_income: float, retirement_age: int = FULL_RETIREMENT_AGE
) -> int:
    """
    Rough monthly Social Security estimate from current income.
      - replacement rate by income tier
      - 7% haircut for claiming before 67, 8% credit for claiming after
      - capped at MAX_MONTHLY_SS_BENEFIT
    """
    replacement_rate = next(
        (rate for ceiling, rate in SS_REPLACEMENT_TIERS if current_income <= ceiling),
        SS_TOP_REPLACEMENT_RATE,
    )

    age_adjustment = 1.0
    if retirement_age < FULL_RETIREMENT_AGE:
        age_adjustment = EARLY_CLAIM_ADJUSTMENT
    elif retirement_age > FULL_RETIREMENT_AGE:
        age_adjustment = DELAYED_CLAIM_ADJUSTMENT

    monthly = current_income * replacement_rate / 12 * age_adjustment
    return min(round(monthly), MAX_MONTHLY_SS_BENEFIT)


def retirement_readiness_score(
    current_age: int,
    retirement_age: int,
    current_savings: float,
    annual_contributions: float,
    current_income: float,
    desired_replacement_rate: float = DESIRED_REPLACEMENT_RATE,
) -> int:
    """
    0-100 score: projected savings at retirement against the 25x target for
    the desired income, with the Social Security estimate netted out.
    """
    years_to_retirement = max(0, retirement_age - current_age)
    portfolio = future_value(
        current_savings,
        READINESS_RETURN,
        years_to_retirement,
        annual_contributions / 12,
    )

    required = current_income * desired_replacement_rate * SAVINGS_MULTIPLE
    annual_ss = estimate_social_security_benefit(current_income, retirement_age) * 12
    adjusted_required = max(0.0, required - annual_ss * SAVINGS_MULTIPLE)

    if adjusted_required <= 0:
        return 100
    return round(min(100.0, portfolio / adjusted_required * 100))


def project_retirement_income(
    retirement_age: int,
    portfolio_value: float,
    social_security_benefit: float,
    withdrawal_rate: float = SAFE_WITHDRAWAL_RATE,
    inflation_rate: float = 0.025,
    years: int = 30,
    portfolio_return: float = INCOME_PROJECTION_RETURN,
) -> pd.DataFrame:
    """
    Monthly income per year of retirement: a fixed-rate draw on the
    remaining portfolio plus a Social Security benefit that inflates from the
    second year.
    """
    rows = []
    portfolio = portfolio_value
    benefit = social_security_benefit

    for year in range(years):
        withdrawal = portfolio * withdrawal_rate
        monthly_portfolio = withdrawal / 12
        portfolio = (portfolio - withdrawal) * (1 + portfolio_return)

        if year > 0:
            benefit *= 1 + inflation_rate

        rows.append(
            {
                "age": retirement_age + year,
                "portfolio_income": round(monthly_portfolio),
                "social_security": round(benefit),
                "total": round(monthly_portfolio + benefit),
            }
        )

    return pd.DataFrame(rows, columns=INCOME_PROJECTION_COLUMNS)


def plan_readiness_score(
    inputs: PlanInputs, annual_contributions: Optional[float] = None
) -> int:
    """Readiness score for a plan, using household salary and all four buckets."""
    income = inputs.current_income + inputs.spouse_current_income
    if annual_contributions is None:
        # salary above spending is what the projection reinvests
        annual_contributions = max(0.0, income - inputs.initial_annual_spending)

    score = retirement_readiness_score(
        inputs.current_age,
        inputs.primary_retire_age,
        inputs.starting_balances.total,
        annual_contributions,
        income,
    )
    logging.debug(f"[Readiness] score {score} for income ${income:,.0f}")
    return score
