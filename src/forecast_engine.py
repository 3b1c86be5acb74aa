import logging
import pandas as pd

from typing import List, Optional, Tuple

# Internal Imports
from audit import FlowTracker
from domain import (
    Balances,
    InvalidPlanError,
    MortgageState,
    PlanInputs,
    PlanSummary,
    YearSnapshot,
    YearState,
)
from mortgage import amortize
from waterfall import WithdrawalWaterfall


def initial_state(inputs: PlanInputs, start_age: Optional[int] = None) -> YearState:
    age = inputs.current_age if start_age is None else start_age
    return YearState(
        age=age,
        year_index=0,
        living_expenses=inputs.initial_living_expenses,
        primary_salary=inputs.current_income,
        spouse_salary=inputs.spouse_current_income,
        balances=inputs.starting_balances,
        mortgage=MortgageState(
            balance=inputs.mortgage_balance,
            years_remaining=inputs.mortgage_years_left,
        ),
    )


def _fixed_income(inputs: PlanInputs, age: int) -> Tuple[float, float]:
    social_security = 0.0
    if age >= inputs.primary_ss_start_age:
        social_security += inputs.primary_ss_benefit
    if age >= inputs.spouse_ss_start_age:
        social_security += inputs.spouse_ss_benefit

    pension = 0.0
    if age >= inputs.effective_pension_start_age:
        pension += inputs.pension_income + inputs.other_retirement_income
    if inputs.spouse_retire_age is not None and age >= inputs.spouse_retire_age:
        pension += inputs.spouse_pension_income

    return social_security, pension


def _salary_received(
    inputs: PlanInputs, age: int, primary_salary: float, spouse_salary: float
) -> Tuple[float, float]:
    primary_working = age < inputs.primary_retire_age
    if inputs.spouse_retire_age is None:
        spouse_working = primary_working
    else:
        spouse_working = age < inputs.spouse_retire_age

    return (
        primary_salary if primary_working else 0.0,
        spouse_salary if spouse_working else 0.0,
    )


def advance(
    state: YearState,
    inputs: PlanInputs,
    growth_rate: float,
    inflation_rate: Optional[float] = None,
    waterfall: Optional[WithdrawalWaterfall] = None,
    flow_tracker: Optional[FlowTracker] = None,
    start_year: int = 0,
) -> Tuple[YearSnapshot, YearState]:
    """
    Run one projection year from a start-of-year state.

    Returns the year's snapshot and the next year's start state. The input
    state is never modified.
    """
    waterfall = waterfall or WithdrawalWaterfall()
    inflation = inputs.inflation_rate if inflation_rate is None else inflation_rate
    age = state.age
    year = start_year + state.year_index

    # 1) Inflation and salary growth, skipped in the first year
    living_expenses = state.living_expenses
    primary_salary = state.primary_salary
    spouse_salary = state.spouse_salary
    if state.year_index > 0:
        living_expenses *= 1 + inflation
        primary_salary *= 1 + inputs.income_growth_rate
        spouse_salary *= 1 + inputs.income_growth_rate

    # 2) Mortgage
    loan = amortize(
        state.mortgage.balance,
        inputs.mortgage_rate,
        inputs.mortgage_annual_payment,
        state.mortgage.years_remaining,
    )
    total_spending = living_expenses + loan.payment

    # 3) Fixed income by age threshold
    social_security, pension = _fixed_income(inputs, age)
    fixed_income = social_security + pension
    primary_received, spouse_received = _salary_received(
        inputs, age, primary_salary, spouse_salary
    )
    salary = primary_received + spouse_received

    # 4) Net funding need
    net_need = total_spending - fixed_income - salary

    # 5) Withdrawals
    buckets = state.balances.to_buckets(flow_tracker)
    result = waterfall.apply(buckets, net_need, age, year)
    balances = Balances.from_buckets(buckets)

    # 6) Growth, skipped in a depleted year
    applied_growth = 0.0
    if not result.depleted:
        balances = balances.with_growth(growth_rate)
        applied_growth = growth_rate

    cumulative_tax = state.cumulative_tax + result.total_tax

    # 7) Snapshot
    snapshot = YearSnapshot(
        year=year,
        age=age,
        living_expenses=living_expenses,
        mortgage_payment=loan.payment,
        total_spending=total_spending,
        salary_income=salary,
        primary_salary=primary_received,
        spouse_salary=spouse_received,
        social_security_income=social_security,
        pension_income=pension,
        fixed_income=fixed_income,
        net_need=net_need,
        surplus_reinvested=result.surplus_reinvested,
        rmd_amount=result.rmd_amount,
        withdrawals=result.withdrawals,
        total_gross_withdrawal=result.total_gross_withdrawal,
        taxable_withdrawals=result.taxable_withdrawals,
        total_tax=result.total_tax,
        cumulative_tax=cumulative_tax,
        unmet_need=result.unmet_need,
        balances=balances,
        mortgage_balance=loan.new_balance,
        growth_rate=applied_growth,
        depleted=result.depleted,
    )

    next_state = YearState(
        age=age + 1,
        year_index=state.year_index + 1,
        living_expenses=living_expenses,
        primary_salary=primary_salary,
        spouse_salary=spouse_salary,
        balances=balances,
        mortgage=MortgageState(
            balance=loan.new_balance, years_remaining=loan.years_remaining
        ),
        cumulative_tax=cumulative_tax,
    )

    return snapshot, next_state


class ProjectionEngine:
    """
    Deterministic year-by-year projection at a fixed growth rate.

    Runs from the current age to life expectancy and stops after the first
    depleted year.
    """

    def __init__(
        self,
        inputs: PlanInputs,
        waterfall: Optional[WithdrawalWaterfall] = None,
    ):
        errors = inputs.structural_errors()
        if errors:
            raise InvalidPlanError(errors)

        self.inputs = inputs
        self.waterfall = waterfall or WithdrawalWaterfall()
        self.start_year: int = inputs.start_year or pd.Timestamp.now().year
        self.flow_tracker = FlowTracker()
        self.snapshots: List[YearSnapshot] = []

    def run(self) -> List[YearSnapshot]:
        self.snapshots = []
        self.flow_tracker = FlowTracker()
        state = initial_state(self.inputs)

        while state.age <= self.inputs.life_expectancy:
            snapshot, state = advance(
                state,
                self.inputs,
                growth_rate=self.inputs.growth_rate,
                waterfall=self.waterfall,
                flow_tracker=self.flow_tracker,
                start_year=self.start_year,
            )
            self.snapshots.append(snapshot)

            if snapshot.depleted:
                logging.info(
                    f"[Projection] portfolio depleted at age {snapshot.age} ({snapshot.year})"
                )
                break

        logging.debug(
            f"[Projection] {len(self.snapshots)} years projected, "
            f"ending assets ${self.snapshots[-1].total_assets:,.0f}"
        )
        return self.snapshots

    def flows_frame(self) -> pd.DataFrame:
        return self.flow_tracker.to_dataframe()


def run_projection(inputs: PlanInputs) -> List[YearSnapshot]:
    return ProjectionEngine(inputs).run()


def snapshots_to_frame(snapshots: List[YearSnapshot]) -> pd.DataFrame:
    return pd.DataFrame([s.to_record() for s in snapshots])


def summarize(snapshots: List[YearSnapshot]) -> PlanSummary:
    if not snapshots:
        raise ValueError("Cannot summarize an empty projection")

    last = snapshots[-1]
    return PlanSummary(
        years_projected=len(snapshots),
        depleted=last.depleted,
        depletion_age=last.age if last.depleted else None,
        ending_net_worth=last.net_worth,
        total_lifetime_tax=sum(s.total_tax for s in snapshots),
        peak_assets=max(s.total_assets for s in snapshots),
    )
