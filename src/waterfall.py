import logging

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

# Internal Imports
from domain import (
    Balances,
    Bucket,
    BUCKET_KINDS,
    CASH_SAVINGS,
    PRETAX_DEFERRED,
    ROTH_TAX_FREE,
    TAXABLE_BROKERAGE,
)
from rmd import required_minimum_distribution
from taxes import FlatTaxCalculator

DEPLETION_TOLERANCE = 1.0

# Discretionary draws after the forced RMD, in priority order.
WITHDRAWAL_ORDER: Tuple[str, ...] = (
    TAXABLE_BROKERAGE,
    PRETAX_DEFERRED,
    ROTH_TAX_FREE,
    CASH_SAVINGS,
)


@dataclass(frozen=True)
class WaterfallResult:
    withdrawals: Balances
    total_tax: float
    unmet_need: float
    rmd_amount: float
    rmd_taken: float
    surplus_reinvested: float
    depleted: bool

    @property
    def total_gross_withdrawal(self) -> float:
        return self.withdrawals.total

    @property
    def net_withdrawal(self) -> float:
        return self.withdrawals.total - self.total_tax

    @property
    def taxable_withdrawals(self) -> float:
        return self.withdrawals.pretax_deferred + self.withdrawals.taxable_brokerage


class WithdrawalWaterfall:
    """
    Funds a year's net need from the four buckets in a fixed priority order:
      1) surplus (negative need) is reinvested into the taxable brokerage
      2) the RMD is always taken from pre-tax deferred
      3) taxable brokerage, grossed up for tax
      4) remaining pre-tax deferred, grossed up for tax
      5) Roth, untaxed
      6) cash, untaxed
    Any need left after cash beyond the tolerance marks the year depleted.
    """

    def __init__(
        self,
        tax_calc: Optional[FlatTaxCalculator] = None,
        tolerance: float = DEPLETION_TOLERANCE,
    ):
        self.tax_calc = tax_calc or FlatTaxCalculator()
        self.tolerance = tolerance

    def apply(
        self,
        buckets: Dict[str, Bucket],
        need: float,
        age: int,
        year: Optional[int] = None,
    ) -> WaterfallResult:
        withdrawals = {kind: 0.0 for kind in BUCKET_KINDS}
        total_tax = 0.0
        surplus = 0.0

        # 1) Surplus handling
        if need < 0:
            surplus = -need
            buckets[TAXABLE_BROKERAGE].deposit(
                surplus, "Surplus Income", year, age, flow_type="reinvest"
            )
            logging.debug(f"[Waterfall] {age}: reinvested surplus ${surplus:,.0f}")
            need = 0.0

        # 2) Forced RMD
        pretax = buckets[PRETAX_DEFERRED]
        rmd_amount = required_minimum_distribution(pretax.balance(), age)
        rmd_taken = pretax.withdraw(rmd_amount, "RMD", year, age, flow_type="rmd")
        if rmd_taken > 0:
            rmd_tax = self.tax_calc.tax_on(rmd_taken, pretax.bucket_type)
            withdrawals[PRETAX_DEFERRED] += rmd_taken
            total_tax += rmd_tax
            need = max(0.0, need - (rmd_taken - rmd_tax))
            logging.debug(
                f"[Waterfall] {age}: RMD ${rmd_taken:,.0f} (tax ${rmd_tax:,.0f}), need now ${need:,.0f}"
            )

        # 3-6) Discretionary draws
        for kind in WITHDRAWAL_ORDER:
            if need <= 0:
                break

            bucket = buckets[kind]
            if bucket.balance() <= 0:
                continue

            treatment = bucket.bucket_type
            gross_needed = self.tax_calc.gross_up(need, treatment)
            gross = bucket.withdraw(gross_needed, "Spending", year, age)
            tax = self.tax_calc.tax_on(gross, treatment)

            withdrawals[kind] += gross
            total_tax += tax
            need = max(0.0, need - (gross - tax))
            logging.debug(
                f"[Waterfall] {age}: drew ${gross:,.0f} from {kind} (tax ${tax:,.0f}), need now ${need:,.0f}"
            )

        depleted = need > self.tolerance
        if depleted:
            logging.debug(f"[Waterfall] {age}: depleted with ${need:,.0f} unmet")

        return WaterfallResult(
            withdrawals=Balances(**withdrawals),
            total_tax=total_tax,
            unmet_need=need,
            rmd_amount=rmd_amount,
            rmd_taken=rmd_taken,
            surplus_reinvested=surplus,
            depleted=depleted,
        )
