import logging

from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class AmortizationResult:
    payment: float
    interest: float
    principal: float
    new_balance: float
    years_remaining: int

    @property
    def active(self) -> bool:
        return self.payment > 0


def amortize(
    remaining_balance: float,
    annual_rate: float,
    annual_payment: float,
    years_remaining: int,
) -> AmortizationResult:
    """
    Apply one stepped annual payment against the remaining balance.

    The payment surfaced for the year is always the configured annual payment
    while the loan is active, including the final partial year.
    """
    if remaining_balance <= 0 or years_remaining <= 0:
        return AmortizationResult(
            payment=0.0,
            interest=0.0,
            principal=0.0,
            new_balance=max(0.0, remaining_balance),
            years_remaining=max(0, years_remaining),
        )

    interest = remaining_balance * annual_rate
    principal = min(remaining_balance, annual_payment - interest)
    new_balance = max(0.0, remaining_balance - principal)

    logging.debug(
        f"[Mortgage] paid ${annual_payment:,.0f} (interest ${interest:,.0f}, "
        f"principal ${principal:,.0f}), balance ${remaining_balance:,.0f} -> ${new_balance:,.0f}"
    )

    return AmortizationResult(
        payment=annual_payment,
        interest=interest,
        principal=principal,
        new_balance=new_balance,
        years_remaining=years_remaining - 1,
    )


def amortization_schedule(
    remaining_balance: float,
    annual_rate: float,
    annual_payment: float,
    years_remaining: int,
) -> Iterator[AmortizationResult]:
    """Yield one result per year until the loan is paid off or its term runs out."""
    balance, years = remaining_balance, years_remaining
    while True:
        result = amortize(balance, annual_rate, annual_payment, years)
        if not result.active:
            return
        yield result
        balance, years = result.new_balance, result.years_remaining
