from dataclasses import asdict, dataclass, fields
from typing import Dict, List, Optional

# Internal Imports
from audit import FlowTracker
from taxes import CASH, PRETAX, ROTH_FREE, TAXABLE

PRETAX_DEFERRED = "pretax_deferred"
ROTH_TAX_FREE = "roth_tax_free"
TAXABLE_BROKERAGE = "taxable_brokerage"
CASH_SAVINGS = "cash_savings"

BUCKET_KINDS = (PRETAX_DEFERRED, ROTH_TAX_FREE, TAXABLE_BROKERAGE, CASH_SAVINGS)

TAX_TREATMENT: Dict[str, str] = {
    PRETAX_DEFERRED: PRETAX,
    ROTH_TAX_FREE: ROTH_FREE,
    TAXABLE_BROKERAGE: TAXABLE,
    CASH_SAVINGS: CASH,
}


class InvalidPlanError(ValueError):
    """Plan configuration rejected before any simulation runs."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class Bucket:
    """
    A single account bucket with a tax treatment tag.

    The balance never goes below zero: withdrawals are capped at what is
    available and the actual amount taken is returned.
    """

    def __init__(
        self,
        name: str,
        balance: float,
        bucket_type: str,
        flow_tracker: Optional[FlowTracker] = None,
    ):
        self.name = name
        self.amount = max(0.0, float(balance))
        self.bucket_type = bucket_type
        self.flow_tracker = flow_tracker

    def balance(self) -> float:
        return self.amount

    def deposit(
        self,
        amount: float,
        source: Optional[str] = None,
        year: Optional[int] = None,
        age: Optional[int] = None,
        flow_type: str = "deposit",
    ) -> None:
        if amount <= 0:
            return

        self.amount += amount
        if self.flow_tracker and source:
            self.flow_tracker.record(source, self.name, amount, year, age, flow_type)

    def withdraw(
        self,
        amount: float,
        target: Optional[str] = None,
        year: Optional[int] = None,
        age: Optional[int] = None,
        flow_type: str = "withdraw",
    ) -> float:
        """
        Remove up to `amount` from this bucket.
        Returns the actual withdrawn (<= amount).
        """
        if amount <= 0:
            return 0.0

        withdrawn = min(amount, self.amount)
        self.amount -= withdrawn

        if self.flow_tracker and target and withdrawn > 0:
            self.flow_tracker.record(self.name, target, withdrawn, year, age, flow_type)

        return withdrawn


@dataclass(frozen=True)
class Balances:
    pretax_deferred: float = 0.0
    roth_tax_free: float = 0.0
    taxable_brokerage: float = 0.0
    cash_savings: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.pretax_deferred
            + self.roth_tax_free
            + self.taxable_brokerage
            + self.cash_savings
        )

    def get(self, kind: str) -> float:
        if kind not in BUCKET_KINDS:
            raise KeyError(kind)
        return getattr(self, kind)

    def with_growth(self, rate: float) -> "Balances":
        return Balances(
            **{kind: max(0.0, self.get(kind) * (1 + rate)) for kind in BUCKET_KINDS}
        )

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)

    def to_buckets(
        self, flow_tracker: Optional[FlowTracker] = None
    ) -> Dict[str, Bucket]:
        return {
            kind: Bucket(kind, self.get(kind), TAX_TREATMENT[kind], flow_tracker)
            for kind in BUCKET_KINDS
        }

    @classmethod
    def from_buckets(cls, buckets: Dict[str, Bucket]) -> "Balances":
        return cls(**{kind: buckets[kind].balance() for kind in BUCKET_KINDS})


@dataclass(frozen=True)
class PlanInputs:
    """
    Scalar plan parameters for one projection run.

    Rates are decimals (0.07, not 7). Spouse ages are expressed on the
    primary person's age axis.
    """

    current_age: int
    life_expectancy: int
    primary_retire_age: int
    spouse_retire_age: Optional[int] = None

    pretax_deferred: float = 0.0
    roth_tax_free: float = 0.0
    taxable_brokerage: float = 0.0
    cash_savings: float = 0.0

    growth_rate: float = 0.07
    inflation_rate: float = 0.03
    initial_annual_spending: float = 0.0

    mortgage_balance: float = 0.0
    mortgage_rate: float = 0.0
    mortgage_annual_payment: float = 0.0
    mortgage_years_left: int = 0

    current_income: float = 0.0
    spouse_current_income: float = 0.0
    income_growth_rate: float = 0.0

    primary_ss_start_age: int = 67
    primary_ss_benefit: float = 0.0
    spouse_ss_start_age: int = 67
    spouse_ss_benefit: float = 0.0

    pension_income: float = 0.0
    other_retirement_income: float = 0.0
    spouse_pension_income: float = 0.0
    pension_start_age: Optional[int] = None

    start_year: Optional[int] = None

    @property
    def starting_balances(self) -> Balances:
        return Balances(
            pretax_deferred=self.pretax_deferred,
            roth_tax_free=self.roth_tax_free,
            taxable_brokerage=self.taxable_brokerage,
            cash_savings=self.cash_savings,
        )

    @property
    def initial_living_expenses(self) -> float:
        # initial spending includes the mortgage payment while the loan is active
        mortgage_component = (
            self.mortgage_annual_payment if self.mortgage_balance > 0 else 0.0
        )
        return max(0.0, self.initial_annual_spending - mortgage_component)

    @property
    def effective_pension_start_age(self) -> int:
        if self.pension_start_age is None:
            return self.primary_retire_age
        return self.pension_start_age

    def structural_errors(self) -> List[str]:
        errors = []
        if self.primary_retire_age <= self.current_age:
            errors.append(
                f"Retirement age ({self.primary_retire_age}) must be greater than current age ({self.current_age})"
            )
        if self.life_expectancy <= self.primary_retire_age:
            errors.append(
                f"Life expectancy ({self.life_expectancy}) must be greater than retirement age ({self.primary_retire_age})"
            )
        if self.spouse_retire_age is not None and self.spouse_retire_age <= 0:
            errors.append(
                f"Spouse retirement age ({self.spouse_retire_age}) must be positive"
            )
        for kind in BUCKET_KINDS:
            if getattr(self, kind) < 0:
                errors.append(f"Starting balance for {kind} must not be negative")
        if self.mortgage_balance < 0:
            errors.append("Mortgage balance must not be negative")
        return errors


@dataclass(frozen=True)
class MortgageState:
    balance: float = 0.0
    years_remaining: int = 0


@dataclass(frozen=True)
class YearState:
    """Start-of-year state carried by value from one projection year to the next."""

    age: int
    year_index: int
    living_expenses: float
    primary_salary: float
    spouse_salary: float
    balances: Balances
    mortgage: MortgageState
    cumulative_tax: float = 0.0


@dataclass(frozen=True)
class YearSnapshot:
    year: int
    age: int
    living_expenses: float
    mortgage_payment: float
    total_spending: float
    salary_income: float
    primary_salary: float
    spouse_salary: float
    social_security_income: float
    pension_income: float
    fixed_income: float
    net_need: float
    surplus_reinvested: float
    rmd_amount: float
    withdrawals: Balances
    total_gross_withdrawal: float
    taxable_withdrawals: float
    total_tax: float
    cumulative_tax: float
    unmet_need: float
    balances: Balances
    mortgage_balance: float
    growth_rate: float
    depleted: bool = False

    @property
    def total_assets(self) -> float:
        return self.balances.total

    @property
    def net_worth(self) -> float:
        return self.total_assets - self.mortgage_balance

    @property
    def net_withdrawal(self) -> float:
        return self.total_gross_withdrawal - self.total_tax

    def to_record(self) -> Dict[str, object]:
        record: Dict[str, object] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Balances):
                prefix = "withdrawal" if f.name == "withdrawals" else "eoy"
                for kind in BUCKET_KINDS:
                    record[f"{kind}_{prefix}"] = value.get(kind)
            else:
                record[f.name] = value
        record["total_assets"] = self.total_assets
        record["net_worth"] = self.net_worth
        return record


@dataclass(frozen=True)
class PlanSummary:
    years_projected: int
    depleted: bool
    depletion_age: Optional[int]
    ending_net_worth: float
    total_lifetime_tax: float
    peak_assets: float
