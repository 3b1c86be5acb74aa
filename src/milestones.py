import pandas as pd

from dataclasses import dataclass
from typing import List, Optional, Sequence

# Internal Imports
from domain import PlanInputs, YearSnapshot
from rmd import RMD_START_AGE

SOCIAL_SECURITY_ELIGIBILITY_AGE = 62
MEDICARE_ELIGIBILITY_AGE = 65


@dataclass(frozen=True)
class Milestone:
    title: str
    description: str
    category: str
    target_age: int
    target_year: int


def _mortgage_payoff_age(
    inputs: PlanInputs, snapshots: Optional[Sequence[YearSnapshot]]
) -> Optional[int]:
    if not snapshots or inputs.mortgage_balance <= 0:
        return None
    return next((s.age for s in snapshots if s.mortgage_balance <= 0), None)


def standard_milestones(
    inputs: PlanInputs,
    snapshots: Optional[Sequence[YearSnapshot]] = None,
) -> List[Milestone]:
    """
    Key plan milestones that fall within the plan timeline, ordered by age.
    The mortgage payoff milestone needs a projection to locate it.
    """
    start_year = inputs.start_year or pd.Timestamp.now().year

    candidates = [
        (
            "Retirement Begins",
            "Start of retirement phase",
            "retirement",
            inputs.primary_retire_age,
        ),
        (
            "Social Security Eligibility",
            "Eligible for Social Security benefits",
            "retirement",
            SOCIAL_SECURITY_ELIGIBILITY_AGE,
        ),
        (
            "Medicare Eligibility",
            "Eligible for Medicare benefits",
            "healthcare",
            MEDICARE_ELIGIBILITY_AGE,
        ),
        (
            "RMDs Begin",
            "Required minimum distributions start from pre-tax accounts",
            "tax",
            RMD_START_AGE,
        ),
    ]

    payoff_age = _mortgage_payoff_age(inputs, snapshots)
    if payoff_age is not None:
        candidates.append(
            ("Mortgage Paid Off", "Home mortgage fully repaid", "housing", payoff_age)
        )

    milestones = [
        Milestone(
            title=title,
            description=description,
            category=category,
            target_age=age,
            target_year=start_year + (age - inputs.current_age),
        )
        for title, description, category, age in candidates
        if inputs.current_age <= age <= inputs.life_expectancy
    ]
    return sorted(milestones, key=lambda m: m.target_age)
