from dataclasses import replace

from forecast_engine import run_projection
from milestones import standard_milestones


def test_standard_milestones_are_ordered_by_age(salaried_plan):
    milestones = standard_milestones(salaried_plan)

    assert [m.title for m in milestones] == [
        "Social Security Eligibility",
        "Retirement Begins",
        "Medicare Eligibility",
        "RMDs Begin",
    ]
    assert [m.target_age for m in milestones] == [62, 65, 65, 73]
    assert milestones[-1].target_year == 2026 + 13


def test_milestones_outside_timeline_are_dropped(salaried_plan):
    plan = replace(
        salaried_plan, current_age=66, primary_retire_age=70, life_expectancy=72
    )
    titles = [m.title for m in standard_milestones(plan)]

    assert titles == ["Retirement Begins"]


def test_mortgage_payoff_comes_from_projection(household_plan):
    plan = replace(household_plan, mortgage_years_left=10)
    snapshots = run_projection(plan)
    milestones = {m.title: m for m in standard_milestones(plan, snapshots)}

    payoff = milestones["Mortgage Paid Off"]
    assert payoff.category == "housing"
    assert payoff.target_age == 68
    assert payoff.target_year == 2034


def test_no_payoff_milestone_without_mortgage(salaried_plan):
    snapshots = run_projection(salaried_plan)
    titles = [m.title for m in standard_milestones(salaried_plan, snapshots)]
    assert "Mortgage Paid Off" not in titles
