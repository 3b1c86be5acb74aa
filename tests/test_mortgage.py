import pytest

from mortgage import amortization_schedule, amortize


def test_inactive_loan_pays_nothing():
    result = amortize(0, 0.05, 12000, 10)
    assert not result.active
    assert result.payment == 0.0
    assert result.new_balance == 0.0

    result = amortize(50000, 0.05, 12000, 0)
    assert not result.active
    assert result.new_balance == 50000


def test_regular_year_splits_interest_and_principal():
    result = amortize(100000, 0.05, 12000, 10)
    assert result.active
    assert result.payment == 12000
    assert result.interest == pytest.approx(5000)
    assert result.principal == pytest.approx(7000)
    assert result.new_balance == pytest.approx(93000)
    assert result.years_remaining == 9


def test_final_partial_year_surfaces_full_payment():
    result = amortize(5000, 0.05, 12000, 1)
    assert result.payment == 12000
    assert result.principal == pytest.approx(5000)
    assert result.new_balance == 0.0
    assert result.years_remaining == 0


def test_payment_below_interest_grows_balance():
    result = amortize(100000, 0.10, 5000, 5)
    assert result.principal == pytest.approx(-5000)
    assert result.new_balance == pytest.approx(105000)


def test_schedule_pays_off_principal():
    schedule = list(amortization_schedule(120000, 0.045, 18000, 10))
    assert schedule[-1].new_balance == 0.0
    assert len(schedule) < 10
    assert sum(r.principal for r in schedule) == pytest.approx(120000)
