from datetime import date
from decimal import Decimal

import pytest

from finance_tracker.goals import apply_payment, debt_progress, debt_summary, goal_progress
from finance_tracker.models import Debt, FinancialGoal

AS_OF = date(2024, 3, 1)


def test_goal_progress_partial():
    goal = FinancialGoal(title='Holiday', target_amount=1000, current_amount=250, target_date='2024-03-31')
    progress = goal_progress(goal, AS_OF)
    assert progress['percentage'] == 25
    assert progress['remaining'] == Decimal('750')
    assert progress['days_remaining'] == 30
    assert not progress['is_completed']
    assert not progress['is_overdue']


def test_goal_progress_overdue_and_completed():
    overdue = goal_progress(FinancialGoal(title='Car', target_amount=500, current_amount=100, target_date='2024-02-01'), AS_OF)
    assert overdue['is_overdue']
    assert overdue['days_remaining'] == -29

    done = goal_progress(FinancialGoal(title='Fund', target_amount=500, current_amount=650, target_date='2024-02-01'), AS_OF)
    assert done['percentage'] == 100
    assert done['remaining'] == 0
    assert done['is_completed']
    assert not done['is_overdue']


def test_goal_without_target_or_date():
    progress = goal_progress(FinancialGoal(title='Someday', target_amount=0), AS_OF)
    assert progress['percentage'] == 0
    assert progress['days_remaining'] is None
    assert not progress['is_overdue']


def test_debt_progress_and_due_dates():
    debt = Debt(name='Card', total_amount=1000, current_balance=250, due_date='2024-03-05')
    progress = debt_progress(debt, AS_OF)
    assert progress['percentage_paid'] == 75
    assert progress['days_until_due'] == 4
    assert progress['is_due_soon']
    assert not progress['is_overdue']

    late = debt_progress(Debt(name='Loan', total_amount=1000, current_balance=900, due_date='2024-02-20'), AS_OF)
    assert late['is_overdue']
    assert not late['is_due_soon']


def test_apply_payment_never_goes_below_zero():
    debt = Debt(name='Card', total_amount=1000, current_balance=300)
    assert apply_payment(debt, 100).current_balance == Decimal('200')
    assert apply_payment(debt, 500).current_balance == 0
    assert debt.current_balance == 300


def test_apply_payment_rejects_non_positive():
    with pytest.raises(ValueError):
        apply_payment(Debt(name='Card', total_amount=100, current_balance=100), 0)


def test_debt_summary():
    debts = [
        Debt(name='Card', total_amount=1000, current_balance=400, interest_rate=21.9, minimum_payment=35),
        Debt(name='Car', total_amount=9000, current_balance=6000, interest_rate=5.5, minimum_payment=250),
    ]
    summary = debt_summary(debts)
    assert summary['total_balance'] == Decimal('6400')
    assert summary['total_minimum_payments'] == Decimal('285')
    assert summary['highest_interest'].name == 'Card'

    assert debt_summary([])['highest_interest'] is None
