from datetime import date
from decimal import Decimal

import pandas as pd

from finance_tracker import analytics
from finance_tracker.budget_progress import compute_all_budget_progress
from finance_tracker.models import Budget, Expense


def _expenses():
    return [
        Expense(category='Food', amount=Decimal('12.50'), currency='USD', date='2024-01-01', item='Lunch'),
        Expense(category='Food', amount=7.5, currency='USD', date='2024-01-03', item='Coffee'),
        Expense(category='Travel', amount=100, currency='USD', date='2024-02-10', item='Train'),
        Expense(category='Travel', amount=80, currency='EUR', date='2024-02-11', item='Hotel'),
    ]


def test_expenses_frame_drops_unparseable_rows():
    records = _expenses() + [
        {'category': 'Food', 'amount': 'n/a', 'currency': 'USD', 'date': '2024-01-05'},
        {'category': 'Food', 'amount': 3, 'currency': 'USD', 'date': None},
    ]
    df = analytics.expenses_frame(records)
    assert len(df) == 4
    assert list(df.columns) == analytics.EXPENSE_COLUMNS
    assert df['amount'].dtype == float


def test_expenses_frame_accepts_dataframe():
    df = pd.DataFrame({'category': ['Food'], 'amount': [5], 'date': ['2024-01-01']})
    result = analytics.expenses_frame(df)
    assert result.loc[0, 'amount'] == 5.0
    assert 'currency' in result.columns


def test_category_spending_largest_first():
    spending = analytics.category_spending(_expenses())
    assert list(spending.index) == ['Travel', 'Food']
    assert spending.loc['Travel', 'Total_Spent'] == 180.0
    assert spending.loc['Food', 'Transaction_Count'] == 2
    assert spending.loc['Food', 'Avg_Transaction'] == 10.0


def test_category_spending_filters_currency():
    spending = analytics.category_spending(_expenses(), currency='USD')
    assert spending.loc['Travel', 'Total_Spent'] == 100.0


def test_category_spending_empty():
    spending = analytics.category_spending([])
    assert spending.empty
    assert list(spending.columns) == ['Total_Spent', 'Transaction_Count', 'Avg_Transaction']


def test_monthly_spending():
    monthly = analytics.monthly_spending(_expenses(), currency='USD')
    assert list(monthly['Month']) == ['2024-01', '2024-02']
    assert list(monthly['Amount']) == [20.0, 100.0]


def test_weekday_spending_fills_missing_days():
    weekdays = analytics.weekday_spending(_expenses(), currency='USD')
    amounts = dict(zip(weekdays['Day'], weekdays['Amount']))
    # 2024-01-01 is a Monday, 2024-01-03 a Wednesday, 2024-02-10 a Saturday
    assert amounts == {'Mon': 12.5, 'Tue': 0.0, 'Wed': 7.5, 'Thu': 0.0, 'Fri': 0.0, 'Sat': 100.0, 'Sun': 0.0}


def test_spending_velocity_cumulative():
    velocity = analytics.spending_velocity(_expenses(), days=10, as_of=date(2024, 1, 5))
    assert list(velocity['Amount']) == [12.5, 7.5]
    assert list(velocity['Cumulative']) == [12.5, 20.0]


def test_spending_velocity_outside_window_is_empty():
    velocity = analytics.spending_velocity(_expenses(), days=7, as_of=date(2023, 6, 1))
    assert velocity.empty
    assert list(velocity.columns) == ['Date', 'Amount', 'Cumulative']


def test_budget_progress_frame_follows_engine_order():
    budgets = [
        Budget(category='Travel', amount=100, currency='USD', period='yearly'),
        Budget(category='Food', amount=50, currency='USD', period='quarterly'),
    ]
    evaluation = compute_all_budget_progress(budgets, _expenses(), as_of=date(2024, 2, 15))

    frame = analytics.budget_progress_frame(evaluation)

    assert list(frame['Category']) == ['Travel', 'Food']
    assert list(frame['Spent']) == [100.0, 20.0]
    assert list(frame['Percentage']) == [100, 40]
    assert list(frame['Status']) == ['warning', 'on_track']
    assert list(frame['Over Budget']) == [False, False]


def test_budget_progress_frame_empty():
    evaluation = compute_all_budget_progress([], [])
    frame = analytics.budget_progress_frame(evaluation)
    assert frame.empty
    assert 'Raw Percentage' in frame.columns
