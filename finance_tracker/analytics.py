"""Spending analytics for the overview and analytics views.

These helpers turn expense records into small DataFrames ready for charting.
Budget-versus-actual numbers are not computed here: :func:`budget_progress_frame`
only reshapes the output of the budget engine.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional, Union

import numpy as np
import pandas as pd

from .budget_progress import to_date
from .models import BudgetEvaluation, Expense

WEEKDAYS = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
EXPENSE_COLUMNS = ['item', 'category', 'currency', 'amount', 'date']


def _to_float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return np.nan


def expenses_frame(expenses: Union[pd.DataFrame, Iterable[Any]]) -> pd.DataFrame:
    """Normalize expense records into a DataFrame.

    Args:
        expenses: DataFrame or iterable of ``Expense`` objects / mappings

    Returns:
        DataFrame with columns item, category, currency, amount (float) and
        date (datetime64). Rows whose amount or date cannot be parsed are dropped.
    """
    if isinstance(expenses, pd.DataFrame):
        df = expenses.copy()
    else:
        rows = []
        for record in expenses or ():
            expense = record if isinstance(record, Expense) else Expense.from_record(record)
            rows.append({
                'item': expense.item,
                'category': expense.category,
                'currency': expense.currency,
                'amount': expense.amount,
                'date': expense.date,
            })
        df = pd.DataFrame(rows, columns=EXPENSE_COLUMNS)

    if df.empty:
        return pd.DataFrame(columns=EXPENSE_COLUMNS)

    for column in EXPENSE_COLUMNS:
        if column not in df.columns:
            df[column] = ''
    df['amount'] = df['amount'].map(_to_float)
    df['date'] = pd.to_datetime(df['date'], errors='coerce')
    df['category'] = df['category'].fillna('Other').astype(str)
    df = df.dropna(subset=['amount', 'date'])
    return df[EXPENSE_COLUMNS].reset_index(drop=True)


def _filter_currency(df: pd.DataFrame, currency: Optional[str]) -> pd.DataFrame:
    if currency is None or df.empty:
        return df
    return df[df['currency'] == currency].copy()


def category_spending(expenses: Union[pd.DataFrame, Iterable[Any]], currency: Optional[str] = None) -> pd.DataFrame:
    """Total spending by category, largest first.

    Returns:
        DataFrame indexed by category with Total_Spent, Transaction_Count and
        Avg_Transaction columns
    """
    df = _filter_currency(expenses_frame(expenses), currency)
    if df.empty:
        return pd.DataFrame(columns=['Total_Spent', 'Transaction_Count', 'Avg_Transaction'])

    spending = df.groupby('category')['amount'].agg(['sum', 'count', 'mean']).round(2)
    spending.columns = ['Total_Spent', 'Transaction_Count', 'Avg_Transaction']
    spending.index.name = 'Category'
    return spending.sort_values('Total_Spent', ascending=False)


def monthly_spending(expenses: Union[pd.DataFrame, Iterable[Any]], currency: Optional[str] = None) -> pd.DataFrame:
    """Spending per calendar month in chronological order.

    Returns:
        DataFrame with columns Month ('YYYY-MM') and Amount
    """
    df = _filter_currency(expenses_frame(expenses), currency)
    if df.empty:
        return pd.DataFrame(columns=['Month', 'Amount'])

    df['Month'] = df['date'].dt.to_period('M')
    grouped = df.groupby('Month')['amount'].sum().sort_index().reset_index()
    grouped['Month'] = grouped['Month'].astype(str)
    return grouped.rename(columns={'amount': 'Amount'})


def weekday_spending(expenses: Union[pd.DataFrame, Iterable[Any]], currency: Optional[str] = None) -> pd.DataFrame:
    """Spending per day of the week, Monday first, with empty days as zero."""
    df = _filter_currency(expenses_frame(expenses), currency)
    totals = (
        df.groupby(df['date'].dt.dayofweek)['amount'].sum()
        if not df.empty
        else pd.Series(dtype=float)
    )
    return pd.DataFrame({
        'Day': WEEKDAYS,
        'Amount': [float(totals.get(i, 0.0)) for i in range(7)],
    })


def spending_velocity(
    expenses: Union[pd.DataFrame, Iterable[Any]],
    days: int = 30,
    as_of: Optional[Any] = None,
    currency: Optional[str] = None,
) -> pd.DataFrame:
    """Daily spending over the trailing ``days`` with a running total.

    Args:
        expenses: Expense records
        days: Length of the trailing window
        as_of: End of the window; defaults to today
        currency: Optional currency filter

    Returns:
        DataFrame with columns Date, Amount and Cumulative, oldest first
    """
    df = _filter_currency(expenses_frame(expenses), currency)
    end = pd.Timestamp(to_date(as_of) if as_of is not None else datetime.now().date())
    start = end - pd.Timedelta(days=days)
    df = df[(df['date'] >= start) & (df['date'] <= end)] if not df.empty else df
    if df.empty:
        return pd.DataFrame(columns=['Date', 'Amount', 'Cumulative'])

    daily = df.groupby(df['date'].dt.normalize())['amount'].sum().sort_index()
    result = daily.reset_index().rename(columns={'date': 'Date', 'amount': 'Amount'})
    result['Cumulative'] = result['Amount'].cumsum()
    return result


def budget_progress_frame(evaluation: BudgetEvaluation) -> pd.DataFrame:
    """Reshape a budget evaluation into one row per budget, in engine order.

    Returns:
        DataFrame with columns Category, Period, Currency, Budget, Spent,
        Remaining, Percentage, Raw Percentage, Status and Over Budget
    """
    columns = [
        'Category', 'Period', 'Currency', 'Budget', 'Spent', 'Remaining',
        'Percentage', 'Raw Percentage', 'Status', 'Over Budget',
    ]
    rows = []
    for budget, progress in evaluation:
        try:
            amount = float(budget.amount)
        except (TypeError, ValueError):
            amount = np.nan
        rows.append({
            'Category': budget.category,
            'Period': budget.period,
            'Currency': budget.currency,
            'Budget': amount,
            'Spent': float(progress.spent),
            'Remaining': float(progress.remaining),
            'Percentage': progress.percentage,
            'Raw Percentage': float(progress.raw_percentage),
            'Status': progress.status,
            'Over Budget': progress.is_over_budget,
        })
    return pd.DataFrame(rows, columns=columns)
