"""Savings-goal and debt payoff progress."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, Optional

from .budget_progress import to_date, to_decimal
from .models import Debt, FinancialGoal

# Debts due within this many days are flagged as due soon
DUE_SOON_DAYS = 7


def _today(as_of: Optional[Any]) -> date:
    return to_date(as_of) if as_of is not None else datetime.now().date()


def _days_until(target: Optional[Any], as_of: Optional[Any]) -> Optional[int]:
    if target is None or target == "":
        return None
    return (to_date(target) - _today(as_of)).days


def _round_percent(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def goal_progress(goal: FinancialGoal, as_of: Optional[Any] = None) -> Dict[str, Any]:
    """Progress of a savings goal toward its target.

    Returns:
        Dictionary with percentage (0-100), remaining, days_remaining
        (None without a target date), is_completed and is_overdue
    """
    target = to_decimal(goal.target_amount)
    current = to_decimal(goal.current_amount)
    percentage = min(_round_percent(current / target * 100), 100) if target > 0 else 0
    days_remaining = _days_until(goal.target_date, as_of)
    is_completed = percentage >= 100
    return {
        'percentage': max(percentage, 0),
        'remaining': max(Decimal(0), target - current),
        'days_remaining': days_remaining,
        'is_completed': is_completed,
        'is_overdue': days_remaining is not None and days_remaining < 0 and not is_completed,
    }


def debt_progress(debt: Debt, as_of: Optional[Any] = None) -> Dict[str, Any]:
    """Payoff progress and due-date status of a debt.

    Returns:
        Dictionary with percentage_paid, days_until_due (None without a due
        date), is_overdue and is_due_soon
    """
    total = to_decimal(debt.total_amount)
    balance = to_decimal(debt.current_balance)
    percentage = _round_percent((total - balance) / total * 100) if total > 0 else 0
    days = _days_until(debt.due_date, as_of)
    return {
        'percentage_paid': percentage,
        'days_until_due': days,
        'is_overdue': days is not None and days < 0,
        'is_due_soon': days is not None and 0 <= days <= DUE_SOON_DAYS,
    }


def apply_payment(debt: Debt, amount: Any) -> Debt:
    """Return a copy of ``debt`` with ``amount`` paid off; the balance never goes below zero.

    Raises:
        ValueError: If the payment is not positive.
    """
    paid = to_decimal(amount)
    if paid <= 0:
        raise ValueError("Payment amount must be positive")
    balance = max(Decimal(0), to_decimal(debt.current_balance) - paid)
    return replace(debt, current_balance=balance)


def debt_summary(debts: Iterable[Debt]) -> Dict[str, Any]:
    """Totals across all debts.

    Returns:
        Dictionary with total_balance, total_minimum_payments and
        highest_interest (the debt with the largest rate, or None)
    """
    debts = list(debts)
    highest = max(debts, key=lambda d: to_decimal(d.interest_rate)) if debts else None
    return {
        'total_balance': sum((to_decimal(d.current_balance) for d in debts), Decimal(0)),
        'total_minimum_payments': sum((to_decimal(d.minimum_payment or 0) for d in debts), Decimal(0)),
        'highest_interest': highest,
    }
