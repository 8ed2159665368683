"""Budget progress engine.

Computes how much of each budget has been spent inside the budget's trailing
period window and rolls the results up into portfolio totals.  Every
overview, budget-management and analytics view reads its budget numbers from
here instead of re-deriving them.

The functions are pure: they take snapshots of the expense and budget
collections and never touch the data store.  Records with unusable amounts or
dates are skipped, logged and reported back to the caller so that one bad
row cannot blank the whole view.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping, NamedTuple, Optional, Tuple, Union

import pandas as pd

from . import config
from .models import (
    Budget,
    BudgetAggregate,
    BudgetEvaluation,
    BudgetProgress,
    Expense,
    SkippedRecord,
)

logger = logging.getLogger(__name__)

PERIOD_OFFSETS = {
    "weekly": pd.DateOffset(days=7),
    "monthly": pd.DateOffset(months=1),
    "quarterly": pd.DateOffset(months=3),
    "yearly": pd.DateOffset(years=1),
}

_ZERO = Decimal(0)
_HUNDRED = Decimal(100)

BudgetLike = Union[Budget, Mapping[str, Any]]
ExpenseLike = Union[Expense, Mapping[str, Any]]


class BudgetEngineError(ValueError):
    """Base class for errors raised by the budget engine."""


class InvalidPeriod(BudgetEngineError):
    """Raised when a period tag is not one of weekly/monthly/quarterly/yearly."""

    def __init__(self, period: Any):
        self.period = period
        super().__init__(
            f"Unknown budget period {period!r}; expected one of {', '.join(PERIOD_OFFSETS)}"
        )


class MalformedRecord(BudgetEngineError):
    """Raised when a budget or expense carries an unusable amount or date."""


class _Entry(NamedTuple):
    category: str
    currency: str
    day: date
    amount: Decimal


def to_decimal(value: Any) -> Decimal:
    """Convert a record amount to an exact ``Decimal``.

    Floats go through their shortest ``repr`` so ``0.1`` becomes
    ``Decimal('0.1')`` rather than the binary expansion.

    Raises:
        MalformedRecord: For ``None``, booleans, non-numeric text, NaN and
            infinities.
    """
    if value is None or isinstance(value, bool):
        raise MalformedRecord(f"Amount {value!r} is not a number")
    if isinstance(value, Decimal):
        number = value
    else:
        try:
            if isinstance(value, str):
                text = value.strip()
            elif isinstance(value, int):
                text = str(value)
            else:
                text = repr(float(value))
            number = Decimal(text)
        except (InvalidOperation, TypeError, ValueError) as exc:
            raise MalformedRecord(f"Amount {value!r} is not a number") from exc
    if not number.is_finite():
        raise MalformedRecord(f"Amount {value!r} is not finite")
    return number


def to_date(value: Any) -> date:
    """Convert a record date (ISO string, date, datetime or Timestamp) to a calendar date.

    Raises:
        MalformedRecord: If the value cannot be parsed.
    """
    if value is None or value is pd.NaT or (isinstance(value, str) and not value.strip()):
        raise MalformedRecord("Missing date")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise MalformedRecord(f"Date {value!r} is not a date or ISO date string")
    parsed = pd.to_datetime(value, errors="coerce")
    if pd.isna(parsed):
        raise MalformedRecord(f"Date {value!r} is not a valid calendar date")
    return parsed.date()


def _resolve_as_of(as_of: Optional[Any]) -> date:
    if as_of is None:
        return datetime.now().date()
    return to_date(as_of)


def compute_period_window(period: str, as_of: Optional[Any] = None) -> Tuple[date, date]:
    """Return the trailing calendar window ``(start, as_of)`` for a budget period.

    ``start`` is ``as_of`` minus 7 days, 1 month, 3 months or 1 year.  Month
    and year subtraction use pandas calendar offsets, which clamp to the last
    valid day of the target month (2024-03-31 minus one month is 2024-02-29).

    Args:
        period: One of ``weekly``, ``monthly``, ``quarterly`` or ``yearly``.
        as_of: Reference date; defaults to today.

    Returns:
        Tuple of ``(start, end)`` calendar dates, both inclusive.

    Raises:
        InvalidPeriod: If ``period`` is not a recognized tag.

    Example:
        >>> compute_period_window('monthly', '2024-03-31')
        (datetime.date(2024, 2, 29), datetime.date(2024, 3, 31))
    """
    if not isinstance(period, str) or period not in PERIOD_OFFSETS:
        raise InvalidPeriod(period)
    end = _resolve_as_of(as_of)
    start = (pd.Timestamp(end) - PERIOD_OFFSETS[period]).date()
    return start, end


def _as_budget(budget: BudgetLike) -> Budget:
    return budget if isinstance(budget, Budget) else Budget.from_record(budget)


def _as_expense(expense: ExpenseLike) -> Expense:
    return expense if isinstance(expense, Expense) else Expense.from_record(expense)


def _currency(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise MalformedRecord(f"Currency {value!r} is missing")
    return value


def _budget_amount(budget: Budget) -> Decimal:
    _currency(budget.currency)
    amount = to_decimal(budget.amount)
    if amount < 0:
        raise MalformedRecord(f"Budget amount {budget.amount!r} is negative")
    return amount


def _report(skipped: Optional[List[SkippedRecord]], kind: str, record: Any, reason: str) -> None:
    logger.warning("Skipping malformed %s %r: %s", kind, record, reason)
    if skipped is not None:
        skipped.append(SkippedRecord(kind=kind, record=record, reason=reason))


def _normalize_expenses(
    expenses: Iterable[ExpenseLike],
    skipped: Optional[List[SkippedRecord]],
) -> List[_Entry]:
    entries: List[_Entry] = []
    for raw in expenses or ():
        expense = _as_expense(raw)
        try:
            entries.append(_Entry(
                category=expense.category,
                currency=_currency(expense.currency),
                day=to_date(expense.date),
                amount=to_decimal(expense.amount),
            ))
        except MalformedRecord as exc:
            _report(skipped, "expense", raw, str(exc))
    return entries


def _progress(budget: Budget, amount: Decimal, entries: List[_Entry], as_of: date) -> BudgetProgress:
    start, end = compute_period_window(budget.period, as_of)
    spent = sum(
        (
            entry.amount
            for entry in entries
            if entry.category == budget.category
            and entry.currency == budget.currency
            and start <= entry.day <= end
        ),
        _ZERO,
    )

    raw_percentage = spent / amount * _HUNDRED if amount > 0 else _ZERO
    rounded = int(raw_percentage.quantize(Decimal(1), rounding=ROUND_HALF_UP))

    return BudgetProgress(
        spent=spent,
        percentage=min(max(rounded, 0), 100),
        remaining=max(_ZERO, amount - spent),
        is_over_budget=spent > amount,
        raw_percentage=raw_percentage,
    )


def _empty_progress() -> BudgetProgress:
    return BudgetProgress(spent=_ZERO, percentage=0, remaining=_ZERO, is_over_budget=False)


def compute_budget_progress(
    budget: BudgetLike,
    expenses: Iterable[ExpenseLike],
    as_of: Optional[Any] = None,
    *,
    skipped: Optional[List[SkippedRecord]] = None,
) -> BudgetProgress:
    """Compute spend, percentage, headroom and over-budget flag for one budget.

    An expense counts when its category and currency equal the budget's and
    its date falls inside :func:`compute_period_window` for the budget's
    period.  Amounts are summed as ``Decimal`` so long series do not drift.

    Args:
        budget: ``Budget`` or mapping with ``category``, ``amount``,
            ``period`` and ``currency``.
        expenses: Iterable of ``Expense`` objects or mappings with
            ``category``, ``amount``, ``currency`` and ``date``.
        as_of: Reference date for the period window; defaults to today.
        skipped: Optional list collecting expenses that were left out.

    Returns:
        BudgetProgress for the budget.

    Raises:
        InvalidPeriod: If the budget period is not recognized.
        MalformedRecord: If the budget amount is missing, non-finite or
            negative, or the budget has no currency.
    """
    budget = _as_budget(budget)
    as_of_date = _resolve_as_of(as_of)
    amount = _budget_amount(budget)
    entries = _normalize_expenses(expenses, skipped)
    return _progress(budget, amount, entries, as_of_date)


def compute_all_budget_progress(
    budgets: Iterable[BudgetLike],
    expenses: Iterable[ExpenseLike],
    as_of: Optional[Any] = None,
) -> BudgetEvaluation:
    """Evaluate every budget against one expense snapshot and total the results.

    Budgets are evaluated independently and returned in input order, so an
    expense shared by two budgets with the same category and currency counts
    toward both.  A budget with a malformed amount or unknown period gets an
    empty progress entry, adds nothing to the totals and is reported in
    ``skipped``; the rest of the batch is unaffected.

    Args:
        budgets: Budgets in display order.
        expenses: All expenses for the same owner and refresh.
        as_of: Reference date shared by every budget; defaults to today.

    Returns:
        BudgetEvaluation with per-budget progress, the aggregate and the
        skipped records.
    """
    as_of_date = _resolve_as_of(as_of)
    skipped: List[SkippedRecord] = []
    entries = _normalize_expenses(expenses, skipped)

    results: List[Tuple[Budget, BudgetProgress]] = []
    total_budget = _ZERO
    total_spent = _ZERO
    alert_count = 0
    alert_threshold = Decimal(str(config.ALERT_THRESHOLD))

    for raw in budgets or ():
        budget = _as_budget(raw)
        try:
            amount = _budget_amount(budget)
            progress = _progress(budget, amount, entries, as_of_date)
        except InvalidPeriod as exc:
            logger.error("Budget %r has an invalid period: %s", budget, exc)
            skipped.append(SkippedRecord(kind="budget", record=raw, reason=str(exc)))
            results.append((budget, _empty_progress()))
            continue
        except MalformedRecord as exc:
            _report(skipped, "budget", raw, str(exc))
            results.append((budget, _empty_progress()))
            continue

        results.append((budget, progress))
        total_budget += amount
        total_spent += progress.spent
        if progress.is_over_budget or progress.raw_percentage > alert_threshold:
            alert_count += 1

    aggregate = BudgetAggregate(
        total_budget=total_budget,
        total_spent=total_spent,
        total_remaining=total_budget - total_spent,
        alert_count=alert_count,
    )
    return BudgetEvaluation(results=results, aggregate=aggregate, skipped=skipped)
