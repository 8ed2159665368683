"""Record types shared by the data store, the budget engine and the UI.

Expenses, budgets, goals and debts are immutable snapshots of the rows held
by the data store.  ``BudgetProgress``, ``BudgetAggregate`` and
``BudgetEvaluation`` are derived on demand and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from . import config

Amount = Union[Decimal, float, int, str]
DateLike = Union[date, datetime, str]


def _owner_of(record: Mapping[str, Any]) -> Optional[str]:
    return record.get("owner", record.get("user_id"))


@dataclass(frozen=True)
class Expense:
    """A single recorded expense."""
    category: str
    amount: Amount
    currency: str
    date: DateLike
    item: str = ""
    id: Optional[str] = None
    owner: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Expense":
        """Build an expense from a data store row, ignoring unknown fields."""
        return cls(
            category=record.get("category") or "",
            amount=record.get("amount"),
            currency=record.get("currency") or "",
            date=record.get("date"),
            item=record.get("item") or "",
            id=record.get("id"),
            owner=_owner_of(record),
            created_at=record.get("created_at"),
        )


@dataclass(frozen=True)
class Budget:
    """A spending limit for one category and currency over a trailing period."""
    category: str
    amount: Amount
    currency: str
    period: str = "monthly"
    id: Optional[str] = None
    owner: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Budget":
        """Build a budget from a data store row, ignoring unknown fields."""
        return cls(
            category=record.get("category") or "",
            amount=record.get("amount"),
            currency=record.get("currency") or "",
            period=record.get("period"),
            id=record.get("id"),
            owner=_owner_of(record),
            created_at=record.get("created_at"),
            updated_at=record.get("updated_at"),
        )


@dataclass(frozen=True)
class BudgetProgress:
    """Spend of one budget inside its current period window.

    ``percentage`` is the rounded value clamped to 0-100 for progress bars;
    ``raw_percentage`` is the unclamped ratio used for alerting.
    """
    spent: Decimal
    percentage: int
    remaining: Decimal
    is_over_budget: bool
    raw_percentage: Decimal = Decimal(0)

    @property
    def status(self) -> str:
        if self.is_over_budget:
            return "over"
        if self.raw_percentage >= Decimal(str(config.WARNING_THRESHOLD)):
            return "warning"
        return "on_track"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "spent": float(self.spent),
            "percentage": self.percentage,
            "remaining": float(self.remaining),
            "is_over_budget": self.is_over_budget,
        }


@dataclass(frozen=True)
class BudgetAggregate:
    """Portfolio-level roll-up of every budget's progress."""
    total_budget: Decimal
    total_spent: Decimal
    total_remaining: Decimal
    alert_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_budget": float(self.total_budget),
            "total_spent": float(self.total_spent),
            "total_remaining": float(self.total_remaining),
            "alert_count": self.alert_count,
        }


@dataclass(frozen=True)
class SkippedRecord:
    """A record left out of a computation, with the reason it was dropped."""
    kind: str  # "expense" or "budget"
    record: Any
    reason: str


@dataclass
class BudgetEvaluation:
    """Result of evaluating a batch of budgets against one expense snapshot."""
    results: List[Tuple[Budget, BudgetProgress]]
    aggregate: BudgetAggregate
    skipped: List[SkippedRecord] = field(default_factory=list)

    def __iter__(self) -> Iterator[Tuple[Budget, BudgetProgress]]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def progress(self) -> List[BudgetProgress]:
        return [progress for _, progress in self.results]


@dataclass(frozen=True)
class FinancialGoal:
    """A savings target with a deadline."""
    title: str
    target_amount: Amount
    current_amount: Amount = 0
    target_date: Optional[DateLike] = None
    category: str = "Other"
    id: Optional[str] = None
    owner: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "FinancialGoal":
        return cls(
            title=record.get("title") or "",
            target_amount=record.get("target_amount"),
            current_amount=record.get("current_amount") or 0,
            target_date=record.get("target_date"),
            category=record.get("category") or "Other",
            id=record.get("id"),
            owner=_owner_of(record),
        )


@dataclass(frozen=True)
class Debt:
    """An outstanding loan or balance being paid down."""
    name: str
    total_amount: Amount
    current_balance: Amount
    interest_rate: Amount = 0
    minimum_payment: Amount = 0
    due_date: Optional[DateLike] = None
    debt_type: str = "Other"
    id: Optional[str] = None
    owner: Optional[str] = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Debt":
        return cls(
            name=record.get("name") or "",
            total_amount=record.get("total_amount"),
            current_balance=record.get("current_balance"),
            interest_rate=record.get("interest_rate") or 0,
            minimum_payment=record.get("minimum_payment") or 0,
            due_date=record.get("due_date"),
            debt_type=record.get("debt_type") or "Other",
            id=record.get("id"),
            owner=_owner_of(record),
        )
