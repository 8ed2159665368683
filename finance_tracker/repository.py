"""Repository layer between the data store and the budget engine.

``FinanceRepository`` is the contract every data source implements.
``SnapshotCache`` keeps one consistent snapshot of an owner's expenses and
budgets and only refreshes it after an explicit :meth:`SnapshotCache.invalidate`,
so the engine never sees expenses from one refresh mixed with budgets from
another.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import db
from .budget_progress import compute_all_budget_progress
from .models import Budget, BudgetEvaluation, Expense

logger = logging.getLogger(__name__)

InvalidationListener = Callable[[Optional[str]], None]


class FinanceRepository(ABC):
    """Source of an owner's expense and budget records."""

    @abstractmethod
    def fetch_expenses(self, owner_id: str) -> List[Expense]:
        """Return all expenses belonging to ``owner_id``."""

    @abstractmethod
    def fetch_budgets(self, owner_id: str) -> List[Budget]:
        """Return the owner's budgets ordered by creation time, newest first."""


class SQLiteRepository(FinanceRepository):
    """Repository backed by the SQLite data store in :mod:`finance_tracker.db`."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path
        db.init_db(db_path)

    def fetch_expenses(self, owner_id: str) -> List[Expense]:
        return [Expense.from_record(row) for row in db.fetch_expenses(owner_id, db_path=self.db_path)]

    def fetch_budgets(self, owner_id: str) -> List[Budget]:
        return [Budget.from_record(row) for row in db.fetch_budgets(owner_id, db_path=self.db_path)]


class InMemoryRepository(FinanceRepository):
    """Repository holding records in memory, keyed by owner."""

    def __init__(self):
        self._expenses: Dict[str, List[Expense]] = {}
        self._budgets: Dict[str, List[Budget]] = {}

    def add_expense(self, owner_id: str, expense: Expense) -> None:
        self._expenses.setdefault(owner_id, []).append(expense)

    def add_budget(self, owner_id: str, budget: Budget) -> None:
        # newest first, matching the SQLite ordering
        self._budgets.setdefault(owner_id, []).insert(0, budget)

    def fetch_expenses(self, owner_id: str) -> List[Expense]:
        return list(self._expenses.get(owner_id, []))

    def fetch_budgets(self, owner_id: str) -> List[Budget]:
        return list(self._budgets.get(owner_id, []))


@dataclass(frozen=True)
class FinanceSnapshot:
    """Expenses and budgets fetched together for one owner."""
    owner_id: str
    expenses: Tuple[Expense, ...]
    budgets: Tuple[Budget, ...]
    fetched_at: datetime = field(default_factory=datetime.now)

    def currencies(self) -> List[str]:
        """Currencies used by the snapshot's budgets, in first-seen order."""
        return list(dict.fromkeys(budget.currency for budget in self.budgets))

    def evaluate(self, as_of: Any = None, currency: Optional[str] = None) -> BudgetEvaluation:
        """Run the budget engine over the snapshot.

        With ``currency`` only budgets in that currency are evaluated, so the
        aggregate totals are never summed across currencies.
        """
        budgets = self.budgets if currency is None else [b for b in self.budgets if b.currency == currency]
        return compute_all_budget_progress(budgets, self.expenses, as_of)


class SnapshotCache:
    """Per-owner snapshot cache with explicit invalidation.

    Writers call :meth:`invalidate` after a mutation; subscribers registered
    with :meth:`subscribe` are notified with the invalidated owner id (or
    ``None`` when everything was dropped).
    """

    def __init__(self, repository: FinanceRepository):
        self.repository = repository
        self._snapshots: Dict[str, FinanceSnapshot] = {}
        self._listeners: List[InvalidationListener] = []

    def snapshot(self, owner_id: str) -> FinanceSnapshot:
        cached = self._snapshots.get(owner_id)
        if cached is not None:
            return cached
        snapshot = FinanceSnapshot(
            owner_id=owner_id,
            expenses=tuple(self.repository.fetch_expenses(owner_id)),
            budgets=tuple(self.repository.fetch_budgets(owner_id)),
        )
        logger.debug(
            "Fetched snapshot for %s: %d expenses, %d budgets",
            owner_id, len(snapshot.expenses), len(snapshot.budgets),
        )
        self._snapshots[owner_id] = snapshot
        return snapshot

    def evaluate(self, owner_id: str, as_of: Any = None, currency: Optional[str] = None) -> BudgetEvaluation:
        return self.snapshot(owner_id).evaluate(as_of, currency)

    def invalidate(self, owner_id: Optional[str] = None) -> None:
        if owner_id is None:
            self._snapshots.clear()
        else:
            self._snapshots.pop(owner_id, None)
        for listener in list(self._listeners):
            listener(owner_id)

    def subscribe(self, listener: InvalidationListener) -> Callable[[], None]:
        """Register an invalidation listener and return a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
