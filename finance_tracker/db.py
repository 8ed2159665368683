"""SQLite data store for expenses, budgets, savings goals and debts.

Every row is scoped to an owner id.  Read functions return plain dictionaries
(or a DataFrame for analytics) that the budget engine and the repository
layer turn into model objects.
"""

from __future__ import annotations

import math
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, Iterator, List, Optional

import pandas as pd

from .config import BUDGET_PERIODS, DEFAULT_CURRENCY, get_db_path, ensure_data_directories
from .goals import apply_payment
from .models import Debt

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS expenses (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    item TEXT,
    amount REAL NOT NULL,
    category TEXT NOT NULL,
    currency TEXT NOT NULL DEFAULT 'USD',
    date TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS budgets (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    category TEXT NOT NULL,
    amount REAL NOT NULL,
    period TEXT NOT NULL,
    currency TEXT NOT NULL DEFAULT 'USD',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS financial_goals (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    target_amount REAL NOT NULL,
    current_amount REAL NOT NULL DEFAULT 0,
    target_date TEXT,
    category TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS debts (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    total_amount REAL NOT NULL,
    current_balance REAL NOT NULL,
    interest_rate REAL NOT NULL DEFAULT 0,
    minimum_payment REAL NOT NULL DEFAULT 0,
    due_date TEXT,
    debt_type TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS debt_payments (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    debt_id TEXT NOT NULL REFERENCES debts(id) ON DELETE CASCADE,
    amount REAL NOT NULL,
    payment_date TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS ix_expenses_owner_date ON expenses (user_id, date);
CREATE INDEX IF NOT EXISTS ix_budgets_owner ON budgets (user_id, created_at);
CREATE INDEX IF NOT EXISTS ix_goals_owner ON financial_goals (user_id, created_at);
CREATE INDEX IF NOT EXISTS ix_debts_owner ON debts (user_id, created_at);
"""


@contextmanager
def connect(db_path: Optional[str] = None) -> Iterator[sqlite3.Connection]:
    if db_path is None:
        ensure_data_directories()
    conn = sqlite3.connect(db_path or get_db_path())
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: Optional[str] = None) -> None:
    with connect(db_path) as conn:
        conn.executescript(SCHEMA_SQL)
        conn.commit()


def _now() -> str:
    return datetime.utcnow().isoformat()


def _new_id() -> str:
    return str(uuid.uuid4())


def _to_iso_date(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    ts = pd.to_datetime(value, errors='coerce')
    if pd.isna(ts):
        raise ValueError(f"Invalid date: {value!r}")
    return ts.date().isoformat()


def _parse_amount(value: Any, *, allow_negative: bool = False) -> float:
    """Convert a user-supplied amount into a finite float."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError("Amount is required")
    if isinstance(value, str):
        value = value.strip().replace("$", "").replace(",", "")
    number = pd.to_numeric([value], errors='coerce')[0]
    if pd.isna(number) or not math.isfinite(float(number)):
        raise ValueError(f"Amount {value!r} is not a finite number")
    if not allow_negative and number < 0:
        raise ValueError(f"Amount {value!r} cannot be negative")
    return float(number)


def _require(value: Optional[str], label: str) -> str:
    if not value or not str(value).strip():
        raise ValueError(f"{label} cannot be empty")
    return str(value).strip()


def _validate_period(period: str) -> str:
    if period not in BUDGET_PERIODS:
        raise ValueError(f"Invalid period {period!r}; expected one of {', '.join(BUDGET_PERIODS)}")
    return period


def _update(table: str, row_id: str, fields: Dict[str, Any], db_path: Optional[str], touch: bool = True) -> bool:
    updates = {k: v for k, v in fields.items() if v is not None}
    if not updates:
        return False
    if touch:
        updates['updated_at'] = _now()
    assignments = ", ".join(f"{column} = ?" for column in updates)
    params = list(updates.values()) + [row_id]
    with connect(db_path) as conn:
        cursor = conn.execute(f"UPDATE {table} SET {assignments} WHERE id = ?", params)
        conn.commit()
        return cursor.rowcount > 0


def _delete(table: str, row_id: str, db_path: Optional[str]) -> bool:
    with connect(db_path) as conn:
        cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (row_id,))
        conn.commit()
        return cursor.rowcount > 0


def _fetch(sql: str, params: List[Any], db_path: Optional[str]) -> List[Dict[str, Any]]:
    with connect(db_path) as conn:
        rows = conn.execute(sql, params).fetchall()
    return [dict(row) for row in rows]


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------

def add_expense(
    owner_id: str,
    item: str,
    amount: Any,
    category: str,
    currency: str = DEFAULT_CURRENCY,
    expense_date: Any = None,
    db_path: Optional[str] = None,
) -> str:
    """Insert an expense and return its id.

    ``expense_date`` defaults to today.
    """
    record = (
        _new_id(),
        _require(owner_id, "Owner id"),
        (item or "").strip(),
        _parse_amount(amount),
        _require(category, "Category"),
        _require(currency, "Currency"),
        _to_iso_date(expense_date) or date.today().isoformat(),
        _now(),
    )
    with connect(db_path) as conn:
        conn.execute(
            "INSERT INTO expenses (id, user_id, item, amount, category, currency, date, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            record,
        )
        conn.commit()
    return record[0]


def update_expense(
    expense_id: str,
    item: Optional[str] = None,
    amount: Any = None,
    category: Optional[str] = None,
    currency: Optional[str] = None,
    expense_date: Any = None,
    db_path: Optional[str] = None,
) -> bool:
    """Update an expense in place. Returns True if a row changed."""
    return _update('expenses', expense_id, {
        'item': item,
        'amount': _parse_amount(amount) if amount is not None else None,
        'category': category,
        'currency': currency,
        'date': _to_iso_date(expense_date),
    }, db_path, touch=False)


def delete_expense(expense_id: str, db_path: Optional[str] = None) -> bool:
    return _delete('expenses', expense_id, db_path)


def fetch_expenses(owner_id: str, db_path: Optional[str] = None) -> List[Dict[str, Any]]:
    """Fetch an owner's expenses, newest first."""
    return _fetch(
        "SELECT id, user_id, item, amount, category, currency, date, created_at "
        "FROM expenses WHERE user_id = ? ORDER BY date DESC, created_at DESC",
        [owner_id],
        db_path,
    )


def expenses_dataframe(owner_id: str, db_path: Optional[str] = None) -> pd.DataFrame:
    """Fetch an owner's expenses as a DataFrame with a parsed ``date`` column."""
    with connect(db_path) as conn:
        df = pd.read_sql_query(
            "SELECT id, item, amount, category, currency, date, created_at "
            "FROM expenses WHERE user_id = ? ORDER BY date ASC, created_at ASC",
            conn,
            params=[owner_id],
        )
    if not df.empty:
        df['date'] = pd.to_datetime(df['date'])
    return df


# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------

def add_budget(
    owner_id: str,
    category: str,
    amount: Any,
    period: str = "monthly",
    currency: str = DEFAULT_CURRENCY,
    db_path: Optional[str] = None,
) -> str:
    """Insert a budget and return its id."""
    now = _now()
    record = (
        _new_id(),
        _require(owner_id, "Owner id"),
        _require(category, "Category"),
        _parse_amount(amount),
        _validate_period(period),
        _require(currency, "Currency"),
        now,
        now,
    )
    with connect(db_path) as conn:
        conn.execute(
            "INSERT INTO budgets (id, user_id, category, amount, period, currency, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            record,
        )
        conn.commit()
    return record[0]


def update_budget(
    budget_id: str,
    category: Optional[str] = None,
    amount: Any = None,
    period: Optional[str] = None,
    currency: Optional[str] = None,
    db_path: Optional[str] = None,
) -> bool:
    """Update a budget and stamp ``updated_at``. Returns True if a row changed."""
    return _update('budgets', budget_id, {
        'category': category,
        'amount': _parse_amount(amount) if amount is not None else None,
        'period': _validate_period(period) if period is not None else None,
        'currency': currency,
    }, db_path)


def delete_budget(budget_id: str, db_path: Optional[str] = None) -> bool:
    return _delete('budgets', budget_id, db_path)


def fetch_budgets(owner_id: str, db_path: Optional[str] = None) -> List[Dict[str, Any]]:
    """Fetch an owner's budgets ordered by creation time, newest first."""
    return _fetch(
        "SELECT id, user_id, category, amount, period, currency, created_at, updated_at "
        "FROM budgets WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
        [owner_id],
        db_path,
    )


# ---------------------------------------------------------------------------
# Savings goals
# ---------------------------------------------------------------------------

def add_goal(
    owner_id: str,
    title: str,
    target_amount: Any,
    current_amount: Any = 0,
    target_date: Any = None,
    category: str = "Other",
    db_path: Optional[str] = None,
) -> str:
    now = _now()
    record = (
        _new_id(),
        _require(owner_id, "Owner id"),
        _require(title, "Title"),
        _parse_amount(target_amount),
        _parse_amount(current_amount),
        _to_iso_date(target_date),
        category,
        now,
        now,
    )
    with connect(db_path) as conn:
        conn.execute(
            "INSERT INTO financial_goals (id, user_id, title, target_amount, current_amount, "
            "target_date, category, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            record,
        )
        conn.commit()
    return record[0]


def update_goal_amount(goal_id: str, current_amount: Any, db_path: Optional[str] = None) -> bool:
    return _update('financial_goals', goal_id, {'current_amount': _parse_amount(current_amount)}, db_path)


def delete_goal(goal_id: str, db_path: Optional[str] = None) -> bool:
    return _delete('financial_goals', goal_id, db_path)


def fetch_goals(owner_id: str, db_path: Optional[str] = None) -> List[Dict[str, Any]]:
    return _fetch(
        "SELECT id, user_id, title, target_amount, current_amount, target_date, category, created_at "
        "FROM financial_goals WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
        [owner_id],
        db_path,
    )


# ---------------------------------------------------------------------------
# Debts
# ---------------------------------------------------------------------------

def add_debt(
    owner_id: str,
    name: str,
    total_amount: Any,
    current_balance: Any = None,
    interest_rate: Any = 0,
    minimum_payment: Any = 0,
    due_date: Any = None,
    debt_type: str = "Other",
    db_path: Optional[str] = None,
) -> str:
    """Insert a debt; the balance defaults to the full amount."""
    now = _now()
    total = _parse_amount(total_amount)
    record = (
        _new_id(),
        _require(owner_id, "Owner id"),
        _require(name, "Name"),
        total,
        _parse_amount(current_balance) if current_balance is not None else total,
        _parse_amount(interest_rate),
        _parse_amount(minimum_payment),
        _to_iso_date(due_date),
        debt_type,
        now,
        now,
    )
    with connect(db_path) as conn:
        conn.execute(
            "INSERT INTO debts (id, user_id, name, total_amount, current_balance, interest_rate, "
            "minimum_payment, due_date, debt_type, created_at, updated_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            record,
        )
        conn.commit()
    return record[0]


def record_debt_payment(
    debt_id: str,
    amount: Any,
    payment_date: Any = None,
    db_path: Optional[str] = None,
) -> float:
    """Log a payment against a debt and return the new balance (never below zero).

    Raises:
        ValueError: If the amount is not positive or the debt does not exist.
    """
    paid = _parse_amount(amount)
    with connect(db_path) as conn:
        row = conn.execute("SELECT * FROM debts WHERE id = ?", (debt_id,)).fetchone()
        if row is None:
            raise ValueError(f"Debt {debt_id!r} not found")
        new_balance = float(apply_payment(Debt.from_record(dict(row)), paid).current_balance)
        now = _now()
        conn.execute(
            "INSERT INTO debt_payments (id, user_id, debt_id, amount, payment_date, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (_new_id(), row['user_id'], debt_id, paid, _to_iso_date(payment_date) or date.today().isoformat(), now),
        )
        conn.execute(
            "UPDATE debts SET current_balance = ?, updated_at = ? WHERE id = ?",
            (new_balance, now, debt_id),
        )
        conn.commit()
    return new_balance


def delete_debt(debt_id: str, db_path: Optional[str] = None) -> bool:
    return _delete('debts', debt_id, db_path)


def fetch_debts(owner_id: str, db_path: Optional[str] = None) -> List[Dict[str, Any]]:
    return _fetch(
        "SELECT id, user_id, name, total_amount, current_balance, interest_rate, minimum_payment, "
        "due_date, debt_type, created_at FROM debts WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
        [owner_id],
        db_path,
    )


def fetch_debt_payments(debt_id: str, db_path: Optional[str] = None) -> List[Dict[str, Any]]:
    return _fetch(
        "SELECT id, debt_id, amount, payment_date FROM debt_payments WHERE debt_id = ? "
        "ORDER BY payment_date DESC, created_at DESC",
        [debt_id],
        db_path,
    )
