"""Configuration management for the finance tracker.

This module centralizes all configuration values including paths,
alert thresholds, suggestion lists and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in finance_tracker/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("FINTRACK_DATA_DIR", _PROJECT_ROOT / "data"))

# Database
DB_PATH = Path(
    os.getenv("FINTRACK_DB_PATH", DATA_DIR / "finance.db")
).resolve()

DEFAULT_CURRENCY = os.getenv("FINTRACK_DEFAULT_CURRENCY", "USD")

# Budgets above this share of their amount count towards the alert total
ALERT_THRESHOLD = float(os.getenv("FINTRACK_ALERT_THRESHOLD", "80"))

# Budgets at or above this share are flagged as nearly exhausted
WARNING_THRESHOLD = float(os.getenv("FINTRACK_WARNING_THRESHOLD", "90"))

BUDGET_PERIODS = ("weekly", "monthly", "quarterly", "yearly")

EXPENSE_CATEGORIES = [
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Healthcare",
    "Education",
    "Travel",
    "Groceries",
    "Other",
]

GOAL_CATEGORIES = [
    "Emergency Fund",
    "Vacation",
    "Car Purchase",
    "Home Down Payment",
    "Education",
    "Retirement",
    "Investment",
    "Debt Payoff",
    "Other",
]

DEBT_TYPES = [
    "Credit Card",
    "Student Loan",
    "Car Loan",
    "Mortgage",
    "Personal Loan",
    "Medical Debt",
    "Other",
]


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)


def get_db_path() -> str:
    """Get the database path as a string (for sqlite3.connect)."""
    return str(DB_PATH)
