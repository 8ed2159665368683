#!/usr/bin/env python3
"""Print budget progress for one owner from the SQLite store."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from finance_tracker import analytics
from finance_tracker.currency import CURRENCIES, format_currency
from finance_tracker.repository import SnapshotCache, SQLiteRepository


def _money(amount, currency: str) -> str:
    if currency in CURRENCIES:
        return format_currency(amount, currency)
    return f"{format_currency(amount, currency, include_sign=False)} {currency}"


def main(owner_id: str, db_path: Optional[str] = None, as_of: Optional[str] = None) -> int:
    snapshot = SnapshotCache(SQLiteRepository(db_path)).snapshot(owner_id)
    evaluation = snapshot.evaluate(as_of)
    if not len(evaluation):
        print(f"No budgets found for {owner_id}.")
        return 0

    frame = analytics.budget_progress_frame(evaluation)
    print(frame[['Category', 'Period', 'Currency', 'Budget', 'Spent', 'Remaining', 'Percentage', 'Status']]
          .to_string(index=False))

    # totals are never summed across currencies
    for currency in snapshot.currencies():
        totals = snapshot.evaluate(as_of, currency).aggregate
        print(f"\nTotals ({currency})")
        print(f"  Budget:    {_money(totals.total_budget, currency)}")
        print(f"  Spent:     {_money(totals.total_spent, currency)}")
        print(f"  Remaining: {_money(totals.total_remaining, currency)}")
        print(f"  Alerts:    {totals.alert_count}")

    if evaluation.skipped:
        print(f"\nSkipped {len(evaluation.skipped)} record(s):")
        for skipped in evaluation.skipped:
            print(f"  - {skipped.kind}: {skipped.reason}")
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Show budget progress for an owner.')
    parser.add_argument('owner_id', help='Owner whose budgets to report')
    parser.add_argument('--db', dest='db_path', default=None, help='Path to the SQLite database')
    parser.add_argument('--as-of', default=None, help='Reference date (YYYY-MM-DD); defaults to today')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log skipped records as they are found')
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.ERROR, format='%(levelname)s %(name)s: %(message)s')
    raise SystemExit(main(args.owner_id, db_path=args.db_path, as_of=args.as_of))
