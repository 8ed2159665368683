"""Streamlit app for the finance tracker.

The overview, budget and analytics tabs all read budget numbers from a
:class:`~finance_tracker.models.BudgetEvaluation` produced by the budget
engine for the current snapshot; nothing here re-derives spend per budget.
Portfolio totals are only shown for budgets in the display currency.

To run the dashboard from the command line::

    streamlit run finance_tracker/dashboard.py
"""

from __future__ import annotations

import os
import sys
from datetime import date
from typing import List

import pandas as pd
import streamlit as st

# Support both ``streamlit run finance_tracker/dashboard.py`` and package
# imports.
if __package__:
    from . import analytics
    from . import config
    from . import db
    from . import goals as goal_calc
    from . import visualization as viz
    from .budget_progress import to_decimal
    from .currency import CURRENCIES, StaticRateProvider, convert, format_currency
    from .models import Debt, FinancialGoal
    from .repository import SnapshotCache, SQLiteRepository
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from finance_tracker import analytics  # type: ignore
    from finance_tracker import config  # type: ignore
    from finance_tracker import db  # type: ignore
    from finance_tracker import goals as goal_calc  # type: ignore
    from finance_tracker import visualization as viz  # type: ignore
    from finance_tracker.budget_progress import to_decimal  # type: ignore
    from finance_tracker.currency import CURRENCIES, StaticRateProvider, convert, format_currency  # type: ignore
    from finance_tracker.models import Debt, FinancialGoal  # type: ignore
    from finance_tracker.repository import SnapshotCache, SQLiteRepository  # type: ignore

RECENT_EXPENSE_LIMIT = 20


def _snapshot_cache() -> SnapshotCache:
    if 'snapshot_cache' not in st.session_state:
        st.session_state.snapshot_cache = SnapshotCache(SQLiteRepository())
    return st.session_state.snapshot_cache


def _currency_codes() -> List[str]:
    codes = list(CURRENCIES)
    if config.DEFAULT_CURRENCY in codes:
        codes.remove(config.DEFAULT_CURRENCY)
        codes.insert(0, config.DEFAULT_CURRENCY)
    return codes


def _money(amount, currency: str) -> str:
    if currency in CURRENCIES:
        return format_currency(amount, currency)
    return f"{format_currency(amount, currency, include_sign=False)} {currency}"


def _saved(cache: SnapshotCache, owner_id: str, message: str) -> None:
    cache.invalidate(owner_id)
    st.toast(message)
    st.rerun()


def _render_entry_forms(owner_id: str, cache: SnapshotCache) -> None:
    with st.sidebar.expander("➕ Add expense"):
        with st.form("add_expense", clear_on_submit=True):
            item = st.text_input("Item")
            amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f")
            category = st.selectbox("Category", config.EXPENSE_CATEGORIES)
            currency = st.selectbox("Currency", _currency_codes())
            expense_date = st.date_input("Date", value=date.today())
            if st.form_submit_button("Save expense"):
                try:
                    db.add_expense(owner_id, item, amount, category, currency, expense_date)
                except ValueError as exc:
                    st.error(str(exc))
                else:
                    _saved(cache, owner_id, "Expense added")

    with st.sidebar.expander("🎯 Add budget"):
        with st.form("add_budget", clear_on_submit=True):
            category = st.selectbox("Category", config.EXPENSE_CATEGORIES, key="budget_category")
            amount = st.number_input("Amount", min_value=0.0, step=1.0, key="budget_amount")
            period = st.selectbox("Period", config.BUDGET_PERIODS, index=1)
            currency = st.selectbox("Currency", _currency_codes(), key="budget_currency")
            if st.form_submit_button("Save budget"):
                try:
                    db.add_budget(owner_id, category, amount, period, currency)
                except ValueError as exc:
                    st.error(str(exc))
                else:
                    _saved(cache, owner_id, f"Budget created for {category}")


def _render_converter() -> None:
    with st.sidebar.expander("💱 Currency converter"):
        provider = StaticRateProvider()
        amount = st.number_input("Amount", min_value=0.0, value=100.0, step=1.0, key="convert_amount")
        codes = _currency_codes()
        from_code = st.selectbox("From", codes, key="convert_from")
        to_code = st.selectbox("To", codes, index=min(1, len(codes) - 1), key="convert_to")
        converted = convert(amount, from_code, to_code, provider)
        st.markdown(f"**{format_currency(amount, from_code)}** = **{format_currency(converted, to_code)}**")
        st.caption("Static reference rates")


def _render_overview(snapshot, as_of, progress_df: pd.DataFrame, currency: str) -> None:
    evaluation = snapshot.evaluate(as_of, currency)
    totals = evaluation.aggregate
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Budget", format_currency(totals.total_budget, currency), f"Across {len(evaluation)} budgets", delta_color="off")
    col2.metric("Total Spent", format_currency(totals.total_spent, currency))
    col3.metric(
        "Remaining",
        format_currency(abs(totals.total_remaining), currency),
        "Under budget" if totals.total_remaining >= 0 else "Over budget",
        delta_color="normal" if totals.total_remaining >= 0 else "inverse",
    )
    col4.metric("Budget Alerts", totals.alert_count)

    others = [code for code in snapshot.currencies() if code != currency]
    if others:
        st.caption(f"Totals cover {currency} budgets only; also tracking {', '.join(others)}.")

    if progress_df.empty:
        st.info("No budgets yet. Add one from the sidebar to start tracking.")
        return
    st.plotly_chart(viz.create_budget_progress_chart(progress_df), use_container_width=True)


def _render_budgets(evaluation, owner_id: str, cache: SnapshotCache) -> None:
    if not len(evaluation):
        st.info("No budgets yet.")
        return
    for budget, progress in evaluation:
        st.markdown(f"**{budget.category}** · {budget.period} · {budget.currency}")
        st.progress(progress.percentage / 100)
        spent = _money(progress.spent, budget.currency)
        if progress.is_over_budget:
            over = _money(progress.spent - to_decimal(budget.amount), budget.currency)
            st.error(f"{spent} spent · over by {over}")
        elif progress.status == "warning":
            st.warning(f"{spent} spent · {_money(progress.remaining, budget.currency)} remaining")
        else:
            st.success(f"{spent} spent · {_money(progress.remaining, budget.currency)} remaining")

        if budget.id is None:
            continue
        with st.expander("Edit budget"):
            with st.form(f"edit_budget_{budget.id}"):
                amount = st.number_input("Amount", min_value=0.0, value=float(budget.amount or 0), step=1.0)
                periods = list(config.BUDGET_PERIODS)
                period = st.selectbox(
                    "Period", periods,
                    index=periods.index(budget.period) if budget.period in periods else 1,
                )
                if st.form_submit_button("Update budget"):
                    try:
                        db.update_budget(budget.id, amount=amount, period=period)
                    except ValueError as exc:
                        st.error(str(exc))
                    else:
                        _saved(cache, owner_id, f"Budget for {budget.category} updated")
            if st.button("Delete budget", key=f"delete_budget_{budget.id}"):
                db.delete_budget(budget.id)
                _saved(cache, owner_id, f"Budget for {budget.category} deleted")


def _render_transactions(owner_id: str, cache: SnapshotCache) -> None:
    df = db.expenses_dataframe(owner_id)
    if df.empty:
        st.info("No expenses recorded yet.")
        return
    recent = df.sort_values(['date', 'created_at'], ascending=False).head(RECENT_EXPENSE_LIMIT)
    for row in recent.itertuples(index=False):
        col1, col2, col3 = st.columns([4, 2, 1])
        col1.markdown(f"**{row.item or row.category}** · {row.category} · {row.date:%Y-%m-%d}")
        col2.markdown(_money(row.amount, row.currency))
        if col3.button("🗑️", key=f"delete_expense_{row.id}", help="Delete expense"):
            db.delete_expense(row.id)
            _saved(cache, owner_id, "Expense deleted")

    with st.expander("Edit an expense"):
        labels = {
            row.id: f"{row.date:%Y-%m-%d} · {row.item or row.category} · {row.amount:.2f} {row.currency}"
            for row in recent.itertuples(index=False)
        }
        with st.form("edit_expense"):
            expense_id = st.selectbox("Expense", list(labels), format_func=labels.get)
            amount = st.number_input("New amount", min_value=0.0, step=0.01, format="%.2f")
            category = st.selectbox("New category", config.EXPENSE_CATEGORIES)
            if st.form_submit_button("Update expense"):
                try:
                    db.update_expense(expense_id, amount=amount, category=category)
                except ValueError as exc:
                    st.error(str(exc))
                else:
                    _saved(cache, owner_id, "Expense updated")


def _render_analytics(expenses, progress_df: pd.DataFrame, currency: str) -> None:
    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(viz.create_category_pie_chart(analytics.category_spending(expenses, currency)), use_container_width=True)
    with col2:
        st.plotly_chart(viz.create_weekday_chart(analytics.weekday_spending(expenses, currency)), use_container_width=True)
    st.plotly_chart(viz.create_monthly_trend_chart(analytics.monthly_spending(expenses, currency)), use_container_width=True)
    st.plotly_chart(viz.create_velocity_chart(analytics.spending_velocity(expenses, currency=currency)), use_container_width=True)
    if not progress_df.empty:
        st.subheader("Budget performance")
        st.dataframe(progress_df, use_container_width=True)


def _render_goals(owner_id: str, currency: str) -> None:
    st.subheader("🎯 Savings goals")
    with st.expander("➕ New goal"):
        with st.form("add_goal", clear_on_submit=True):
            title = st.text_input("Title")
            target = st.number_input("Target amount", min_value=0.0, step=100.0)
            current = st.number_input("Saved so far", min_value=0.0, step=10.0)
            target_date = st.date_input("Target date", value=None)
            category = st.selectbox("Category", config.GOAL_CATEGORIES)
            if st.form_submit_button("Create goal"):
                try:
                    db.add_goal(owner_id, title, target, current, target_date, category)
                except ValueError as exc:
                    st.error(str(exc))
                else:
                    st.rerun()

    goal_rows = db.fetch_goals(owner_id)
    if not goal_rows:
        st.info("No savings goals yet.")
    for row in goal_rows:
        goal = FinancialGoal.from_record(row)
        progress = goal_calc.goal_progress(goal)
        st.markdown(f"**{goal.title}** · {goal.category}")
        st.progress(progress['percentage'] / 100)
        st.caption(
            f"{format_currency(goal.current_amount, currency)} of {format_currency(goal.target_amount, currency)}"
            f" · {format_currency(progress['remaining'], currency)} to go"
        )
        if progress['days_remaining'] is not None:
            days = progress['days_remaining']
            st.caption(f"{abs(days)} days overdue" if progress['is_overdue'] else f"{days} days left")

        col1, col2 = st.columns([3, 1])
        with col1.form(f"contribute_{goal.id}", clear_on_submit=True):
            contribution = st.number_input("Add to goal", min_value=0.0, step=10.0)
            if st.form_submit_button("Add"):
                new_amount = to_decimal(goal.current_amount) + to_decimal(contribution)
                db.update_goal_amount(goal.id, float(new_amount))
                st.rerun()
        if col2.button("Delete", key=f"delete_goal_{goal.id}"):
            db.delete_goal(goal.id)
            st.rerun()


def _record_payment(debt: Debt, amount) -> None:
    try:
        db.record_debt_payment(debt.id, amount)
    except ValueError as exc:
        st.error(str(exc))
    else:
        st.rerun()


def _render_debts(owner_id: str, currency: str) -> None:
    st.subheader("💳 Debts")
    with st.expander("➕ New debt"):
        with st.form("add_debt", clear_on_submit=True):
            name = st.text_input("Name")
            total = st.number_input("Original amount", min_value=0.0, step=100.0)
            balance = st.number_input("Current balance", min_value=0.0, step=100.0)
            rate = st.number_input("Interest rate (%)", min_value=0.0, step=0.1)
            minimum = st.number_input("Minimum payment", min_value=0.0, step=10.0)
            due_date = st.date_input("Next due date", value=None)
            debt_type = st.selectbox("Type", config.DEBT_TYPES)
            if st.form_submit_button("Add debt"):
                try:
                    db.add_debt(owner_id, name, total, balance or None, rate, minimum, due_date, debt_type)
                except ValueError as exc:
                    st.error(str(exc))
                else:
                    st.rerun()

    debts = [Debt.from_record(row) for row in db.fetch_debts(owner_id)]
    if not debts:
        st.info("No debts tracked.")
        return
    summary = goal_calc.debt_summary(debts)
    col1, col2, col3 = st.columns(3)
    col1.metric("Total debt", format_currency(summary['total_balance'], currency))
    col2.metric("Minimum payments", format_currency(summary['total_minimum_payments'], currency))
    highest = summary['highest_interest']
    col3.metric("Highest interest", f"{highest.name} ({float(highest.interest_rate):.1f}%)")

    for debt in debts:
        progress = goal_calc.debt_progress(debt)
        st.markdown(f"**{debt.name}** · {debt.debt_type} · balance {format_currency(debt.current_balance, currency)}")
        st.progress(min(max(progress["percentage_paid"], 0), 100) / 100)
        if progress['is_overdue']:
            st.error("Payment overdue")
        elif progress['is_due_soon']:
            st.warning(f"Due in {progress['days_until_due']} days")

        col1, col2, col3 = st.columns([2, 3, 1])
        minimum = to_decimal(debt.minimum_payment)
        if to_decimal(debt.current_balance) > 0 and minimum > 0:
            if col1.button(f"Pay minimum ({format_currency(minimum, currency)})", key=f"pay_min_{debt.id}"):
                _record_payment(debt, float(minimum))
        with col2.form(f"pay_{debt.id}", clear_on_submit=True):
            amount = st.number_input("Custom payment", min_value=0.0, step=10.0)
            if st.form_submit_button("Pay"):
                _record_payment(debt, amount)
        if col3.button("Delete", key=f"delete_debt_{debt.id}"):
            db.delete_debt(debt.id)
            st.rerun()

        payments = db.fetch_debt_payments(debt.id)
        if payments:
            with st.expander(f"Payment history ({len(payments)})"):
                st.dataframe(pd.DataFrame(payments)[['payment_date', 'amount']], use_container_width=True)


def main() -> None:
    """Entry point for the Streamlit app."""
    st.set_page_config(page_title="Finance Tracker", layout="wide", initial_sidebar_state="expanded")
    st.title("💰 Finance Tracker")

    owner_id = st.sidebar.text_input("Owner id", value=st.session_state.get('owner_id', 'demo'))
    st.session_state.owner_id = owner_id
    as_of = st.sidebar.date_input("As of", value=date.today())
    currency = st.sidebar.selectbox("Display currency", _currency_codes())
    if not owner_id:
        st.info("Enter an owner id to begin.")
        st.stop()

    cache = _snapshot_cache()
    _render_entry_forms(owner_id, cache)
    _render_converter()
    if st.sidebar.button("🔄 Refresh"):
        cache.invalidate(owner_id)

    snapshot = cache.snapshot(owner_id)
    evaluation = snapshot.evaluate(as_of)
    for skipped in evaluation.skipped:
        st.warning(f"Skipped {skipped.kind}: {skipped.reason}")
    progress_df = analytics.budget_progress_frame(evaluation)

    overview_tab, budgets_tab, transactions_tab, analytics_tab, goals_tab = st.tabs([
        "📊 Overview",
        "📋 Budgets",
        "🧾 Transactions",
        "📈 Analytics",
        "🎯 Goals & Debts",
    ])
    with overview_tab:
        _render_overview(snapshot, as_of, progress_df, currency)
    with budgets_tab:
        _render_budgets(evaluation, owner_id, cache)
    with transactions_tab:
        _render_transactions(owner_id, cache)
    with analytics_tab:
        _render_analytics(snapshot.expenses, progress_df, currency)
    with goals_tab:
        _render_goals(owner_id, currency)
        _render_debts(owner_id, currency)


if __name__ == "__main__":  # pragma: no cover
    main()
