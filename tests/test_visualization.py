from datetime import date

import pandas as pd

from finance_tracker import analytics, visualization as viz
from finance_tracker.budget_progress import compute_all_budget_progress
from finance_tracker.models import Budget, Expense


def _expenses():
    return [
        Expense(category='Food', amount=40, currency='USD', date='2024-03-10'),
        Expense(category='Travel', amount=120, currency='USD', date='2024-03-12'),
    ]


def test_empty_inputs_give_placeholder_figure():
    figures = [
        viz.create_budget_progress_chart(pd.DataFrame()),
        viz.create_category_pie_chart(analytics.category_spending([])),
        viz.create_monthly_trend_chart(analytics.monthly_spending([])),
        viz.create_weekday_chart(analytics.weekday_spending([])),
        viz.create_velocity_chart(analytics.spending_velocity([])),
    ]
    for fig in figures:
        assert fig.layout.title.text == "No data to display"
        assert len(fig.data) == 0


def test_budget_progress_chart_has_bars():
    budgets = [Budget(category='Food', amount=100, currency='USD'), Budget(category='Travel', amount=100, currency='USD')]
    evaluation = compute_all_budget_progress(budgets, _expenses(), as_of=date(2024, 3, 31))
    fig = viz.create_budget_progress_chart(analytics.budget_progress_frame(evaluation))

    assert fig.layout.title.text == "Budget progress"
    # one trace per status: on_track and over
    assert len(fig.data) == 2


def test_category_pie_chart():
    fig = viz.create_category_pie_chart(analytics.category_spending(_expenses()), title="Spend")
    assert fig.layout.title.text == "Spend"
    assert set(fig.data[0].labels) == {'Food', 'Travel'}


def test_velocity_chart_has_bar_and_line():
    velocity = analytics.spending_velocity(_expenses(), days=30, as_of=date(2024, 3, 31))
    fig = viz.create_velocity_chart(velocity)
    assert [trace.type for trace in fig.data] == ['bar', 'scatter']
