"""Plotly visualisation helpers for the finance tracker.

Each function accepts one of the DataFrames produced by
:mod:`finance_tracker.analytics` and returns a
`plotly.graph_objects.Figure` that Streamlit renders via
``st.plotly_chart``.  Empty input always yields an empty figure titled
"No data to display" so callers never need to special-case it.
"""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

STATUS_COLORS = {
    "over": "#ef4444",
    "warning": "#eab308",
    "on_track": "#22c55e",
}


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def create_budget_progress_chart(progress: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Horizontal bar chart of each budget's consumed percentage.

    Parameters
    ----------
    progress : pandas.DataFrame
        Output of :func:`finance_tracker.analytics.budget_progress_frame`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        One bar per budget, coloured by status, capped at 100%.
    """
    if progress.empty:
        return _empty_figure()
    df = progress.copy()
    df["Label"] = df["Category"].astype(str) + " (" + df["Period"].astype(str) + ", " + df["Currency"].astype(str) + ")"
    fig = px.bar(
        df,
        x="Percentage",
        y="Label",
        color="Status",
        orientation="h",
        color_discrete_map=STATUS_COLORS,
        hover_data=["Spent", "Budget", "Remaining"],
        range_x=[0, 100],
    )
    fig.update_layout(
        title=title or "Budget progress",
        xaxis_title="% of budget used",
        yaxis_title="",
    )
    return fig


def create_category_pie_chart(spending: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Pie chart of total spending per category.

    Parameters
    ----------
    spending : pandas.DataFrame
        Output of :func:`finance_tracker.analytics.category_spending`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Pie chart.
    """
    if spending.empty:
        return _empty_figure()
    df = spending.reset_index()
    fig = px.pie(df, names="Category", values="Total_Spent")
    fig.update_layout(title=title or "Spending by category")
    return fig


def create_monthly_trend_chart(monthly: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Line chart of spending per month."""
    if monthly.empty:
        return _empty_figure()
    fig = px.line(monthly, x="Month", y="Amount", markers=True)
    fig.update_layout(
        title=title or "Monthly spending",
        xaxis_title="Month",
        yaxis_title="Amount",
    )
    return fig


def create_weekday_chart(weekdays: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Bar chart of spending per day of the week."""
    if weekdays.empty or not weekdays["Amount"].any():
        return _empty_figure()
    fig = px.bar(weekdays, x="Day", y="Amount")
    fig.update_layout(
        title=title or "Spending by weekday",
        xaxis_title="Day",
        yaxis_title="Amount",
    )
    return fig


def create_velocity_chart(velocity: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Daily spending bars with the cumulative total as a line.

    Parameters
    ----------
    velocity : pandas.DataFrame
        Output of :func:`finance_tracker.analytics.spending_velocity`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Combined bar and line chart.
    """
    if velocity.empty:
        return _empty_figure()
    fig = go.Figure()
    fig.add_trace(go.Bar(x=velocity["Date"], y=velocity["Amount"], name="Daily"))
    fig.add_trace(go.Scatter(x=velocity["Date"], y=velocity["Cumulative"], name="Cumulative", mode="lines"))
    fig.update_layout(
        title=title or "Spending velocity",
        xaxis_title="Date",
        yaxis_title="Amount",
    )
    return fig
