"""Top‑level package for the Finance Tracker.

The primary modules are:

* ``budget_progress`` – the budget engine: per-budget spend, percentage,
  headroom and the portfolio totals every view reads from
* ``repository`` – snapshot access to an owner's expenses and budgets
* ``db`` – the SQLite data store
* ``analytics`` – spending breakdowns for charting
* ``visualization`` – functions that generate Plotly figures
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run finance_tracker/dashboard.py
```
"""

from . import budget_progress  # noqa: F401  # re-exported for convenience
from . import repository  # noqa: F401  # re-exported for convenience
from . import analytics  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience
from .budget_progress import (  # noqa: F401
    BudgetEngineError,
    InvalidPeriod,
    MalformedRecord,
    compute_all_budget_progress,
    compute_budget_progress,
    compute_period_window,
)
# Streamlit may not be installed in all environments (e.g. during unit
# testing).  If the import fails, ``dashboard`` is ``None``.
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore


__all__ = [
    "analytics",
    "budget_progress",
    "compute_all_budget_progress",
    "compute_budget_progress",
    "compute_period_window",
    "BudgetEngineError",
    "InvalidPeriod",
    "MalformedRecord",
    "dashboard",
    "repository",
    "visualization",
]
