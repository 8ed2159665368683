import importlib

import pytest

from finance_tracker import config


@pytest.fixture
def reload_config(monkeypatch: pytest.MonkeyPatch):
    yield lambda: importlib.reload(config)
    monkeypatch.undo()
    importlib.reload(config)


def test_environment_overrides(tmp_path, monkeypatch: pytest.MonkeyPatch, reload_config) -> None:
    monkeypatch.setenv("FINTRACK_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("FINTRACK_DEFAULT_CURRENCY", "EUR")
    monkeypatch.setenv("FINTRACK_ALERT_THRESHOLD", "75")
    monkeypatch.delenv("FINTRACK_DB_PATH", raising=False)

    reloaded = reload_config()

    assert reloaded.DEFAULT_CURRENCY == "EUR"
    assert reloaded.ALERT_THRESHOLD == 75.0
    assert reloaded.DB_PATH == (tmp_path / "data" / "finance.db").resolve()

    reloaded.ensure_data_directories()
    assert (tmp_path / "data").is_dir()
    assert reloaded.get_db_path() == str(reloaded.DB_PATH)


def test_budget_periods_cover_engine_offsets() -> None:
    from finance_tracker.budget_progress import PERIOD_OFFSETS

    assert set(config.BUDGET_PERIODS) == set(PERIOD_OFFSETS)
