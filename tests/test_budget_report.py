import importlib.util
from pathlib import Path

from finance_tracker import db

SCRIPT_PATH = Path(__file__).resolve().parents[1] / 'scripts' / 'budget_report.py'


def _load_script():
    spec = importlib.util.spec_from_file_location('budget_report_test', SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_report_prints_totals_per_currency(tmp_path, capsys):
    path = str(tmp_path / 'finance.db')
    db.init_db(path)
    db.add_budget('alice', 'Food', 200, 'monthly', 'USD', db_path=path)
    db.add_budget('alice', 'Food', 10000, 'monthly', 'JPY', db_path=path)
    db.add_expense('alice', 'Lunch', 50, 'Food', 'USD', '2024-03-30', db_path=path)
    db.add_expense('alice', 'Ramen', 3000, 'Food', 'JPY', '2024-03-30', db_path=path)

    assert _load_script().main('alice', db_path=path, as_of='2024-03-31') == 0

    out = capsys.readouterr().out
    assert 'Totals (USD)' in out
    assert 'Budget:    $200.00' in out
    assert 'Totals (JPY)' in out
    assert 'Budget:    ¥10,000' in out
    assert '$10,200' not in out


def test_report_without_budgets(tmp_path, capsys):
    path = str(tmp_path / 'finance.db')
    assert _load_script().main('nobody', db_path=path) == 0
    assert 'No budgets found for nobody.' in capsys.readouterr().out
