from datetime import date

import pytest

from finance_tracker import db


@pytest.fixture
def db_path(tmp_path):
    path = str(tmp_path / "finance.db")
    db.init_db(path)
    return path


def test_add_and_fetch_expense(db_path) -> None:
    expense_id = db.add_expense("alice", "Coffee", "$1,200.50", "Food", "USD", "2024-03-01", db_path=db_path)

    rows = db.fetch_expenses("alice", db_path=db_path)
    assert len(rows) == 1
    row = rows[0]
    assert row["id"] == expense_id
    assert row["amount"] == pytest.approx(1200.50)
    assert row["date"] == "2024-03-01"
    assert db.fetch_expenses("bob", db_path=db_path) == []


def test_expense_date_defaults_to_today(db_path) -> None:
    db.add_expense("alice", "Lunch", 12, "Food", db_path=db_path)
    assert db.fetch_expenses("alice", db_path=db_path)[0]["date"] == date.today().isoformat()


@pytest.mark.parametrize("amount", [-5, "abc", None, float("inf")])
def test_add_expense_rejects_bad_amounts(db_path, amount) -> None:
    with pytest.raises(ValueError):
        db.add_expense("alice", "Bad", amount, "Food", db_path=db_path)


def test_add_expense_rejects_bad_date(db_path) -> None:
    with pytest.raises(ValueError):
        db.add_expense("alice", "Bad", 5, "Food", expense_date="2024-02-30", db_path=db_path)


def test_update_and_delete_expense(db_path) -> None:
    expense_id = db.add_expense("alice", "Taxi", 20, "Transportation", db_path=db_path)

    assert db.update_expense(expense_id, amount=25, category="Travel", db_path=db_path)
    row = db.fetch_expenses("alice", db_path=db_path)[0]
    assert row["amount"] == 25
    assert row["category"] == "Travel"
    assert row["item"] == "Taxi"

    assert db.delete_expense(expense_id, db_path=db_path)
    assert not db.delete_expense(expense_id, db_path=db_path)
    assert db.fetch_expenses("alice", db_path=db_path) == []


def test_expenses_dataframe_parses_dates(db_path) -> None:
    db.add_expense("alice", "B", 5, "Food", expense_date="2024-03-02", db_path=db_path)
    db.add_expense("alice", "A", 7, "Food", expense_date="2024-03-01", db_path=db_path)

    df = db.expenses_dataframe("alice", db_path=db_path)
    assert list(df["item"]) == ["A", "B"]
    assert str(df["date"].dtype).startswith("datetime64")


def test_budgets_are_newest_first(db_path) -> None:
    first = db.add_budget("alice", "Food", 300, "monthly", db_path=db_path)
    second = db.add_budget("alice", "Travel", 1000, "yearly", db_path=db_path)

    ids = [row["id"] for row in db.fetch_budgets("alice", db_path=db_path)]
    assert ids == [second, first]


def test_add_budget_rejects_unknown_period(db_path) -> None:
    with pytest.raises(ValueError):
        db.add_budget("alice", "Food", 100, "daily", db_path=db_path)


def test_update_budget_touches_updated_at(db_path) -> None:
    budget_id = db.add_budget("alice", "Food", 300, db_path=db_path)
    before = db.fetch_budgets("alice", db_path=db_path)[0]

    assert db.update_budget(budget_id, amount=350, period="weekly", db_path=db_path)
    after = db.fetch_budgets("alice", db_path=db_path)[0]
    assert after["amount"] == 350
    assert after["period"] == "weekly"
    assert after["updated_at"] >= before["updated_at"]
    assert not db.update_budget(budget_id, db_path=db_path)


def test_goal_lifecycle(db_path) -> None:
    goal_id = db.add_goal("alice", "Holiday", 2000, 500, "2025-06-01", "Vacation", db_path=db_path)
    assert db.update_goal_amount(goal_id, 750, db_path=db_path)

    goal = db.fetch_goals("alice", db_path=db_path)[0]
    assert goal["current_amount"] == 750
    assert goal["target_date"] == "2025-06-01"

    assert db.delete_goal(goal_id, db_path=db_path)
    assert db.fetch_goals("alice", db_path=db_path) == []


def test_debt_payment_reduces_balance_and_floors_at_zero(db_path) -> None:
    debt_id = db.add_debt("alice", "Card", 1000, interest_rate=19.9, minimum_payment=35, db_path=db_path)
    assert db.fetch_debts("alice", db_path=db_path)[0]["current_balance"] == 1000

    assert db.record_debt_payment(debt_id, 400, "2024-03-01", db_path=db_path) == 600
    assert db.record_debt_payment(debt_id, 900, db_path=db_path) == 0

    payments = db.fetch_debt_payments(debt_id, db_path=db_path)
    assert len(payments) == 2
    assert db.fetch_debts("alice", db_path=db_path)[0]["current_balance"] == 0


def test_debt_payment_validation(db_path) -> None:
    debt_id = db.add_debt("alice", "Loan", 500, db_path=db_path)
    with pytest.raises(ValueError):
        db.record_debt_payment(debt_id, 0, db_path=db_path)
    with pytest.raises(ValueError):
        db.record_debt_payment("missing", 10, db_path=db_path)


def test_deleting_debt_removes_payments(db_path) -> None:
    debt_id = db.add_debt("alice", "Loan", 500, db_path=db_path)
    db.record_debt_payment(debt_id, 100, db_path=db_path)

    assert db.delete_debt(debt_id, db_path=db_path)
    assert db.fetch_debt_payments(debt_id, db_path=db_path) == []


def test_default_path_comes_from_config(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    from finance_tracker import config

    target = tmp_path / "nested" / "finance.db"
    monkeypatch.setattr(config, "DATA_DIR", tmp_path / "nested")
    monkeypatch.setattr(config, "DB_PATH", target)
    db.init_db()
    db.add_budget("alice", "Food", 100)

    assert target.exists()
    assert len(db.fetch_budgets("alice")) == 1


def test_debt_payment_uses_goal_payment_rule(db_path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    original = db.apply_payment

    def tracking(debt, amount):
        calls.append((debt.name, amount))
        return original(debt, amount)

    monkeypatch.setattr(db, "apply_payment", tracking)
    debt_id = db.add_debt("alice", "Card", 100.10, db_path=db_path)

    assert db.record_debt_payment(debt_id, 0.1, db_path=db_path) == pytest.approx(100.0)
    assert calls == [("Card", 0.1)]
