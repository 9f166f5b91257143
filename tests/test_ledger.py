from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from maajod.adapters.memory import MemoryTransactionRepository
from maajod.cache import SummaryCache
from maajod.errors import InvalidInput, NotFound, ValidationError
from maajod.ledger import Ledger

NOW = datetime(2024, 1, 20, 12, 0, 0)


@pytest.fixture()
def ledger():
    return Ledger(MemoryTransactionRepository(), cache=SummaryCache(300), now=lambda: NOW)


def test_expense_without_category_fails(ledger):
    with pytest.raises(ValidationError):
        ledger.create("s1", type="expense", amount=10)


def test_income_without_category_succeeds(ledger):
    t = ledger.create("s1", type="income", amount=10)
    assert t.category is None
    assert t.amount == Decimal("10")


@pytest.mark.parametrize("kwargs", [
    dict(type=None, amount=1),
    dict(type="income", amount=None),
    dict(type="gift", amount=1),
    dict(type="income", amount=-1),
    dict(type="income", amount="abc"),
    dict(type="expense", amount=1, category="travel"),
])
def test_invalid_entries_rejected(ledger, kwargs):
    with pytest.raises(ValidationError):
        ledger.create("s1", **kwargs)


def test_zero_amount_allowed(ledger):
    assert ledger.create("s1", type="income", amount=0).amount == Decimal("0")


def test_date_defaults_to_now(ledger):
    assert ledger.create("s1", type="income", amount=5).date == NOW


def test_empty_range_summary(ledger):
    s = ledger.summary("s1", datetime(2024, 1, 1), datetime(2024, 1, 31))
    assert (s.total_income, s.total_expense, s.net, s.transactions) == (0, 0, 0, [])


def test_daily_summary_totals(ledger):
    ledger.create("s1", type="income", amount=100, date=datetime(2024, 1, 5, 9))
    ledger.create("s1", type="expense", amount="30.50", category="supplies", date=datetime(2024, 1, 5, 23, 59, 59))
    ledger.create("s1", type="income", amount=7, date=datetime(2024, 1, 6, 0, 0))
    ledger.create("s2", type="income", amount=999, date=datetime(2024, 1, 5, 10))

    s = ledger.daily_summary("s1", date(2024, 1, 5))
    assert s.total_income == Decimal("100")
    assert s.total_expense == Decimal("30.50")
    assert s.net == Decimal("69.50")
    assert len(s.transactions) == 2


def test_daily_summary_defaults_to_today(ledger):
    ledger.create("s1", type="income", amount=3)
    assert ledger.daily_summary("s1").total_income == Decimal("3")


def test_transactions_ordered_newest_first(ledger):
    a = ledger.create("s1", type="income", amount=1, date=datetime(2024, 1, 3))
    b = ledger.create("s1", type="income", amount=2, date=datetime(2024, 1, 9))
    c = ledger.create("s1", type="income", amount=3, date=datetime(2024, 1, 3))
    c.created_at = a.created_at + timedelta(seconds=1)

    rows = ledger.find_by_date_range("s1", datetime(2024, 1, 1), datetime(2024, 1, 31))
    assert [r.id for r in rows] == [b.id, c.id, a.id]


def test_range_start_after_end_rejected(ledger):
    with pytest.raises(ValidationError):
        ledger.find_by_date_range("s1", datetime(2024, 2, 1), datetime(2024, 1, 1))


@pytest.mark.parametrize("month", [0, 13])
def test_monthly_summary_rejects_bad_month(ledger, month):
    with pytest.raises(InvalidInput):
        ledger.monthly_summary("s1", 2024, month)


def test_monthly_summary_defaults_to_current_month(ledger):
    ledger.create("s1", type="income", amount=50, date=datetime(2024, 1, 31, 23, 0))
    ledger.create("s1", type="income", amount=70, date=datetime(2024, 2, 1))
    assert ledger.monthly_summary("s1").total_income == Decimal("50")


def test_delete_requires_matching_store(ledger):
    t = ledger.create("s1", type="income", amount=10)
    with pytest.raises(NotFound):
        ledger.delete("s2", t.id)
    assert len(ledger.repo.rows) == 1
    ledger.delete("s1", t.id)
    assert ledger.repo.rows == []


def test_monthly_summary_cached_until_write(ledger):
    ledger.create("s1", type="income", amount=10, date=datetime(2024, 1, 2))
    first = ledger.monthly_summary("s1", 2024, 1)
    assert ledger.monthly_summary("s1", 2024, 1) is first

    t = ledger.create("s1", type="income", amount=5, date=datetime(2024, 1, 3))
    second = ledger.monthly_summary("s1", 2024, 1)
    assert second is not first
    assert second.total_income == Decimal("15")

    ledger.delete("s1", t.id)
    assert ledger.monthly_summary("s1", 2024, 1).total_income == Decimal("10")


def test_write_to_other_month_keeps_cache(ledger):
    ledger.create("s1", type="income", amount=10, date=datetime(2024, 1, 2))
    jan = ledger.monthly_summary("s1", 2024, 1)
    ledger.create("s1", type="income", amount=5, date=datetime(2024, 2, 3))
    assert ledger.monthly_summary("s1", 2024, 1) is jan


class RacingRepository(MemoryTransactionRepository):
    # 第一次查詢明細時，模擬另一個請求同時寫入一筆收入
    def __init__(self):
        super().__init__()
        self.on_read = None

    def find_by_date_range(self, store_id, start, end):
        rows = super().find_by_date_range(store_id, start, end)
        if self.on_read is not None:
            hook, self.on_read = self.on_read, None
            hook()
        return rows


def test_summary_computed_across_write_is_not_cached():
    repo = RacingRepository()
    ledger = Ledger(repo, cache=SummaryCache(300), now=lambda: NOW)
    repo.on_read = lambda: ledger.create("s1", type="income", amount=50, date=datetime(2024, 1, 10))

    first = ledger.monthly_summary("s1", 2024, 1)
    assert first.total_income == Decimal("0")

    second = ledger.monthly_summary("s1", 2024, 1)
    assert len(repo.rows) == 1
    assert second.total_income == Decimal("50")
    assert ledger.monthly_summary("s1", 2024, 1) is second
