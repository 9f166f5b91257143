# -*- coding: utf-8 -*-
# 記帳與彙總：新增/刪除收支、依日期區間查詢、日/月彙總
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, List, Optional, Union

from .cache import SummaryCache
from .errors import NotFound, ValidationError
from .models import EXPENSE_CATEGORIES, TRANSACTION_TYPES
from .repository import NewTransaction, TransactionRepository
from .utils.dates import day_range, month_range

log = logging.getLogger("maajod.ledger")

ZERO = Decimal("0")


@dataclass
class Summary:
    total_income: Decimal = ZERO
    total_expense: Decimal = ZERO
    transactions: List = field(default_factory=list)

    @property
    def net(self) -> Decimal:
        return self.total_income - self.total_expense


def _to_amount(raw) -> Decimal:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValidationError("缺少欄位：amount")
    if isinstance(raw, bool):
        raise ValidationError("金額格式錯誤")
    try:
        amount = Decimal(str(raw))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError("金額格式錯誤")
    if not amount.is_finite():
        raise ValidationError("金額格式錯誤")
    if amount < 0:
        raise ValidationError("金額不可為負數")
    return amount


class Ledger:
    def __init__(
        self,
        repo: TransactionRepository,
        cache: Optional[SummaryCache] = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.repo = repo
        self.cache = cache
        self.now = now

    # ----- 寫入 -----
    def create(
        self,
        store_id: str,
        type: Optional[str],
        amount,
        category: Optional[str] = None,
        note: Optional[str] = None,
        date: Optional[datetime] = None,
    ):
        if not type:
            raise ValidationError("缺少欄位：type")
        if type not in TRANSACTION_TYPES:
            raise ValidationError(f"type 必須是 {'/'.join(TRANSACTION_TYPES)}")
        value = _to_amount(amount)
        category = category or None
        if type == "expense" and not category:
            raise ValidationError("支出必須指定 category")
        if category is not None and category not in EXPENSE_CATEGORIES:
            raise ValidationError(f"category 必須是 {'/'.join(EXPENSE_CATEGORIES)}")

        entry = NewTransaction(
            store_id=store_id,
            type=type,
            amount=value,
            category=category,
            note=note or "",
            date=date or self.now(),
        )
        t = self.repo.create(entry)
        self._invalidate(store_id, entry.date)
        log.info("created %s %s in store %s", t.type, t.id, store_id)
        return t

    def delete(self, store_id: str, transaction_id: str):
        t = self.repo.delete(transaction_id, store_id)
        if t is None:
            raise NotFound("找不到這筆收支")
        self._invalidate(store_id, t.date)
        log.info("deleted %s from store %s", transaction_id, store_id)
        return t

    def _invalidate(self, store_id: str, when: datetime) -> None:
        if self.cache is not None:
            self.cache.invalidate(store_id, when.year, when.month)

    # ----- 查詢 -----
    def find_by_date_range(self, store_id: str, start: datetime, end: datetime) -> List:
        if start > end:
            raise ValidationError("startDate 不可晚於 endDate")
        return self.repo.find_by_date_range(store_id, start, end)

    def summary(self, store_id: str, start: datetime, end: datetime) -> Summary:
        totals = self.repo.aggregate_by_date_range(store_id, start, end)
        return Summary(
            total_income=totals.get("income", ZERO),
            total_expense=totals.get("expense", ZERO),
            transactions=self.repo.find_by_date_range(store_id, start, end),
        )

    def daily_summary(self, store_id: str, d: Optional[Union[date, datetime]] = None) -> Summary:
        start, end = day_range(d or self.now())
        return self.summary(store_id, start, end)

    def monthly_summary(self, store_id: str, year: Optional[int] = None, month: Optional[int] = None) -> Summary:
        today = self.now()
        y = year if year is not None else today.year
        m = month if month is not None else today.month
        start, end = month_range(y, m)

        if self.cache is None:
            return self.summary(store_id, start, end)
        hit = self.cache.get(store_id, y, m)
        if hit is not None:
            return hit
        # 讀取期間若有寫入，generation 會變，結果就不放進快取
        gen = self.cache.generation(store_id)
        result = self.summary(store_id, start, end)
        self.cache.put(store_id, y, m, result, generation=gen)
        return result
