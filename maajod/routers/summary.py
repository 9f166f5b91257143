from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..access import StoreContext
from ..deps import get_ledger, get_store_context
from ..errors import InvalidInput
from ..ledger import Ledger, Summary
from ..utils.dates import parse_date
from .transactions import transaction_dict

router = APIRouter(prefix="/api/summary", tags=["summary"])


def summary_dict(s: Summary) -> dict:
    return {
        "totalIncome": float(s.total_income),
        "totalExpense": float(s.total_expense),
        "net": float(s.net),
        "transactions": [transaction_dict(t) for t in s.transactions],
    }


def _int_param(name: str, raw: Optional[str]) -> Optional[int]:
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise InvalidInput(f"{name} 必須是整數")


@router.get("/daily")
def daily(
    date_str: Optional[str] = Query(default=None, alias="date"),
    ctx: StoreContext = Depends(get_store_context),
    ledger: Ledger = Depends(get_ledger),
):
    d = parse_date(date_str) if date_str else None
    return summary_dict(ledger.daily_summary(ctx.store_id, d))


@router.get("/monthly")
def monthly(
    year: Optional[str] = Query(default=None),
    month: Optional[str] = Query(default=None),
    ctx: StoreContext = Depends(get_store_context),
    ledger: Ledger = Depends(get_ledger),
):
    return summary_dict(ledger.monthly_summary(ctx.store_id, _int_param("year", year), _int_param("month", month)))
