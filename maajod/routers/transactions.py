from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..access import StoreContext
from ..deps import get_ledger, get_store_context
from ..errors import ValidationError
from ..ledger import Ledger
from ..utils.dates import parse_date, parse_range_end
from ..utils.schemas import TransactionIn

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


def _iso(dt):
    return dt.isoformat() if dt else None


def transaction_dict(t) -> dict:
    return {
        "id": t.id,
        "storeId": t.store_id,
        "type": t.type,
        "amount": float(t.amount) if t.amount is not None else 0.0,
        "category": t.category,
        "note": t.note or "",
        "date": _iso(t.date),
        "createdAt": _iso(t.created_at),
        "updatedAt": _iso(getattr(t, "updated_at", None)),
    }


@router.post("", status_code=201)
def create_transaction(
    payload: TransactionIn,
    ctx: StoreContext = Depends(get_store_context),
    ledger: Ledger = Depends(get_ledger),
):
    t = ledger.create(
        ctx.store_id,
        type=payload.type,
        amount=payload.amount,
        category=payload.category,
        note=payload.note,
        date=parse_date(payload.date) if payload.date else None,
    )
    return transaction_dict(t)


@router.get("")
def list_transactions(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    ctx: StoreContext = Depends(get_store_context),
    ledger: Ledger = Depends(get_ledger),
):
    if not start_date or not end_date:
        raise ValidationError("startDate 與 endDate 為必填")
    rows = ledger.find_by_date_range(ctx.store_id, parse_date(start_date), parse_range_end(end_date))
    return [transaction_dict(t) for t in rows]


@router.delete("/{tid}")
def delete_transaction(
    tid: str,
    ctx: StoreContext = Depends(get_store_context),
    ledger: Ledger = Depends(get_ledger),
):
    t = ledger.delete(ctx.store_id, tid)
    return {"message": "已刪除", "transaction": transaction_dict(t)}
