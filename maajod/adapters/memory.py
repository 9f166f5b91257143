# In-memory adapters; used by unit tests of the resolver and the aggregation engine.
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from ..repository import MembershipRepository, NewTransaction, TransactionRepository


@dataclass
class TransactionRecord:
    store_id: str
    type: str
    amount: Decimal
    date: datetime
    category: Optional[str] = None
    note: str = ""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)


@dataclass
class MembershipRecord:
    user_id: str
    store_id: str
    role: str = "member"
    is_default: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=datetime.now)


class MemoryTransactionRepository(TransactionRepository):
    def __init__(self):
        self.rows: List[TransactionRecord] = []

    def create(self, entry: NewTransaction) -> TransactionRecord:
        rec = TransactionRecord(
            store_id=entry.store_id,
            type=entry.type,
            amount=entry.amount,
            date=entry.date,
            category=entry.category,
            note=entry.note or "",
        )
        self.rows.append(rec)
        return rec

    def _in_range(self, store_id, start, end):
        return [r for r in self.rows if r.store_id == store_id and start <= r.date <= end]

    def find_by_date_range(self, store_id, start, end):
        return sorted(self._in_range(store_id, start, end), key=lambda r: (r.date, r.created_at), reverse=True)

    def delete(self, transaction_id, store_id):
        for r in self.rows:
            if r.id == transaction_id and r.store_id == store_id:
                self.rows.remove(r)
                return r
        return None

    def aggregate_by_date_range(self, store_id, start, end) -> Dict[str, Decimal]:
        totals: Dict[str, Decimal] = {}
        for r in self._in_range(store_id, start, end):
            totals[r.type] = totals.get(r.type, Decimal("0")) + r.amount
        return totals


class MemoryMembershipRepository(MembershipRepository):
    def __init__(self, rows: Optional[List[MembershipRecord]] = None):
        self.rows: List[MembershipRecord] = list(rows or [])

    def add(self, user_id, store_id, role="member", is_default=False, created_at=None) -> MembershipRecord:
        rec = MembershipRecord(user_id=user_id, store_id=store_id, role=role, is_default=is_default)
        if created_at is not None:
            rec.created_at = created_at
        self.rows.append(rec)
        return rec

    def find(self, user_id, store_id):
        return next((r for r in self.rows if r.user_id == user_id and r.store_id == store_id), None)

    def find_default(self, user_id):
        return next((r for r in self._ordered(user_id) if r.is_default), None)

    def find_first(self, user_id):
        return next(iter(self._ordered(user_id)), None)

    def _ordered(self, user_id):
        return sorted((r for r in self.rows if r.user_id == user_id), key=lambda r: (r.created_at, r.id))
