from datetime import datetime
from decimal import Decimal
from typing import Dict, List

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from ..models import Membership, Transaction
from ..repository import MembershipRepository, NewTransaction, TransactionRepository


class SqlTransactionRepository(TransactionRepository):
    def __init__(self, db: Session):
        self.db = db

    def create(self, entry: NewTransaction) -> Transaction:
        t = Transaction(
            store_id=entry.store_id,
            type=entry.type,
            amount=entry.amount,
            category=entry.category,
            note=entry.note or "",
            date=entry.date,
        )
        self.db.add(t)
        self.db.commit()
        self.db.refresh(t)
        return t

    def find_by_date_range(self, store_id: str, start: datetime, end: datetime) -> List[Transaction]:
        stmt = (
            select(Transaction)
            .where(and_(Transaction.store_id == store_id, Transaction.date >= start, Transaction.date <= end))
            .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def delete(self, transaction_id: str, store_id: str):
        # 用 (id, store) 一起查：別家店的資料一律當作不存在
        t = self.db.execute(
            select(Transaction).where(and_(Transaction.id == transaction_id, Transaction.store_id == store_id))
        ).scalars().first()
        if not t:
            return None
        self.db.delete(t)
        self.db.commit()
        return t

    def aggregate_by_date_range(self, store_id: str, start: datetime, end: datetime) -> Dict[str, Decimal]:
        rows = self.db.execute(
            select(Transaction.type, func.coalesce(func.sum(Transaction.amount), 0))
            .where(and_(Transaction.store_id == store_id, Transaction.date >= start, Transaction.date <= end))
            .group_by(Transaction.type)
        ).all()
        return {t: Decimal(str(total or 0)) for t, total in rows}


class SqlMembershipRepository(MembershipRepository):
    def __init__(self, db: Session):
        self.db = db

    def find(self, user_id: str, store_id: str):
        return self.db.execute(
            select(Membership).where(and_(Membership.user_id == user_id, Membership.store_id == store_id))
        ).scalars().first()

    def find_default(self, user_id: str):
        return self.db.execute(
            select(Membership)
            .where(and_(Membership.user_id == user_id, Membership.is_default.is_(True)))
            .order_by(Membership.created_at.asc(), Membership.id.asc())
        ).scalars().first()

    def find_first(self, user_id: str):
        return self.db.execute(
            select(Membership)
            .where(Membership.user_id == user_id)
            .order_by(Membership.created_at.asc(), Membership.id.asc())
        ).scalars().first()
