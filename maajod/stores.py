# -*- coding: utf-8 -*-
# 店家與成員關係（user <-> store）
from typing import List, Optional, Tuple

from sqlalchemy import and_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import Conflict, NotFound, ValidationError
from .models import STORE_ROLES, Membership, Store, User


def create_store(db: Session, owner_id: str, name: str, description: Optional[str] = None) -> Tuple[Store, Membership]:
    name = (name or "").strip()
    if not name:
        raise ValidationError("請輸入店名")
    # 第一家店才自動設成預設；之後建立的店不動既有的預設
    has_default = db.execute(
        select(Membership.id).where(and_(Membership.user_id == owner_id, Membership.is_default.is_(True)))
    ).first() is not None

    store = Store(name=name, description=description or "")
    db.add(store)
    db.flush()
    m = Membership(user_id=owner_id, store_id=store.id, role="owner", is_default=not has_default)
    db.add(m)
    db.commit()
    db.refresh(store)
    db.refresh(m)
    return store, m


def list_user_stores(db: Session, user_id: str) -> List[Tuple[Store, Membership]]:
    rows = db.execute(
        select(Store, Membership)
        .join(Membership, Membership.store_id == Store.id)
        .where(Membership.user_id == user_id)
        .order_by(Membership.created_at.asc(), Membership.id.asc())
    ).all()
    return [(s, m) for s, m in rows]


def default_store_id(stores: List[Tuple[Store, Membership]]) -> Optional[str]:
    for s, m in stores:
        if m.is_default:
            return s.id
    return stores[0][0].id if stores else None


def get_store(db: Session, store_id: str) -> Store:
    s = db.get(Store, store_id)
    if not s:
        raise NotFound("找不到店家")
    return s


def update_store(db: Session, store_id: str, name: Optional[str] = None,
                 description: Optional[str] = None, is_active: Optional[bool] = None) -> Store:
    s = get_store(db, store_id)
    if name is not None:
        if not name.strip():
            raise ValidationError("店名不可為空")
        s.name = name.strip()
    if description is not None:
        s.description = description
    if is_active is not None:
        s.is_active = is_active
    db.commit()
    db.refresh(s)
    return s


def add_member(db: Session, store_id: str, user_id: str, role: str = "member") -> Membership:
    if role not in STORE_ROLES:
        raise ValidationError(f"role 必須是 {'/'.join(STORE_ROLES)}")
    get_store(db, store_id)
    if not user_id or not db.get(User, user_id):
        raise NotFound("找不到使用者")
    existing = db.execute(
        select(Membership).where(and_(Membership.user_id == user_id, Membership.store_id == store_id))
    ).scalars().first()
    if existing:
        raise Conflict("此使用者已在店內")
    m = Membership(user_id=user_id, store_id=store_id, role=role, is_default=False)
    db.add(m)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("此使用者已在店內")
    db.refresh(m)
    return m


def remove_member(db: Session, store_id: str, user_id: str) -> None:
    m = db.execute(
        select(Membership).where(and_(Membership.user_id == user_id, Membership.store_id == store_id))
    ).scalars().first()
    if not m:
        raise NotFound("此使用者不在店內")
    db.delete(m)
    db.commit()


def list_members(db: Session, store_id: str) -> List[Tuple[Membership, User]]:
    rows = db.execute(
        select(Membership, User)
        .join(User, User.id == Membership.user_id)
        .where(Membership.store_id == store_id)
        .order_by(Membership.created_at.asc(), Membership.id.asc())
    ).all()
    return [(m, u) for m, u in rows]


def set_default_store(db: Session, user_id: str, store_id: str) -> None:
    # 先清掉所有預設，再設定新的；同一個 commit 內完成
    db.execute(update(Membership).where(Membership.user_id == user_id).values(is_default=False))
    db.execute(
        update(Membership)
        .where(and_(Membership.user_id == user_id, Membership.store_id == store_id))
        .values(is_default=True)
    )
    db.commit()
