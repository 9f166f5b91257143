from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import stores as svc
from ..access import normalize_store_id, require_role, resolve_store_context
from ..adapters.sql import SqlMembershipRepository
from ..db import get_db
from ..deps import get_current_user
from ..errors import NotFound
from ..models import Membership, Store, User
from ..utils.schemas import MemberIn, StoreIn, StoreUpdateIn

router = APIRouter(prefix="/api/stores", tags=["stores"])


def _iso(dt):
    return dt.isoformat() if dt else None


def store_dict(s: Store) -> dict:
    return {
        "id": s.id,
        "name": s.name,
        "description": s.description or "",
        "isActive": bool(s.is_active),
        "createdAt": _iso(s.created_at),
        "updatedAt": _iso(s.updated_at),
    }


def store_with_role(s: Store, m: Membership) -> dict:
    return {**store_dict(s), "userRole": m.role, "isDefault": bool(m.is_default)}


def membership_dict(m: Membership, u: User = None) -> dict:
    d = {
        "id": m.id,
        "userId": m.user_id,
        "storeId": m.store_id,
        "role": m.role,
        "isDefault": bool(m.is_default),
        "createdAt": _iso(m.created_at),
        "updatedAt": _iso(m.updated_at),
    }
    if u is not None:
        d["user"] = {"id": u.id, "username": u.username, "name": u.name, "role": u.role}
    return d


def _membership_role(db: Session, user: User, store_id: str) -> str:
    if normalize_store_id(store_id) is None:
        raise NotFound("找不到店家")
    # 明確指定了 store，不會走預設店家的分支
    return resolve_store_context(SqlMembershipRepository(db), user.id, store_id).role


@router.post("", status_code=201)
def create_store(payload: StoreIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    s, m = svc.create_store(db, user.id, payload.name, payload.description)
    return {"store": store_dict(s), "userStore": membership_dict(m)}


@router.get("")
def my_stores(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [store_with_role(s, m) for s, m in svc.list_user_stores(db, user.id)]


@router.get("/{sid}")
def get_store(sid: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    role = _membership_role(db, user, sid)
    return {**store_dict(svc.get_store(db, sid)), "userRole": role}


@router.put("/{sid}")
def update_store(sid: str, payload: StoreUpdateIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    require_role(_membership_role(db, user, sid), "admin", "只有店主或管理員可以修改店家")
    s = svc.update_store(db, sid, name=payload.name, description=payload.description, is_active=payload.is_active)
    return store_dict(s)


@router.get("/{sid}/users")
def list_users(sid: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    _membership_role(db, user, sid)
    return [membership_dict(m, u) for m, u in svc.list_members(db, sid)]


@router.post("/{sid}/users", status_code=201)
def add_user(sid: str, payload: MemberIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    require_role(_membership_role(db, user, sid), "admin", "只有店主或管理員可以新增成員")
    m = svc.add_member(db, sid, payload.user_id, payload.role)
    return membership_dict(m)


@router.delete("/{sid}/users/{uid}")
def remove_user(sid: str, uid: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    require_role(_membership_role(db, user, sid), "owner", "只有店主可以移除成員")
    svc.remove_member(db, sid, uid)
    return {"message": "已移除成員"}


@router.put("/{sid}/default")
def set_default(sid: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    _membership_role(db, user, sid)
    svc.set_default_store(db, user.id, sid)
    return {"message": "已設定預設店家"}
