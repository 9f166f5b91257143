from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import get_db
from ..deps import get_current_user, get_settings
from ..errors import Conflict, Unauthenticated, ValidationError
from ..models import User
from ..stores import default_store_id, list_user_stores
from ..utils.config import Settings
from ..utils.schemas import ChangePasswordIn, LoginIn, RegisterIn
from ..utils.security import create_token, verify_password
from .stores import store_with_role

router = APIRouter(prefix="/api/auth", tags=["auth"])

# 帳號不存在與密碼錯誤回同一句話，避免被拿來探測帳號
BAD_LOGIN = "帳號或密碼錯誤"


def user_dict(u: User) -> dict:
    return {"id": u.id, "username": u.username, "name": u.name, "role": u.role}


def _stores_payload(db: Session, user_id: str) -> dict:
    rows = list_user_stores(db, user_id)
    return {
        "stores": [store_with_role(s, m) for s, m in rows],
        "defaultStoreId": default_store_id(rows),
    }


@router.post("/login")
def login(payload: LoginIn, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    username = payload.username.strip().lower()
    if not username or not payload.password:
        raise ValidationError("請輸入帳號與密碼")
    u = db.execute(select(User).where(User.username == username)).scalars().first()
    if not u or not verify_password(payload.password, u.password):
        raise Unauthenticated(BAD_LOGIN)

    token = create_token(
        u.id,
        {"username": u.username, "name": u.name, "role": u.role},
        settings.jwt_secret,
        settings.jwt_alg,
        settings.token_days,
    )
    return {"token": token, "user": user_dict(u), **_stores_payload(db, u.id)}


@router.post("/register", status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    if db.execute(select(User.id).where(User.username == payload.username)).first():
        raise Conflict("此帳號已被使用")
    u = User(username=payload.username, password=payload.password, name=payload.name, role=payload.role or "user")
    db.add(u)
    db.commit()
    db.refresh(u)
    return {"message": "建立使用者成功", "user": user_dict(u)}


@router.get("/me")
def me(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"user": user_dict(user), **_stores_payload(db, user.id)}


@router.post("/change-password")
def change_password(payload: ChangePasswordIn, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    if not verify_password(payload.old_password, user.password):
        raise ValidationError("目前密碼不正確")
    user.password = payload.new_password
    db.commit()
    return {"ok": True}
