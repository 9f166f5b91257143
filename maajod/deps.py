# maajod/deps.py
from typing import Optional

from fastapi import Depends, Header, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .access import StoreContext, normalize_store_id, resolve_store_context
from .adapters.sql import SqlMembershipRepository, SqlTransactionRepository
from .db import get_db
from .errors import Unauthenticated
from .ledger import Ledger
from .models import User
from .utils.config import Settings
from .utils.security import decode_token

bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
) -> User:
    if not creds or not creds.credentials:
        raise Unauthenticated("缺少憑證")
    payload = decode_token(creds.credentials, settings.jwt_secret, settings.jwt_alg)
    user = db.get(User, payload["sub"])
    if not user:
        raise Unauthenticated("Token 無效")
    return user


def get_store_context(
    x_store_id: Optional[str] = Header(default=None),
    store_id: Optional[str] = Query(default=None, alias="storeId"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StoreContext:
    # header 優先，其次 query；空白、"undefined"、"null" 都當作沒給
    requested = normalize_store_id(x_store_id) or store_id
    return resolve_store_context(SqlMembershipRepository(db), user.id, requested)


def get_ledger(request: Request, db: Session = Depends(get_db)) -> Ledger:
    return Ledger(SqlTransactionRepository(db), cache=request.app.state.summary_cache)
