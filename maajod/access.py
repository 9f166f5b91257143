# -*- coding: utf-8 -*-
"""
店家存取判斷（store-scoped access control）

- resolve_store_context(...)：決定這次請求要用哪一家店，並確認使用者是該店成員。
  順序：明確指定的 storeId → 使用者的預設店家 → 最早加入的店家。
- require_role(role, minimum)：店內角色檢查，owner > admin > member。
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .errors import Forbidden, StoreRequired, Unauthenticated
from .repository import MembershipRepository

log = logging.getLogger("maajod.access")

ROLE_RANK = {"member": 1, "admin": 2, "owner": 3}

_ABSENT = ("", "undefined", "null")


@dataclass(frozen=True)
class StoreContext:
    store_id: str
    role: str


def normalize_store_id(raw: Optional[str]) -> Optional[str]:
    # 前端常把 undefined/null 直接塞進 header
    if raw is None:
        return None
    raw = raw.strip()
    return None if raw in _ABSENT else raw


def resolve_store_context(
    memberships: MembershipRepository,
    user_id: Optional[str],
    requested_store_id: Optional[str] = None,
) -> StoreContext:
    if not user_id:
        raise Unauthenticated()

    store_id = normalize_store_id(requested_store_id)
    if store_id is None:
        default = memberships.find_default(user_id)
        if default is not None:
            store_id = default.store_id
            log.info("using default store %s for user %s", store_id, user_id)
        else:
            first = memberships.find_first(user_id)
            if first is None:
                raise StoreRequired()
            store_id = first.store_id
            log.info("using first store %s for user %s", store_id, user_id)

    membership = memberships.find(user_id, store_id)
    if membership is None:
        log.warning("access denied: user %s -> store %s", user_id, store_id)
        raise Forbidden()
    return StoreContext(store_id=store_id, role=membership.role)


def has_role(role: Optional[str], minimum: str) -> bool:
    return ROLE_RANK.get(role or "", 0) >= ROLE_RANK[minimum]


def require_role(role: Optional[str], minimum: str, detail: str = None) -> None:
    if not has_role(role, minimum):
        raise Forbidden(detail or "此操作需要店家 %s 以上的權限" % minimum)
