# -*- coding: utf-8 -*-
from datetime import datetime, timedelta, timezone
from typing import Dict

import jwt
from passlib.context import CryptContext

from ..errors import Unauthenticated

pwd = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


def is_hashed(value: str) -> bool:
    return bool(value) and pwd.identify(value, required=False) is not None


def hash_password(plain: str) -> str:
    if is_hashed(plain):
        return plain
    return pwd.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd.verify(plain, hashed)
    except Exception:
        return False


def create_token(sub: str, claims: Dict, secret: str, alg: str = "HS256", days: int = 30) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": sub,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=days)).timestamp()),
        **claims
    }
    return jwt.encode(payload, secret, algorithm=alg)


def decode_token(token: str, secret: str, alg: str = "HS256") -> dict:
    try:
        payload = jwt.decode(token, secret, algorithms=[alg])
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Token 已過期")
    except jwt.InvalidTokenError:
        raise Unauthenticated("Token 無效")
    if not payload.get("sub"):
        raise Unauthenticated("Token 無效")
    return payload
