# -*- coding: utf-8 -*-
# maajod/utils/config.py
import os
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional

from ..errors import ConfigError

APP_NAME = "Maajod API"
APP_VERSION = "1.0.0"


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    database_url: str = "sqlite:///./maajod.db"
    jwt_alg: str = "HS256"
    token_days: int = 30
    summary_cache_ttl: float = 300.0
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    port: int = 3001
    log_level: str = "INFO"


def _number(get: Callable, name: str, default, cast):
    raw = get(name)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise ConfigError(f"{name} 必須是數字：{raw!r}")


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    get = (os.environ if env is None else env).get

    # 沒有預設密鑰：未設定就直接拒絕啟動
    secret = (get("JWT_SECRET") or "").strip()
    if not secret:
        raise ConfigError("JWT_SECRET 未設定，拒絕在沒有簽章密鑰的情況下啟動")

    origins = [o.strip() for o in (get("CORS_ORIGINS") or "*").split(",") if o.strip()]

    return Settings(
        jwt_secret=secret,
        database_url=get("DATABASE_URL") or "sqlite:///./maajod.db",
        jwt_alg=get("JWT_ALG") or "HS256",
        token_days=_number(get, "TOKEN_DAYS", 30, int),
        summary_cache_ttl=_number(get, "SUMMARY_CACHE_TTL", 300.0, float),
        cors_origins=origins or ["*"],
        port=_number(get, "PORT", 3001, int),
        log_level=(get("LOG_LEVEL") or "INFO").upper(),
    )
