# maajod/main.py
from __future__ import annotations
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .cache import SummaryCache
from .db import ensure_tables, make_engine, make_session_factory
from .errors import install_handlers
from .routers.auth import router as auth_router
from .routers.stores import router as stores_router
from .routers.summary import router as summary_router
from .routers.transactions import router as transactions_router
from .utils.config import APP_NAME, APP_VERSION, Settings, load_settings

log = logging.getLogger("maajod.main")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    # 沒帶 settings 就從環境變數讀；JWT_SECRET 缺少會在這裡直接失敗
    settings = settings or load_settings()
    logging.basicConfig(level=settings.log_level, format="[maajod] %(levelname)s %(name)s: %(message)s")

    app = FastAPI(title=APP_NAME, version=APP_VERSION)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["Content-Type", "Authorization", "x-store-id"],
        expose_headers=["x-store-id"],
    )

    engine = make_engine(settings.database_url)
    ensure_tables(engine)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.summary_cache = SummaryCache(settings.summary_cache_ttl)

    install_handlers(app)

    # ===== API 路由 =====
    app.include_router(auth_router)
    app.include_router(stores_router)
    app.include_router(transactions_router)
    app.include_router(summary_router)

    @app.get("/health")
    def health():
        return {"status": "ok", "message": f"{APP_NAME} is running"}

    log.info("%s %s ready (db=%s)", APP_NAME, APP_VERSION, engine.url.render_as_string(hide_password=True))
    return app


def run() -> None:
    import uvicorn

    settings = load_settings()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
