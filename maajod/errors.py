# -*- coding: utf-8 -*-
# maajod/errors.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

log = logging.getLogger("maajod.errors")


class ConfigError(RuntimeError):
    """啟動設定錯誤；只在啟動時拋出，不會回應給客戶端。"""


class AppError(Exception):
    status_code = 500
    default_detail = "伺服器錯誤"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(AppError):
    status_code = 400
    default_detail = "輸入資料不正確"


class InvalidInput(ValidationError):
    default_detail = "參數不正確"


class StoreRequired(ValidationError):
    default_detail = "請指定店家（x-store-id 標頭或 storeId 參數），或先設定預設店家"


class Conflict(ValidationError):
    default_detail = "資料已存在"


class Unauthenticated(AppError):
    status_code = 401
    default_detail = "未登入"


class Forbidden(AppError):
    status_code = 403
    default_detail = "沒有權限存取此店家"


class NotFound(AppError):
    status_code = 404
    default_detail = "找不到資料"


class InternalError(AppError):
    status_code = 500


def _app_error(request: Request, exc: AppError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg", "")}
        for e in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"detail": ValidationError.default_detail, "errors": errors})


def _unhandled(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": InternalError.default_detail})


def install_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(Exception, _unhandled)
