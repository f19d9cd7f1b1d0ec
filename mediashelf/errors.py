# ------------------------------------------------------------
# errors.py — 앱 전용 예외 + FastAPI 예외 핸들러
#   모든 오류 응답은 {"error": ..., ("details": ...)} 형태
# ------------------------------------------------------------

import logging
from contextlib import contextmanager
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class AppError(Exception):
    """앱 전용 예외의 베이스 클래스. status_code로 HTTP 상태를 결정"""

    status_code = 400

    def __init__(self, message: str, details: Any = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    # 기존 API와의 호환을 위해 409가 아닌 400 유지
    status_code = 400


class StorageError(AppError):
    status_code = 500


@contextmanager
def storage_errors(db, message: str):
    """
    DB 작업 블록을 감싸 SQLAlchemy 예외를 StorageError로 변환.
    - 롤백 후 로그를 남기고, 원본 메시지는 details로 전달
    """
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("%s", message)
        raise StorageError(message, details=str(e)) from e


def _body(message: str, details: Any = None) -> dict:
    body = {"error": message}
    if details is not None:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=_body(exc.message, exc.details))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # 잘못된 JSON/enum 값/Content-Type 등은 422 대신 400으로 응답
        errors = jsonable_encoder(
            [{k: e.get(k) for k in ("loc", "msg", "type")} for e in exc.errors()]
        )
        return JSONResponse(status_code=400, content=_body("Invalid request body", errors))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=_body("Internal server error", str(exc)))
