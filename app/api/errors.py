# app/api/errors.py
from fastapi import HTTPException

from app.domain.errors import OrderingError


def to_http_exception(error: OrderingError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.to_detail())
