# FILE: pharmaledger/api/response.py
from __future__ import annotations

from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from pharmaledger.schemas.common import ApiError, ApiResponse


def _envelope(status_code: int, data: Any = None, msg: Optional[str] = None) -> JSONResponse:
    body = ApiResponse(
        status=msg is None,
        data=data,
        error=ApiError(msg=msg) if msg is not None else None,
    )
    # Decimal -> str, date -> ISO
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


def ok(data: Any = None, status_code: int = 200) -> JSONResponse:
    return _envelope(status_code, data=data)


def created(data: Any = None) -> JSONResponse:
    return _envelope(201, data=data)


def err(msg: str, status_code: int = 400) -> JSONResponse:
    return _envelope(status_code, msg=msg or "Request failed")
