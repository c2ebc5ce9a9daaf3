# FILE: clinic_app/utils/resp.py
from __future__ import annotations

from typing import Any
from urllib.parse import quote
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from clinic_app.schemas.common import ApiResponse, ApiError


def ok(data: Any = None, status_code: int = 200) -> JSONResponse:
    payload = ApiResponse(status=True, data=data)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def err(msg: str, status_code: int = 400) -> JSONResponse:
    payload = ApiResponse(status=False, error=ApiError(msg=msg))
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


def attachment_headers(filename: str) -> dict:
    """Content-Disposition for a download; non-ASCII names go in filename*."""
    ascii_name = filename.encode("ascii", "ignore").decode("ascii") or "download"
    return {
        "Content-Disposition":
        f'attachment; filename="{ascii_name}"; filename*=UTF-8\'\'{quote(filename)}'
    }
