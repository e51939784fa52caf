from typing import Any, Generic, TypeVar

from fastapi import status
from pydantic import BaseModel
from fastapi.responses import JSONResponse, Response

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    success: bool
    message: str = ""
    data: T | None = None
    status_code: int = status.HTTP_200_OK


def send_success(
    message: str = "Success", data: Any = None, status_code: int = status.HTTP_200_OK
) -> APIResponse:
    return APIResponse(
        success=True, message=message, data=data, status_code=status_code
    )


def send_error(
    message: str = "Error",
    data: Any = None,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> APIResponse:
    return APIResponse(
        success=False, message=message, data=data, status_code=status_code
    )


def error_response(
    message: str, status_code: int = status.HTTP_400_BAD_REQUEST, data: Any = None
) -> JSONResponse:
    return JSONResponse(
        content=send_error(message=message, data=data, status_code=status_code).model_dump(),
        status_code=status_code,
    )


def json_bytes_response(body: bytes) -> Response:
    """Send an already-serialized JSON body as-is."""
    return Response(content=body, media_type="application/json")
