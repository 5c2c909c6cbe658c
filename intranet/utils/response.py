from typing import Any

from fastapi import status


def success_response(
    data: Any = None,
    message: str = "success",
    code: int = status.HTTP_200_OK,
) -> dict:
    """Wrap a payload in the standard success envelope"""
    return {
        "code": code,
        "status": "success",
        "message": message,
        "data": data,
    }
