"""`{status, data, message}` response envelope as a tagged union."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from ..errors import ApiError


@dataclass(frozen=True)
class Ok:
    data: Any
    message: Optional[str] = None


@dataclass(frozen=True)
class Err:
    message: str
    code: Optional[str] = None


Result = Union[Ok, Err]


def _message_of(payload: Any) -> Optional[str]:
    if isinstance(payload, dict):
        message = payload.get('message') or payload.get('error')
        if isinstance(message, str) and message.strip():
            return message
    return None


def parse_envelope(payload: Any, fallback_message: str) -> Result:
    """Validate a decoded response body.

    Anything other than ``{"status": "success", ...}`` becomes an Err carrying
    the server's message, or ``fallback_message`` when there is none.
    """
    if not isinstance(payload, dict):
        return Err(fallback_message)

    if payload.get('status') != 'success':
        code = payload.get('code')
        return Err(_message_of(payload) or fallback_message, str(code) if code is not None else None)

    return Ok(payload.get('data'), payload.get('message'))


def unwrap(result: Result) -> Any:
    if isinstance(result, Ok):
        return result.data
    raise ApiError(result.message, code=result.code)
