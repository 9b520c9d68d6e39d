"""Qencode API response dataclasses.

WHY: Each Qencode endpoint answers with a small flat JSON object. Typed,
immutable dataclasses make the fields explicit and keep callers from
mutating handles that are passed between steps.

HOW: Each dataclass maps 1:1 to an endpoint response. from_dict factory
methods parse the decoded JSON object. The access token's ``expire``
field uses Qencode's own timestamp layout, so it goes through
parse_expire() instead of any auto-detecting date parser.

RULES:
- Absent or null fields decode to their zero value ("" or 0)
- ``expire`` is required: an empty or malformed timestamp is an error
- Wrong JSON types raise TypeError; bad timestamps raise ValueError
- The ``error`` field is kept as-is; a non-zero value is not raised here
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from qencode_client.config import EXPIRE_FORMAT

_EXPIRE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}:[0-9]{2}:[0-9]{2}")


def parse_expire(value: str) -> datetime:
    """Parse a Qencode expiry timestamp such as ``2021-09-19T01:35:57``.

    strptime alone accepts single-digit fields and surrounding variations,
    so the exact layout is matched first. The result is a naive datetime.

    Raises:
        ValueError: if ``value`` deviates from ``YYYY-MM-DDThh:mm:ss`` or
            names an impossible date.
    """
    if not isinstance(value, str) or not _EXPIRE_RE.fullmatch(value):
        raise ValueError(
            "expire {!r} does not match format YYYY-MM-DDThh:mm:ss".format(value)
        )
    return datetime.strptime(value, EXPIRE_FORMAT)


def _str_field(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError("field {!r} must be a string, got {}".format(key, type(value).__name__))
    return value


def _int_field(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    # bool is an int subclass but never a valid error code
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError("field {!r} must be an integer, got {}".format(key, type(value).__name__))
    return value


def _require_object(data: Any) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise TypeError("response must be a JSON object, got {}".format(type(data).__name__))
    return data


@dataclass(frozen=True)
class AccessToken:
    """Response of POST /v1/access_token.

    WHY: Task creation needs a short-lived access token rather than the
    API key. Callers track ``expire`` themselves and fetch a new token
    when it lapses; the client never caches one.

    RULES:
    - token: opaque credential string
    - expire: naive datetime parsed with EXPIRE_FORMAT
    """

    token: str
    expire: datetime

    @classmethod
    def from_dict(cls, data: dict) -> AccessToken:
        data = _require_object(data)
        return cls(
            token=_str_field(data, "token"),
            expire=parse_expire(_str_field(data, "expire")),
        )

    def to_dict(self) -> dict[str, str]:
        """Render back to the wire shape, ``expire`` in EXPIRE_FORMAT."""
        return {"token": self.token, "expire": self.expire.strftime(EXPIRE_FORMAT)}


@dataclass(frozen=True)
class CreateTaskResponse:
    """Response of POST /v1/create_task.

    RULES:
    - error: application error code, 0 on success (caller must check)
    - upload_url: where media may be uploaded before starting the task
    - task_token: identifies the task in start_task
    """

    error: int
    upload_url: str
    task_token: str

    @classmethod
    def from_dict(cls, data: dict) -> CreateTaskResponse:
        data = _require_object(data)
        return cls(
            error=_int_field(data, "error"),
            upload_url=_str_field(data, "upload_url"),
            task_token=_str_field(data, "task_token"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.error,
            "upload_url": self.upload_url,
            "task_token": self.task_token,
        }


@dataclass(frozen=True)
class StartTaskResponse:
    """Response of POST /v1/start_encode2.

    RULES:
    - error: application error code, 0 on success (caller must check)
    - status_url: endpoint for polling encoding progress
    """

    error: int
    status_url: str

    @classmethod
    def from_dict(cls, data: dict) -> StartTaskResponse:
        data = _require_object(data)
        return cls(
            error=_int_field(data, "error"),
            status_url=_str_field(data, "status_url"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.error, "status_url": self.status_url}
