"""Async HTTP client for the Qencode transcoding API.

WHY: Starting an encode means exchanging an API key for an access token,
creating a task, and starting it with an encoding query. Each step is a
form-encoded POST with its own response shape. This module hides the HTTP
details behind a single client class so callers deal in typed objects.

HOW: QencodeClient wraps an httpx.AsyncClient (caller-supplied or a
default one it owns). Every operation goes through _post(), which builds
the form request against base_url + path, maps non-2xx statuses to
RequestError, and decodes the JSON body. Model parsing failures become
DecodeError; httpx failures become TransportError.

RULES:
- One request per call: no retries, no backoff, no token caching
- Status > 299 raises RequestError with the raw body, never parsed
- A payload "error" code on a 2xx response is returned, not raised
- start_task serializes the query before any network call
- Timeouts and cancellation come from httpx / asyncio, not this module
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

import httpx

from qencode_client.api.models import (
    AccessToken,
    CreateTaskResponse,
    StartTaskResponse,
)
from qencode_client.api.query import StartTaskQuery
from qencode_client.config import QENCODE_BASE_URL

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_ACCESS_TOKEN_PATH = "/v1/access_token"
_CREATE_TASK_PATH = "/v1/create_task"
_START_TASK_PATH = "/v1/start_encode2"

_FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}

_T = TypeVar("_T")


class QencodeError(Exception):
    """Base class for every error raised by QencodeClient."""


class RequestError(QencodeError):
    """Raised when Qencode answers with an HTTP status above 299.

    WHY: Qencode puts diagnostic detail in error bodies whose shape is
    not documented. Callers get the status and the untouched body so
    they can inspect it themselves.

    RULES:
    - message is the fixed per-operation description
    - response_body is the raw body bytes, verbatim
    - str() renders "[<status> <reason>]: <message>"
    """

    def __init__(self, message: str, status_code: int, response_body: bytes = b"") -> None:
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(
            "[{} {}]: {}".format(
                status_code, httpx.codes.get_reason_phrase(status_code), message
            )
        )

    @property
    def text(self) -> str:
        """The response body decoded as UTF-8 (invalid bytes replaced)."""
        return self.response_body.decode("utf-8", errors="replace")


class TransportError(QencodeError):
    """Raised when the request could not be built or sent.

    Covers malformed URLs, DNS failures, refused connections and
    timeouts. The underlying httpx exception is chained as __cause__.
    """


class DecodeError(QencodeError, ValueError):
    """Raised when a 2xx response body cannot be decoded.

    Either the body is not JSON, or a field has the wrong type, or the
    token ``expire`` timestamp does not match YYYY-MM-DDThh:mm:ss.
    """


class QuerySerializationError(QencodeError, TypeError):
    """Raised when the encoding query cannot be serialized to JSON.

    Raised by start_task before any request is sent.
    """


class QencodeClient:
    """Async client for the Qencode task API.

    WHY: Gives callers one object per API host with a typed method per
    endpoint, and keeps form encoding, status checks and JSON decoding
    out of their code.

    HOW: Holds a base URL and an httpx.AsyncClient. When no client is
    passed in, a default httpx.AsyncClient is created and owned; aclose()
    (or leaving ``async with``) closes only an owned client.

    RULES:
    - base_url defaults to QENCODE_BASE_URL from config
    - Holds no per-call state; one instance may serve concurrent tasks
    - Tokens are never stored; every call takes the token it needs
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        base_url: str | None = None,
    ) -> None:
        self._base_url = QENCODE_BASE_URL if base_url is None else base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client if http_client is not None else httpx.AsyncClient()

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> QencodeClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Step 1: Access token
    # ------------------------------------------------------------------

    async def get_token(self, api_key: str) -> AccessToken:
        """Exchange an API key for a time-limited access token.

        HOW: POSTs ``api_key`` to /v1/access_token and decodes
        ``{token, expire}``, parsing ``expire`` strictly.

        RULES:
        - Raises RequestError("error getting token") on status > 299
        - Raises DecodeError on malformed JSON or expire timestamp
        - Raises TransportError on network/URL failures

        Args:
            api_key: The project API key.

        Returns:
            AccessToken with the token string and its expiry.
        """
        data = await self._post(
            _ACCESS_TOKEN_PATH,
            {"api_key": api_key},
            "error getting token",
        )
        return _decode(AccessToken.from_dict, data)

    # ------------------------------------------------------------------
    # Step 2: Create task
    # ------------------------------------------------------------------

    async def create_task(self, token: str) -> CreateTaskResponse:
        """Create an encoding task and return its task token and upload URL.

        RULES:
        - A non-zero ``error`` in the response is returned, not raised
        - Raises RequestError("error creating task") on status > 299
        - Raises DecodeError / TransportError as get_token does

        Args:
            token: An access token from get_token().
        """
        data = await self._post(
            _CREATE_TASK_PATH,
            {"token": token},
            "error creating task",
        )
        return _decode(CreateTaskResponse.from_dict, data)

    # ------------------------------------------------------------------
    # Step 3: Start task
    # ------------------------------------------------------------------

    async def start_task(
        self,
        task_token: str,
        payload: str,
        query: StartTaskQuery | Mapping[str, Any],
    ) -> StartTaskResponse:
        """Start an encoding task with the given query.

        WHY: The task only begins encoding once Qencode receives the
        query describing source, outputs and destinations.

        HOW: Serializes the query to compact JSON and sends it as the
        ``query`` form field next to ``task_token`` and ``payload``.

        RULES:
        - payload is opaque: Qencode echoes it back on the callback
        - Raises QuerySerializationError before sending if the query
          cannot be serialized
        - A non-zero ``error`` in the response is returned, not raised
        - Raises RequestError("error starting task") on status > 299

        Args:
            task_token: The task token from create_task().
            payload: Arbitrary string (typically JSON) for the callback.
            query: A StartTaskQuery, or a mapping already in wire shape.

        Returns:
            StartTaskResponse with the status URL.
        """
        serialized = serialize_query(query)
        data = await self._post(
            _START_TASK_PATH,
            {"task_token": task_token, "payload": payload, "query": serialized},
            "error starting task",
        )
        return _decode(StartTaskResponse.from_dict, data)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def _post(self, path: str, form: dict[str, str], error_message: str) -> Any:
        """POST a form to base_url + path and return the decoded JSON body."""
        url = self._base_url + path
        try:
            resp = await self._client.post(url, data=form, headers=_FORM_HEADERS)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError("POST {} failed: {}".format(url, exc)) from exc

        logger.debug("POST %s -> %d", url, resp.status_code)

        if resp.status_code > 299:
            raise RequestError(error_message, resp.status_code, resp.content)

        try:
            return resp.json()
        except (ValueError, RecursionError) as exc:
            raise DecodeError("invalid JSON response from {}: {}".format(url, exc)) from exc


def serialize_query(query: StartTaskQuery | Mapping[str, Any]) -> str:
    """Serialize an encoding query to the JSON string sent to Qencode.

    Raises:
        QuerySerializationError: the query holds values JSON cannot encode.
    """
    try:
        if isinstance(query, StartTaskQuery):
            return query.to_json()
        return json.dumps(dict(query), separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError, RecursionError) as exc:
        raise QuerySerializationError("cannot serialize query: {}".format(exc)) from exc


def _decode(parse: Callable[[Any], _T], data: Any) -> _T:
    try:
        return parse(data)
    except (TypeError, ValueError) as exc:
        raise DecodeError("unexpected response: {}".format(exc)) from exc
