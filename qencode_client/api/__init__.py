"""Qencode API package: async HTTP interface to the Qencode task API.

WHY: Callers need to obtain access tokens, create tasks, and start them
with an encoding query. This package keeps all Qencode communication
behind one client class.

HOW: QencodeClient (client.py) issues the form-encoded requests.
Responses are parsed into frozen dataclasses (models.py); the encoding
query is built from the dataclasses in query.py.

RULES:
- All HTTP calls go through QencodeClient (no direct httpx usage elsewhere)
- Every error the client raises is a QencodeError subclass
"""

from qencode_client.api.client import (
    DecodeError,
    QencodeClient,
    QencodeError,
    QuerySerializationError,
    RequestError,
    TransportError,
    serialize_query,
)
from qencode_client.api.models import AccessToken, CreateTaskResponse, StartTaskResponse
from qencode_client.api.query import (
    OPTIMIZE_BITRATE_DISABLED,
    OPTIMIZE_BITRATE_ENABLED,
    OUTPUT_HLS,
    SEPARATE_AUDIO_DISABLED,
    SEPARATE_AUDIO_ENABLED,
    Destination,
    Format,
    Query,
    StartTaskQuery,
    Stream,
)

__all__ = [
    "AccessToken",
    "CreateTaskResponse",
    "DecodeError",
    "Destination",
    "Format",
    "OPTIMIZE_BITRATE_DISABLED",
    "OPTIMIZE_BITRATE_ENABLED",
    "OUTPUT_HLS",
    "QencodeClient",
    "QencodeError",
    "Query",
    "QuerySerializationError",
    "RequestError",
    "SEPARATE_AUDIO_DISABLED",
    "SEPARATE_AUDIO_ENABLED",
    "StartTaskQuery",
    "StartTaskResponse",
    "Stream",
    "TransportError",
    "serialize_query",
]
