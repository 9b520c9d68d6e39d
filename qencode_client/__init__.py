"""Qencode Client: async client for the Qencode video-encoding API.

WHY: Starting a Qencode encode takes three authenticated form posts
(access token, create task, start task) whose responses carry their own
quirks: a non-standard timestamp and payload-embedded error codes. This
package maps those requests and responses to typed Python objects.

HOW: A single QencodeClient wraps an httpx.AsyncClient. Responses are
decoded into frozen dataclasses; the encoding query is built from plain
dataclasses and serialized to JSON inside the form body.

RULES:
- The client never caches tokens; callers pass them to every call
- Payload "error" codes are returned, not raised
- Polling, uploads, and webhooks are left to the caller
"""

__version__ = "0.1.0"
