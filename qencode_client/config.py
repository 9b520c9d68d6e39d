"""Configuration defaults and .env loading.

WHY: The API endpoint and credentials differ between environments
(production, staging proxies, local stubs). Keeping them in one module
makes them easy to find and override without touching client code.

HOW: python-dotenv loads the .env file on import. Defaults are plain
module-level constants read from the environment. load_api_key() gives
a clear error when the key is missing.

RULES:
- API key is loaded from .env / environment, never hardcoded
- QENCODE_BASE_URL has no trailing slash; paths are appended verbatim
- EXPIRE_FORMAT is the only accepted token expiry format
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the working directory
load_dotenv()

# ---------------------------------------------------------------------------
# API configuration defaults
# ---------------------------------------------------------------------------

QENCODE_BASE_URL = os.getenv("QENCODE_BASE_URL", "https://api.qencode.com").rstrip("/")

EXPIRE_FORMAT = "%Y-%m-%dT%H:%M:%S"
"""Format of the access token ``expire`` field (no offset, no fractions)."""


def load_api_key() -> str:
    """Load the Qencode API key from the environment.

    WHY: The API key is only needed to obtain an access token, but it is
    a long-lived secret. Reading it from the environment keeps it out of
    shell history and source code.

    HOW: Reads QENCODE_API_KEY from os.environ (populated by python-dotenv).

    RULES:
    - Raises ValueError if the key is missing or blank
    - Never returns a default/placeholder value
    """
    key = os.getenv("QENCODE_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "Qencode API key not configured. "
            "Set QENCODE_API_KEY in the environment or the .env file."
        )
    return key
