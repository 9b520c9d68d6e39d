"""Shared test fixtures for the qencode_client test suite.

WHY: The client tests need a way to run QencodeClient against a stub
server without touching the network.

HOW: The ``call`` fixture returns a StubCall (see stubs.py) that runs
one client operation against a stub handler and records the requests.
"""

import pytest

from stubs import StubCall


@pytest.fixture
def call():
    """Helper that runs one client operation against a stub handler."""
    return StubCall()
