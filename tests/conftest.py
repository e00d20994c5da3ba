"""Shared fixtures built on the in-memory StubTransport."""

import pytest

from cdp_devtools.connection import CDPConnection

from stubs import WS_URL, StubTransport, reply_with


@pytest.fixture
def transport():
    return StubTransport()


@pytest.fixture
def responding_transport():
    return StubTransport(responder=reply_with())


@pytest.fixture
def connection(transport):
    return CDPConnection(WS_URL, transport=transport)


@pytest.fixture
def responding_connection(responding_transport):
    return CDPConnection(WS_URL, transport=responding_transport)
