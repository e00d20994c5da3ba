"""Unit tests for the DevTools client and its facade registry."""

import pytest

from cdp_devtools.connection import CDPConnection
from cdp_devtools.devtools import DevTools
from cdp_devtools.domains import CSS, DOM, Emulation, Fetch, Network, Overlay, Page, Runtime

from stubs import WS_URL, StubTransport


@pytest.fixture
def devtools():
    return DevTools(CDPConnection(WS_URL, transport=StubTransport()))


@pytest.mark.unit
class TestFacades:
    @pytest.mark.parametrize(
        "attribute,domain_cls",
        [
            ("page", Page),
            ("network", Network),
            ("fetch", Fetch),
            ("runtime", Runtime),
            ("dom", DOM),
            ("css", CSS),
            ("emulation", Emulation),
            ("overlay", Overlay),
        ],
    )
    def test_typed_properties(self, devtools, attribute, domain_cls):
        facade = getattr(devtools, attribute)
        assert isinstance(facade, domain_cls)
        assert facade.connection is devtools.connection

    def test_facades_are_cached(self, devtools):
        assert devtools.page is devtools.page
        assert devtools.domain("Page") is devtools.page

    def test_unknown_domain(self, devtools):
        with pytest.raises(KeyError, match="Unknown CDP domain 'Tracing'"):
            devtools.domain("Tracing")

    def test_connect_builds_unopened_client(self):
        client = DevTools.connect(WS_URL, timeout=5.0)
        assert client.is_closed
        assert client.connection.timeout == 5.0
        assert client.connection.ws_url == WS_URL


@pytest.mark.unit
@pytest.mark.asyncio
async def test_context_manager_opens_and_closes(devtools):
    async with devtools as client:
        assert client is devtools
        assert not client.is_closed
    assert devtools.is_closed
