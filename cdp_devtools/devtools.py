"""DevTools client: one connection plus its typed domain facades.

Usage:
    async with DevTools.connect("ws://localhost:4444/devtools/<session>/page") as devtools:
        await devtools.page.navigate_and_wait("https://example.com")
        encoded = await devtools.page.capture_screenshot()
"""

from typing import Dict, Optional, Type, TypeVar

from .connection import CDPConnection
from .domains import CSS, DOM, Domain, Emulation, Fetch, Network, Overlay, Page, Runtime

D = TypeVar("D", bound=Domain)


class DevTools:
    """Entry point bundling a CDPConnection with lazily created domain facades.

    Each facade is created on first access and reused for the lifetime of the
    client, so listeners registered through ``devtools.page`` all live on the
    same Page instance.

    Attributes:
        connection: Underlying CDPConnection
    """

    DOMAINS: Dict[str, Type[Domain]] = {
        "Page": Page,
        "Network": Network,
        "Fetch": Fetch,
        "Runtime": Runtime,
        "DOM": DOM,
        "CSS": CSS,
        "Emulation": Emulation,
        "Overlay": Overlay,
    }

    def __init__(self, connection: CDPConnection):
        self.connection = connection
        self._domains: Dict[str, Domain] = {}

    @classmethod
    def connect(
        cls,
        ws_url: str,
        *,
        timeout: Optional[float] = None,
        max_size: int = 2_097_152,
    ) -> "DevTools":
        """Build a client for ws_url; open it with ``async with`` or ``await open()``."""
        return cls(CDPConnection(ws_url, timeout=timeout, max_size=max_size))

    async def open(self) -> "DevTools":
        if not self.connection.is_connected:
            await self.connection.connect()
        return self

    async def close(self) -> None:
        await self.connection.disconnect()

    @property
    def is_closed(self) -> bool:
        return not self.connection.is_connected

    async def __aenter__(self) -> "DevTools":
        return await self.open()

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def domain(self, name: str) -> Domain:
        """Return the facade for a domain name from DOMAINS.

        Raises:
            KeyError: If name is not a known domain
        """
        facade = self._domains.get(name)
        if facade is None:
            try:
                domain_cls = self.DOMAINS[name]
            except KeyError:
                raise KeyError(
                    f"Unknown CDP domain {name!r}; known: {', '.join(sorted(self.DOMAINS))}"
                ) from None
            facade = domain_cls(self.connection)
            self._domains[name] = facade
        return facade

    def _typed(self, domain_cls: Type[D]) -> D:
        facade = self.domain(domain_cls.name)
        assert isinstance(facade, domain_cls)
        return facade

    @property
    def page(self) -> Page:
        return self._typed(Page)

    @property
    def network(self) -> Network:
        return self._typed(Network)

    @property
    def fetch(self) -> Fetch:
        return self._typed(Fetch)

    @property
    def runtime(self) -> Runtime:
        return self._typed(Runtime)

    @property
    def dom(self) -> DOM:
        return self._typed(DOM)

    @property
    def css(self) -> CSS:
        return self._typed(CSS)

    @property
    def emulation(self) -> Emulation:
        return self._typed(Emulation)

    @property
    def overlay(self) -> Overlay:
        return self._typed(Overlay)
