"""
Endpoint discovery for DevTools connections.

Targets come either from the browser's /json HTTP endpoint or, behind a
Selenoid-style WebDriver hub, from a session id mapped to
ws://<host>:<port>/devtools/<session_id>/page.
"""

import json
import urllib.request
import urllib.error
from typing import List, Optional, Dict, Any

from .connection import CDPConnection
from .devtools import DevTools
from .exceptions import CDPError, CDPTargetNotFoundError


class Target:
    """
    Represents a debuggable browser target (page, worker, service worker, iframe).

    Attributes:
        id: Unique target ID
        type: Target type ("page", "iframe", "worker", "service_worker", "browser")
        title: Page title or worker name
        url: Target URL
        webSocketDebuggerUrl: CDP WebSocket URL for this target
        description: Additional metadata (optional)
        devtoolsFrontendUrl: DevTools UI URL (optional)
        faviconUrl: Page favicon URL (optional)
    """

    def __init__(self, target_data: Dict[str, Any]):
        self.id = target_data["id"]
        self.type = target_data["type"]
        self.title = target_data.get("title", "")
        self.url = target_data.get("url", "")
        self.webSocketDebuggerUrl = target_data.get("webSocketDebuggerUrl", "")
        self.description = target_data.get("description", "")
        self.devtoolsFrontendUrl = target_data.get("devtoolsFrontendUrl", "")
        self.faviconUrl = target_data.get("faviconUrl", "")

    def to_dict(self) -> Dict[str, Any]:
        """Convert target to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "url": self.url,
            "webSocketDebuggerUrl": self.webSocketDebuggerUrl,
            "description": self.description,
            "devtoolsFrontendUrl": self.devtoolsFrontendUrl,
            "faviconUrl": self.faviconUrl,
        }

    def __repr__(self):
        return f"Target(id={self.id!r}, type={self.type!r}, url={self.url!r})"


class CDPSession:
    """
    Resolves DevTools WebSocket endpoints and builds connections to them.

    Usage:
        session = CDPSession("localhost", 9222)
        targets = session.list_targets(target_type="page")
        conn = session.connect_to_target(targets[0])

        # Behind a Selenoid hub, with a WebDriver session id
        hub = CDPSession("localhost", 4444)
        devtools = hub.devtools_for_session(driver.session_id)

    Attributes:
        chrome_host: Host serving /json or the hub
        chrome_port: Debugging or hub port
        timeout: HTTP request timeout for target discovery
        command_timeout: Default command timeout for created connections (None: no deadline)
    """

    def __init__(
        self,
        chrome_host: str = "localhost",
        chrome_port: int = 9222,
        timeout: float = 5.0,
        command_timeout: Optional[float] = None,
        max_size: int = 2_097_152,
    ):
        """
        Raises:
            ValueError: If chrome_port is out of range
        """
        if not 1 <= chrome_port <= 65535:
            raise ValueError(f"chrome_port must be 1-65535, got {chrome_port}")

        self.chrome_host = chrome_host
        self.chrome_port = chrome_port
        self.timeout = timeout
        self.command_timeout = command_timeout
        self.max_size = max_size

    def session_url(self, session_id: str) -> str:
        """WebSocket URL of the page behind a WebDriver session."""
        if not session_id or "/" in session_id:
            raise ValueError(f"Invalid WebDriver session id: {session_id!r}")
        return f"ws://{self.chrome_host}:{self.chrome_port}/devtools/{session_id}/page"

    def list_targets(
        self,
        target_type: Optional[str] = None,
        url_pattern: Optional[str] = None,
    ) -> List[Target]:
        """
        Fetch targets from the /json HTTP endpoint with optional filtering.

        Args:
            target_type: Filter by target type ("page", "iframe", "worker", ...)
            url_pattern: Case-insensitive substring the target URL must contain

        Raises:
            CDPError: If HTTP endpoint is unreachable or returns invalid data
        """
        endpoint_url = f"http://{self.chrome_host}:{self.chrome_port}/json"

        try:
            with urllib.request.urlopen(endpoint_url, timeout=self.timeout) as response:
                targets_data = json.loads(response.read())
        except urllib.error.URLError as e:
            raise CDPError(
                f"Failed to connect to Chrome at {endpoint_url}: {e}",
                details={
                    "chrome_host": self.chrome_host,
                    "chrome_port": self.chrome_port,
                    "recovery": "Ensure Chrome is running with --remote-debugging-port",
                },
            ) from e
        except json.JSONDecodeError as e:
            raise CDPError(
                f"Invalid JSON response from Chrome endpoint: {e}",
                details={"endpoint": endpoint_url},
            ) from e

        if not isinstance(targets_data, list):
            raise CDPError(
                "Unexpected response from Chrome endpoint: expected a list of targets",
                details={"endpoint": endpoint_url},
            )

        targets = [Target(data) for data in targets_data]

        if target_type:
            targets = [t for t in targets if t.type == target_type]

        if url_pattern:
            url_pattern_lower = url_pattern.lower()
            targets = [t for t in targets if url_pattern_lower in t.url.lower()]

        return targets

    def get_target_by_id(self, target_id: str) -> Optional[Target]:
        for target in self.list_targets():
            if target.id == target_id:
                return target
        return None

    def connect_to_url(self, ws_url: str) -> CDPConnection:
        """CDPConnection for ws_url (not yet connected)."""
        return CDPConnection(ws_url, timeout=self.command_timeout, max_size=self.max_size)

    def connect_to_target(self, target: Target) -> CDPConnection:
        """
        Create CDPConnection for given target (not yet connected).

        Raises:
            CDPError: If the target has no WebSocket URL (already attached elsewhere)
        """
        if not target.webSocketDebuggerUrl:
            raise CDPError(
                f"Target {target.id} has no WebSocket debugger URL",
                details={"target": target.to_dict()},
            )
        return self.connect_to_url(target.webSocketDebuggerUrl)

    def connect_to_first_page(self) -> CDPConnection:
        """
        Raises:
            CDPTargetNotFoundError: If no page targets found
        """
        targets = self.list_targets(target_type="page")

        if not targets:
            raise CDPTargetNotFoundError(
                "No page targets found",
                details={
                    "chrome_host": self.chrome_host,
                    "chrome_port": self.chrome_port,
                    "recovery": "Navigate to a URL in Chrome or check --remote-debugging-port",
                },
            )

        return self.connect_to_target(targets[0])

    def connect_to_session(self, session_id: str) -> CDPConnection:
        """CDPConnection to the page of a WebDriver session (not yet connected)."""
        return self.connect_to_url(self.session_url(session_id))

    def devtools_for_session(self, session_id: str) -> DevTools:
        return DevTools(self.connect_to_session(session_id))
