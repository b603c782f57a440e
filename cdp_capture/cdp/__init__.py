"""
Chrome DevTools Protocol (CDP) client.

- CDPClient: request/response and event correlation over one connection
- WebSocketTransport: the default transport
- CDPError / CDPConnectionError: error taxonomy

Example usage:
    ```python
    from cdp_capture.cdp import CDPClient

    async with CDPClient(ws_url) as client:
        pages = await client.list_pages()
        session_id = await client.attach_to_target(pages[0].target_id)
        await client.call("Page.enable", {}, session_id)
        loaded = client.expect("Page.loadEventFired", session_id)
        await client.call("Page.navigate", {"url": "https://example.com"}, session_id)
        await loaded
    ```
"""

from cdp_capture.cdp.connection import (
    CDPClient,
    CDPClientError,
    CDPConnectionError,
    CDPError,
)
from cdp_capture.cdp.transport import (
    BaseTransport,
    TransportError,
    WebSocketTransport,
)
from cdp_capture.cdp.types import (
    A11yTree,
    Frame,
    FrameTree,
    TargetInfo,
)

__all__ = [
    # Client
    "CDPClient",
    "CDPClientError",
    "CDPConnectionError",
    "CDPError",
    # Transport
    "BaseTransport",
    "TransportError",
    "WebSocketTransport",
    # Types
    "A11yTree",
    "Frame",
    "FrameTree",
    "TargetInfo",
]
