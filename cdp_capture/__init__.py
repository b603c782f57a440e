"""
cdp-capture: dump a browser page over the Chrome DevTools Protocol.

Basic usage:
    from cdp_capture import CDPClient, run_capture, choose_page

    async with CDPClient(ws_url) as client:
        page = choose_page(await client.list_pages())
        result = await run_capture(client, page, "https://example.com", ".")
"""

__version__ = "0.1.0"
__license__ = "MIT"

from cdp_capture.cdp import (
    BaseTransport,
    CDPClient,
    CDPClientError,
    CDPConnectionError,
    CDPError,
    TargetInfo,
    TransportError,
    WebSocketTransport,
)

from cdp_capture.capture import (
    CaptureResult,
    NoPagesError,
    StageTimer,
    choose_page,
    run_capture,
    write_artifacts,
)

from cdp_capture.config import ClientOptions, ConfigurationError

from cdp_capture.discovery import (
    DiscoveryError,
    NoBrowsersError,
    discover_ws_url,
)

__all__ = [
    "__version__",
    # Client
    "BaseTransport",
    "CDPClient",
    "CDPClientError",
    "CDPConnectionError",
    "CDPError",
    "TargetInfo",
    "TransportError",
    "WebSocketTransport",
    # Capture
    "CaptureResult",
    "NoPagesError",
    "StageTimer",
    "choose_page",
    "run_capture",
    "write_artifacts",
    # Config
    "ClientOptions",
    "ConfigurationError",
    # Discovery
    "DiscoveryError",
    "NoBrowsersError",
    "discover_ws_url",
]
