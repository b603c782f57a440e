"""
Default configuration values for cdp-capture.
"""

# Environment
ENV_PREFIX = "CDP_CAPTURE_"
LEGACY_URL_ENV = "URL"

# Discovery
DEFAULT_POOL_URL = "http://localhost:19222"
DEFAULT_DISCOVERY_TIMEOUT = 10.0

# Connection
DEFAULT_MAX_MESSAGE_SIZE = 100 * 1024 * 1024  # 100MB
DEFAULT_PING_INTERVAL = 30.0
DEFAULT_PING_TIMEOUT = 10.0
DEFAULT_TIMEOUT = None  # wait forever

# Artifacts
DEFAULT_OUTPUT_DIR = "."
SCREENSHOT_FILENAME = "screenshot.png"
PDF_FILENAME = "page.pdf"
DOM_FILENAME = "dom.json"
A11Y_FILENAME = "a11y.json"

# Capture parameters
SCREENSHOT_PARAMS = {
    "format": "png",
    "captureBeyondViewport": True,
    "optimizeForSpeed": True,
}
DOM_SNAPSHOT_PARAMS = {
    "computedStyles": ["display"],
    "includeDOMRects": True,
}
CAPTURE_DOMAINS = ["Accessibility", "DOMSnapshot", "Page"]
