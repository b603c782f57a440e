"""
Browser discovery through a browser pool manager.

The pool manager lists browser instances over HTTP; each instance exposes
the usual ``/json`` target list whose entries carry a WebSocket debugger URL.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

import httpx

from cdp_capture.config.defaults import DEFAULT_DISCOVERY_TIMEOUT, DEFAULT_POOL_URL

logger = logging.getLogger(__name__)

_DEVTOOLS_PATH = re.compile(r"/devtools/.*")


class DiscoveryError(Exception):
    """The protocol endpoint could not be discovered."""


class NoBrowsersError(DiscoveryError):
    """The pool manager reported no browsers."""


def browser_ws_url(ws_debugger_url: str) -> str:
    """Strip the ``/devtools/...`` path from a debugger URL.

    Args:
        ws_debugger_url: Target WebSocket debugger URL.

    Returns:
        Base URL of the browser's protocol endpoint.
    """
    return _DEVTOOLS_PATH.sub("", ws_debugger_url, count=1)


async def discover_ws_url(
    pool_url: str = DEFAULT_POOL_URL,
    *,
    launch_settings: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """Ask the pool manager for a browser and return its protocol URL.

    Args:
        pool_url: Pool manager URL.
        launch_settings: Token asking the pool for a fresh browser instance.
        client: HTTP client to use. A short-lived one is created if omitted.

    Returns:
        Browser-level WebSocket URL.

    Raises:
        NoBrowsersError: If the pool lists no browsers.
        DiscoveryError: If any HTTP request fails or returns bad data.
    """
    if client is None:
        async with httpx.AsyncClient(timeout=DEFAULT_DISCOVERY_TIMEOUT) as owned:
            return await _discover(owned, pool_url, launch_settings)
    return await _discover(client, pool_url, launch_settings)


async def _discover(
    client: httpx.AsyncClient,
    pool_url: str,
    launch_settings: Optional[str],
) -> str:
    params = {"launch": launch_settings} if launch_settings else None
    try:
        response = await client.get(pool_url, params=params)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise DiscoveryError(f"Unexpected pool response from {pool_url}")
        browsers = data.get("browsers", [])
        if not browsers:
            raise NoBrowsersError(f"No browsers found at {pool_url}")

        response = await client.get(browsers[0])
        response.raise_for_status()
        targets = response.json()
    except httpx.HTTPError as e:
        raise DiscoveryError(f"Browser discovery failed: {e}") from e
    except ValueError as e:
        raise DiscoveryError(f"Invalid discovery response: {e}") from e

    if not isinstance(targets, list) or not targets or "webSocketDebuggerUrl" not in targets[0]:
        raise DiscoveryError(f"No debuggable targets at {browsers[0]}")

    target = targets[0]
    ws_url = browser_ws_url(target["webSocketDebuggerUrl"])
    logger.info(f"Debug @ {target.get('devtoolsFrontendUrl')}")
    logger.info(f"WS @ {ws_url}")
    return ws_url
