"""
CDP protocol client.

Multiplexes requests and one-shot event expectations over a single
transport connection and routes every inbound message to its waiter.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Optional

from cdp_capture.cdp.transport import BaseTransport, TransportError, WebSocketTransport
from cdp_capture.cdp.types import A11yTree, FrameTree, TargetInfo

logger = logging.getLogger(__name__)


class CDPClientError(Exception):
    """Base class for protocol client errors."""


class CDPConnectionError(CDPClientError, ConnectionError):
    """The connection could not be opened or is no longer usable."""


class CDPError(CDPClientError):
    """CDP protocol error returned by the remote side."""

    def __init__(self, code: int, message: str, data: Optional[Any] = None) -> None:
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"{code}: {message}")


class CDPClient:
    """Client for one Chrome DevTools Protocol connection.

    Outgoing requests get increasing integer ids and are matched to their
    responses by id. Events are matched to expectations by the pair
    (method, session id). Anything that matches neither is dropped.

    Example:
        async with CDPClient("ws://localhost:9222/devtools/browser/xxx") as client:
            pages = await client.list_pages()
            session_id = await client.attach_to_target(pages[0].target_id)
            loaded = client.expect("Page.loadEventFired", session_id)
            await client.call("Page.navigate", {"url": "https://example.com"}, session_id)
            await loaded
    """

    def __init__(
        self,
        url: str,
        *,
        transport: Optional[BaseTransport] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: Protocol endpoint URL.
            transport: Transport to use. A WebSocket transport is created if omitted.
            timeout: Default timeout in seconds for calls and expectations.
                None waits forever.
        """
        self._url = url
        self._transport = transport if transport is not None else WebSocketTransport(url)
        self._timeout = timeout
        self._next_id = 1
        self._pending: dict[int, asyncio.Future[dict[str, Any]]] = {}
        self._expectations: dict[tuple[str, str], asyncio.Future[dict[str, Any]]] = {}
        self._receive_task: Optional[asyncio.Task[None]] = None
        self._started = False
        self._connected = False
        self._closed = False

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_started(self) -> bool:
        return self._started

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def next_id(self) -> int:
        """Id the next call will be assigned."""
        return self._next_id

    @property
    def pending_requests(self) -> int:
        return len(self._pending)

    @property
    def pending_expectations(self) -> int:
        return len(self._expectations)

    async def start(self) -> None:
        """Open the connection and begin dispatching inbound messages.

        Raises:
            CDPConnectionError: If the transport fails to open.
        """
        if self._closed:
            raise CDPConnectionError("Client was closed and cannot be restarted")
        if self._started:
            return

        self._started = True
        logger.debug(f"Connecting to {self._url}")
        try:
            await self._transport.connect()
        except TransportError as e:
            self._started = False
            raise CDPConnectionError(str(e)) from e

        self._connected = True
        self._receive_task = asyncio.create_task(self._receive_loop())
        logger.info(f"Connected to {self._url}")

    async def close(self) -> None:
        """Stop dispatching, cancel all waiters and close the transport."""
        if self._closed:
            return
        self._closed = True
        self._connected = False

        if self._receive_task and not self._receive_task.done():
            self._receive_task.cancel()
            try:
                await self._receive_task
            except asyncio.CancelledError:
                pass

        for future in list(self._pending.values()) + list(self._expectations.values()):
            if not future.done():
                future.cancel()
        self._pending.clear()
        self._expectations.clear()

        await self._transport.close()
        logger.debug("Client closed")

    async def call(
        self,
        method: str,
        params: Optional[dict[str, Any]] = None,
        session_id: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
    ) -> Any:
        """Send a CDP command and wait for its response.

        Args:
            method: CDP method name (e.g., "Page.navigate").
            params: Method parameters, passed through unchecked.
            session_id: Session to scope the command to.
            timeout: Timeout override in seconds.

        Returns:
            The ``result`` payload of the response.

        Raises:
            CDPError: If the response carries an error object.
            CDPConnectionError: If the client is not connected.
            asyncio.TimeoutError: If a timeout is set and expires.
        """
        if not method:
            raise ValueError("method must be a non-empty string")
        if not self._connected:
            raise CDPConnectionError("Client is not connected")

        message_id = self._next_id
        self._next_id += 1

        message: dict[str, Any] = {
            "id": message_id,
            "method": method,
            "params": params if params is not None else {},
        }
        if session_id:
            message["sessionId"] = session_id

        future: asyncio.Future[dict[str, Any]] = asyncio.get_running_loop().create_future()
        self._pending[message_id] = future

        try:
            await self._transport.send(json.dumps(message))
        except TransportError as e:
            self._pending.pop(message_id, None)
            raise CDPConnectionError(str(e)) from e
        logger.debug(f"CDP send: {method} (id={message_id})")

        timeout = timeout if timeout is not None else self._timeout
        try:
            if timeout is None:
                response = await future
            else:
                response = await asyncio.wait_for(future, timeout=timeout)
        finally:
            self._pending.pop(message_id, None)

        if "error" in response:
            error = response["error"]
            raise CDPError(
                error.get("code", -1),
                error.get("message", "Unknown error"),
                error.get("data"),
            )
        return response.get("result", {})

    def expect(
        self,
        event: str,
        session_id: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
    ) -> Awaitable[dict[str, Any]]:
        """Register a one-shot wait for the next matching event.

        Must be called before the action that triggers the event; events
        arriving earlier are not buffered. A second expectation for the same
        (event, session) replaces the first, which then never resolves.

        Args:
            event: Event name (e.g., "Page.loadEventFired").
            session_id: Session the event must carry. None matches
                connection-level events.
            timeout: Timeout override in seconds.

        Returns:
            Awaitable resolving to the full event message.
        """
        key = (event, session_id or "")
        future: asyncio.Future[dict[str, Any]] = asyncio.get_running_loop().create_future()
        previous = self._expectations.get(key)
        if previous is not None and not previous.done():
            logger.warning(f"Replacing pending expectation for {event}/{key[1]}")
        self._expectations[key] = future

        timeout = timeout if timeout is not None else self._timeout
        if timeout is None:
            return future
        return asyncio.ensure_future(self._wait_expectation(key, future, timeout))

    async def _wait_expectation(
        self,
        key: tuple[str, str],
        future: asyncio.Future[dict[str, Any]],
        timeout: float,
    ) -> dict[str, Any]:
        try:
            return await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError:
            if self._expectations.get(key) is future:
                del self._expectations[key]
            raise

    async def _receive_loop(self) -> None:
        """Background loop feeding inbound frames to the dispatcher."""
        try:
            async for frame in self._transport:
                try:
                    self.dispatch(frame)
                except Exception as e:
                    logger.exception(f"Error handling CDP message: {e}")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"CDP receive loop error: {e}")
        finally:
            if self._connected:
                self._connected = False
                logger.warning(
                    f"Connection to {self._url} ended with "
                    f"{len(self._pending)} pending requests and "
                    f"{len(self._expectations)} pending expectations"
                )

    def dispatch(self, frame: str) -> None:
        """Route one inbound text frame to its waiter, or drop it."""
        try:
            data = json.loads(frame)
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON from CDP: {frame[:100]}")
            return
        if not isinstance(data, dict):
            logger.warning(f"Unexpected CDP message: {frame[:100]}")
            return

        if "id" in data:
            future = self._pending.pop(data["id"], None)
            if future is None:
                logger.debug(f"Dropping response for unknown id {data['id']}")
            elif not future.done():
                future.set_result(data)
            return

        method = data.get("method")
        session_id = data.get("sessionId") or ""

        if method == "Target.attachedToTarget":
            params = data.get("params") or {}
            target_info = params.get("targetInfo") or {}
            logger.info(
                f"Attached to {target_info.get('url')} "
                f"with session {params.get('sessionId')}"
            )

        future = self._expectations.pop((method, session_id), None)
        if future is None:
            logger.debug(f"Dropping unexpected event {method}/{session_id}")
        elif not future.done():
            future.set_result(data)

    # Typed wrappers

    async def list_pages(self) -> list[TargetInfo]:
        """List page targets."""
        result = await self.call(
            "Target.getTargets",
            {"filter": [{"type": "page", "exclude": False}]},
        )
        return [TargetInfo.model_validate(t) for t in result.get("targetInfos", [])]

    async def attach_to_target(self, target_id: str) -> str:
        """Attach to a target in flatten mode and return the session id."""
        result = await self.call(
            "Target.attachToTarget",
            {"targetId": target_id, "flatten": True},
        )
        return result["sessionId"]

    async def get_a11y_tree(self, session_id: str) -> A11yTree:
        """Fetch the full accessibility tree of every frame of a page.

        Frames whose tree cannot be fetched map to None.

        Args:
            session_id: Session attached to the page.

        Returns:
            Mapping of frame id to accessibility nodes.
        """
        result = await self.call("Page.getFrameTree", {}, session_id)
        frame_ids = FrameTree.model_validate(result["frameTree"]).frame_ids()

        responses = await asyncio.gather(
            *(
                self.call("Accessibility.getFullAXTree", {"frameId": frame_id}, session_id)
                for frame_id in frame_ids
            ),
            return_exceptions=True,
        )

        trees: A11yTree = {}
        for frame_id, response in zip(frame_ids, responses):
            if isinstance(response, Exception):
                logger.error(f"Accessibility tree for frame {frame_id} failed: {response}")
                trees[frame_id] = None
            elif isinstance(response, BaseException):
                raise response
            else:
                trees[frame_id] = response.get("nodes")
        return trees

    async def __aenter__(self) -> "CDPClient":
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
