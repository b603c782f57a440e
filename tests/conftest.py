"""
Shared fixtures: an in-memory transport and a scripted browser.
"""

import asyncio
import base64
import json
from typing import Any, Callable, Optional

import pytest

from cdp_capture.cdp.transport import BaseTransport, TransportError

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png"
PDF_BYTES = b"%PDF-1.7 fake-pdf"

Responder = Callable[[dict[str, Any]], list[dict[str, Any]]]


class FakeTransport(BaseTransport):
    """Transport that records sent frames and replays queued inbound ones.

    A responder, when given, is called with every sent message and returns
    the messages the peer sends back.
    """

    def __init__(self, responder: Optional[Responder] = None, *, fail_connect: bool = False):
        self.responder = responder
        self.fail_connect = fail_connect
        self.sent: list[dict[str, Any]] = []
        self.connect_calls = 0
        self.closed = False
        self._inbound: asyncio.Queue[Optional[str]] = asyncio.Queue()

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.fail_connect:
            raise TransportError("Connection refused")

    async def send(self, text: str) -> None:
        message = json.loads(text)
        self.sent.append(message)
        if self.responder is not None:
            for reply in self.responder(message):
                self.push(reply)

    def push(self, message: Any) -> None:
        """Queue an inbound frame."""
        self._inbound.put_nowait(message if isinstance(message, str) else json.dumps(message))

    def finish(self) -> None:
        """Simulate the peer closing the connection."""
        self._inbound.put_nowait(None)

    def sent_methods(self) -> list[str]:
        return [m["method"] for m in self.sent]

    async def _frames(self):
        while True:
            frame = await self._inbound.get()
            if frame is None:
                return
            yield frame

    def __aiter__(self):
        return self._frames()

    async def close(self) -> None:
        self.closed = True
        self.finish()


FRAME_TREE = {
    "frame": {"id": "root", "url": "https://example.com/"},
    "childFrames": [
        {
            "frame": {"id": "child-1", "parentId": "root", "url": "https://ads.example.com/"},
            "childFrames": [],
        },
        {"frame": {"id": "child-2", "parentId": "root", "url": "about:blank"}},
    ],
}


class FakeBrowser:
    """Scripted protocol peer with one page target.

    Args:
        pages: Page targets returned by Target.getTargets.
        session_id: Session id handed out on attach.
        failing_frames: Frame ids whose accessibility tree request fails.
    """

    def __init__(
        self,
        pages: Optional[list[dict[str, Any]]] = None,
        session_id: str = "S",
        failing_frames: tuple[str, ...] = (),
    ):
        if pages is None:
            pages = [{"targetId": "T1", "type": "page", "title": "Example", "url": "https://example.com/"}]
        self.pages = pages
        self.session_id = session_id
        self.failing_frames = failing_frames

    def __call__(self, message: dict[str, Any]) -> list[dict[str, Any]]:
        method = message["method"]
        params = message.get("params", {})
        reply: dict[str, Any] = {"id": message["id"], "result": {}}
        extra: list[dict[str, Any]] = []

        if method == "Target.getTargets":
            reply["result"] = {"targetInfos": self.pages}
        elif method == "Target.attachToTarget":
            reply["result"] = {"sessionId": self.session_id}
            extra.append({
                "method": "Target.attachedToTarget",
                "params": {
                    "sessionId": self.session_id,
                    "targetInfo": {"targetId": params["targetId"], "url": "https://example.com/"},
                },
            })
        elif method == "Page.navigate":
            reply["result"] = {"frameId": "root", "loaderId": "L1"}
            extra.append({"method": "Page.frameStartedLoading", "params": {}, "sessionId": self.session_id})
            extra.append({"method": "Page.loadEventFired", "params": {"timestamp": 1.5}, "sessionId": self.session_id})
        elif method == "Page.captureScreenshot":
            reply["result"] = {"data": base64.b64encode(PNG_BYTES).decode()}
        elif method == "Page.printToPDF":
            reply["result"] = {"data": base64.b64encode(PDF_BYTES).decode()}
        elif method == "DOMSnapshot.captureSnapshot":
            reply["result"] = {"documents": [{"nodes": {}}], "strings": ["display"]}
        elif method == "Page.getFrameTree":
            reply["result"] = {"frameTree": FRAME_TREE}
        elif method == "Accessibility.getFullAXTree":
            frame_id = params["frameId"]
            if frame_id in self.failing_frames:
                reply = {"id": message["id"], "error": {"code": -32000, "message": "Frame detached"}}
            else:
                reply["result"] = {"nodes": [{"nodeId": f"{frame_id}-1", "role": {"value": "WebArea"}}]}

        return [reply] + extra


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def browser() -> FakeBrowser:
    return FakeBrowser()


@pytest.fixture
def browser_transport(browser: FakeBrowser) -> FakeTransport:
    return FakeTransport(browser)


async def settle(rounds: int = 10) -> None:
    """Let background tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)
