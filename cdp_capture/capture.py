"""
Page capture pipeline.

Attaches to a page, optionally navigates it, then captures a screenshot,
a PDF, a DOM snapshot and the accessibility tree of every frame.
"""

from __future__ import annotations

import base64
import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Union

from cdp_capture.cdp.connection import CDPClient
from cdp_capture.cdp.types import A11yTree, TargetInfo
from cdp_capture.config.defaults import (
    A11Y_FILENAME,
    CAPTURE_DOMAINS,
    DOM_FILENAME,
    DOM_SNAPSHOT_PARAMS,
    PDF_FILENAME,
    SCREENSHOT_FILENAME,
    SCREENSHOT_PARAMS,
)

logger = logging.getLogger(__name__)

# (measure name, start mark, end mark)
MEASURES = [
    ("readiness", "started", "ready"),
    ("load", "ready", "loaded"),
    ("screenshot", "ready", "screenshotFinished"),
    ("pdf", "screenshotFinished", "pdfFinished"),
    ("dom", "pdfFinished", "domFinished"),
    ("a11y", "domFinished", "a11yFinished"),
]


class NoPagesError(Exception):
    """The browser has no page targets."""


@dataclass
class StageTimer:
    """Named timestamps and the durations between them."""

    marks: dict[str, float] = field(default_factory=dict)
    clock: Callable[[], float] = time.perf_counter

    def mark(self, name: str) -> None:
        self.marks[name] = self.clock()

    def measure(self, start: str, end: str) -> float:
        """Duration between two marks in milliseconds."""
        return (self.marks[end] - self.marks[start]) * 1000

    def measures(self) -> list[tuple[str, float]]:
        """All standard measures whose marks were recorded."""
        return [
            (name, self.measure(start, end))
            for name, start, end in MEASURES
            if start in self.marks and end in self.marks
        ]


@dataclass
class CaptureResult:
    """Everything captured from one page."""

    session_id: str
    screenshot: bytes
    pdf: bytes
    dom: dict[str, Any]
    a11y: A11yTree
    timer: StageTimer
    paths: dict[str, Path] = field(default_factory=dict)


def choose_page(
    pages: list[TargetInfo],
    prompt: Optional[Callable[[list[TargetInfo]], int]] = None,
) -> TargetInfo:
    """Pick the page to capture.

    Args:
        pages: Available page targets.
        prompt: Asks the user for an index when there are several pages.

    Returns:
        Selected page.

    Raises:
        NoPagesError: If there are no pages, or several and no prompt.
    """
    if not pages:
        raise NoPagesError("No pages found")
    if len(pages) == 1:
        return pages[0]
    if prompt is None:
        raise NoPagesError(f"{len(pages)} pages found and no way to choose")
    return pages[prompt(pages)]


async def run_capture(
    client: CDPClient,
    page: TargetInfo,
    navigate_to: Optional[str] = None,
    output_dir: Union[str, Path, None] = None,
) -> CaptureResult:
    """Capture a page and optionally write the artifacts.

    Args:
        client: Started protocol client.
        page: Page target to capture.
        navigate_to: URL to load before capturing.
        output_dir: Directory to write artifacts to. Nothing is written if None.

    Returns:
        Capture result.
    """
    timer = StageTimer()
    timer.mark("started")

    session_id = await client.attach_to_target(page.target_id)
    for domain in CAPTURE_DOMAINS:
        await client.call(f"{domain}.enable", {}, session_id)

    timer.mark("ready")

    if navigate_to is not None:
        loaded = client.expect("Page.loadEventFired", session_id)
        await client.call("Page.navigate", {"url": navigate_to}, session_id)
        await loaded
        logger.info(f"Loaded {navigate_to}")

    timer.mark("loaded")

    result = await client.call("Page.captureScreenshot", SCREENSHOT_PARAMS, session_id)
    screenshot = base64.b64decode(result["data"])
    timer.mark("screenshotFinished")

    result = await client.call("Page.printToPDF", {}, session_id)
    pdf = base64.b64decode(result["data"])
    timer.mark("pdfFinished")

    dom = await client.call("DOMSnapshot.captureSnapshot", DOM_SNAPSHOT_PARAMS, session_id)
    timer.mark("domFinished")

    a11y = await client.get_a11y_tree(session_id)
    timer.mark("a11yFinished")

    capture = CaptureResult(
        session_id=session_id,
        screenshot=screenshot,
        pdf=pdf,
        dom=dom,
        a11y=a11y,
        timer=timer,
    )
    if output_dir is not None:
        capture.paths = write_artifacts(capture, output_dir)
    return capture


def write_artifacts(capture: CaptureResult, output_dir: Union[str, Path]) -> dict[str, Path]:
    """Write the captured artifacts under their fixed file names.

    Returns:
        Mapping of file name to written path.
    """
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)

    paths = {
        name: directory / name
        for name in (SCREENSHOT_FILENAME, PDF_FILENAME, DOM_FILENAME, A11Y_FILENAME)
    }
    paths[SCREENSHOT_FILENAME].write_bytes(capture.screenshot)
    paths[PDF_FILENAME].write_bytes(capture.pdf)
    paths[DOM_FILENAME].write_text(json.dumps(capture.dom), encoding="utf-8")
    paths[A11Y_FILENAME].write_text(json.dumps(capture.a11y), encoding="utf-8")

    logger.debug(f"Wrote artifacts to {directory}")
    return paths


def format_timings(timer: StageTimer) -> str:
    """Render the stage measures as a table."""
    rows = [(name, f"{duration:.2f}") for name, duration in timer.measures()]
    width = max([len("name")] + [len(name) for name, _ in rows])
    lines = [f"{'name':<{width}}  duration (ms)"]
    lines.extend(f"{name:<{width}}  {duration:>13}" for name, duration in rows)
    return "\n".join(lines)
