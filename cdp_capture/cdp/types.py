"""
Typed views over the few CDP payloads the client interprets.

Everything else the protocol returns is passed through as plain dicts.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class TargetInfo(BaseModel):
    """A debuggable target as reported by ``Target.getTargets``."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    target_id: str = Field(..., alias="targetId")
    type: str = "page"
    title: str = ""
    url: str = ""
    attached: bool = False
    browser_context_id: Optional[str] = Field(None, alias="browserContextId")


class Frame(BaseModel):
    """A single frame of a page."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    parent_id: Optional[str] = Field(None, alias="parentId")
    url: str = ""


class FrameTree(BaseModel):
    """Frame hierarchy as returned by ``Page.getFrameTree``."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    frame: Frame
    child_frames: list["FrameTree"] = Field(default_factory=list, alias="childFrames")

    def frame_ids(self) -> list[str]:
        """Collect frame ids depth-first, parents before children."""
        ids = [self.frame.id]
        for child in self.child_frames:
            ids.extend(child.frame_ids())
        return ids


FrameTree.model_rebuild()

# Accessibility nodes per frame id; None when the frame could not be fetched.
A11yTree = dict[str, Optional[list[dict[str, Any]]]]
