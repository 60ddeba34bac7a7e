"""
Lifelog records as returned by GET /v1/lifelogs.

Content nodes form a tree (heading1 -> heading2 -> blockquote ...). A node with
children is a SectionNode, anything else is a TextNode. The content itself is
passed through untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

SPEAKER_USER = "user"


@dataclass(frozen=True)
class TextNode:
    type: str
    content: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    start_offset_ms: Optional[int] = None
    end_offset_ms: Optional[int] = None
    speaker_name: Optional[str] = None
    speaker_identifier: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type}
        for key, value in (
            ("content", self.content),
            ("startTime", self.start_time),
            ("endTime", self.end_time),
            ("startOffsetMs", self.start_offset_ms),
            ("endOffsetMs", self.end_offset_ms),
            ("speakerName", self.speaker_name),
            ("speakerIdentifier", self.speaker_identifier),
        ):
            if value is not None:
                out[key] = value
        return out


@dataclass(frozen=True)
class SectionNode(TextNode):
    children: Tuple["ContentNode", ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        out["children"] = [child.to_dict() for child in self.children]
        return out


ContentNode = Union[TextNode, SectionNode]


def parse_content_node(payload: Dict[str, Any]) -> ContentNode:
    speaker = payload.get("speakerIdentifier")
    common = dict(
        type=payload["type"],
        content=payload.get("content"),
        start_time=payload.get("startTime"),
        end_time=payload.get("endTime"),
        start_offset_ms=payload.get("startOffsetMs"),
        end_offset_ms=payload.get("endOffsetMs"),
        speaker_name=payload.get("speakerName"),
        speaker_identifier=speaker if speaker == SPEAKER_USER else None,
    )
    children = payload.get("children") or []
    if children:
        return SectionNode(children=tuple(parse_content_node(c) for c in children), **common)
    return TextNode(**common)


@dataclass(frozen=True)
class LifelogRecord:
    id: str
    start_time: str
    end_time: str
    title: Optional[str] = None
    markdown: Optional[str] = None
    contents: Tuple[ContentNode, ...] = ()

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "LifelogRecord":
        """Build a record from the API's JSON shape. Raises KeyError/TypeError on bad input."""
        return cls(
            id=payload["id"],
            start_time=payload["startTime"],
            end_time=payload["endTime"],
            title=payload.get("title"),
            markdown=payload.get("markdown"),
            contents=tuple(parse_content_node(c) for c in payload.get("contents") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id}
        if self.title is not None:
            out["title"] = self.title
        if self.markdown is not None:
            out["markdown"] = self.markdown
        out["startTime"] = self.start_time
        out["endTime"] = self.end_time
        if self.contents:
            out["contents"] = [node.to_dict() for node in self.contents]
        return out


@dataclass(frozen=True)
class Page:
    records: Tuple[LifelogRecord, ...] = ()
    next_cursor: Optional[str] = None
    count: int = 0
