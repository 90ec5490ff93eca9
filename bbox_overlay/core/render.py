from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional

from .entries import BoundingBox
from .metadata import Metadata


def format_number(value: float) -> str:
    return f"{value:.3f}"


def plural(count: int, singular: str, suffix: str = "s") -> str:
    return f"{count} {singular}{'' if count == 1 else suffix}"


@dataclass
class OverlayRect:
    """Box placement as percentages of the target image."""
    box_uid: int
    left: float
    top: float
    width: float
    height: float
    color: Optional[str]
    fill: Optional[str]
    text: str

    @classmethod
    def for_box(cls, box: BoundingBox, position: int) -> "OverlayRect":
        b = box.box
        return cls(
            box_uid=box.uid,
            left=b.x1 * 100,
            top=b.y1 * 100,
            width=b.width * 100,
            height=b.height * 100,
            color=box.color,
            fill=box.fill,
            text=box.display_text(position),
        )


@dataclass
class ImageView:
    index: int
    name: str
    byte_size: int
    overlays: List[OverlayRect] = field(default_factory=list)
    metadata: Optional[Metadata] = None


@dataclass
class BoxSummary:
    header: str
    source: str
    image: str
    label: str
    coords: str
    notes: List[str]
    matched: bool
    color: Optional[str]

    @classmethod
    def for_box(cls, box: BoundingBox, position: int) -> "BoxSummary":
        b = box.box
        return cls(
            header=f"#{position}",
            source=box.source,
            image=box.resolved_image_name or box.image_name or "not matched",
            label=box.label or "—",
            coords=(f"({format_number(b.x1)}, {format_number(b.y1)}) → "
                    f"({format_number(b.x2)}, {format_number(b.y2)})"),
            notes=box.notes(),
            matched=box.matched,
            color=box.color,
        )

    @property
    def note_text(self) -> str:
        return " ".join(self.notes)


@dataclass
class RenderPlan:
    images: List[ImageView]
    boxes: List[BoxSummary]

    @property
    def image_counter(self) -> str:
        return plural(len(self.images), "file")

    @property
    def box_counter(self) -> str:
        return plural(len(self.boxes), "box", "es")
