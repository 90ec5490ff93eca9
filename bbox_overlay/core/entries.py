from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, List, Mapping, Optional, Sequence

from .errors import EntryError
from .geometry import NormalizedBox, normalize_coordinates

if TYPE_CHECKING:
    from .metadata import Metadata

Accessor = Callable[[Mapping[str, Any]], Any]


def key(name: str) -> Accessor:
    '''Accessor reading one top-level field of a raw entry.'''
    def read(entry: Mapping[str, Any]) -> Any:
        return entry.get(name)
    read.__name__ = f"key_{name}"
    return read


@dataclass(frozen=True)
class AliasedField:
    """A logical field read from the first alias that holds a value."""
    name: str
    accessors: Sequence[Accessor]

    @classmethod
    def of(cls, name: str, *aliases: str) -> "AliasedField":
        return cls(name, tuple(key(a) for a in aliases))

    def resolve(self, entry: Mapping[str, Any]) -> Any:
        for accessor in self.accessors:
            value = accessor(entry)
            if value is not None:
                return value
        return None


IMAGE_NAME = AliasedField.of("image", "image", "imageName", "filename", "file")
IMAGE_INDEX = AliasedField.of("imageIndex", "imageIndex", "index")
LABEL = AliasedField.of("label", "label", "class", "category", "id")

NOT_AN_OBJECT = "Entry is not an object."
MISSING_COORDINATES = "Missing coordinates (x1,y1,x2,y2 or x,y,width,height)."


@dataclass
class BoundingBox:
    """Canonical box plus its per-pass resolution state."""
    source: str
    entry_index: int
    label: str
    image_name: Optional[str]
    image_index: Optional[int]
    box: NormalizedBox
    base_warnings: List[str] = field(default_factory=list)
    uid: int = -1
    color: Optional[str] = None
    fill: Optional[str] = None
    metadata: Optional[Metadata] = None

    # recomputed by every resolution pass
    dynamic_warnings: List[str] = field(default_factory=list)
    matched: bool = False
    resolved_image_name: Optional[str] = None
    resolved_image_index: Optional[int] = None

    def display_text(self, position: int) -> str:
        '''Label shown on the overlay; position is 1-based.'''
        return self.label if self.label else f"Box {position}"

    def notes(self) -> List[str]:
        notes = [*self.base_warnings, *self.dynamic_warnings]
        if not self.matched:
            notes.append("No matching image found for this box.")
        return notes


def as_index(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def as_name(value: Any) -> Optional[str]:
    # 0, "" and false name no image
    if value is None or value == "" or value == 0:
        return None
    return str(value)


def normalize_entry(entry: Any, source: str, entry_index: int) -> BoundingBox:
    """Validate one raw entry and build a canonical, unresolved box."""
    if not isinstance(entry, Mapping):
        raise EntryError(NOT_AN_OBJECT)

    nested = entry.get("box")
    container = nested if isinstance(nested, Mapping) else entry

    normalized = normalize_coordinates(container)
    if normalized is None:
        raise EntryError(MISSING_COORDINATES)
    box, warnings = normalized

    label = LABEL.resolve(entry)

    return BoundingBox(
        source=source,
        entry_index=entry_index,
        label=str(label) if label is not None else "",
        image_name=as_name(IMAGE_NAME.resolve(entry)),
        image_index=as_index(IMAGE_INDEX.resolve(entry)),
        box=box,
        base_warnings=warnings,
    )
