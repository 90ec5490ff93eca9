from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple


def normalize_name(name: Optional[str]) -> Optional[str]:
    '''Match key for image names: trimmed and lower-cased, None if blank.'''
    if name is None:
        return None
    key = str(name).strip().lower()
    return key or None


@dataclass(frozen=True)
class ImageSource:
    """What the image loader hands over for one file."""
    name: Optional[str]
    byte_size: int = 0


@dataclass(frozen=True)
class Image:
    index: int
    name: str
    byte_size: int = 0


class ImageRegistry:
    """
    Immutable snapshot of one load batch.
    The name index is derived from the image list at construction.
    """

    def __init__(self, images: Iterable[Image] = ()):
        self._images: Tuple[Image, ...] = tuple(images)
        by_name: Dict[str, List[Image]] = {}
        for image in self._images:
            key = normalize_name(image.name)
            if not key:
                continue
            by_name.setdefault(key, []).append(image)
        self._by_name: Dict[str, Tuple[Image, ...]] = {k: tuple(v) for k, v in by_name.items()}

    @classmethod
    def from_sources(cls, sources: Iterable[ImageSource]) -> "ImageRegistry":
        images = []
        for index, src in enumerate(sources):
            name = src.name or f"image-{index + 1}"
            images.append(Image(index=index, name=name, byte_size=max(int(src.byte_size or 0), 0)))
        return cls(images)

    @property
    def images(self) -> Tuple[Image, ...]:
        return self._images

    def __len__(self) -> int:
        return len(self._images)

    def __iter__(self):
        return iter(self._images)

    def at(self, index: int) -> Optional[Image]:
        if 0 <= index < len(self._images):
            return self._images[index]
        return None

    def named(self, name: Optional[str]) -> Tuple[Image, ...]:
        key = normalize_name(name)
        if not key:
            return ()
        return self._by_name.get(key, ())

    def names(self) -> List[str]:
        return list(self._by_name)
