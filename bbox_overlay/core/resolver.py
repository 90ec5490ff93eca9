from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from .registry import Image, ImageRegistry, normalize_name

ONLY_IMAGE_NOTE = "Applied box to the only loaded image."


@dataclass(frozen=True)
class Resolution:
    image: Image
    note: Optional[str] = None


def resolve_image(image_name: Optional[str], image_index: Optional[int],
                  registry: ImageRegistry) -> Optional[Resolution]:
    """
    Decide which registered image a box applies to.

    1. name match; an in-range index picks the exact image inside the
       name group, otherwise the first image of the group
    2. in-range index alone
    3. no name and exactly one image loaded
    """
    count = len(registry)
    index_ok = image_index is not None and 0 <= image_index < count

    candidates = registry.named(image_name)
    if candidates:
        if index_ok:
            for candidate in candidates:
                if candidate.index == image_index:
                    return Resolution(candidate)
        return Resolution(candidates[0])

    if index_ok:
        return Resolution(registry.at(image_index))

    if not normalize_name(image_name) and count == 1:
        return Resolution(registry.at(0), ONLY_IMAGE_NOTE)

    return None
