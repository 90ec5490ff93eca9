from __future__ import annotations
import math
from typing import Any, List, Mapping, Optional, Tuple

from pydantic import BaseModel, confloat, model_validator

Norm = confloat(ge=0.0, le=1.0)

INTERPRETED_XYWH_WARNING = "Interpreted x/y/width/height as x1/y1/x2/y2."
CLAMPED_WARNING = "Values outside [0,1] were clamped."


class NormalizedBox(BaseModel):
    """Axis-aligned box in unit space. Invalid boxes cannot be constructed."""

    model_config = {"frozen": True}

    x1: Norm
    y1: Norm
    x2: Norm
    y2: Norm

    @model_validator(mode="after")
    def _check_order(self) -> "NormalizedBox":
        if self.x1 > self.x2 or self.y1 > self.y2:
            raise ValueError("box corners are not ordered")
        return self

    @property
    def width(self) -> float:
        return max(self.x2 - self.x1, 0.0)

    @property
    def height(self) -> float:
        return max(self.y2 - self.y1, 0.0)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x1, self.y1, self.x2, self.y2)


def to_finite(value: Any) -> Optional[float]:
    '''Return value as a finite float, or None if it is not a number.'''
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


def _read(source: Mapping[str, Any], keys: Tuple[str, ...]) -> Optional[List[float]]:
    values = [to_finite(source.get(k)) for k in keys]
    if any(v is None for v in values):
        return None
    return values


def normalize_coordinates(source: Mapping[str, Any]) -> Optional[Tuple[NormalizedBox, List[str]]]:
    """
    Convert a raw coordinate payload into a canonical box.

    Corner form (x1, y1, x2, y2) is tried first, then origin+extent form
    (x, y, width, height). Returns None when neither is complete. Corners are
    reordered, and values outside [0,1] are clamped with a single warning.
    """
    warnings: List[str] = []

    corners = _read(source, ("x1", "y1", "x2", "y2"))
    if corners is None:
        extent = _read(source, ("x", "y", "width", "height"))
        if extent is None:
            return None
        x, y, w, h = extent
        corners = [x, y, x + w, y + h]
        warnings.append(INTERPRETED_XYWH_WARNING)

    ax, ay, bx, by = corners
    min_x, max_x = min(ax, bx), max(ax, bx)
    min_y, max_y = min(ay, by), max(ay, by)

    if max_x > 1 or max_y > 1 or min_x < 0 or min_y < 0:
        warnings.append(CLAMPED_WARNING)

    box = NormalizedBox(
        x1=clamp01(min_x),
        y1=clamp01(min_y),
        x2=clamp01(max_x),
        y2=clamp01(max_y),
    )
    return box, warnings
