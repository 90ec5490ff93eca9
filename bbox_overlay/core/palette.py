from __future__ import annotations
from typing import List, Sequence

DEFAULT_PALETTE: List[str] = [
    "#f97316",
    "#14b8a6",
    "#6366f1",
    "#ef4444",
    "#10b981",
    "#8b5cf6",
    "#ec4899",
    "#0ea5e9",
    "#facc15",
    "#a855f7",
]

DEFAULT_FILL_ALPHA = 0.18


def color_for(position: int, palette: Sequence[str] = DEFAULT_PALETTE) -> str:
    return palette[position % len(palette)]


def hex_to_rgba(hex_color: str, alpha: float) -> str:
    '''"#rgb" or "#rrggbb" to a CSS rgba() string; falls back to orange.'''
    hex_part = hex_color.lstrip("#")
    if len(hex_part) == 3:
        chunks = [c + c for c in hex_part]
    else:
        chunks = [hex_part[i:i + 2] for i in range(0, len(hex_part) - 1, 2)]
    try:
        r, g, b = (int(part, 16) for part in chunks[:3])
    except ValueError:
        return f"rgba(249, 115, 22, {alpha})"
    return f"rgba({r}, {g}, {b}, {alpha})"
