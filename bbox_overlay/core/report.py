from __future__ import annotations
import json, datetime, platform
from dataclasses import asdict
from pathlib import Path

import yaml

from .render import RenderPlan


def build_report(plan: RenderPlan) -> dict:
    return {
        "created_at": datetime.datetime.now(datetime.timezone.utc).isoformat().replace("+00:00", "Z"),
        "os": platform.platform(),
        "totals": {
            "images": len(plan.images),
            "boxes": len(plan.boxes),
            "matched": sum(1 for b in plan.boxes if b.matched),
        },
        "images": [
            {
                "index": img.index,
                "name": img.name,
                "byte_size": img.byte_size,
                "overlays": [asdict(o) for o in img.overlays],
                "metadata": img.metadata.to_dict() if img.metadata else None,
            }
            for img in plan.images
        ],
        "boxes": [asdict(b) for b in plan.boxes],
    }


def write_report(path: Path, plan: RenderPlan) -> Path:
    rep = build_report(plan)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() in (".yaml", ".yml"):
        path.write_text(yaml.safe_dump(rep, sort_keys=False, allow_unicode=True), encoding="utf-8")
    else:
        path.write_text(json.dumps(rep, indent=2, ensure_ascii=False), encoding="utf-8")
    return path
