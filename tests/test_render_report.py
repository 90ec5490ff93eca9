import json

import pytest
import yaml

from bbox_overlay.core.palette import hex_to_rgba
from bbox_overlay.core.render import plural
from bbox_overlay.core.report import build_report, write_report


@pytest.fixture
def loaded(session, sources):
    session.load_images(sources("a.jpg", "b.jpg"))
    session.ingest_text(json.dumps([
        {"image": "a.jpg", "label": "cat", "s3Key": "k", "x1": 0.1, "y1": 0.2, "x2": 0.5, "y2": 0.6},
        {"image": "zzz.jpg", "x1": 0, "y1": 0, "x2": 1, "y2": 1},
    ]), "boxes.json")
    return session


def test_overlays_are_grouped_by_image(loaded):
    plan = loaded.render_plan()
    first, second = plan.images
    assert first.name == "a.jpg"
    assert second.overlays == []
    rect = first.overlays[0]
    assert rect.text == "cat"
    assert rect.left == pytest.approx(10)
    assert rect.top == pytest.approx(20)
    assert rect.width == pytest.approx(40)
    assert rect.height == pytest.approx(40)
    assert first.metadata.s3_key == "k"
    assert second.metadata is None


def test_box_summaries(loaded):
    plan = loaded.render_plan()
    matched, unmatched = plan.boxes
    assert matched.header == "#1"
    assert matched.image == "a.jpg"
    assert matched.coords == "(0.100, 0.200) → (0.500, 0.600)"
    assert matched.notes == []
    assert unmatched.image == "zzz.jpg"
    assert unmatched.label == "—"
    assert unmatched.note_text == "No matching image found for this box."


def test_counters(loaded):
    plan = loaded.render_plan()
    assert plan.image_counter == "2 files"
    assert plan.box_counter == "2 boxes"
    assert plural(1, "box", "es") == "1 box"
    assert plural(0, "file") == "0 files"


def test_hex_to_rgba():
    assert hex_to_rgba("#14b8a6", 0.18) == "rgba(20, 184, 166, 0.18)"
    assert hex_to_rgba("#fff", 1) == "rgba(255, 255, 255, 1)"
    assert hex_to_rgba("#zz", 0.5) == "rgba(249, 115, 22, 0.5)"
    assert hex_to_rgba("#gggggg", 0.5) == "rgba(249, 115, 22, 0.5)"


def test_report_contents(loaded):
    report = build_report(loaded.render_plan())
    assert report["totals"] == {"images": 2, "boxes": 2, "matched": 1}
    assert report["images"][0]["metadata"]["s3Key"] == "k"
    assert report["boxes"][1]["matched"] is False
    assert report["created_at"].endswith("Z")


def test_write_report_json_and_yaml(loaded, tmp_path):
    plan = loaded.render_plan()
    json_path = write_report(tmp_path / "out" / "report.json", plan)
    assert json.loads(json_path.read_text(encoding="utf-8"))["totals"]["boxes"] == 2

    yaml_path = write_report(tmp_path / "report.yaml", plan)
    assert yaml.safe_load(yaml_path.read_text(encoding="utf-8"))["totals"]["matched"] == 1
