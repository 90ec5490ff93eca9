import json

from bbox_overlay.app import main
from bbox_overlay.services import (
    AnnotationSession, ConfigService, EventBus, IAnnotationSession, IConfigService, IEventBus,
    ILogger, MemoryLogger, ServiceContainerBuilder, configure_services,
)


def test_container_wires_session(tmp_path):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"pasted_source_label": "clipboard"}), encoding="utf-8")
    container = configure_services(config_file=config)

    session = container.get(IAnnotationSession)
    assert isinstance(session, AnnotationSession)
    assert container.get(IAnnotationSession) is session
    assert isinstance(container.get(IEventBus), EventBus)
    assert isinstance(container.get(IConfigService), ConfigService)
    assert session.ingest_pasted('{"x1": 0, "y1": 0, "x2": 1, "y2": 1}').source == "clipboard"


def test_builder_keeps_supplied_instances():
    logger = MemoryLogger()
    container = ServiceContainerBuilder().add_instance(ILogger, logger).build()
    container.get(IAnnotationSession).clear_session()
    assert container.get(ILogger) is logger
    assert "Cleared images" in logger.messages("INFO")


def test_cli_end_to_end(tmp_path, capsys):
    image = tmp_path / "Frame.PNG"
    image.write_bytes(b"\x89PNG....")
    boxes = tmp_path / "boxes.json"
    boxes.write_text(json.dumps([
        {"image": "frame.png", "label": "car", "s3Key": "bucket/frame", "x1": 0, "y1": 0, "x2": 0.5, "y2": 0.5},
        {"label": "skipped"},
    ]), encoding="utf-8")
    report = tmp_path / "report.json"

    code = main([
        "--images", str(image),
        "--annotations", str(boxes),
        "--report", str(report),
    ])

    out = capsys.readouterr().out
    assert code == 0
    assert "[boxes.json] Skipped entry 2" in out
    assert "1 file, 1 box" in out
    assert "#1 boxes.json | Frame.PNG | car" in out
    assert json.loads(report.read_text(encoding="utf-8"))["images"][0]["metadata"]["s3Key"] == "bucket/frame"


def test_cli_without_boxes_fails(capsys):
    assert main(["--paste", "   "]) == 1
    assert "Nothing to parse. Paste JSON before loading." in capsys.readouterr().out
