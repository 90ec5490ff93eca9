import json

import yaml

from bbox_overlay.core.palette import DEFAULT_PALETTE
from bbox_overlay.services import ConfigService, LogLevel, MemoryLogger


def test_defaults_without_file():
    service = ConfigService(MemoryLogger())
    assert service.get_setting("palette") == DEFAULT_PALETTE
    assert service.get_setting("fill_alpha") == 0.18
    assert service.get_setting("pasted_source_label") == "pasted JSON"
    assert service.get_setting("logging.console_level") == LogLevel.WARNING
    assert service.get_setting("nope", "fallback") == "fallback"


def test_missing_file_uses_defaults(tmp_path):
    logger = MemoryLogger()
    service = ConfigService(logger, tmp_path / "absent.yaml")
    assert service.config.resolution_cache_size == 4096
    assert "No config file found, using defaults" in logger.messages("INFO")


def test_loads_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "palette": ["#000000", "#ffffff"],
        "pasted_source_label": "clipboard",
        "logging": {"console_level": "DEBUG"},
    }), encoding="utf-8")
    service = ConfigService(MemoryLogger(), path)
    assert service.config.palette == ["#000000", "#ffffff"]
    assert service.get_setting("pasted_source_label") == "clipboard"
    assert service.get_setting("logging.console_level") == LogLevel.DEBUG


def test_invalid_file_falls_back_and_logs(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"palette": ["red"]}), encoding="utf-8")
    logger = MemoryLogger()
    service = ConfigService(logger, path)
    assert service.config.palette == DEFAULT_PALETTE
    assert logger.get_entries("ERROR")


def test_set_setting_validates():
    logger = MemoryLogger()
    service = ConfigService(logger)
    service.set_setting("fill_alpha", 0.5)
    assert service.get_setting("fill_alpha") == 0.5
    service.set_setting("fill_alpha", 3)
    assert service.get_setting("fill_alpha") == 0.5
    service.set_setting("logging.console_level", "ERROR")
    assert service.get_setting("logging.console_level") == LogLevel.ERROR
    service.set_setting("unknown.key", 1)
    assert "Setting path not found: unknown.key" in logger.messages("WARNING")


def test_save_export_import_round_trip(tmp_path):
    path = tmp_path / "saved.json"
    service = ConfigService(MemoryLogger(), path)
    data = service.load_config()
    data["pasted_source_label"] = "clipboard"
    assert service.save_config(data)
    assert json.loads(path.read_text(encoding="utf-8"))["pasted_source_label"] == "clipboard"

    exported = tmp_path / "export.yaml"
    assert service.export_config(exported)

    other = ConfigService(MemoryLogger())
    assert other.import_config(exported)
    assert other.get_setting("pasted_source_label") == "clipboard"
    assert not other.import_config(tmp_path / "nowhere.yaml")


def test_save_rejects_invalid_config():
    service = ConfigService(MemoryLogger())
    assert not service.save_config({"palette": []})
    assert service.config.palette == DEFAULT_PALETTE
