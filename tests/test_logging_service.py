from bbox_overlay.services import LoggingService, LogLevel


def test_console_output_goes_to_stderr(capsys):
    logger = LoggingService("bbox_overlay.test", console_level=LogLevel.WARNING)
    logger.warning("Rejected payload")
    logger.debug("hidden")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "WARNING - Rejected payload" in captured.err
    assert "hidden" not in captured.err


def test_file_handler_records_debug(tmp_path, capsys):
    log_file = tmp_path / "logs" / "run.log"
    logger = LoggingService("bbox_overlay.file", log_file=log_file)
    logger.log_performance("resolution pass", 1.5, boxes=2)

    for handler in logger._logger.handlers:
        handler.flush()
    assert "Performance: resolution pass took 1.50ms" in log_file.read_text(encoding="utf-8")
    assert capsys.readouterr().err == ""

    for handler in logger._logger.handlers:
        handler.close()
