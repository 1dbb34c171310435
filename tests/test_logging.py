"""Tests for the structured logging setup."""

import json

from devtool.logging import configure_logging, get_logger


def test_console_logging_goes_to_stderr(capsys):
    configure_logging(level="INFO", json_output=False)

    get_logger("devtool.test").info("test.message", test_field="test_value")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "test.message" in captured.err
    assert "test_field=test_value" in captured.err


def test_json_logging_emits_one_object_per_line(capsys):
    configure_logging(level="INFO", json_output=True)

    get_logger("devtool.test").warning("dispatch.host_fallback", tool="node", role="node")

    line = capsys.readouterr().err.strip()
    payload = json.loads(line)
    assert payload["message"] == "dispatch.host_fallback"
    assert payload["tool"] == "node"
    assert payload["levelname"] == "WARNING"


def test_level_filters_lower_records(capsys):
    configure_logging(level="WARNING", json_output=False)

    logger = get_logger("devtool.test")
    logger.info("hidden.event")
    logger.warning("shown.event")

    err = capsys.readouterr().err
    assert "hidden.event" not in err
    assert "shown.event" in err
