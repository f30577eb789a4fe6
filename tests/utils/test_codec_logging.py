import json
import logging

import structlog

from occi_codec.config import LoggingSettings
from occi_codec.utils.logging import (
    JsonFormatter,
    bind_correlation_id,
    configure_logging,
    get_correlation_id,
    reset_correlation_id,
    scrub_processor,
)


def _lines(text: str) -> list[dict]:
    return [json.loads(line) for line in text.splitlines() if line.startswith("{")]


def test_codec_events_are_rendered_as_scrubbed_json(capsys):
    configure_logging(settings=LoggingSettings(level="INFO", scrub_fields=["token"]))
    token = bind_correlation_id("corr-123")
    try:
        structlog.get_logger("occi_codec.tests").info(
            "occi.json.decoded", shape="resource", token="secret", detail={"Token": "nested"}
        )
    finally:
        reset_correlation_id(token)

    [event] = [line for line in _lines(capsys.readouterr().out) if line["event"] == "occi.json.decoded"]
    assert event["level"] == "info"
    assert event["logger"] == "occi_codec.tests"
    assert event["shape"] == "resource"
    assert event["token"] == "***"
    assert event["detail"] == {"Token": "***"}
    assert event["correlation_id"] == "corr-123"


def test_events_below_the_configured_level_are_dropped(capsys):
    configure_logging(level="WARNING")
    logger = structlog.get_logger("occi_codec.tests.level")
    logger.info("occi.text.decoded")
    logger.warning("occi.json.decode_failed", error_type="CategoryParseError")

    events = [line["event"] for line in _lines(capsys.readouterr().out)]
    assert "occi.text.decoded" not in events
    assert "occi.json.decode_failed" in events
    assert logging.getLogger().level == logging.WARNING


def test_stdlib_records_share_the_json_rendering():
    formatter = JsonFormatter(scrub_fields=["authorization"])
    record = logging.LogRecord("uvicorn", logging.INFO, __file__, 1, "request %s", ("done",), None)
    record.authorization = "Bearer x"
    payload = json.loads(formatter.format(record))
    assert payload["event"] == "request done"
    assert payload["level"] == "info"
    assert payload["logger"] == "uvicorn"
    assert payload["authorization"] == "***"


def test_correlation_id_binding():
    token = bind_correlation_id("corr-9")
    try:
        assert get_correlation_id() == "corr-9"
        event = scrub_processor(None)(None, "info", {"event": "occi.render.collection"})
        assert event["correlation_id"] == "corr-9"
    finally:
        reset_correlation_id(token)
    assert get_correlation_id() is None
