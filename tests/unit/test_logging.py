from __future__ import annotations

import json
import logging
import re

from theme_switcher.logging_config import JsonLogFormatter, parse_redact_fields
from theme_switcher.logging_context import set_request_id
from theme_switcher.web.middleware import REQUEST_ID_HEADER, parse_skip_paths

from tests.helpers import make_client


def test_json_log_formatter_redacts_sensitive_fields() -> None:
    formatter = JsonLogFormatter(redact_fields=parse_redact_fields("api_key"))
    record = logging.makeLogRecord(
        {
            "name": "tests.logging",
            "levelno": logging.INFO,
            "levelname": "INFO",
            "msg": "test.event",
            "args": (),
            "cookie": "wordpress_tts_theme_abc=b",
            "payload": {
                "api_key": "key-value",
                "safe": "ok",
            },
            "color_message": "ANSI-noise",
        }
    )

    payload = json.loads(formatter.format(record))

    assert payload["event"] == "test.event"
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}Z", payload["timestamp"])
    assert payload["cookie"] == "[REDACTED]"
    assert payload["payload"]["api_key"] == "[REDACTED]"
    assert payload["payload"]["safe"] == "ok"
    assert "color_message" not in payload


def test_json_log_formatter_includes_request_id_from_context() -> None:
    formatter = JsonLogFormatter()
    record = logging.makeLogRecord({"msg": "theme_switcher.theme_set", "theme": "b"})

    set_request_id("request-abc")
    try:
        payload = json.loads(formatter.format(record))
    finally:
        set_request_id(None)

    assert payload["request_id"] == "request-abc"
    assert payload["theme"] == "b"


def test_request_logging_middleware_sets_request_id_header() -> None:
    client = make_client()

    response = client.get("/", headers={REQUEST_ID_HEADER: "request-123"})

    assert response.status_code == 200
    assert response.headers[REQUEST_ID_HEADER] == "request-123"


def test_parse_skip_paths_trims_and_discards_empty_segments() -> None:
    assert parse_skip_paths(" /healthz , , /static/ ") == ("/healthz", "/static/")
