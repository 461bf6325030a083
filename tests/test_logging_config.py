import io
import json
import logging

from ledger_explorer.logging_config import (
    DEFAULT_ENV,
    JsonFormatter,
    configure_logging,
    structured_log_extra,
)


def _build_logger(stream: io.StringIO) -> logging.Logger:
    logger = logging.getLogger("ledger_explorer.test.logging")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    logger.handlers = [handler]
    return logger


def test_structured_log_extra_adds_common_identifiers():
    extra = structured_log_extra(
        event="account_fetch_issued",
        address="rAlice",
        correlation_id="6f1c4f62-4bb1-4cf4-9e1a-1f0d3f9c5a10",
        sequence=3,
        custom_field="value",
    )

    assert extra["event"] == "account_fetch_issued"
    assert extra["env"] == DEFAULT_ENV
    assert extra["address"] == "rAlice"
    assert extra["correlation_id"] == "6f1c4f62-4bb1-4cf4-9e1a-1f0d3f9c5a10"
    assert extra["sequence"] == 3
    assert extra["custom_field"] == "value"

    minimal_extra = structured_log_extra()
    assert "address" not in minimal_extra
    assert "correlation_id" not in minimal_extra
    assert "sequence" not in minimal_extra


def test_json_formatter_preserves_extra_fields():
    stream = io.StringIO()
    logger = _build_logger(stream)

    logger.info(
        "log message",
        extra=structured_log_extra(
            event="stale_result_discarded",
            address="rAlice",
            sequence=2,
            custom_field="value",
        ),
    )

    payload = json.loads(stream.getvalue())

    assert payload["event"] == "stale_result_discarded"
    assert payload["address"] == "rAlice"
    assert payload["sequence"] == 2
    assert payload["custom_field"] == "value"
    assert payload["env"] == DEFAULT_ENV
    assert payload["message"] == "log message"
    assert payload["level"] == "INFO"


def test_json_formatter_includes_exception_text():
    stream = io.StringIO()
    logger = _build_logger(stream)

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        logger.exception("task failed", extra=structured_log_extra(event="view_task_failed"))

    payload = json.loads(stream.getvalue())

    assert payload["event"] == "view_task_failed"
    assert "RuntimeError: boom" in payload["exception"]


def test_configure_logging_installs_single_json_handler():
    root = logging.getLogger()
    previous_handlers = list(root.handlers)
    previous_level = root.level
    try:
        configure_logging(level=logging.DEBUG, env="staging")
        configure_logging(level=logging.DEBUG, env="staging")

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        formatter = root.handlers[0].formatter
        assert isinstance(formatter, JsonFormatter)
        assert formatter.env == "staging"
    finally:
        root.handlers = previous_handlers
        root.setLevel(previous_level)
