"""Tests for structured logging helpers."""

import structlog

from blobcms.core.config import Settings
from blobcms.core.logging import (
    LoggingContext,
    add_correlation_id,
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    new_correlation_id,
    rename_message_field,
)


def test_rename_message_field():
    event = rename_message_field(None, "info", {"event": "Schema created"})
    assert event == {"message": "Schema created"}


def test_add_correlation_id_keeps_existing():
    event = add_correlation_id(None, "info", {"correlation_id": "abc"})
    assert event["correlation_id"] == "abc"


def test_add_correlation_id_generates_when_missing():
    event = add_correlation_id(None, "info", {})
    assert event["correlation_id"].startswith("cid_")


def test_logging_context_binds_and_unbinds():
    with LoggingContext(command="schemas.list"):
        assert structlog.contextvars.get_contextvars()["command"] == "schemas.list"
    assert "command" not in structlog.contextvars.get_contextvars()


def test_configure_logging_json_mode_does_not_raise():
    settings = Settings(storage_provider="memory", environment="production", log_format="json")
    configure_logging(settings)
    get_logger("blobcms.test").info("configured", mode="json")
    structlog.reset_defaults()


def test_bind_correlation_id_and_clear_context():
    bind_correlation_id("cid_fixed")
    assert structlog.contextvars.get_contextvars()["correlation_id"] == "cid_fixed"

    clear_context()
    assert structlog.contextvars.get_contextvars() == {}


def test_new_correlation_id_is_unique():
    first, second = new_correlation_id(), new_correlation_id()
    assert first.startswith("cid_")
    assert first != second
