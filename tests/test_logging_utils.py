"""Tests for structured logging helpers."""
import logging

from amee_layer.logging_utils import get_logger, log_operation


def test_get_logger_namespace():
    assert get_logger("amee_layer.carbon_store").name == "amee_layer.carbon_store"
    assert get_logger("client").name == "amee_layer.client"


def test_log_operation_extra_context(caplog):
    logger = get_logger("test")

    with caplog.at_level(logging.INFO):
        log_operation(logger, operation="add_to_amee", outcome="success", profile_item_uid="ABC123")

    assert "add_to_amee: success" in caplog.text
    record = caplog.records[0]
    assert record.operation == "add_to_amee"
    assert record.profile_item_uid == "ABC123"


def test_log_operation_level(caplog):
    logger = get_logger("test")

    with caplog.at_level(logging.WARNING):
        log_operation(logger, operation="quiet", outcome="success", level=logging.DEBUG)
        log_operation(logger, operation="loud", outcome="failed", level=logging.ERROR)

    assert "quiet" not in caplog.text
    assert "loud: failed" in caplog.text
