"""
Structured logging helpers.
"""

import logging

from util.logging import StructuredLogger, sanitize_payload


def test_sanitize_payload_redacts_credentials():
    payload = {"api_key": "sk-secret", "OPENAI_API_KEY": "sk-other", "query": "mystery", "token": ""}

    sanitized = sanitize_payload(payload)

    assert sanitized["api_key"] == "[REDACTED]"
    assert sanitized["OPENAI_API_KEY"] == "[REDACTED]"
    assert sanitized["query"] == "mystery"
    assert sanitized["token"] == ""


def test_sanitize_payload_truncates_nested_strings():
    sanitized = sanitize_payload({"errors": [{"message": "x" * 150}]})
    assert sanitized["errors"][0]["message"] == "x" * 100 + "..."


def test_levels_follow_status(caplog):
    log = StructuredLogger("librarian.test")

    with caplog.at_level(logging.INFO, logger="librarian.test"):
        log.log_index_event("initialize", "success", {"books": 3})
        log.log_fallback("composer.recommend", "ChatServiceError: connection refused")
        log.log_embedding_operation("generate", 7, status="failed")

    levels = [(r.levelno, r.getMessage()) for r in caplog.records]
    assert levels[0] == (logging.INFO, "Operation: index.initialize, Status: success, Details: {'books': 3}")
    assert levels[1][0] == logging.WARNING
    assert "composer.recommend.fallback" in levels[1][1]
    assert levels[2] == (logging.ERROR, "Operation: embedding.generate, Status: failed, Details: {'book_id': 7}")


def test_chat_request_truncates_message(caplog):
    log = StructuredLogger("librarian.test")

    with caplog.at_level(logging.INFO, logger="librarian.test"):
        log.log_chat_request("recommend", "a" * 80, True, 3)

    message = caplog.records[0].getMessage()
    assert "'message': '" + "a" * 50 + "...'" in message
    assert "'result_count': 3" in message
