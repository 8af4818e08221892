"""
Structured logging for the librarian retrieval core.
Every module logs through the shared `logger` instance defined at the bottom.
"""

import logging
from typing import Any, Dict, List

QUERY_PREVIEW_CHARS = 50


class StructuredLogger:
    """Structured logger for catalog, embedding, index and chat operations."""

    def __init__(self, name: str = "librarian"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status in ("failed", "error"):
            self.logger.error(message)
        elif status in ("fallback", "degraded"):
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_embedding_operation(self, operation: str, book_id: int, details: Dict[str, Any] = None, status: str = "success"):
        """Log a per-book embedding operation (store write, generation)."""
        log_details = {"book_id": book_id}
        if details:
            log_details.update(details)

        self.log_operation(f"embedding.{operation}", status, log_details)

    def log_index_event(self, event: str, status: str = "success", details: Dict[str, Any] = None):
        """Log a similarity index lifecycle event (initialize, refresh, search)."""
        self.log_operation(f"index.{event}", status, details)

    def log_fallback(self, component: str, reason: str):
        """Log that a remote strategy failed and the local fallback was used."""
        self.log_operation(f"{component}.fallback", "fallback", {"reason": str(reason)[:100]})

    def log_chat_request(self, route: str, message: str, is_book_request: bool, result_count: int = 0, status: str = "success"):
        """Log a chat route request with the user message truncated."""
        log_details = {
            "message": _preview(message),
            "is_book_request": is_book_request,
            "result_count": result_count
        }
        self.log_operation(f"chat.{route}", status, log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


def _preview(text: str) -> str:
    if text is None:
        return ""
    return text[:QUERY_PREVIEW_CHARS] + "..." if len(text) > QUERY_PREVIEW_CHARS else text


# Global logger instance
logger = StructuredLogger()


def sanitize_payload(payload: Any, sensitive_fields: List[str] = None) -> Any:
    """Sanitize payloads for logging: redact credentials, truncate long strings."""
    if sensitive_fields is None:
        sensitive_fields = ['api_key', 'openai_api_key', 'secret', 'password', 'token']

    if isinstance(payload, dict):
        sanitized = {}
        for k, v in payload.items():
            if k.lower() in sensitive_fields:
                sanitized[k] = "[REDACTED]" if v else v
            else:
                sanitized[k] = sanitize_payload(v, sensitive_fields)
        return sanitized
    elif isinstance(payload, str):
        # Truncate long strings
        return payload[:100] + "..." if len(payload) > 100 else payload
    elif isinstance(payload, list):
        return [sanitize_payload(item, sensitive_fields) for item in payload]
    else:
        return payload
