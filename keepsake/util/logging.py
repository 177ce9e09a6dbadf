"""
Structured logging for capture, embedding, retrieval and answer generation.
"""

import logging
import os
from typing import Any, Dict, List


def _truncate(value: Any, limit: int = 50) -> Any:
    if isinstance(value, str) and len(value) > limit:
        return value[:limit] + "..."
    return value


class StructuredLogger:
    """Structured logger for store, embedding, retrieval and generation operations."""

    def __init__(self, name: str = "keepsake"):
        self.logger = logging.getLogger(name)
        level_name = os.getenv("LOG_LEVEL", "INFO").upper().strip()
        self.logger.setLevel(getattr(logging, level_name, logging.INFO))

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

        if status == "failed":
            self.logger.error(message)
        else:
            self.logger.info(message)

    def log_store_operation(self, operation: str, item_id: str, content_type: str = None, status: str = "success"):
        """Log a content store write."""
        details = {"item_id": item_id}
        if content_type is not None:
            details["content_type"] = content_type

        self.log_operation(f"store.{operation}", status, details)

    def log_embedding(self, model: str, text_length: int, dimension: int = None, status: str = "success", details: Dict[str, Any] = None):
        """Log an embedding call."""
        log_details = {"model": model, "text_length": text_length}
        if dimension is not None:
            log_details["dimension"] = dimension
        if details:
            log_details.update(details)

        self.log_operation("embedding.generate", status, log_details)

    def log_retrieval(self, query: str, candidates: int, returned: int, details: Dict[str, Any] = None):
        """Log a retrieval pass over the content store."""
        log_details = {
            "query": _truncate(query),
            "candidates": candidates,
            "returned": returned
        }
        if details:
            log_details.update(details)

        self.log_operation("retrieval.rank", "success", log_details)

    def log_generation(self, model: str, prompt_length: int, start_time: float, end_time: float, status: str = "success", details: Dict[str, Any] = None):
        """Log a generation call with its duration."""
        duration_ms = round((end_time - start_time) * 1000, 2)
        log_details = {
            "model": model,
            "prompt_length": prompt_length,
            "duration_ms": duration_ms
        }
        if details:
            log_details.update(details)

        self.log_operation("generation.complete", status, log_details)

    def log_answer(self, question: str, sources: int, confidence: str):
        """Log a completed question-answering request."""
        self.log_operation("rag.answer", "success", {
            "question": _truncate(question),
            "sources": sources,
            "confidence": confidence
        })

    def log_reconcile(self, scanned: int, embedded: int, unchanged: int, failed: int, errors: List[str] = None):
        """Log the outcome of an embedding reconcile sweep."""
        log_details = {
            "scanned": scanned,
            "embedded": embedded,
            "unchanged": unchanged,
            "failed": failed
        }
        if errors:
            log_details["errors"] = [_truncate(e, 100) for e in errors[:5]]

        status = "partial" if failed else "success"
        self.log_operation("reconcile.sweep", status, log_details)

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


# Global logger instance
logger = StructuredLogger()


def sanitize_payload(payload: Any, sensitive_fields: List[str] = None) -> Any:
    """Truncate long strings and drop image blobs before a payload is logged."""
    if sensitive_fields is None:
        sensitive_fields = ['image_data', 'imageData']

    if isinstance(payload, dict):
        sanitized = {}
        for k, v in payload.items():
            if k in sensitive_fields:
                sanitized[k] = "[OMITTED]"
            else:
                sanitized[k] = sanitize_payload(v, sensitive_fields)
        return sanitized
    elif isinstance(payload, str):
        return _truncate(payload, 100)
    elif isinstance(payload, list):
        return [sanitize_payload(item, sensitive_fields) for item in payload]
    else:
        return payload
