"""Logging for the Anchor guidance service.

Emits structured log records to stdout and appends them to an append-only
log file for local review. User text and model output are never logged.
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger("anchor")


def setup_logging(log_file: str) -> None:
    """Configure the service logger with stdout and file handlers.

    Args:
        log_file: Path to the append-only log file.
    """
    logger.setLevel(logging.INFO)

    if not logger.handlers:
        stdout_handler = logging.StreamHandler()
        stdout_handler.setLevel(logging.INFO)
        stdout_fmt = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
        stdout_handler.setFormatter(stdout_fmt)
        logger.addHandler(stdout_handler)

        log_path = Path(log_file)
        os.makedirs(log_path.parent, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a")
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(stdout_fmt)
        logger.addHandler(file_handler)


def log_guidance(
    *,
    request_id: str,
    model: str,
    outcome: str,
    input_chars: int,
    duration_ms: Optional[int] = None,
    error: Optional[str] = None
) -> None:
    """Log a single guidance request as one JSON line.

    Args:
        request_id: Client-assigned request ID.
        model: The model identifier sent to the provider.
        outcome: "success" or the failing error kind (e.g. "transport_error").
        input_chars: Length of the user's text.
        duration_ms: Wall time of the call, including calls that failed
            before any request was sent.
        error: Error detail if the request failed.
    """
    record: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": request_id,
        "model": model,
        "outcome": outcome,
        "input_chars": input_chars,
    }

    if duration_ms is not None:
        record["duration_ms"] = duration_ms

    if error:
        record["error"] = error

    if outcome == "success":
        logger.info(json.dumps(record))
    else:
        logger.warning(json.dumps(record))
