# NetBird API Exporter
# Copyright (C) 2025 Amirreza "Farnam" Taheri
# This program comes with ABSOLUTELY NO WARRANTY; for details type `show w`.
# This is free software, and you are welcome to redistribute it
# under certain conditions; type `show c` for details.

import logging
import re
from pathlib import Path
from typing import Iterable, Optional

from .constants import LOG_FORMAT


class SensitiveDataFilter(logging.Filter):
    """Filter to mask sensitive information in logs"""

    PATTERNS = {
        "auth_header": r"\b(Token|Bearer)\s+[A-Za-z0-9._~+/=\-]{8,}",
        "credential": r"(?:token|password|secret)\s*[=:]\s*[^\s,;]+",
        "email": r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}",
    }

    def __init__(self, secrets: Iterable[str] = ()):
        super().__init__()
        self.secrets = [s for s in secrets if s]

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()

        # Mask explicitly registered secrets first, e.g. the API token itself
        for secret in self.secrets:
            message = message.replace(secret, "[MASKED_CREDENTIAL]")

        # Mask authorization headers and key=value credentials
        message = re.sub(self.PATTERNS["auth_header"], r"\1 [MASKED_CREDENTIAL]", message)
        message = re.sub(self.PATTERNS["credential"], "[MASKED_CREDENTIAL]", message, flags=re.IGNORECASE)

        # Mask emails
        message = re.sub(self.PATTERNS["email"], "[MASKED_EMAIL]", message)

        record.msg = message
        record.args = ()
        return True


def resolve_level(log_level: str) -> Optional[int]:
    """Map a level name such as ``"debug"`` or ``"WARN"`` to its numeric value."""
    name = log_level.strip().upper()
    if name == "WARN":
        name = "WARNING"
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else None


def setup_logging(
    log_level: str = "INFO",
    mask_sensitive: bool = True,
    log_file: Optional[Path] = None,
    secrets: Iterable[str] = (),
):
    """Setup logging with optional sensitive data filtering"""

    root_logger = logging.getLogger()
    level = resolve_level(log_level)
    root_logger.setLevel(level if level is not None else logging.INFO)

    # Remove existing handlers to avoid duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Filters live on the handlers so records from child loggers are masked too
    if mask_sensitive:
        sensitive_filter = SensitiveDataFilter(secrets)
        for handler in root_logger.handlers:
            handler.addFilter(sensitive_filter)

    if level is None:
        logging.getLogger(__name__).warning(f"Invalid log level {log_level!r}, using info")
