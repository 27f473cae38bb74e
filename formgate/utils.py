"""
Utility functions for FormGate

Provides logging setup and privacy-safe helpers for log output
"""

import hashlib
import logging
from pathlib import Path
from typing import Optional


# ═══════════════════════════════════════════════════════════════════
# LOGGING
# ═══════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure logging for FormGate"""
    level = getattr(logging, log_level.upper())

    handlers = [logging.StreamHandler()]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers
    )


def get_logger(name: str) -> logging.Logger:
    """Get logger instance for module"""
    return logging.getLogger(name)


# ═══════════════════════════════════════════════════════════════════
# REDACTION
# ═══════════════════════════════════════════════════════════════════

def hash_ip(ip: Optional[str]) -> str:
    """Return a one-way hash of the client IP for privacy-safe logging."""
    if not ip:
        return "unknown"
    return hashlib.sha256(ip.encode()).hexdigest()[:12]


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """Mask all but the last ``visible`` characters of a secret."""
    if not value:
        return ""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
