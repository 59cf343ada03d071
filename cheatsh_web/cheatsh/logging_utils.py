import logging
import time
from typing import Optional

from .config import settings


def setup_logger(name: str = "cheatsh", level: Optional[str] = None) -> logging.Logger:
    """Setup standardized logger with UTF-8 support."""
    logger = logging.getLogger(name)

    if not logger.handlers:  # Avoid duplicate handlers
        handler = logging.StreamHandler()
        # Cheat sheets are full of non-ASCII box drawing characters
        if hasattr(handler.stream, 'reconfigure'):
            handler.stream.reconfigure(encoding='utf-8')

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if level is None:
        level = settings.log_level

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger


def log_relay(logger: logging.Logger,
              request_id: str,
              query: str,
              status_code: int,
              duration_ms: float,
              body_length: Optional[int] = None,
              output_format: str = "text",
              error: Optional[str] = None) -> None:
    """Log one relayed request in a structured format."""

    log_data = {
        "request_id": request_id,
        "query": query,
        "status": status_code,
        "format": output_format,
        "duration_ms": round(duration_ms, 1)
    }

    if body_length is not None:
        log_data["body_length"] = body_length

    if error:
        log_data["error"] = error

    success = error is None and 200 <= status_code < 400
    status_icon = "✅" if success else "❌"

    if error:
        logger.error(f"{status_icon} Relay: {log_data}")
    else:
        logger.info(f"{status_icon} Relay: {log_data}")


def create_request_id() -> str:
    """Create unique request ID for tracking."""
    return f"req_{int(time.time() * 1000)}"


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)
