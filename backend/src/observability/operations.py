"""Logging and counting of rejected portal operations."""

import logging
from contextlib import contextmanager
from typing import Optional

from domain.errors import PortalError
from .metrics import rejected_operations_total

logger = logging.getLogger(__name__)


@contextmanager
def log_rejection(operation: str, email: Optional[str]):
    """Log and count portal errors raised inside the block, then re-raise."""
    try:
        yield
    except PortalError as e:
        rejected_operations_total.labels(error=e.code).inc()
        logger.warning(
            f"{operation} rejected for {email or 'unknown'}: {e.message}",
            extra={"email": email},
        )
        raise
