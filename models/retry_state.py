"""Observable retry state."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class RetryState:
    """Progress of the current execute_with_retry call."""
    is_retrying: bool = False
    attempts: int = 0
    last_error: Optional[BaseException] = None
