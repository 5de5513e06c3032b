"""Retry policy applied to a single Zenodo request."""

from dataclasses import dataclass


@dataclass
class RetryPolicy:
    """Configuration for the retry loop of one request."""

    max_retries: int = 3
    base_delay: float = 1.0  # seconds
    use_exponential_backoff: bool = True
    respect_rate_limit: bool = True

    def __post_init__(self):
        """Validate configuration."""
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.base_delay <= 0:
            raise ValueError(f"base_delay must be > 0, got {self.base_delay}")
