"""Configuration management for the Zenodo client"""

from pydantic import Field
from pydantic_settings import BaseSettings

from zenodo_client.resilience.policy import RetryPolicy


class Settings(BaseSettings):
    """Client settings, read from the environment or a ``.env`` file.

    Example .env:
        ZENODO_ACCESS_TOKEN=...
        ZENODO_HOST=zenodo.org
        ZENODO_MAX_RETRIES=5
    """

    # ===== Connection =====
    zenodo_access_token: str | None = None
    zenodo_host: str = Field(
        default="sandbox.zenodo.org",
        description="Zenodo host; use zenodo.org for production"
    )
    zenodo_timeout: float = 60.0  # Per-attempt HTTP timeout (seconds)

    # ===== Retry configuration =====
    zenodo_max_retries: int = Field(default=3, ge=0)
    zenodo_retry_base_delay: float = Field(default=1.0, gt=0)  # Seconds
    zenodo_use_exponential_backoff: bool = True
    zenodo_respect_rate_limit: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @property
    def base_url(self) -> str:
        return f"https://{self.zenodo_host}/api/"

    def get_retry_policy(self) -> RetryPolicy:
        """Build the retry policy described by these settings."""
        return RetryPolicy(
            max_retries=self.zenodo_max_retries,
            base_delay=self.zenodo_retry_base_delay,
            use_exponential_backoff=self.zenodo_use_exponential_backoff,
            respect_rate_limit=self.zenodo_respect_rate_limit,
        )


# Global settings instance
settings = Settings()
