"""Environment-driven settings for megaverse.

Every knob the tool consumes comes from environment variables or a
``.env`` file in the working directory, validated by pydantic at startup.
CLI options override individual values (see ``megaverse.cli.app``).

Fields
──────
candidate_id        : Candidate identifier sent with every request (``CANDIDATE_ID``)
base_url            : API root, one trailing slash stripped (``BASE_URL``)
concurrency         : Maximum in-flight create/delete calls (``CONCURRENCY``)
dry_run             : Print the plan, send nothing (``DRY_RUN``)
retries             : Retries per action after the first attempt (``RETRIES``)
base_delay_ms       : Backoff base for actions (``BASE_DELAY_MS``)
goal_retries        : Retries for fetching the goal map (``GOAL_RETRIES``)
goal_base_delay_ms  : Backoff base for fetching the goal map (``GOAL_BASE_DELAY_MS``)
request_timeout     : httpx timeout per request in seconds (``REQUEST_TIMEOUT``)
attempt_timeout     : Optional deadline per attempt in seconds (``ATTEMPT_TIMEOUT``)
log_level           : structlog level (``LOG_LEVEL``)
log_json            : Force JSON (true) or console (false) logs (``LOG_JSON``)

Examples:
    >>> from megaverse.core.settings import MegaverseSettings
    >>> s = MegaverseSettings(candidate_id="abc")
    >>> s.concurrency
    8
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://challenge.crossmint.io/api"


class MegaverseSettings(BaseSettings):
    """Settings shared by every megaverse command."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Remote ───────────────────────────────────────────────────
    candidate_id: str = ""
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = Field(default=30.0, gt=0)

    # ── Execution ────────────────────────────────────────────────
    concurrency: int = Field(default=8, ge=1)
    dry_run: bool = False
    retries: int = Field(default=6, ge=0)
    base_delay_ms: int = Field(default=900, ge=0)
    goal_retries: int = Field(default=4, ge=0)
    goal_base_delay_ms: int = Field(default=800, ge=0)
    attempt_timeout: float | None = Field(default=None, gt=0)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.removesuffix("/")

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


@lru_cache(maxsize=1)
def get_settings() -> MegaverseSettings:
    """Return the process-wide settings, loaded once."""
    return MegaverseSettings()


def clear_settings_cache() -> None:
    """Forget cached settings (tests, or after changing the environment)."""
    get_settings.cache_clear()
