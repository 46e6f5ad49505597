"""Application configuration loaded from environment variables.

Uses ``pydantic-settings`` for automatic env-var loading, type coercion,
and ``.env`` file support.  Provider choice and per-provider credentials are
*not* configured here -- they live in the user-editable settings store
(see ``adjutant.services.settings_store``).
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

VERSION = "0.1.0"


class Settings(BaseSettings):
    """Process settings -- sourced from environment / ``.env`` file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    FRONTEND_URL: str = "http://localhost:3000"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""  # optional rotating file log, e.g. logs/adjutant.log

    # Where the provider/key snapshot is persisted (one JSON document).
    SETTINGS_FILE: str = "~/.adjutant/settings.json"

    # Default parent directory for scaffolded projects when the caller
    # does not pass one (CLI only -- the API always requires targetPath).
    PROJECTS_DIR: str = "created-projects"

    # Fixed latency of the stub backend, per call.
    MOCK_LATENCY_SECONDS: float = Field(default=1.0, ge=0)

    # Pause after each persisted file so observers can follow along.
    AGENT_STEP_DELAY_SECONDS: float = Field(default=0.5, ge=0)

    # HTTP backends -- the runner itself never times out a task.
    LLM_TIMEOUT_SECONDS: float = 300.0
    LLM_MAX_RETRIES: int = Field(default=2, ge=0)
    LLM_MAX_TOKENS: int = 8192


settings = Settings()
