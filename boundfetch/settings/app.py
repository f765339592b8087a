"""Application settings powered by Pydantic BaseSettings."""

from pydantic import Field, NonNegativeFloat, NonNegativeInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment overrides for the process-wide fetch defaults.

    Every fetch option can be set with a ``BOUNDFETCH_`` prefixed variable,
    e.g. ``BOUNDFETCH_MAX_LENGTH=1048576``. The value ``none`` selects the
    unbounded setting for budgets and the byte limit.
    """

    model_config = SettingsConfigDict(
        env_prefix="BOUNDFETCH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        env_parse_none_str="none",
        extra="ignore",
    )

    redir_retry: NonNegativeInt | None = None
    conn_retry: NonNegativeInt | None = None
    open_timeout: NonNegativeFloat | None = None
    read_timeout: NonNegativeFloat | None = None
    total_timeout: NonNegativeFloat | None = None
    max_length: NonNegativeInt | None = None
    allow_strange_ports: bool | None = None
    ignore_content_overflows: bool | None = None
    verify_tls: bool | None = None
    retry_backoff: NonNegativeFloat | None = None
    user_agent: str | None = None
    default_content_language: str | None = None
    default_content_type: str | None = None
    default_charset: str | None = None

    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=True)

    def option_overrides(self) -> dict[str, object]:
        """Return the fetch options explicitly set in the environment."""
        ignored = {"log_level", "log_json"}
        return {
            name: getattr(self, name)
            for name in sorted(self.model_fields_set)
            if name not in ignored
        }


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
