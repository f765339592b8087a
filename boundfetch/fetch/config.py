"""Configuration models for the fetch layer."""

from collections.abc import Mapping
from typing import Annotated, Any, ClassVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    field_validator,
)

from boundfetch.fetch.constants import (
    DEFAULT_CHARSET,
    DEFAULT_CONNECTION_RETRY_BUDGET,
    DEFAULT_CONTENT_LANGUAGE,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_MAX_LENGTH_BYTES,
    DEFAULT_OPEN_TIMEOUT_SECONDS,
    DEFAULT_READ_TIMEOUT_SECONDS,
    DEFAULT_REDIRECT_BUDGET,
    DEFAULT_RETRY_BACKOFF_SECONDS,
    DEFAULT_TOTAL_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)
from boundfetch.settings import get_settings


class UnknownOptionError(ValueError):
    """Raised when options contain keys that are not recognized."""

    def __init__(self, keys: list[str]) -> None:
        """Initialize the error.

        Args:
            keys: The unrecognized option names.
        """
        self.keys = keys
        super().__init__(f"unknown options: {', '.join(keys)}")


class FetchOptions(BaseModel):
    """Limits and defaults for fetching a single resource.

    ``None`` means unbounded for ``redir_retry``, ``conn_retry`` and
    ``max_length``. A timeout of 0 disables that timeout.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    redir_retry: NonNegativeInt | None = DEFAULT_REDIRECT_BUDGET
    conn_retry: NonNegativeInt | None = DEFAULT_CONNECTION_RETRY_BUDGET
    open_timeout: NonNegativeFloat = DEFAULT_OPEN_TIMEOUT_SECONDS
    read_timeout: NonNegativeFloat = DEFAULT_READ_TIMEOUT_SECONDS
    total_timeout: NonNegativeFloat = DEFAULT_TOTAL_TIMEOUT_SECONDS
    max_length: NonNegativeInt | None = DEFAULT_MAX_LENGTH_BYTES
    allow_strange_ports: bool = False
    ignore_content_overflows: bool = False
    verify_tls: bool = Field(
        default=True,
        description="Verify TLS certificates; False is insecure",
    )
    retry_backoff: NonNegativeFloat = DEFAULT_RETRY_BACKOFF_SECONDS
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        DEFAULT_USER_AGENT
    )
    default_content_language: Annotated[str, Field(min_length=1)] = (
        DEFAULT_CONTENT_LANGUAGE
    )
    default_content_type: Annotated[str, Field(min_length=1)] = DEFAULT_CONTENT_TYPE
    default_charset: Annotated[str, Field(min_length=1)] = DEFAULT_CHARSET

    @field_validator(
        "default_content_language",
        "default_content_type",
        "default_charset",
    )
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        """Lowercase and strip symbolic option values."""
        v = v.strip().lower()
        if not v:
            msg = "value must not be blank"
            raise ValueError(msg)
        return v

    @field_validator("default_charset")
    @classmethod
    def validate_charset(cls, v: str) -> str:
        """Ensure the default charset can decode bodies."""
        try:
            b"".decode(v)
        except LookupError as e:
            msg = f"Unknown charset: {v}"
            raise ValueError(msg) from e
        return v

    @classmethod
    def option_names(cls) -> frozenset[str]:
        """Names of all recognized options."""
        return frozenset(cls.model_fields)

    @classmethod
    def check_keys(cls, overrides: Mapping[str, Any]) -> dict[str, Any]:
        """Normalize option names and reject unknown ones.

        Args:
            overrides: Mapping of option name to value.

        Returns:
            Dictionary with lower-cased option names.

        Raises:
            UnknownOptionError: If any name is not a recognized option.
            TypeError: If overrides is not a mapping.
        """
        if not isinstance(overrides, Mapping):
            msg = f"malformed options: {type(overrides).__name__} is not a mapping"
            raise TypeError(msg)
        normalized = {
            str(key).strip().lower(): value for key, value in overrides.items()
        }
        unknown = sorted(set(normalized) - cls.option_names())
        if unknown:
            raise UnknownOptionError(unknown)
        return normalized

    def with_overrides(
        self, overrides: Mapping[str, Any] | None = None
    ) -> "FetchOptions":
        """Return new options with the given values merged over these.

        Args:
            overrides: Mapping of option name to value.

        Returns:
            Validated FetchOptions instance.

        Raises:
            UnknownOptionError: If any name is not a recognized option.
            pydantic.ValidationError: If a value is out of range.
        """
        if not overrides:
            return self
        merged = self.model_dump()
        merged.update(self.check_keys(overrides))
        return FetchOptions.model_validate(merged)


class OptionsRegistry:
    """Holder for default options applied to new resources.

    Pass a registry explicitly where isolation matters; ``get_instance()``
    returns the process-wide one, seeded from the built-in defaults and the
    ``BOUNDFETCH_*`` environment.
    """

    _instance: ClassVar["OptionsRegistry | None"] = None

    def __init__(self, defaults: FetchOptions | None = None) -> None:
        """Initialize the registry.

        Args:
            defaults: Starting defaults (built-in defaults if omitted).
        """
        self._seed = defaults or FetchOptions()
        self._defaults = self._seed

    @classmethod
    def get_instance(cls) -> "OptionsRegistry":
        """Get the process-wide registry."""
        if cls._instance is None:
            seed = FetchOptions().with_overrides(get_settings().option_overrides())
            cls._instance = cls(seed)
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the process-wide registry (primarily for testing)."""
        cls._instance = None

    @property
    def defaults(self) -> FetchOptions:
        """Get the current default options."""
        return self._defaults

    def configure(
        self,
        overrides: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> FetchOptions:
        """Merge overrides into the defaults.

        Args:
            overrides: Mapping of option name to value.
            **kwargs: Further overrides by keyword.

        Returns:
            The new default options.

        Raises:
            UnknownOptionError: If any name is not a recognized option.
        """
        merged = {**(overrides or {}), **kwargs}
        self._defaults = self._defaults.with_overrides(merged)
        return self._defaults

    def resolve(
        self, options: FetchOptions | Mapping[str, Any] | None = None
    ) -> FetchOptions:
        """Build the options for one resource.

        Args:
            options: Complete options, or overrides for the defaults.

        Returns:
            Validated FetchOptions instance.
        """
        if isinstance(options, FetchOptions):
            return options
        return self._defaults.with_overrides(options)

    def reset(self) -> None:
        """Restore the defaults this registry was created with."""
        self._defaults = self._seed


def get_registry() -> OptionsRegistry:
    """Get the process-wide options registry."""
    return OptionsRegistry.get_instance()
