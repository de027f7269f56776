"""Runtime configuration model."""

import os

from pydantic import BaseModel, field_validator

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class FixturaConfig(BaseModel):
    """Process-wide fixture settings.

    Args:
        default_adapter: Entry-point name of the adapter used by factories
            defined without an explicit adapter.
        concurrent_many: Fan out build_many/create_many items concurrently.
            Sequence values are then not guaranteed to follow index order.
        log_level: Level applied to the ``fixtura`` logger by the CLI.
    """

    default_adapter: str = "object"
    concurrent_many: bool = False
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{value}'. Must be one of: {', '.join(LOG_LEVELS)}"
            )
        return level


def load_config() -> FixturaConfig:
    """Build a config from ``FIXTURA_*`` environment variables.

    Returns:
        FixturaConfig with environment overrides applied.

    Raises:
        pydantic.ValidationError: If a variable holds an invalid value.
    """
    values: dict[str, str] = {}
    env_map = {
        "FIXTURA_ADAPTER": "default_adapter",
        "FIXTURA_CONCURRENT_MANY": "concurrent_many",
        "FIXTURA_LOG_LEVEL": "log_level",
    }
    for env_name, field_name in env_map.items():
        value = os.environ.get(env_name)
        if value:
            values[field_name] = value
    return FixturaConfig(**values)


# Active configuration, loaded lazily from the environment
_config: FixturaConfig | None = None


def get_config() -> FixturaConfig:
    """Return the active configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: FixturaConfig | None) -> None:
    """Replace the active configuration. None reloads from the environment."""
    global _config
    _config = config
