import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pr_review.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FOLDER = Path(".config") / "openai"
CONFIG_FILENAME = "config.toml"


@dataclass(frozen=True)
class Settings:
    openai_completion_url: str = "https://api.openai.com/v1/chat/completions"
    openai_model: str = "gpt-3.5-turbo-1106"
    temperature: float = 0.5
    config_path: Path | None = None  # None -> ~/.config/openai/config.toml
    gh_binary: str = "gh"
    openai_request_timeout: float | None = None
    require_config: bool = False
    error_exit_code: int = 0
    log_level: str = "WARNING"


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, convert, default):
    """Read a numeric env var; an invalid value falls back to the default."""
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return convert(value.strip())
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %r", name, value, default)
        return default


def get_settings() -> Settings:
    defaults = Settings()
    config_path = os.environ.get("PR_REVIEW_CONFIG")
    return Settings(
        openai_completion_url=os.environ.get(
            "PR_REVIEW_API_URL", defaults.openai_completion_url
        ),
        openai_model=os.environ.get("PR_REVIEW_MODEL", defaults.openai_model),
        config_path=Path(config_path).expanduser() if config_path else None,
        gh_binary=os.environ.get("PR_REVIEW_GH_BINARY", defaults.gh_binary),
        openai_request_timeout=_env_number(
            "PR_REVIEW_TIMEOUT", float, defaults.openai_request_timeout
        ),
        require_config=_env_bool("PR_REVIEW_REQUIRE_CONFIG", defaults.require_config),
        error_exit_code=_env_number(
            "PR_REVIEW_ERROR_EXIT_CODE", int, defaults.error_exit_code
        ),
        log_level=os.environ.get("PR_REVIEW_LOG_LEVEL", defaults.log_level),
    )


class ApiKeySection(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str = ""


class PromptSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Loaded for completeness; the review prompt is fixed.
    custom: str = ""


class FileConfig(BaseModel):
    """Contents of the user's ``config.toml``."""

    model_config = ConfigDict(frozen=True)

    apikey: ApiKeySection = Field(default_factory=ApiKeySection)
    prompt: PromptSection = Field(default_factory=PromptSection)


def resolve_config_path(settings: Settings) -> Path:
    """Return the config file location, deriving it from the home directory
    when no explicit path is configured."""
    if settings.config_path is not None:
        return settings.config_path
    try:
        home = Path.home()
    except (RuntimeError, KeyError) as e:
        raise ConfigError("Error getting current user home directory") from e
    return home / CONFIG_FOLDER / CONFIG_FILENAME


def load_config(settings: Settings) -> FileConfig:
    """Read and validate the TOML config file.

    Raises ConfigError if the home directory cannot be resolved, the file
    cannot be opened, or its contents do not match the expected structure.
    """
    path = resolve_config_path(settings)
    logger.debug("Loading config from %s", path)

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Error parsing TOML file: {e}") from e
    except OSError as e:
        raise ConfigError(f"Error opening TOML file: {e}") from e

    try:
        return FileConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Error parsing TOML file: {e}") from e
