"""Settings resolution: env vars, then .env, then an optional TOML file, then defaults."""

from functools import lru_cache
from pathlib import Path
from typing import Any

import tomlkit
from pydantic import SecretStr
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

CONFIG_PATH = Path.home() / ".config" / "pr-status" / "config.toml"


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/pr-status/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    with CONFIG_PATH.open() as fh:
        return tomlkit.load(fh)


class _TomlConfigSource(PydanticBaseSettingsSource):
    """Top-level keys of config.toml that name a settings field."""

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        doc = _load_toml().unwrap()
        return {k: v for k, v in doc.items() if k in self.settings_cls.model_fields}


class PrStatusSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PR_STATUS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Polling
    poll_interval: float = 30.0  # seconds between ticks

    # Per-call time bounds (seconds)
    branch_timeout: float = 3.0
    repo_timeout: float = 5.0
    query_timeout: float = 10.0

    # GitHub
    review_thread_limit: int = 100
    github_token: SecretStr | None = None  # falls back to `gh auth token`
    graphql_url: str = "https://api.github.com/graphql"

    # Executables
    gh_path: str = "gh"
    git_path: str = "git"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings, dotenv_settings, _TomlConfigSource(settings_cls), file_secret_settings)


def get_settings() -> PrStatusSettings:
    """Resolve settings. Nothing is required: a missing config file yields defaults.

    Precedence (highest to lowest):
    1. PR_STATUS_* env vars
    2. .env in cwd
    3. ~/.config/pr-status/config.toml
    4. Field defaults
    """
    return PrStatusSettings()
