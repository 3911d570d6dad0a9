from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from benkyo.domain.constants import EASY_GROWTH, GOOD_GROWTH, STICKY_LEARNED

CONFIG_FILES = [
    Path.home() / ".config/benkyo/config.toml",
    Path.home() / ".benkyo.toml",
]


class AppConfig(BaseSettings):
    """
    Configuration model for benkyo.
    Supports loading from:
    1. Environment variables (BENKYO_*)
    2. Config file (~/.config/benkyo/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="BENKYO_",
        extra="ignore",
    )

    # Storage
    store: Literal["memory", "json"] = "json"
    store_path: Path = Field(
        default_factory=lambda: Path.home() / ".local/share/benkyo/cards.json",
        validate_default=True,
    )

    # Server
    host: str = "127.0.0.1"
    port: int = 8777

    # Scheduling policy
    good_growth: int = GOOD_GROWTH
    easy_growth: int = EASY_GROWTH
    sticky_learned: bool = STICKY_LEARNED

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Find the first existing file
        toml_file = None
        for f in CONFIG_FILES:
            if f.exists():
                toml_file = f
                break

        # Earlier sources win: overrides, then environment, then the file.
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("store_path", mode="before")
    @classmethod
    def resolve_store_path(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def check_growth(self) -> "AppConfig":
        if not 1 <= self.good_growth <= self.easy_growth:
            raise ValueError("good_growth and easy_growth must satisfy 1 <= good <= easy")
        return self


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/benkyo/config.toml (if exists)
    3. Environment variables (BENKYO_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
