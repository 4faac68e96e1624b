"""Configuration settings with TOML and environment variable support."""

import os
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Backend = Literal["browser", "static"]
WaitUntil = Literal["commit", "domcontentloaded", "load", "networkidle"]


class Settings(BaseSettings):
    """Fetch settings loaded from pagefetch.toml and environment variables.

    Precedence order:
    1. Environment variables (with PAGEFETCH_ prefix)
    2. pagefetch.toml file (see _find_config_file for search order)
    3. Default values

    Example environment variables:
        PAGEFETCH_VERBOSE=true
        PAGEFETCH_BACKEND=static
        PAGEFETCH_BUDGET_S=10
    """

    verbose: bool = False
    backend: Backend = "browser"
    headless: bool = True

    # Timing
    budget_s: float = Field(20.0, gt=0)
    safety_margin_s: float = Field(2.0, ge=0)
    dns_timeout_s: float = Field(5.0, gt=0)

    # Navigation
    max_attempts: int = Field(2, ge=1)
    retry_delay_s: float = Field(0.25, ge=0)
    wait_until: WaitUntil = "networkidle"
    user_agent: str = Field(
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGEFETCH_",
        extra="ignore",
    )

    # Application constants (not configurable)
    CONFIG_FILENAME: ClassVar[str] = "pagefetch.toml"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Customize settings sources to include TOML file."""
        config_file = _find_config_file()
        if config_file:
            return (
                init_settings,
                env_settings,
                _TomlSettingsSource(settings_cls, config_file),
            )
        return (init_settings, env_settings)

    @model_validator(mode="after")
    def _margin_within_budget(self) -> "Settings":
        if self.safety_margin_s >= self.budget_s:
            raise ValueError(
                f"safety_margin_s ({self.safety_margin_s}) must be smaller "
                f"than budget_s ({self.budget_s})"
            )
        return self

    @property
    def navigation_timeout_s(self) -> float:
        """Per-navigation timeout, so the renderer gives up before the deadline."""
        return self.budget_s - self.safety_margin_s


class _TomlSettingsSource:
    """Custom settings source that reads from [pagefetch] section in TOML."""

    def __init__(self, settings_cls: type[BaseSettings], toml_file: Path):
        self.settings_cls = settings_cls
        self.toml_file = toml_file

    def __call__(self) -> dict:
        """Load settings from [pagefetch] section."""
        import tomllib

        with open(self.toml_file, "rb") as f:
            data = tomllib.load(f)

        return data.get("pagefetch", {})


def _find_config_file() -> Path | None:
    """Find pagefetch.toml in standard locations.

    Search order:
    1. PAGEFETCH_CONFIG environment variable
    2. ./pagefetch.toml (current directory)
    3. $XDG_CONFIG_HOME/pagefetch/pagefetch.toml or ~/.config/pagefetch/pagefetch.toml
    4. ~/.pagefetch.toml (home directory)

    Returns:
        First existing config file path, or None if not found.
    """
    if env_path := os.getenv("PAGEFETCH_CONFIG"):
        path = Path(env_path).expanduser()
        if path.exists():
            return path

    path = Path.cwd() / Settings.CONFIG_FILENAME
    if path.exists():
        return path

    config_home = os.getenv("XDG_CONFIG_HOME", Path.home() / ".config")
    path = Path(config_home) / "pagefetch" / Settings.CONFIG_FILENAME
    if path.exists():
        return path

    path = Path.home() / f".{Settings.CONFIG_FILENAME}"
    if path.exists():
        return path

    return None
