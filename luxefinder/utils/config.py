"""Configuration management system using Pydantic v2 and YAML.

This module provides type-safe configuration loading with validation
for the LuxeFinder back end, scraper and UI. Marketplace credentials are
never read from YAML alone: the environment always wins.
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .exceptions import ConfigFileNotFoundError, ConfigurationMissingError


DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class EbayConfig(BaseModel):
    """Configuration for the eBay OAuth and Browse APIs."""

    auth_url: str = Field(
        default="https://api.ebay.com/identity/v1/oauth2/token",
        description="OAuth client-credentials token endpoint"
    )
    browse_url: str = Field(
        default="https://api.ebay.com/buy/browse/v1/item_summary/search",
        description="Browse API item summary search endpoint"
    )
    scope: str = Field(default="https://api.ebay.com/oauth/api_scope", description="OAuth scope")
    result_limit: int = Field(default=200, ge=1, le=200, description="Items requested per search call")
    timeout: float = Field(default=20.0, gt=0, description="Per-request timeout in seconds")
    default_country: str = Field(default="EBAY_AU", description="Marketplace used when none is requested")
    client_id: Optional[str] = Field(default=None, description="Overridden by EBAY_CLIENT_ID")
    client_secret: Optional[str] = Field(default=None, description="Overridden by EBAY_CLIENT_SECRET")

    def resolve_credentials(self) -> tuple[str, str]:
        """Return (client_id, client_secret), preferring the environment.

        Raises:
            ConfigurationMissingError: If either value is absent
        """
        client_id = os.environ.get('EBAY_CLIENT_ID') or self.client_id
        client_secret = os.environ.get('EBAY_CLIENT_SECRET') or self.client_secret

        missing = []
        if not client_id:
            missing.append('EBAY_CLIENT_ID')
        if not client_secret:
            missing.append('EBAY_CLIENT_SECRET')
        if missing:
            raise ConfigurationMissingError(
                "Missing eBay credentials. Please set EBAY_CLIENT_ID and EBAY_CLIENT_SECRET in .env file",
                missing=missing,
            )
        return client_id, client_secret


class VintedApiConfig(BaseModel):
    """Configuration for the hosted Vinted scraping API."""

    base_url: str = Field(default="https://vinted-scraping.vercel.app/", description="Catalogue endpoint")
    ebay_path: str = Field(default="ebay", description="Path of the eBay mirror endpoint")
    default_country: str = Field(default="pl", description="Vinted country code")
    items_per_page: int = Field(default=24, ge=1, le=200, description="Default catalogue page size")
    mirror_items_per_page: int = Field(default=50, ge=1, le=200, description="Default mirror page size")
    mirror_default_search: str = Field(default="laptop", description="Mirror search term when none is given")
    timeout: float = Field(default=20.0, gt=0, description="Per-request timeout in seconds")
    user_agent: str = Field(default=DESKTOP_USER_AGENT, description="User-Agent header")
    placeholder_image: str = Field(
        default="https://images.unsplash.com/photo-1553062407-98eeb64c6a62?w=400&h=400&fit=crop&auto=format",
        description="Image used when a listing has none"
    )

    @field_validator('base_url')
    @classmethod
    def ensure_trailing_slash(cls, v: str) -> str:
        """Keep base_url joinable with relative paths."""
        return v if v.endswith('/') else v + '/'


class ScraperConfig(BaseModel):
    """Configuration for the Playwright fallback scraper."""

    base_url: str = Field(default="https://www.vinted.com", description="Public catalogue host")
    headless: bool = Field(default=True, description="Run browser in headless mode")
    navigation_timeout: int = Field(default=10, ge=1, description="Navigation timeout in seconds")
    default_timeout: int = Field(default=15, ge=1, description="Default page operation timeout in seconds")
    max_retries: int = Field(default=2, ge=0, le=5, description="Retries after a transient failure")
    retry_backoff: float = Field(default=1.0, ge=0.0, description="Fixed delay between retries in seconds")
    settle_delay: float = Field(default=1.0, ge=0.0, description="Wait after DOM content loaded in seconds")
    user_agent: str = Field(default=DESKTOP_USER_AGENT, description="Fixed desktop user agent")
    viewport: list[int] = Field(default=[1280, 800], description="Viewport [width, height]")
    launch_args: list[str] = Field(
        default_factory=lambda: [
            '--no-sandbox',
            '--disable-setuid-sandbox',
            '--disable-dev-shm-usage',
            '--disable-gpu',
            '--no-first-run',
            '--disable-extensions',
        ],
        description="Chromium launch arguments"
    )
    placeholder_image: str = Field(
        default="https://via.placeholder.com/310x430?text=Vinted+Search+Unavailable",
        description="Image used by the degraded-mode placeholder item"
    )

    @field_validator('viewport')
    @classmethod
    def validate_viewport(cls, v: list[int]) -> list[int]:
        """Ensure viewport has exactly 2 positive values."""
        if len(v) != 2:
            raise ValueError("viewport must contain exactly 2 values [width, height]")
        if v[0] <= 0 or v[1] <= 0:
            raise ValueError("viewport values must be positive")
        return v


class ServerConfig(BaseModel):
    """Configuration for the FastAPI server."""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port")
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:8501"], description="Allowed origins")


class UIConfig(BaseModel):
    """Configuration for the Streamlit UI."""

    api_base_url: str = Field(default="http://localhost:8000", description="Back end base URL")
    request_timeout: float = Field(default=30.0, gt=0, description="Timeout for back end calls in seconds")
    items_per_page: int = Field(default=24, ge=1, description="Default page size")
    page_size_options: list[int] = Field(default=[12, 24, 48, 96], description="Selectable page sizes")
    demo_fallback: bool = Field(default=False, description="Show demonstration data when the back end times out")

    @field_validator('page_size_options')
    @classmethod
    def validate_page_size_options(cls, v: list[int]) -> list[int]:
        """Ensure at least one positive page size."""
        if not v or any(size <= 0 for size in v):
            raise ValueError("page_size_options must contain positive integers")
        return v


class AppConfig(BaseModel):
    """Root configuration model containing all sub-configurations."""

    ebay: EbayConfig = Field(default_factory=EbayConfig)
    vinted_api: VintedApiConfig = Field(default_factory=VintedApiConfig)
    scraper: ScraperConfig = Field(default_factory=ScraperConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    ui: UIConfig = Field(default_factory=UIConfig)
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Choose from: {valid_levels}")
        return v_upper


_config: Optional[AppConfig] = None


def load_config(config_path: Optional[Path | str] = None) -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to configuration file. Defaults to the
                    LUXEFINDER_CONFIG env var, then config/config.yaml
                    relative to the project root

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigFileNotFoundError: If config file doesn't exist
        pydantic.ValidationError: If configuration is invalid
    """
    if config_path is None:
        env_config_path = os.environ.get('LUXEFINDER_CONFIG')
        if env_config_path:
            config_path = Path(env_config_path)
        else:
            project_root = Path(__file__).parent.parent.parent
            config_path = project_root / "config" / "config.yaml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigFileNotFoundError(
            f"Configuration file not found: {config_path}. "
            f"Set LUXEFINDER_CONFIG to the config file path.",
            path=str(config_path),
        )

    with open(config_path, 'r', encoding='utf-8') as f:
        config_dict = yaml.safe_load(f) or {}

    return AppConfig.model_validate(config_dict)


def get_config(config_path: Optional[Path | str] = None, reload: bool = False) -> AppConfig:
    """Get configuration instance (singleton pattern).

    Args:
        config_path: Path to configuration file (only used on first call or if reload=True)
        reload: Force reload of configuration

    Returns:
        Cached or newly loaded AppConfig instance
    """
    global _config

    if _config is None or reload:
        _config = load_config(config_path)

    return _config


def reset_config() -> None:
    """Reset cached configuration (useful for testing)."""
    global _config
    _config = None
