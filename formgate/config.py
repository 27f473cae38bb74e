"""
Configuration management for FormGate

Loads settings from:
1. config/config.yaml
2. Environment variables (FORMGATE_*, .env)
3. Default values
"""

from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Load environment variables
load_dotenv()

DEFAULT_CONFIG_FILE = Path(__file__).parent.parent / "config" / "config.yaml"


class GatewaySettings(BaseSettings):
    """Process-wide settings for the submission gateway."""

    model_config = SettingsConfigDict(
        env_prefix="FORMGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # --- Site configuration ---
    sites_dir: Path = Field(default=Path("sites"))

    # --- Entry pipeline ---
    pipeline_url: str = Field(default="")
    pipeline_timeout: float = 30.0

    # --- reCAPTCHA ---
    recaptcha_verify_url: str = Field(default="https://www.google.com/recaptcha/api/siteverify")
    recaptcha_timeout: float = 10.0

    # --- Analytics ---
    analytics_ua_tracking_id: str = Field(default="")
    analytics_collect_url: str = Field(default="https://www.google-analytics.com/collect")

    # --- API Settings ---
    api_host: str = "0.0.0.0"
    api_port: int = 8080
    cors_origins: str = "*"  # Comma-separated string

    # --- Logging ---
    log_level: str = Field(default="INFO")
    log_file: Optional[Path] = None

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def analytics_enabled(self) -> bool:
        return bool(self.analytics_ua_tracking_id)

    @classmethod
    def from_yaml(cls, yaml_path: str | Path = DEFAULT_CONFIG_FILE) -> "GatewaySettings":
        """Load configuration from YAML file; keys it sets win over the environment."""
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            return cls()

        with open(yaml_path) as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)


# Global configuration instance
_config: Optional[GatewaySettings] = None


def get_config() -> GatewaySettings:
    """Get or create global configuration instance"""
    global _config
    if _config is None:
        _config = GatewaySettings.from_yaml()
    return _config


def reload_config(yaml_path: Optional[str | Path] = None) -> GatewaySettings:
    """Reload configuration from file"""
    global _config
    _config = GatewaySettings.from_yaml(yaml_path) if yaml_path else GatewaySettings.from_yaml()
    return _config
