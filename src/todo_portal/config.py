from enum import Enum
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from todo_portal.exceptions import ConfigError


class XsrfPolicy(str, Enum):
    CONSTANT = "constant"  # reverse proxy enforces a fixed header value
    COOKIE = "cookie"  # application echoes the XSRF-TOKEN cookie


class LogoutMethod(str, Enum):
    GET = "GET"  # navigate the user to the logout endpoint
    POST = "POST"  # background call, then navigate home


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TODO_PORTAL_APP_")
    name: str = "todo-portal"
    version: str = "1.0.0"
    title: str = "Identity-aware SPA"


class ApiSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TODO_PORTAL_API_")
    base_url: str = "https://localhost:3000"
    home_page: str = "https://localhost:9001"
    verify_tls: bool = True  # disable only for local self-signed setups
    timeout_seconds: Optional[float] = None
    cookies: dict[str, str] = {}


class SecuritySettings(BaseSettings):
    """
    Anti-forgery header policy. Pick one per deployment:
    - constant: value must match the access gateway policy
    - cookie: value is read from the XSRF-TOKEN cookie set by the application
    """
    model_config = SettingsConfigDict(env_prefix="TODO_PORTAL_SECURITY_")
    xsrf_policy: XsrfPolicy = XsrfPolicy.CONSTANT
    xsrf_header: str = "X-Xsrf-Token"
    xsrf_constant: str = "constant-value"
    xsrf_cookie: str = "XSRF-TOKEN"


class SessionSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TODO_PORTAL_SESSION_")
    refresh_interval_seconds: float = 5.0
    admin_group: str = "sre"
    logout_method: LogoutMethod = LogoutMethod.GET


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TODO_PORTAL_LOGGING_")
    log_requests: bool = True
    level: str = "INFO"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TODO_PORTAL_", env_nested_delimiter="__", env_file=".env", extra="ignore"
    )
    app: AppSettings = AppSettings()
    api: ApiSettings = ApiSettings()
    security: SecuritySettings = SecuritySettings()
    session: SessionSettings = SessionSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        default_path = Path("config/settings.yaml")
        path = config_path or (default_path if default_path.exists() else None)

        if not path:
            return cls()

        if not Path(path).exists():
            raise ConfigError(f"Config file not found: {path}")

        with open(path, "r") as f:
            config_data = yaml.safe_load(f) or {}

        try:
            return cls(**config_data)
        except ValidationError as exc:
            raise ConfigError(f"Invalid config in {path}: {exc}") from exc


settings = Settings.load()
