"""
Configuration using Pydantic settings.

Values come from (highest priority first) explicit keyword arguments, a
YAML file passed to ``RemoteSettings.from_yaml``, ``POSTMAN_*``
environment variables and the defaults below.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import httpx
import yaml
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from postman_remote.credentials.models import DEFAULT_ALIAS
from postman_remote.enums import CredentialTransport
from postman_remote.exceptions import ConfigurationError


class RemoteSettings(BaseSettings):
    """Settings for locating and authenticating Postman resources.

    Environment variables use the ``POSTMAN_`` prefix, for example
    ``POSTMAN_API_KEY`` or ``POSTMAN_CREDENTIAL_TRANSPORT=query``.
    """

    model_config = SettingsConfigDict(
        env_prefix="POSTMAN_",
        extra="ignore",
    )

    api_host: str = Field(default="api.getpostman.com", description="Postman API host name")
    api_key: SecretStr | None = Field(default=None, description="API key used instead of a stored profile")
    api_key_alias: str = Field(default=DEFAULT_ALIAS, description="Profile alias to resolve the API key from")
    credential_transport: CredentialTransport = Field(
        default=CredentialTransport.HEADER,
        description="Send the API key as X-Api-Key header or apikey query parameter",
    )
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    rc_file: Path = Field(default=Path("~/.postman/newmanrc"), description="Home rc file holding profiles")
    project_rc_file: Path = Field(default=Path(".newmanrc"), description="Project rc file overriding the home one")
    use_project_rc: bool = Field(default=True, description="Read profiles from the project rc file too")

    @field_validator("api_host")
    @classmethod
    def _strip_scheme(cls, value: str) -> str:
        """Accept ``https://host/`` as well as a bare host name."""
        value = re.sub(r"^https?://", "", value.strip(), flags=re.IGNORECASE).rstrip("/")
        if not value:
            raise ValueError("api_host must not be empty")
        try:
            httpx.URL(f"https://{value}")
        except httpx.InvalidURL as e:
            raise ValueError(f"api_host is not a valid host: {e}") from e
        return value

    @property
    def explicit_api_key(self) -> str | None:
        return self.api_key.get_secret_value() if self.api_key else None

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> RemoteSettings:
        """Load settings from a YAML file.

        Supports ${VAR_NAME} and ${VAR_NAME:-default} substitution.

        Raises:
            ConfigurationError: If the file is missing, unreadable or invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            yaml_content = config_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Replace ${VAR} and ${VAR:-default} placeholders, skipping comment lines."""
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))
