"""Configuration management for the adwords package.

Configuration precedence (highest to lowest):
explicit overrides > environment variables > YAML file > defaults

The configuration is type-safe using dataclasses and validated on load.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

from adwords.core.constants import (
    API_VERSION,
    CONNECT_TIMEOUT_SECONDS,
    ENDPOINT_BASE,
    ENV_API_VERSION,
    ENV_BASIC_AUTH_LOGIN,
    ENV_BASIC_AUTH_PASSWORD,
    ENV_CLIENT_CUSTOMER_ID,
    ENV_DEVELOPER_TOKEN,
    ENV_ENDPOINT,
    ENV_INSECURE_SKIP_VERIFY,
    ENV_LOG_PAYLOADS,
    ENV_PARTIAL_FAILURE,
    ENV_USER_AGENT,
    ENV_VALIDATE_ONLY,
    USER_AGENT,
    ServiceGroup,
)
from adwords.core.exceptions import ConfigurationError


@dataclass(frozen=True)
class BasicAuth:
    """HTTP Basic credentials."""

    login: str
    password: str

    def __repr__(self) -> str:
        return f"BasicAuth(login={self.login!r}, password='***')"


@dataclass
class TransportConfig:
    """Settings for one SOAP endpoint."""

    url: str
    insecure_skip_verify: bool = False
    basic_auth: Optional[BasicAuth] = None
    connect_timeout: float = CONNECT_TIMEOUT_SECONDS
    log_payloads: bool = False
    redact_credentials: bool = True
    user_agent: str = USER_AGENT

    def __post_init__(self):
        if not self.url:
            raise ConfigurationError("Transport URL cannot be empty")
        if self.connect_timeout <= 0:
            raise ConfigurationError(
                f"Invalid connect timeout: {self.connect_timeout}",
                details={"connect_timeout": self.connect_timeout},
            )


@dataclass
class AdWordsHeaderConfig:
    """Values of the persistent AdWords SOAP request header."""

    client_customer_id: str = ""
    developer_token: str = ""
    user_agent: str = ""
    validate_only: bool = False
    partial_failure: bool = False


@dataclass
class ClientConfig:
    """Application-wide configuration."""

    developer_token: str
    client_customer_id: str
    user_agent: str = USER_AGENT
    validate_only: bool = False
    partial_failure: bool = False
    api_version: str = API_VERSION
    endpoint_base: str = ENDPOINT_BASE
    insecure_skip_verify: bool = False
    basic_auth: Optional[BasicAuth] = None
    log_payloads: bool = False
    redact_credentials: bool = True
    connect_timeout: float = CONNECT_TIMEOUT_SECONDS

    def service_url(self, group: ServiceGroup, service: str) -> str:
        """Compose the endpoint URL of a service.

        Args:
            group: Service group, e.g. ServiceGroup.CM
            service: Service name, e.g. "AdGroupCriterionService"

        Returns:
            Full endpoint URL
        """
        base = self.endpoint_base.rstrip("/")
        return f"{base}/{group.value}/{self.api_version}/{service}"

    def transport_config(self, url: str) -> TransportConfig:
        """Build the transport settings for one endpoint."""
        return TransportConfig(
            url=url,
            insecure_skip_verify=self.insecure_skip_verify,
            basic_auth=self.basic_auth,
            connect_timeout=self.connect_timeout,
            log_payloads=self.log_payloads,
            redact_credentials=self.redact_credentials,
        )

    def header_config(self) -> AdWordsHeaderConfig:
        """Build the persistent SOAP header values."""
        return AdWordsHeaderConfig(
            client_customer_id=self.client_customer_id,
            developer_token=self.developer_token,
            user_agent=self.user_agent,
            validate_only=self.validate_only,
            partial_failure=self.partial_failure,
        )


class ConfigurationManager:
    """Loads ClientConfig from a YAML file, the environment and overrides."""

    REQUIRED_KEYS = ("developer_token", "client_customer_id", "endpoint_base")

    ENV_MAPPING: Dict[str, str] = {
        "endpoint_base": ENV_ENDPOINT,
        "api_version": ENV_API_VERSION,
        "client_customer_id": ENV_CLIENT_CUSTOMER_ID,
        "developer_token": ENV_DEVELOPER_TOKEN,
        "user_agent": ENV_USER_AGENT,
        "validate_only": ENV_VALIDATE_ONLY,
        "partial_failure": ENV_PARTIAL_FAILURE,
        "insecure_skip_verify": ENV_INSECURE_SKIP_VERIFY,
        "log_payloads": ENV_LOG_PAYLOADS,
    }

    BOOL_KEYS = frozenset(
        {
            "validate_only",
            "partial_failure",
            "insecure_skip_verify",
            "log_payloads",
            "redact_credentials",
        }
    )

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize the configuration manager.

        Args:
            config_path: Optional YAML file with an ``adwords`` section
        """
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[ClientConfig] = None

    def load_config(self, **overrides: Any) -> ClientConfig:
        """Load the client configuration.

        Args:
            **overrides: Values that win over every other source

        Returns:
            ClientConfig instance

        Raises:
            ConfigurationError: If required values are missing or invalid
        """
        values: Dict[str, Any] = {
            "user_agent": USER_AGENT,
            "api_version": API_VERSION,
            "endpoint_base": ENDPOINT_BASE,
        }

        if self.config_path:
            values.update(self._load_yaml(self.config_path))

        values.update(self._load_env())
        values.update({k: v for k, v in overrides.items() if v is not None})

        known = {f.name for f in fields(ClientConfig)}
        unknown = sorted(set(values) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")
            for key in unknown:
                values.pop(key)

        missing = [key for key in self.REQUIRED_KEYS if not values.get(key)]
        if missing:
            raise ConfigurationError(
                f"Missing required configuration values: {', '.join(missing)}"
            )

        for key in self.BOOL_KEYS & set(values):
            values[key] = self._to_bool(values[key], key)

        # YAML reads bare customer ids as integers
        values["client_customer_id"] = str(values["client_customer_id"])
        values["developer_token"] = str(values["developer_token"])

        if "connect_timeout" in values:
            try:
                values["connect_timeout"] = float(values["connect_timeout"])
            except (TypeError, ValueError):
                raise ConfigurationError(
                    f"Invalid connect timeout: {values['connect_timeout']}"
                )

        self._config = ClientConfig(**values)
        logger.debug(
            f"Loaded AdWords configuration for customer {self._config.client_customer_id} "
            f"(API {self._config.api_version})"
        )
        return self._config

    def get_config(self) -> ClientConfig:
        """Get the loaded configuration.

        Raises:
            ConfigurationError: If configuration not loaded yet
        """
        if self._config is None:
            raise ConfigurationError(
                "Configuration not loaded. Call load_config() first."
            )
        return self._config

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Failed to parse YAML configuration: {path}",
                details={"error": str(e)},
            )

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {path}")

        section = data.get("adwords", data)
        values = dict(section)

        basic_auth = values.pop("basic_auth", None)
        if basic_auth:
            try:
                values["basic_auth"] = BasicAuth(
                    login=basic_auth["login"], password=basic_auth["password"]
                )
            except (KeyError, TypeError):
                raise ConfigurationError(
                    "basic_auth requires 'login' and 'password'",
                    details={"file": str(path)},
                )

        return values

    def _load_env(self) -> Dict[str, Any]:
        values = {}
        for key, env_var in self.ENV_MAPPING.items():
            value = os.getenv(env_var)
            if value is not None:
                values[key] = value

        login = os.getenv(ENV_BASIC_AUTH_LOGIN)
        password = os.getenv(ENV_BASIC_AUTH_PASSWORD)
        if login is not None and password is not None:
            values["basic_auth"] = BasicAuth(login=login, password=password)

        return values

    @staticmethod
    def _to_bool(value: Any, key: str) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("true", "1", "yes", "on"):
                return True
            if lowered in ("false", "0", "no", "off", ""):
                return False
        raise ConfigurationError(
            f"Invalid boolean value for {key}: {value!r}", details={"key": key}
        )
