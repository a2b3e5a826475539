"""Configuration - Credentials and transport settings for the gateway client.

A Configuration carries exactly one credential mode, decided once when the
model is built: merchant API keys, an OAuth access token, or an OAuth
client id/secret pair. The mode is inferred from which credentials are
supplied unless given explicitly.

Configurations can be built directly or loaded from YAML with ${ENV_VAR}
substitution via load_configuration().
"""

from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any, Self

import certifi
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from braintree_gateway.exceptions import ConfigurationError


class Environment(str, Enum):
    """Gateway environments and where they live."""

    DEVELOPMENT = "development"
    INTEGRATION = "integration"
    QA = "qa"
    SANDBOX = "sandbox"
    PRODUCTION = "production"

    @property
    def server(self) -> str:
        return _ENVIRONMENT_SERVERS[self]

    @property
    def port(self) -> int:
        if self in (Environment.DEVELOPMENT, Environment.INTEGRATION):
            return int(os.environ.get("GATEWAY_PORT", "3000"))
        return 443

    @property
    def ssl_on(self) -> bool:
        return self not in (Environment.DEVELOPMENT, Environment.INTEGRATION)

    @property
    def protocol(self) -> str:
        return "https" if self.ssl_on else "http"


_ENVIRONMENT_SERVERS: dict[Environment, str] = {
    Environment.DEVELOPMENT: "localhost",
    Environment.INTEGRATION: "localhost",
    Environment.QA: "gateway.qa.braintreepayments.com",
    Environment.SANDBOX: "api.sandbox.braintreegateway.com",
    Environment.PRODUCTION: "api.braintreegateway.com",
}


class CredentialMode(str, Enum):
    """Which credentials authenticate requests."""

    KEYS = "keys"
    ACCESS_TOKEN = "access_token"
    CLIENT_CREDENTIALS = "client_credentials"


# Required fields per credential mode
_MODE_FIELDS: dict[CredentialMode, tuple[str, ...]] = {
    CredentialMode.KEYS: ("merchant_id", "public_key", "private_key"),
    CredentialMode.ACCESS_TOKEN: ("access_token",),
    CredentialMode.CLIENT_CREDENTIALS: ("client_id", "client_secret"),
}

# The environment tag whose recordings also save the raw request side-car
MOCK_REQUEST_LOG_ENVIRONMENT = Environment.SANDBOX


class Configuration(BaseModel):
    """Credentials and transport settings for one gateway connection.

    Usage:
        config = Configuration(
            environment="sandbox",
            merchant_id="my_merchant",
            public_key="public",
            private_key="private",
        )
        config.base_url  # "https://api.sandbox.braintreegateway.com:443"
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    environment: Environment = Field(description="Target gateway environment")
    credential_mode: CredentialMode = Field(description="Active credential mode")

    merchant_id: str | None = Field(default=None, description="Merchant account id")
    public_key: str | None = Field(default=None, description="API public key")
    private_key: str | None = Field(default=None, description="API private key")
    access_token: str | None = Field(default=None, description="OAuth access token")
    client_id: str | None = Field(default=None, description="OAuth client id")
    client_secret: str | None = Field(default=None, description="OAuth client secret")

    timeout: float = Field(default=60.0, gt=0, description="Request timeout in seconds")
    ca_file: str = Field(
        default_factory=certifi.where,
        description="CA bundle used to verify the gateway certificate",
    )

    proxy_host: str | None = Field(default=None, description="Proxy host name")
    proxy_port: int | None = Field(default=None, description="Proxy port")
    proxy_type: str | None = Field(
        default=None, description="Proxy scheme, e.g. http or socks5 (default http)"
    )

    use_mock_response: bool = Field(
        default=False, description="Replay recorded fixtures instead of calling the gateway"
    )
    save_mock_response: bool = Field(
        default=False, description="Record real responses as fixtures"
    )
    mock_responses_dir: Path = Field(
        default=Path("mock_responses"), description="Directory holding mock fixtures"
    )

    @model_validator(mode="before")
    @classmethod
    def infer_credentials(cls, data: Any) -> Any:
        """Fill environment, merchant_id and credential_mode from the credentials.

        Access tokens look like ``access_token$<environment>$<merchant_id>$<secret>``
        and client ids like ``client_id$<environment>$<id>``; both imply their
        environment, and access tokens also imply the merchant.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)

        access_token = data.get("access_token")
        client_id = data.get("client_id")

        if access_token:
            parts = str(access_token).split("$")
            if len(parts) < 4 or parts[0] != "access_token":
                raise ValueError("access_token is not of the form access_token$<environment>$...")
            _merge_implied(data, "environment", parts[1], "access_token")
            _merge_implied(data, "merchant_id", parts[2], "access_token")
        elif client_id:
            parts = str(client_id).split("$")
            if len(parts) < 3 or parts[0] != "client_id":
                raise ValueError("client_id is not of the form client_id$<environment>$...")
            _merge_implied(data, "environment", parts[1], "client_id")

        if data.get("credential_mode") is None:
            if access_token:
                data["credential_mode"] = CredentialMode.ACCESS_TOKEN
            elif data.get("public_key") or data.get("private_key"):
                data["credential_mode"] = CredentialMode.KEYS
            elif client_id or data.get("client_secret"):
                data["credential_mode"] = CredentialMode.CLIENT_CREDENTIALS
            else:
                raise ValueError(
                    "No credentials configured: expected public_key/private_key, "
                    "access_token, or client_id/client_secret"
                )
        return data

    @model_validator(mode="after")
    def check_mode_fields(self) -> Self:
        missing = [name for name in _MODE_FIELDS[self.credential_mode] if not getattr(self, name)]
        if missing:
            raise ValueError(
                f"Credential mode '{self.credential_mode.value}' requires: {', '.join(missing)}"
            )
        if (self.proxy_host is None) != (self.proxy_port is None):
            raise ValueError("proxy_host and proxy_port must be set together")
        return self

    @property
    def base_url(self) -> str:
        env = self.environment
        return f"{env.protocol}://{env.server}:{env.port}"

    @property
    def merchant_path(self) -> str:
        """Path prefix for merchant-scoped resources."""
        if not self.merchant_id:
            raise ConfigurationError("merchant_id is required for merchant-scoped requests")
        return f"/merchants/{self.merchant_id}"

    @property
    def ssl_on(self) -> bool:
        return self.environment.ssl_on

    @property
    def is_access_token(self) -> bool:
        return self.credential_mode is CredentialMode.ACCESS_TOKEN

    @property
    def is_using_proxy(self) -> bool:
        return self.proxy_host is not None

    @property
    def proxy_url(self) -> str | None:
        if not self.is_using_proxy:
            return None
        scheme = self.proxy_type or "http"
        return f"{scheme}://{self.proxy_host}:{self.proxy_port}"

    def __repr__(self) -> str:
        # Secrets stay out of logs and tracebacks
        return (
            f"Configuration(environment={self.environment.value!r}, "
            f"merchant_id={self.merchant_id!r}, "
            f"credential_mode={self.credential_mode.value!r})"
        )


def _merge_implied(data: dict[str, Any], key: str, implied: str, source: str) -> None:
    """Set data[key] from a credential, rejecting conflicts with an explicit value."""
    explicit = data.get(key)
    if explicit is None:
        data[key] = implied
        return
    explicit_value = explicit.value if isinstance(explicit, Enum) else str(explicit)
    if explicit_value != implied:
        raise ValueError(
            f"{key} '{explicit_value}' conflicts with '{implied}' implied by {source}"
        )


# =============================================================================
# Loading
# =============================================================================


def load_configuration(config_path: Path) -> Configuration:
    """Load a Configuration from YAML with ${ENV_VAR} substitution."""
    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigurationError("Config file must be a YAML mapping")

    raw_config = _substitute_env_vars(raw_config)

    # Relative fixture directories are resolved against the config file
    mock_dir = raw_config.get("mock_responses_dir")
    if isinstance(mock_dir, str) and not Path(mock_dir).is_absolute():
        raw_config["mock_responses_dir"] = (config_path.parent / mock_dir).resolve()

    try:
        return Configuration.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config structure: {e}") from e


def _substitute_env_vars(data: Any) -> Any:
    """Recursively substitute ${ENV_VAR} patterns in strings within data."""
    if isinstance(data, str):
        return _substitute_string(data)
    elif isinstance(data, dict):
        return {k: _substitute_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars(item) for item in data]
    return data


def _substitute_string(s: str) -> str:
    """Substitute ${ENV_VAR} patterns. Raises ConfigurationError if env var is not set."""
    pattern = re.compile(r"\$\{([^}]+)\}")

    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigurationError(f"Environment variable '{var_name}' is not set")
        return value

    return pattern.sub(replacer, s)
