"""Registry and client configuration.

Loads configuration from a YAML file and environment variables.
"""

import os
from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from .core.errors import ConfigurationError

ENV_PREFIX = "ANS_"


def _read_pem(inline: Optional[str], path: Optional[Path]) -> Optional[str]:
    if inline:
        return inline
    if path is None:
        return None
    try:
        return Path(path).read_text()
    except OSError as e:
        raise ConfigurationError(f"Cannot read PEM file {path}: {e}") from e


class TrustConfig(BaseModel):
    """Certificate authority material.

    Either both CA certificate and key are supplied (inline or as files) or
    neither, in which case a fresh CA is generated at startup.
    """

    ca_name: str = Field(default="ANS Root CA", description="CA common name")
    ca_cert: Optional[str] = Field(default=None, description="CA certificate PEM")
    ca_key: Optional[str] = Field(default=None, description="CA private key PEM")
    ca_cert_file: Optional[Path] = Field(default=None)
    ca_key_file: Optional[Path] = Field(default=None)

    def load_ca_cert(self) -> Optional[str]:
        """CA certificate PEM from inline value or file."""
        return _read_pem(self.ca_cert, self.ca_cert_file)

    def load_ca_key(self) -> Optional[str]:
        """CA private key PEM from inline value or file."""
        return _read_pem(self.ca_key, self.ca_key_file)


class GatewayConfig(BaseModel):
    """Bearer token authentication settings."""

    require_ca_issued: bool = Field(
        default=False,
        description="Only accept tokens whose certificate was issued by the CA",
    )
    public_paths: list[str] = Field(
        default_factory=lambda: ["/health", "/api/v1/ca"],
        description="Paths served without authentication",
    )
    enrollment_paths: list[str] = Field(
        default_factory=lambda: ["/api/v1/certificates"],
        description="Paths a self-signed caller may use even when "
        "require_ca_issued is set",
    )
    issuer: str = Field(default="ans-client", description="Expected token issuer")
    leeway: int = Field(default=0, description="Allowed clock skew in seconds")


class RegistryConfig(BaseModel):
    """Registry server configuration."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    storage: Literal["memory", "etcd", "redis"] = Field(default="memory")
    storage_config: dict[str, Any] = Field(default_factory=dict)
    log_level: str = Field(default="INFO")
    trust: TrustConfig = Field(default_factory=TrustConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)

    @classmethod
    def from_config(cls, config_path: str | Path) -> "RegistryConfig":
        """Load registry configuration from a YAML file.

        Args:
            config_path: Path to YAML config file

        Returns:
            RegistryConfig instance

        Raises:
            ConfigurationError: If config file cannot be loaded or parsed
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        try:
            with open(config_path, "r") as f:
                data = yaml.safe_load(f) or {}
            return cls.model_validate(data)
        except Exception as e:
            raise ConfigurationError(f"Failed to load registry config: {e}") from e

    @classmethod
    def from_env(cls, base: Optional["RegistryConfig"] = None) -> "RegistryConfig":
        """Overlay ANS_* environment variables on a base configuration.

        Recognised variables: ANS_HOST, ANS_PORT, ANS_STORAGE,
        ANS_CA_CERT_FILE, ANS_CA_KEY_FILE, ANS_REQUIRE_CA_ISSUED,
        ANS_LOG_LEVEL.
        """
        data = (base or cls()).model_dump()
        env = os.environ

        if f"{ENV_PREFIX}HOST" in env:
            data["host"] = env[f"{ENV_PREFIX}HOST"]
        if f"{ENV_PREFIX}PORT" in env:
            data["port"] = env[f"{ENV_PREFIX}PORT"]
        if f"{ENV_PREFIX}STORAGE" in env:
            data["storage"] = env[f"{ENV_PREFIX}STORAGE"]
        if f"{ENV_PREFIX}LOG_LEVEL" in env:
            data["log_level"] = env[f"{ENV_PREFIX}LOG_LEVEL"]
        if f"{ENV_PREFIX}CA_CERT_FILE" in env:
            data["trust"]["ca_cert_file"] = env[f"{ENV_PREFIX}CA_CERT_FILE"]
        if f"{ENV_PREFIX}CA_KEY_FILE" in env:
            data["trust"]["ca_key_file"] = env[f"{ENV_PREFIX}CA_KEY_FILE"]
        if f"{ENV_PREFIX}REQUIRE_CA_ISSUED" in env:
            data["gateway"]["require_ca_issued"] = env[
                f"{ENV_PREFIX}REQUIRE_CA_ISSUED"
            ].lower() in ("1", "true", "yes")

        try:
            return cls.model_validate(data)
        except Exception as e:
            raise ConfigurationError(f"Invalid environment configuration: {e}") from e

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "RegistryConfig":
        """Load from YAML (if given) then apply environment overrides."""
        base = cls.from_config(config_path) if config_path else None
        return cls.from_env(base)


class ClientConfig(BaseModel):
    """Client facade configuration."""

    registry_url: str = Field(description="Base URL of the registry")
    ca_cert: Optional[str] = Field(default=None, description="Trusted CA PEM")
    agent_cert: Optional[str] = Field(default=None, description="Agent certificate PEM")
    agent_key: Optional[str] = Field(default=None, description="Agent private key PEM")
    timeout: float = Field(default=5.0, description="Request timeout in seconds")
    protocol: str = Field(default="a2a", description="Protocol of generated names")
    default_capability: str = Field(
        default="general", description="Name segment when no capability is declared"
    )
    include_private_key: bool = Field(
        default=True,
        description="Send the private key in registrations (legacy wire schema)",
    )

    @model_validator(mode="after")
    def check_key_material(self) -> "ClientConfig":
        """Agent certificate and key must be supplied together."""
        if bool(self.agent_cert) != bool(self.agent_key):
            raise ValueError("agent_cert and agent_key must be supplied together")
        return self
