"""Tests for registry and trust configuration loading."""

import pytest

from agent_naming import (
    RegistryConfig,
    TrustAuthority,
    TrustConfig,
    create_self_signed_certificate,
    generate_keypair,
)
from agent_naming.core.crypto import certificate_to_pem, private_key_to_pem
from agent_naming.core.errors import ConfigurationError


def test_defaults():
    """Defaults serve on port 3000 from memory with a lenient gateway."""
    config = RegistryConfig()

    assert config.port == 3000
    assert config.storage == "memory"
    assert config.gateway.require_ca_issued is False
    assert "/health" in config.gateway.public_paths


def test_from_config(tmp_path):
    """Settings are read from YAML."""
    path = tmp_path / "registry.yaml"
    path.write_text(
        "port: 8080\n"
        "log_level: DEBUG\n"
        "trust:\n"
        "  ca_name: Test CA\n"
        "gateway:\n"
        "  require_ca_issued: true\n"
    )

    config = RegistryConfig.from_config(path)

    assert config.port == 8080
    assert config.log_level == "DEBUG"
    assert config.trust.ca_name == "Test CA"
    assert config.gateway.require_ca_issued is True


def test_from_config_missing_file(tmp_path):
    """A missing file is a configuration error."""
    with pytest.raises(ConfigurationError, match="not found"):
        RegistryConfig.from_config(tmp_path / "missing.yaml")


def test_from_config_invalid_values(tmp_path):
    """Values failing validation are a configuration error."""
    path = tmp_path / "registry.yaml"
    path.write_text("storage: sqlite\n")

    with pytest.raises(ConfigurationError):
        RegistryConfig.from_config(path)


def test_from_env(monkeypatch):
    """ANS_* variables override the base configuration."""
    monkeypatch.setenv("ANS_PORT", "4000")
    monkeypatch.setenv("ANS_HOST", "127.0.0.1")
    monkeypatch.setenv("ANS_REQUIRE_CA_ISSUED", "true")

    config = RegistryConfig.from_env(RegistryConfig(log_level="WARNING"))

    assert config.port == 4000
    assert config.host == "127.0.0.1"
    assert config.log_level == "WARNING"
    assert config.gateway.require_ca_issued is True


def test_from_env_invalid(monkeypatch):
    """Invalid environment values are a configuration error."""
    monkeypatch.setenv("ANS_PORT", "not-a-port")

    with pytest.raises(ConfigurationError):
        RegistryConfig.from_env()


def test_trust_config_from_files(tmp_path, monkeypatch):
    """CA material can be loaded from files named in the environment."""
    keypair = generate_keypair()
    cert_file = tmp_path / "ca.crt"
    key_file = tmp_path / "ca.key"
    cert_file.write_text(
        certificate_to_pem(create_self_signed_certificate(keypair, "File CA"))
    )
    key_file.write_text(private_key_to_pem(keypair.private_key))
    monkeypatch.setenv("ANS_CA_CERT_FILE", str(cert_file))
    monkeypatch.setenv("ANS_CA_KEY_FILE", str(key_file))

    config = RegistryConfig.load()
    authority = TrustAuthority.from_config(config.trust)

    assert authority.ca_name == "File CA"


def test_trust_config_unreadable_file(tmp_path):
    """A PEM file that cannot be read is a configuration error."""
    config = TrustConfig(ca_cert_file=tmp_path / "missing.crt")

    with pytest.raises(ConfigurationError):
        config.load_ca_cert()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
