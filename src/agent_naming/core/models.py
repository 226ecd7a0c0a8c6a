"""Core data models for agent-naming."""

import base64
import json
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model that speaks camelCase on the wire and snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict using wire (camelCase) names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AgentCapability(WireModel):
    """One discrete ability an agent offers."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Capability name, used as the discovery key")
    version: str = Field(description="Capability version")
    description: str = Field(default="", description="Human-readable description")
    permissions: list[str] = Field(
        default_factory=list, description="Permissions granted (set semantics)"
    )

    @field_validator("permissions")
    @classmethod
    def dedupe_permissions(cls, v: list[str]) -> list[str]:
        """Drop duplicate permissions, keeping first-seen order."""
        return list(dict.fromkeys(v))


class AgentEndpoint(WireModel):
    """Network location hint for reaching an agent."""

    model_config = ConfigDict(frozen=True)

    protocol: str = Field(description="Transport protocol, e.g. http")
    address: str = Field(description="Host name or address")
    port: Optional[int] = Field(default=None, description="Port number")
    path: Optional[str] = Field(default=None, description="Path on the host")


class AgentMetadata(WireModel):
    """Everything a peer can learn about a registered agent."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Agent name")
    version: str = Field(description="Agent version")
    capabilities: list[AgentCapability] = Field(default_factory=list)
    provider: str = Field(description="Organisation operating the agent")
    endpoints: list[AgentEndpoint] = Field(default_factory=list)
    environment: str = Field(default="", description="Deployment environment")
    security_clearance: int = Field(default=0, description="Clearance level")
    certificate: Optional[str] = Field(default=None, description="Certificate PEM")
    public_key: Optional[str] = Field(default=None, description="Public key PEM")

    def capability_names(self) -> list[str]:
        """Names of all declared capabilities, in declaration order."""
        return [capability.name for capability in self.capabilities]

    def has_capability(self, capability: str) -> bool:
        """Check if the agent declares a capability (exact name match)."""
        return any(c.name == capability for c in self.capabilities)


class AgentName(WireModel):
    """Parsed form of a canonical agent name."""

    model_config = ConfigDict(frozen=True)

    protocol: str
    agent_id: str
    capability: str
    provider: str
    version: str
    extension: Optional[str] = None

    @classmethod
    def parse(cls, ans_name: str) -> "AgentName":
        """Parse a canonical name string."""
        from .names import parse_ans_name

        return parse_ans_name(ans_name)

    def __str__(self) -> str:
        from .names import generate_ans_name

        return generate_ans_name(self)


class AgentRegistration(WireModel):
    """The unit stored by the directory for one agent."""

    ans_name: str = Field(description="Canonical agent name")
    metadata: AgentMetadata
    certificate: str = Field(description="Agent certificate PEM")
    public_key: str = Field(description="Agent public key PEM")
    private_key: Optional[str] = Field(
        default=None,
        description="Agent private key PEM; accepted for compatibility, never stored",
    )


class CapabilityProof(BaseModel):
    """Signed assertion that the signer holds a named capability."""

    capability: str = Field(description="Capability being proven")
    timestamp: int = Field(description="Creation time, ms since the Unix epoch")
    nonce: str = Field(description="Random identifier")
    signature: str = Field(description="Base64 signature over SHA-256(capability)")

    def to_token(self) -> str:
        """Serialize proof to base64-of-JSON."""
        json_str = json.dumps(self.model_dump(), separators=(",", ":"))
        return base64.b64encode(json_str.encode("utf-8")).decode("utf-8")

    @classmethod
    def from_token(cls, token: str) -> "CapabilityProof":
        """Deserialize proof from base64-of-JSON."""
        json_str = base64.b64decode(token).decode("utf-8")
        return cls.model_validate_json(json_str)


class ValidationResult(BaseModel):
    """Result of validating a bearer token."""

    valid: bool = Field(description="Whether validation succeeded")
    error: Optional[str] = Field(default=None, description="Error message if invalid")

    # If valid, extracted information
    subject: Optional[str] = Field(
        default=None, description="Common name of the caller's certificate"
    )
    issuer: Optional[str] = Field(
        default=None, description="Common name of the certificate issuer"
    )
    certificate: Optional[str] = Field(
        default=None, description="Caller certificate PEM"
    )
    ca_issued: bool = Field(
        default=False, description="Whether the certificate chains to the CA"
    )
    claims: Optional[dict[str, Any]] = Field(default=None, description="Token claims")

    validated_at: datetime = Field(
        default_factory=datetime.now, description="Validation timestamp"
    )

    def __bool__(self) -> bool:
        """Allow using ValidationResult in boolean context."""
        return self.valid
