"""Canonical agent name codec.

Canonical form::

    protocol://agentId.capability.provider.vVersion[.extension]

No segment may contain a dot except the optional extension.
"""

import re

from .errors import FormatError
from .models import AgentName

ANS_NAME_PATTERN = re.compile(
    r"^([^:]+)://([^.]+)\.([^.]+)\.([^.]+)\.v([^.]+)(?:\.(.+))?$"
)


def parse_ans_name(ans_name: str) -> AgentName:
    """Parse a canonical name into its components.

    Args:
        ans_name: Canonical agent name

    Returns:
        AgentName with protocol, agent_id, capability, provider, version
        and optional extension

    Raises:
        FormatError: If the name does not match the grammar
    """
    if not isinstance(ans_name, str):
        raise FormatError(f"Invalid ANS name format: {ans_name!r}")

    match = ANS_NAME_PATTERN.fullmatch(ans_name)
    if match is None:
        raise FormatError(f"Invalid ANS name format: {ans_name}")

    protocol, agent_id, capability, provider, version, extension = match.groups()
    return AgentName(
        protocol=protocol,
        agent_id=agent_id,
        capability=capability,
        provider=provider,
        version=version,
        extension=extension,
    )


def generate_ans_name(parts: AgentName) -> str:
    """Build the canonical name string from its components."""
    ans_name = (
        f"{parts.protocol}://{parts.agent_id}.{parts.capability}"
        f".{parts.provider}.v{parts.version}"
    )
    if parts.extension:
        ans_name += f".{parts.extension}"
    return ans_name


def validate_ans_name(ans_name: str) -> None:
    """Raise FormatError unless ans_name is a well-formed canonical name."""
    parse_ans_name(ans_name)
