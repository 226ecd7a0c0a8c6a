"""Tests for the canonical agent name codec."""

import pytest

from agent_naming import AgentName, generate_ans_name, parse_ans_name
from agent_naming.core.errors import FormatError
from agent_naming.core.names import validate_ans_name

WELL_FORMED = [
    "a2a://model1.ml-inference.acme.v1.prod",
    "a2a://model1.ml-inference.acme.v1",
    "https://drift-detector.concept-drift.mlops.v2.0",
    "a2a://notifier.notification.acme.v3.eu.west.1",
    "mcp://x.y.z.vlatest",
]

MALFORMED = [
    "",
    "model1.ml-inference.acme.v1",
    "a2a://model1.ml-inference.acme",
    "a2a://model1.ml-inference.acme.1.prod",
    "a2a://model1..acme.v1",
    "a2a:/model1.ml-inference.acme.v1",
    "://model1.ml-inference.acme.v1",
    "a2a://model1.ml-inference.acme.v1.prod\n",
]


@pytest.mark.parametrize("ans_name", WELL_FORMED)
def test_generate_inverts_parse(ans_name):
    """generate(parse(s)) == s for well-formed names."""
    assert generate_ans_name(parse_ans_name(ans_name)) == ans_name


@pytest.mark.parametrize("ans_name", MALFORMED)
def test_malformed_names_rejected(ans_name):
    """Names missing mandatory groups fail with FormatError."""
    with pytest.raises(FormatError, match="Invalid ANS name format"):
        parse_ans_name(ans_name)


def test_parse_components():
    """Parsing yields all five mandatory groups and the extension."""
    name = parse_ans_name("a2a://model1.ml-inference.acme.v1.prod")

    assert name.protocol == "a2a"
    assert name.agent_id == "model1"
    assert name.capability == "ml-inference"
    assert name.provider == "acme"
    assert name.version == "1"
    assert name.extension == "prod"


def test_extension_is_optional():
    """Extension defaults to absent."""
    name = parse_ans_name("a2a://model1.ml-inference.acme.v1")
    assert name.extension is None


def test_extension_may_contain_dots():
    """Everything after the version belongs to the extension."""
    name = parse_ans_name("a2a://agent.cap.prov.v2.eu.west.1")
    assert name.version == "2"
    assert name.extension == "eu.west.1"


def test_parse_inverts_generate():
    """parse(generate(p)) == p for valid components."""
    parts = AgentName(
        protocol="a2a",
        agent_id="retrainer",
        capability="model-training",
        provider="acme",
        version="2",
        extension="staging",
    )
    generated = generate_ans_name(parts)

    assert generated == "a2a://retrainer.model-training.acme.v2.staging"
    assert parse_ans_name(generated) == parts


def test_str_and_parse_helpers():
    """AgentName renders as its canonical string."""
    ans_name = "a2a://model1.ml-inference.acme.v1.prod"
    assert str(AgentName.parse(ans_name)) == ans_name


def test_non_string_rejected():
    """Non-string input fails with FormatError rather than TypeError."""
    with pytest.raises(FormatError):
        parse_ans_name(None)


def test_validate_ans_name():
    """validate_ans_name accepts good names and rejects bad ones."""
    validate_ans_name("a2a://model1.ml-inference.acme.v1")
    with pytest.raises(FormatError):
        validate_ans_name("not-a-name")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
