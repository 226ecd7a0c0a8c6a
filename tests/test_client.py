"""Tests for the AgentClient facade against an in-process registry."""

import asyncio

import httpx
import pytest
from pydantic import ValidationError

from agent_naming import (
    AgentClient,
    ClientConfig,
    InMemoryAgentDirectory,
    TrustAuthority,
)
from agent_naming.core.crypto import private_key_to_pem, public_key_to_pem
from agent_naming.core.errors import (
    NotFoundError,
    RegistrationError,
    TransportError,
    TrustError,
)
from agent_naming.core.events import AgentRegistered, ClientError
from agent_naming.server import create_app

from helpers import make_metadata

REGISTRY_URL = "http://registry.test"


@pytest.fixture
def directory(authority):
    return InMemoryAgentDirectory(authority)


@pytest.fixture
def transport(authority, directory):
    app = create_app(authority=authority, directory=directory)
    return httpx.ASGITransport(app=app)


@pytest.fixture
def make_client(transport):
    """Build clients that talk to the in-process registry."""

    def _make_client(**config) -> AgentClient:
        return AgentClient(
            ClientConfig(registry_url=REGISTRY_URL, **config),
            http_client=httpx.AsyncClient(transport=transport),
        )

    return _make_client


async def enrolled(client: AgentClient) -> AgentClient:
    await client.request_certificate("model", adopt=True)
    return client


@pytest.mark.asyncio
async def test_self_signed_registration_rejected(make_client):
    """A client still on its self-signed certificate cannot register."""
    client = make_client()
    events = []
    client.subscribe(events.append)

    with pytest.raises(RegistrationError) as excinfo:
        await client.register_agent("model1", make_metadata("model1", ["ml-inference"]))

    assert excinfo.value.ans_name == "a2a://model1.ml-inference.acme.v1.prod"
    assert len(events) == 1
    assert isinstance(events[0], ClientError)
    assert events[0].operation == "register"


@pytest.mark.asyncio
async def test_register_after_enrollment(make_client, directory):
    """After adopting a CA certificate the client registers successfully."""
    client = await enrolled(make_client())
    events = []
    client.subscribe(events.append)
    metadata = make_metadata("model1", ["ml-inference"])

    registration = await client.register_agent("model1", metadata)

    assert registration.ans_name == "a2a://model1.ml-inference.acme.v1.prod"
    assert registration.ans_name in directory
    assert events == [
        AgentRegistered(ans_name=registration.ans_name, metadata=metadata)
    ]


@pytest.mark.asyncio
async def test_registration_without_capabilities(make_client):
    """Agents with no capabilities are named with the default capability."""
    client = await enrolled(make_client())

    registration = await client.register_agent("idle", make_metadata("idle", []))

    assert registration.ans_name == "a2a://idle.general.acme.v1.prod"


@pytest.mark.asyncio
async def test_private_key_can_be_withheld(make_client):
    """include_private_key=False leaves the key out of the registration."""
    client = await enrolled(make_client(include_private_key=False))

    registration = await client.register_agent(
        "model1", make_metadata("model1", ["ml-inference"])
    )

    assert registration.private_key is None
    assert "privateKey" not in registration.to_wire()


@pytest.mark.asyncio
async def test_resolve_agent(make_client):
    """Registered agents resolve to their metadata."""
    client = await enrolled(make_client())
    metadata = make_metadata("model1", ["ml-inference"])
    registration = await client.register_agent("model1", metadata)

    resolved = await client.resolve_agent(registration.ans_name)

    assert resolved == metadata


@pytest.mark.asyncio
async def test_resolve_unknown_agent(make_client):
    """Unknown names raise NotFoundError."""
    client = make_client()

    with pytest.raises(NotFoundError, match="Failed to resolve agent"):
        await client.resolve_agent("a2a://ghost.x.acme.v1")


@pytest.mark.asyncio
async def test_discover_agents(make_client):
    """Discovery returns exactly the agents with the capability."""
    for name, capability in [
        ("model1", "ml-inference"),
        ("model2", "ml-inference"),
        ("trainer", "model-training"),
    ]:
        client = await enrolled(make_client())
        await client.register_agent(name, make_metadata(name, [capability]))

    found = await client.discover_agents("ml-inference")
    everything = await client.list_agents()

    assert sorted(agent.name for agent in found) == ["model1", "model2"]
    assert await client.discover_agents("ml-inference", provider="globex") == []
    assert len(everything) == 3


@pytest.mark.asyncio
async def test_verify_capability(make_client):
    """A client can prove a capability it registered with."""
    client = await enrolled(make_client())
    registration = await client.register_agent(
        "model1", make_metadata("model1", ["ml-inference"])
    )

    assert await client.verify_capability(registration.ans_name, "ml-inference")
    assert not await client.verify_capability(registration.ans_name, "training")
    assert not await client.verify_capability("a2a://ghost.x.acme.v1", "x")


@pytest.mark.asyncio
async def test_verify_capability_of_other_agent(make_client):
    """A client cannot prove another agent's capability with its own key."""
    owner = await enrolled(make_client())
    registration = await owner.register_agent(
        "model1", make_metadata("model1", ["ml-inference"])
    )
    other = make_client()

    assert not await other.verify_capability(registration.ans_name, "ml-inference")


@pytest.mark.asyncio
async def test_transport_errors():
    """Network failures surface as TransportError, or False from verify."""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = AgentClient(
        ClientConfig(registry_url=REGISTRY_URL),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(refuse)),
    )

    with pytest.raises(TransportError):
        await client.resolve_agent("a2a://model1.ml-inference.acme.v1")
    assert await client.verify_capability(
        "a2a://model1.ml-inference.acme.v1", "ml-inference"
    ) is False


@pytest.mark.asyncio
async def test_timeouts():
    """A registry that does not answer in time surfaces as TransportError."""

    def stall(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    client = AgentClient(
        ClientConfig(registry_url=REGISTRY_URL, timeout=0.1),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(stall)),
    )

    with pytest.raises(TransportError, match="timed out"):
        await client.resolve_agent("a2a://model1.ml-inference.acme.v1")
    assert await client.verify_capability(
        "a2a://model1.ml-inference.acme.v1", "ml-inference"
    ) is False


@pytest.mark.asyncio
async def test_remove_agent(make_client):
    """Removing returns True once, then False."""
    client = await enrolled(make_client())
    registration = await client.register_agent(
        "model1", make_metadata("model1", ["ml-inference"])
    )

    assert await client.remove_agent(registration.ans_name) is True
    assert await client.remove_agent(registration.ans_name) is False


@pytest.mark.asyncio
async def test_fetch_ca_certificate(make_client, authority):
    """The CA certificate is downloaded and checked against a pinned CA."""
    client = make_client(ca_cert=authority.get_ca_certificate())

    assert await client.fetch_ca_certificate() == authority.get_ca_certificate()


@pytest.mark.asyncio
async def test_fetch_ca_certificate_pin_mismatch(make_client):
    """A registry serving a different CA is rejected."""
    client = make_client(ca_cert=TrustAuthority().get_ca_certificate())

    with pytest.raises(TrustError):
        await client.fetch_ca_certificate()


@pytest.mark.asyncio
async def test_concurrent_registrations(make_client, directory):
    """Concurrent registrations from many clients all land."""
    clients = [await enrolled(make_client()) for _ in range(5)]

    await asyncio.gather(
        *(
            client.register_agent(f"agent{i}", make_metadata(f"agent{i}", ["batch"]))
            for i, client in enumerate(clients)
        )
    )

    assert len(directory) == 5


def test_configured_key_material(authority, agent_keypair):
    """Configured key and certificate are used instead of fresh ones."""
    certificate_pem = authority.issue_certificate(
        "model1", public_key_to_pem(agent_keypair.public_key)
    )
    client = AgentClient(
        ClientConfig(
            registry_url=REGISTRY_URL,
            agent_cert=certificate_pem,
            agent_key=private_key_to_pem(agent_keypair.private_key),
        ),
        http_client=httpx.AsyncClient(),
    )

    assert client.certificate_pem == certificate_pem
    assert client.public_key_pem == public_key_to_pem(agent_keypair.public_key)


def test_certificate_without_key_rejected(authority):
    """Certificate and key must be configured together."""
    with pytest.raises(ValidationError):
        ClientConfig(
            registry_url=REGISTRY_URL, agent_cert=authority.get_ca_certificate()
        )


def test_name_helpers():
    """Name codec helpers are available on the client class."""
    ans_name = "a2a://model1.ml-inference.acme.v1.prod"
    name = AgentClient.parse_ans_name(ans_name)

    assert AgentClient.generate_ans_name(name) == ans_name


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
