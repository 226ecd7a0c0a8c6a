#!/usr/bin/env python3
"""
Basic example demonstrating the complete agent naming workflow:
1. Registry starts with its own CA
2. Agent enrolls and registers under a canonical name
3. A peer resolves, discovers and verifies the agent
"""

import asyncio

import httpx

from agent_naming import (
    AgentCapability,
    AgentClient,
    AgentEndpoint,
    AgentMetadata,
    ClientConfig,
)
from agent_naming.server import create_app

REGISTRY_URL = "http://registry.example.com"


async def main():
    print("=== Agent Naming Service - Basic Example ===\n")

    # ============================================================================
    # STEP 1: Start the registry (in process)
    # ============================================================================
    print("1. Starting registry...")
    app = create_app()
    transport = httpx.ASGITransport(app=app)
    print(f"   ✓ CA: {app.state.authority.ca_name}\n")

    # ============================================================================
    # STEP 2: Agent creates a client and pins the registry CA
    # ============================================================================
    print("2. Agent connecting to registry...")
    agent = AgentClient(
        ClientConfig(registry_url=REGISTRY_URL),
        http_client=httpx.AsyncClient(transport=transport),
    )
    await agent.fetch_ca_certificate()
    print("   ✓ CA certificate fetched\n")

    # ============================================================================
    # STEP 3: Agent exchanges its self-signed certificate for a CA-issued one
    # ============================================================================
    print("3. Agent requesting CA-issued certificate...")
    await agent.request_certificate("model1", adopt=True)
    print("   ✓ Certificate adopted\n")

    # ============================================================================
    # STEP 4: Agent registers
    # ============================================================================
    print("4. Agent registering...")
    metadata = AgentMetadata(
        name="model1",
        version="1",
        capabilities=[
            AgentCapability(
                name="ml-inference",
                version="1.0.0",
                description="Serves model predictions",
                permissions=["predict"],
            )
        ],
        provider="acme",
        endpoints=[AgentEndpoint(protocol="http", address="model1.acme", port=8080)],
        environment="prod",
    )
    registration = await agent.register_agent("model1", metadata)
    print(f"   ✓ Registered as {registration.ans_name}\n")

    # ============================================================================
    # STEP 5: Peer discovers agents offering ml-inference
    # ============================================================================
    print("5. Peer discovering ml-inference agents...")
    peer = AgentClient(
        ClientConfig(registry_url=REGISTRY_URL),
        http_client=httpx.AsyncClient(transport=transport),
    )
    found = await peer.discover_agents("ml-inference")
    print(f"   ✓ Found: {[a.name for a in found]}\n")

    # ============================================================================
    # STEP 6: Capability verification
    # ============================================================================
    print("6. Verifying capability proofs...")
    if await agent.verify_capability(registration.ans_name, "ml-inference"):
        print("   ✓ Agent proved ml-inference")
    else:
        print("   ✗ Agent proof unexpectedly FAILED")

    if not await peer.verify_capability(registration.ans_name, "ml-inference"):
        print("   ✓ Peer proof correctly FAILED (wrong key)\n")
    else:
        print("   ✗ Unexpected success\n")

    await agent.close()
    await peer.close()

    # ============================================================================
    print("=== Example Complete ===")
    print("\nKey takeaways:")
    print("1. Names encode protocol, agent, capability, provider and version")
    print("2. Only CA-issued certificates can register")
    print("3. Capability proofs are checked against the registered key")


if __name__ == "__main__":
    asyncio.run(main())
