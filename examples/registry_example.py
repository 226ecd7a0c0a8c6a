#!/usr/bin/env python3
"""Registry server example - run a CA-rooted registry with uvicorn."""

import logging

import uvicorn

from agent_naming import GatewayConfig, RegistryConfig
from agent_naming.server import create_app

# Only callers holding a CA-issued certificate may use the registry;
# /api/v1/certificates stays open to self-signed callers for enrollment.
config = RegistryConfig(
    port=3000,
    log_level="DEBUG",
    gateway=GatewayConfig(require_ca_issued=True),
)

app = create_app(config)


def main():
    logging.basicConfig(level=config.log_level)
    print("=== Registry Server Example ===\n")
    print(f"CA: {app.state.authority.ca_name}")
    print(f"Listening on http://{config.host}:{config.port}\n")
    print("Try:")
    print(f"  curl http://localhost:{config.port}/health")
    print(f"  curl http://localhost:{config.port}/api/v1/ca\n")
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
