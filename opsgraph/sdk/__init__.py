"""Client SDK for the opsgraph server."""

from opsgraph.sdk.client import GateClient, GateClientError

__all__ = ["GateClient", "GateClientError"]
