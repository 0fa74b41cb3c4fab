"""IP address management: networks, gateways and hostname-bound address allocations."""

__version__ = "1.0.0"
