from .network import AddressStatus, Network, IPAddress

__all__ = ["AddressStatus", "Network", "IPAddress"]
