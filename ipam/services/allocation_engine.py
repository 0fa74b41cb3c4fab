from typing import Optional, List

from ..exceptions import NotFoundError, ValidationError
from ..logger import get_logger
from ..models.network import IPAddress, Network
from . import address_space
from .allocation_store import AllocationStore

logger = get_logger(__name__)


class AllocationEngine:
    """
    Entry point for callers of the allocation core.

    Checks argument syntax and normalizes hostnames before anything reaches
    the store, and turns "missing" results into NotFoundError. It keeps no
    state of its own; all invariants live in AllocationStore.
    """

    def __init__(self, store: AllocationStore, allow_anonymous_hostnames: bool = True):
        self.store = store
        self.allow_anonymous_hostnames = allow_anonymous_hostnames

    def _normalize_hostname(self, hostname: Optional[str]) -> Optional[str]:
        if hostname is not None:
            hostname = hostname.strip()
        if not hostname:
            if not self.allow_anonymous_hostnames:
                raise ValidationError("hostname is required")
            return None
        return hostname

    def create_network(self, cidr: str, gateway: str) -> Network:
        address_space.parse_network(cidr)
        address_space.parse_address(gateway)
        network = self.store.create_network(cidr, gateway)
        logger.info(f"Created network {network.id}: {network.cidr} via {network.gateway}")
        return network

    def get_network(self, network_id: int) -> Network:
        network = self.store.get_network(network_id)
        if network is None:
            raise NotFoundError(f"Network {network_id} not found")
        return network

    def list_networks(self) -> List[Network]:
        return self.store.list_networks()

    def network_usage(self, network_id: int) -> dict:
        return self.store.network_usage(self.get_network(network_id))

    def allocate_address(
        self,
        network_id: int,
        requested_address: Optional[str] = None,
        hostname: Optional[str] = None,
    ) -> IPAddress:
        """
        Allocate ``requested_address`` or, when absent, the lowest free address.

        An empty ``requested_address`` string counts as absent.
        """
        if requested_address is not None and requested_address.strip() == "":
            requested_address = None
        if requested_address is not None:
            requested_address = str(address_space.parse_address(requested_address))
        hostname = self._normalize_hostname(hostname)

        return self.store.allocate(network_id, requested_address, hostname)

    def release_address(self, record_id: int) -> None:
        self.store.release(record_id)
        logger.info(f"Released address record {record_id}")

    def get_address(self, record_id: int) -> IPAddress:
        record = self.store.get_address(record_id)
        if record is None:
            raise NotFoundError(f"Address record {record_id} not found")
        return record

    def list_addresses(self, network_id: int) -> List[IPAddress]:
        return self.store.list_addresses(network_id)

    def rename_address(self, record_id: int, hostname: Optional[str]) -> IPAddress:
        hostname = self._normalize_hostname(hostname)
        record = self.store.update_hostname(record_id, hostname)
        logger.info(f"Renamed address record {record_id} to {hostname!r}")
        return record
