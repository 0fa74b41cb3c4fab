from contextlib import contextmanager
from typing import Optional, List

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import (
    ConflictError,
    ExhaustedError,
    IPAMError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from ..logger import get_logger
from ..models.network import AddressStatus, IPAddress, Network
from . import address_space

logger = get_logger(__name__)

ALLOCATED = AddressStatus.allocated.value
AVAILABLE = AddressStatus.available.value


class AllocationStore:
    """
    Durable storage for networks and address records.

    Every public method is one unit of work on the injected session: it
    commits on success and rolls back on any failure, so callers never see
    partial writes. Database errors surface as StorageError.

    Address exclusivity does not depend on in-process locking. The
    (network_id, address) unique constraint and the partial unique index on
    allocated hostnames are the final arbiters; allocation claims a slot
    inside a SAVEPOINT and treats an IntegrityError as "taken".
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _unit_of_work(self, action: str):
        try:
            yield
            self.db.commit()
        except IPAMError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise StorageError(f"Failed to {action}: {e}") from e
        except Exception:
            self.db.rollback()
            raise

    # ------------------------------------------------------------------
    # Networks
    # ------------------------------------------------------------------

    def create_network(self, cidr: str, gateway: str) -> Network:
        """Create a network; the gateway must lie inside the block."""
        block = address_space.parse_network(cidr)
        gateway_ip = address_space.parse_address(gateway)
        if not address_space.contains(block, gateway_ip):
            raise ValidationError(f"Gateway {gateway_ip} is not inside {block}")

        network = Network(cidr=str(block), gateway=str(gateway_ip))
        with self._unit_of_work("create network"):
            self.db.add(network)
            self.db.flush()
        return network

    def get_network(self, network_id: int) -> Optional[Network]:
        with self._unit_of_work("get network"):
            return self.db.query(Network).filter(Network.id == network_id).first()

    def list_networks(self) -> List[Network]:
        with self._unit_of_work("list networks"):
            return self.db.query(Network).order_by(Network.id).all()

    def network_usage(self, network: Network) -> dict:
        """Capacity and allocation counters for a network."""
        block = address_space.parse_network(network.cidr)
        gateway = address_space.parse_address(network.gateway)
        total = address_space.capacity(block, gateway)

        with self._unit_of_work("count allocations"):
            allocated_count = self.db.query(IPAddress).filter(
                IPAddress.network_id == network.id,
                IPAddress.status == ALLOCATED,
            ).count()

        return {
            "capacity": total,
            "allocated_count": allocated_count,
            "available_count": total - allocated_count,
        }

    # ------------------------------------------------------------------
    # Addresses
    # ------------------------------------------------------------------

    def get_address(self, record_id: int) -> Optional[IPAddress]:
        with self._unit_of_work("get address"):
            return (
                self.db.query(IPAddress)
                .populate_existing()
                .filter(IPAddress.id == record_id)
                .first()
            )

    def list_addresses(self, network_id: int) -> List[IPAddress]:
        with self._unit_of_work("list addresses"):
            if self.db.query(Network).filter(Network.id == network_id).first() is None:
                raise NotFoundError(f"Network {network_id} not found")
            return (
                self.db.query(IPAddress)
                .populate_existing()
                .filter(IPAddress.network_id == network_id)
                .order_by(IPAddress.id)
                .all()
            )

    def allocate(
        self,
        network_id: int,
        requested_address: Optional[str],
        hostname: Optional[str],
    ) -> IPAddress:
        """
        Allocate an address in a network.

        With ``requested_address`` the exact address is claimed or the call
        fails; without it the lowest free address is taken. Released rows
        (status=available) count as free and are reused in place.

        Raises:
            NotFoundError: network does not exist
            ConflictError: hostname or requested address already allocated
            ValidationError: requested address is the gateway, the base
                address, or outside the block
            ExhaustedError: no free address left
        """
        with self._unit_of_work("allocate address"):
            network = self.db.query(Network).filter(Network.id == network_id).first()
            if network is None:
                raise NotFoundError(f"Network {network_id} not found")

            if hostname is not None and self._hostname_taken(network_id, hostname):
                raise ConflictError(f"Hostname '{hostname}' is already in use in network {network_id}")

            block = address_space.parse_network(network.cidr)
            gateway = address_space.parse_address(network.gateway)

            if requested_address is not None:
                record = self._allocate_explicit(network, block, gateway, requested_address, hostname)
            else:
                record = self._allocate_first_available(network, block, gateway, hostname)

        logger.info(
            f"Allocated {record.address} (record {record.id}) in network {network_id} "
            f"for hostname {record.hostname!r}"
        )
        return record

    def release(self, record_id: int) -> None:
        """Mark a record available and clear its hostname. The row is kept."""
        with self._unit_of_work("release address"):
            updated = (
                self.db.query(IPAddress)
                .filter(IPAddress.id == record_id)
                .update(
                    {IPAddress.status: AVAILABLE, IPAddress.hostname: None},
                    synchronize_session=False,
                )
            )
            if not updated:
                raise NotFoundError(f"Address record {record_id} not found")

    def update_hostname(self, record_id: int, hostname: Optional[str]) -> IPAddress:
        with self._unit_of_work("update hostname"):
            record = (
                self.db.query(IPAddress)
                .populate_existing()
                .with_for_update()
                .filter(IPAddress.id == record_id)
                .first()
            )
            if record is None:
                raise NotFoundError(f"Address record {record_id} not found")

            network = self.db.query(Network).filter(Network.id == record.network_id).first()
            if network is None:
                raise NotFoundError(f"Network {record.network_id} not found")

            if hostname is not None and self._hostname_taken(network.id, hostname, exclude_id=record.id):
                raise ConflictError(f"Hostname '{hostname}' is already in use in network {network.id}")

            record.hostname = hostname
            try:
                self.db.flush()
            except IntegrityError:
                raise ConflictError(f"Hostname '{hostname}' is already in use in network {network.id}")

        return record

    # ------------------------------------------------------------------
    # Helpers (run inside an open unit of work)
    # ------------------------------------------------------------------

    def _hostname_taken(self, network_id: int, hostname: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(IPAddress.id).filter(
            IPAddress.network_id == network_id,
            IPAddress.hostname == hostname,
            IPAddress.status == ALLOCATED,
        )
        if exclude_id is not None:
            query = query.filter(IPAddress.id != exclude_id)
        return query.first() is not None

    def _allocate_explicit(self, network, block, gateway, requested_address, hostname) -> IPAddress:
        addr = address_space.parse_address(requested_address)

        if addr == gateway:
            raise ValidationError(f"Cannot allocate gateway address {gateway}")
        if not address_space.is_allocatable(block, gateway, addr):
            raise ValidationError(f"Address {addr} is not allocatable in {block}")

        existing = (
            self.db.query(IPAddress)
            .populate_existing()
            .with_for_update()
            .filter(IPAddress.network_id == network.id, IPAddress.address == str(addr))
            .first()
        )
        if existing is not None and existing.status == ALLOCATED:
            raise ConflictError(f"IP address {addr} is already allocated")

        record = self._claim(network.id, str(addr), hostname)
        if record is None:
            raise ConflictError(f"IP address {addr} is already allocated")
        return record

    def _allocate_first_available(self, network, block, gateway, hostname) -> IPAddress:
        # Snapshot of taken slots, only used to skip obvious misses; _claim decides
        occupied = {
            row.address
            for row in self.db.query(IPAddress.address).filter(
                IPAddress.network_id == network.id,
                IPAddress.status == ALLOCATED,
            )
        }

        for candidate in address_space.candidates(block, gateway):
            address = str(candidate)
            if address in occupied:
                continue
            record = self._claim(network.id, address, hostname)
            if record is not None:
                return record
            logger.debug(f"Lost race for {address} in network {network.id}, trying next")

        raise ExhaustedError(f"No available IP addresses in network {network.id} ({block})")

    def _claim(self, network_id: int, address: str, hostname: Optional[str]) -> Optional[IPAddress]:
        """
        Atomically take one slot.

        Reuses a released row through a conditional UPDATE, else inserts a
        new row. Returns None when the slot is already allocated.
        """
        try:
            with self.db.begin_nested():
                reused = (
                    self.db.query(IPAddress)
                    .filter(
                        IPAddress.network_id == network_id,
                        IPAddress.address == address,
                        IPAddress.status == AVAILABLE,
                    )
                    .update(
                        {IPAddress.status: ALLOCATED, IPAddress.hostname: hostname},
                        synchronize_session=False,
                    )
                )
                if reused:
                    return (
                        self.db.query(IPAddress)
                        .populate_existing()
                        .filter(IPAddress.network_id == network_id, IPAddress.address == address)
                        .one()
                    )

                record = IPAddress(
                    network_id=network_id,
                    address=address,
                    hostname=hostname,
                    status=ALLOCATED,
                )
                self.db.add(record)
                self.db.flush()
                return record
        except IntegrityError:
            if hostname is not None and self._hostname_taken(network_id, hostname):
                raise ConflictError(f"Hostname '{hostname}' is already in use in network {network_id}")
            return None
