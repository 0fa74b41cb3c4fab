from enum import Enum

from sqlalchemy import Column, Integer, String, ForeignKey, Index, UniqueConstraint, text

from ..database import Base


class AddressStatus(str, Enum):
    available = "available"
    allocated = "allocated"


class Network(Base):
    __tablename__ = "networks"

    id = Column(Integer, primary_key=True, index=True)
    cidr = Column(String(50), nullable=False)  # normalized, e.g. "10.0.0.0/24"
    gateway = Column(String(50), nullable=False)


class IPAddress(Base):
    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True, index=True)
    network_id = Column(Integer, ForeignKey("networks.id", ondelete="CASCADE"), nullable=False)
    address = Column(String(50), nullable=False)
    hostname = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default=AddressStatus.allocated.value)

    __table_args__ = (
        # One row per slot; released rows stay behind as tombstones
        UniqueConstraint("network_id", "address", name="uq_addresses_network_address"),
        Index(
            "uq_addresses_network_hostname_allocated",
            "network_id",
            "hostname",
            unique=True,
            sqlite_where=text("status = 'allocated'"),
            postgresql_where=text("status = 'allocated'"),
        ),
    )
