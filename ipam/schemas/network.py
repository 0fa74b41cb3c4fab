from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
import ipaddress

from ..models.network import AddressStatus


class NetworkCreate(BaseModel):
    cidr: str = Field(..., description="CIDR notation e.g., 10.0.0.0/24 or 2001:db8::/64")
    gateway: str = Field(..., description="Gateway address inside the block, never allocated")

    class Config:
        extra = "forbid"

    @field_validator("cidr")
    @classmethod
    def validate_cidr(cls, v: str) -> str:
        try:
            network = ipaddress.ip_network(v.strip(), strict=False)
            return str(network)
        except ValueError:
            raise ValueError("Invalid CIDR notation")

    @field_validator("gateway")
    @classmethod
    def validate_gateway(cls, v: str) -> str:
        try:
            return str(ipaddress.ip_address(v.strip()))
        except ValueError:
            raise ValueError("Invalid gateway address")


class NetworkResponse(BaseModel):
    id: int
    cidr: str
    gateway: str

    class Config:
        from_attributes = True


class NetworkDetail(NetworkResponse):
    capacity: int
    allocated_count: int = 0
    available_count: int = 0


class AddressAllocationRequest(BaseModel):
    network_id: int = Field(..., description="Network to allocate from")
    requested_address: Optional[str] = Field(
        None, description="Exact address to allocate; omit for first available"
    )
    hostname: Optional[str] = Field(None, max_length=255, description="Hostname bound to the address")

    class Config:
        extra = "forbid"


class AddressRenameRequest(BaseModel):
    hostname: Optional[str] = Field(..., max_length=255, description="New hostname")

    class Config:
        extra = "forbid"


class AddressResponse(BaseModel):
    id: int
    network_id: int
    address: str
    hostname: Optional[str]
    status: AddressStatus

    class Config:
        from_attributes = True


class AddressListResponse(BaseModel):
    network_id: int
    total_addresses: int
    addresses: List[AddressResponse]
