from fastapi import APIRouter, Depends, status
from typing import List

from ..schemas.network import (
    NetworkCreate,
    NetworkResponse,
    NetworkDetail,
    AddressResponse,
    AddressListResponse,
)
from ..services.allocation_engine import AllocationEngine
from .dependencies import get_allocator

router = APIRouter(prefix="/networks", tags=["Networks"])


@router.post("", response_model=NetworkResponse, status_code=status.HTTP_201_CREATED)
def create_network(network_data: NetworkCreate, allocator: AllocationEngine = Depends(get_allocator)):
    """
    Create a new network.

    - **cidr**: CIDR notation (e.g., "10.0.0.0/24"); host bits are masked off
    - **gateway**: Router address inside the block (e.g., "10.0.0.1")

    The gateway and the base address of the block are never allocated.
    """
    return allocator.create_network(network_data.cidr, network_data.gateway)


@router.get("", response_model=List[NetworkResponse])
def list_networks(allocator: AllocationEngine = Depends(get_allocator)):
    """List all networks in creation order."""
    return allocator.list_networks()


@router.get("/{network_id}", response_model=NetworkDetail)
def get_network(network_id: int, allocator: AllocationEngine = Depends(get_allocator)):
    """Get a network with its capacity and allocation counters."""
    network = allocator.get_network(network_id)
    usage = allocator.network_usage(network_id)

    return NetworkDetail(
        id=network.id,
        cidr=network.cidr,
        gateway=network.gateway,
        capacity=usage["capacity"],
        allocated_count=usage["allocated_count"],
        available_count=usage["available_count"],
    )


@router.get("/{network_id}/addresses", response_model=AddressListResponse)
def list_addresses(network_id: int, allocator: AllocationEngine = Depends(get_allocator)):
    """List every address record of a network, released ones included."""
    records = allocator.list_addresses(network_id)

    return AddressListResponse(
        network_id=network_id,
        total_addresses=len(records),
        addresses=[AddressResponse.model_validate(record) for record in records],
    )
