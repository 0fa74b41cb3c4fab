from fastapi import APIRouter, Depends, status

from ..schemas.network import (
    AddressAllocationRequest,
    AddressRenameRequest,
    AddressResponse,
)
from ..services.allocation_engine import AllocationEngine
from .dependencies import get_allocator

router = APIRouter(prefix="/addresses", tags=["Addresses"])


@router.post("", response_model=AddressResponse)
def allocate_address(
    request: AddressAllocationRequest,
    allocator: AllocationEngine = Depends(get_allocator),
):
    """
    Allocate an address from a network.

    - **network_id**: Network to allocate from
    - **requested_address**: Exact address wanted; omit to get the lowest free one
    - **hostname**: Hostname bound to the address, unique within the network

    Fails with 409 when the hostname or address is taken, or the network is full.
    """
    return allocator.allocate_address(
        request.network_id,
        request.requested_address,
        request.hostname,
    )


@router.get("/{address_id}", response_model=AddressResponse)
def get_address(address_id: int, allocator: AllocationEngine = Depends(get_allocator)):
    return allocator.get_address(address_id)


@router.put("/{address_id}", response_model=AddressResponse)
def rename_address(
    address_id: int,
    request: AddressRenameRequest,
    allocator: AllocationEngine = Depends(get_allocator),
):
    """Change the hostname bound to an address."""
    return allocator.rename_address(address_id, request.hostname)


@router.delete("/{address_id}", status_code=status.HTTP_200_OK)
def release_address(address_id: int, allocator: AllocationEngine = Depends(get_allocator)):
    """Release an address back to its network. The record is kept with status 'available'."""
    allocator.release_address(address_id)
    return {"message": f"Address record {address_id} released successfully"}
