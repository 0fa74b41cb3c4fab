from .network import (
    NetworkCreate,
    NetworkResponse,
    NetworkDetail,
    AddressAllocationRequest,
    AddressRenameRequest,
    AddressResponse,
    AddressListResponse,
)

__all__ = [
    "NetworkCreate",
    "NetworkResponse",
    "NetworkDetail",
    "AddressAllocationRequest",
    "AddressRenameRequest",
    "AddressResponse",
    "AddressListResponse",
]
