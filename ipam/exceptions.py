"""
Error taxonomy for the allocation core.

Every failure raised by the store or the engine is one of these. The HTTP
layer maps ``kind`` to a status code; other callers can branch on the class.
"""


class IPAMError(Exception):
    """Base class for all IPAM failures."""

    kind = "error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(IPAMError):
    """Malformed input: bad CIDR/address syntax, gateway outside block, gateway requested."""

    kind = "validation"


class NotFoundError(IPAMError):
    """Referenced network or address record does not exist."""

    kind = "not_found"


class ConflictError(IPAMError):
    """Hostname already in use in the network, or address already allocated."""

    kind = "conflict"


class ExhaustedError(IPAMError):
    """No free address remains in the pool."""

    kind = "exhausted"


class StorageError(IPAMError):
    """Underlying persistence failure."""

    kind = "storage"
