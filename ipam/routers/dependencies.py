from fastapi import Depends
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..services.allocation_engine import AllocationEngine
from ..services.allocation_store import AllocationStore


def get_allocator(db: Session = Depends(get_db)) -> AllocationEngine:
    """Build a request-scoped engine around the request's session."""
    settings = get_settings()
    return AllocationEngine(
        AllocationStore(db),
        allow_anonymous_hostnames=settings.allow_anonymous_hostnames,
    )
