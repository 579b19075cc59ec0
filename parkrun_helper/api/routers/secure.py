"""Sample protected endpoint."""

from fastapi import APIRouter, Depends

from ..auth import require_identity
from ..models import SecureData
from ...auth import VerifiedIdentity
from ..._utils import utc_now

router = APIRouter(tags=["secure"])


@router.get("/secure-data", response_model=SecureData)
async def get_secure_data(identity: VerifiedIdentity = Depends(require_identity)) -> SecureData:
    """Return sample data to any authenticated caller."""
    now = utc_now()
    return SecureData(
        message="This is protected data from the Parkrun Helper API",
        timestamp=now,
        user=identity.model_dump(by_alias=True),
        data={"totalVolunteers": 42, "upcomingEvents": 5, "lastUpdated": now.isoformat()},
    )
