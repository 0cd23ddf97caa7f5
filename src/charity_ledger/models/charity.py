from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field


EDITABLE_FIELDS = ("name", "member", "location", "logo_image")

class CharityPayload(BaseModel):
    name: str
    member: str
    location: str
    logo_image: str

    def missing_fields(self) -> list[str]:
        return [f for f in EDITABLE_FIELDS if not getattr(self, f).strip()]

class Charity(BaseModel):
    id: str
    name: str
    member: str
    location: str
    logo_image: str

    fund_available: Decimal = Decimal(0)
    donors: list[str] = Field(default_factory=list)

    created_at: datetime
    updated_at: datetime | None = None

def merge_payload(charity: Charity, payload: CharityPayload) -> Charity:
    """
    Returns a copy of `charity` with the externally settable fields taken
    from `payload`. Internally managed fields (id, created_at, fund_available,
    donors, updated_at) are never read from the payload.
    """
    return charity.model_copy(
        update={
            "name": payload.name,
            "member": payload.member,
            "location": payload.location,
            "logo_image": payload.logo_image,
        },
        deep=True,
    )

class NameClaim(BaseModel):
    """Marks a charity name as taken; keyed by the name itself."""
    charity_id: str
    claimed_at: datetime
