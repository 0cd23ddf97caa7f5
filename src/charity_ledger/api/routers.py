from fastapi import (
    APIRouter,
    Request,
    Depends,
    HTTPException
)
from fastapi.security import HTTPBearer
from typing import Optional
import logging
import pydantic

from charity_ledger.core.dependencies import get_charity_operations
from charity_ledger.core.exceptions import ErrorKind
from charity_ledger.models.charity import Charity, CharityPayload
from charity_ledger.models.donation import Donation
from charity_ledger.models.result import Result
from charity_ledger.services.operations import CharityOperations
from charity_ledger.api.schemas import (
    CognitoUser,
    CountResponse,
    DonateRequest,
    DonorsResponse,
    FundsResponse,
    HasDonatedResponse,
    LastUpdateResponse,
)

router = APIRouter()
security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
}

def unwrap(result: Result):
    if result.is_ok:
        return result.ok
    raise HTTPException(status_code=ERROR_STATUS[result.err.kind], detail=result.err.message)

async def get_current_user(
    request: Request,
    token: Optional[str] = Depends(security)
) -> CognitoUser:
    auth = request.scope.get("aws.event", {}).get("requestContext", {}).get("authorizer", {})
    claims = auth.get("claims", {})

    if not claims:
        raise HTTPException(status_code=401, detail="Could not find user claims")

    try:
        user = CognitoUser(**claims)
    except pydantic.ValidationError as e:
        raise HTTPException(
            status_code=401,
            detail=f"Invalid authentication credentials: {e}"
        )

    if not user.email_verified:
        raise HTTPException(status_code=403, detail="Email not verified")

    return user

@router.post("/charities", response_model=Charity, status_code=201)
def create_charity(
    body: CharityPayload,
    operations: CharityOperations = Depends(get_charity_operations)
):
    return unwrap(operations.create_charity(body))

@router.get("/charities", response_model=list[Charity])
def list_charities(
    location: Optional[str] = None,
    operations: CharityOperations = Depends(get_charity_operations)
):
    if location is not None:
        return unwrap(operations.get_charities_by_location(location))
    return unwrap(operations.get_all_charities())

@router.get("/charities/count", response_model=CountResponse)
def count_charities(operations: CharityOperations = Depends(get_charity_operations)):
    return CountResponse(total=unwrap(operations.get_total_charities_count()))

@router.get("/charities/{charity_id}", response_model=Charity)
def get_charity(
    charity_id: str,
    operations: CharityOperations = Depends(get_charity_operations)
):
    return unwrap(operations.get_charity(charity_id))

@router.put("/charities/{charity_id}", response_model=Charity)
def update_charity(
    charity_id: str,
    body: CharityPayload,
    operations: CharityOperations = Depends(get_charity_operations)
):
    return unwrap(operations.update_charity(charity_id, body))

@router.delete("/charities/{charity_id}", response_model=Charity)
def delete_charity(
    charity_id: str,
    operations: CharityOperations = Depends(get_charity_operations)
):
    return unwrap(operations.delete_charity(charity_id))

@router.post("/charities/{charity_id}/donations", response_model=Charity)
def donate_to_charity(
    charity_id: str,
    body: DonateRequest,
    user: CognitoUser = Depends(get_current_user),
    operations: CharityOperations = Depends(get_charity_operations)
):
    return unwrap(operations.donate_to_charity(charity_id, body.amount, user.sub))

@router.get("/charities/{charity_id}/donations", response_model=list[Donation])
def get_donations_for_charity(
    charity_id: str,
    operations: CharityOperations = Depends(get_charity_operations)
):
    return unwrap(operations.get_donations_for_charity(charity_id))

@router.get("/charities/{charity_id}/funds", response_model=FundsResponse)
def get_charity_funds(
    charity_id: str,
    operations: CharityOperations = Depends(get_charity_operations)
):
    funds = unwrap(operations.get_charity_funds(charity_id))
    return FundsResponse(charity_id=charity_id, fund_available=funds)

@router.get("/charities/{charity_id}/donors", response_model=DonorsResponse)
def get_charity_donors(
    charity_id: str,
    operations: CharityOperations = Depends(get_charity_operations)
):
    donors = unwrap(operations.get_charity_donors(charity_id))
    return DonorsResponse(charity_id=charity_id, donors=donors)

@router.get("/charities/{charity_id}/donors/me", response_model=HasDonatedResponse)
def has_donated_to_charity(
    charity_id: str,
    user: CognitoUser = Depends(get_current_user),
    operations: CharityOperations = Depends(get_charity_operations)
):
    has_donated = unwrap(operations.has_donated_to_charity(charity_id, user.sub))
    return HasDonatedResponse(charity_id=charity_id, has_donated=has_donated)

@router.get("/charities/{charity_id}/last-updated", response_model=LastUpdateResponse)
def get_last_charity_update(
    charity_id: str,
    operations: CharityOperations = Depends(get_charity_operations)
):
    updated_at = unwrap(operations.get_last_charity_update_timestamp(charity_id))
    return LastUpdateResponse(charity_id=charity_id, updated_at=updated_at)

@router.get("/donations/{donation_id}", response_model=Donation)
def get_donation(
    donation_id: str,
    operations: CharityOperations = Depends(get_charity_operations)
):
    return unwrap(operations.get_donation(donation_id))
