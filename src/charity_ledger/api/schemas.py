from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime
from decimal import Decimal

class CognitoUser(BaseModel):
    sub: str  # The unique user ID from Cognito, used as the caller identity
    email: EmailStr
    email_verified: bool
    name: Optional[str] = None

class DonateRequest(BaseModel):
    amount: Decimal

class FundsResponse(BaseModel):
    charity_id: str
    fund_available: Decimal

class DonorsResponse(BaseModel):
    charity_id: str
    donors: list[str]

class HasDonatedResponse(BaseModel):
    charity_id: str
    has_donated: bool

class LastUpdateResponse(BaseModel):
    charity_id: str
    updated_at: Optional[datetime] = None

class CountResponse(BaseModel):
    total: int
