from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel


class Donation(BaseModel):
    id: str
    charity_id: str
    amount: Decimal
    donor: str  # caller identity of the donor

    created_at: datetime
