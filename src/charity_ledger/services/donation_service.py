import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation

from charity_ledger.core.exceptions import ValidationError
from charity_ledger.data_access.charity_repository import CharityRepository
from charity_ledger.data_access.donation_repository import DonationRepository
from charity_ledger.models.charity import Charity
from charity_ledger.models.donation import Donation

logger = logging.getLogger(__name__)

def to_amount(value) -> Decimal:
    """Converts a caller supplied number into a finite, strictly positive Decimal."""
    if isinstance(value, bool):
        raise ValidationError("Donation amount must be a number.")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError("Donation amount must be a number.")

    if not amount.is_finite() or amount <= 0:
        raise ValidationError("Donation amount must be greater than zero.")
    return amount

class DonationService:
    """
    Orchestrates work that spans the charity and donation collections.

    `donate` credits the charity through `CharityRepository.apply`, a
    versioned conditional write, so concurrent donors never overwrite each
    other's credit, whichever process they run in. The donation record is a
    second write with no rollback.
    """

    def __init__(self, charities: CharityRepository, donations: DonationRepository):
        self.charities = charities
        self.donations = donations

    def donate(self, charity_id: str, amount, donor: str) -> Charity:
        if not charity_id or not isinstance(charity_id, str):
            raise ValidationError("Invalid charity id.")
        amount = to_amount(amount)

        def credit(charity: Charity) -> Charity:
            charity.fund_available += amount
            charity.donors.append(donor)
            return charity

        updated = self.charities.apply(charity_id, credit)

        try:
            donation = self.donations.create(charity_id=updated.id, amount=amount, donor=donor)
        except Exception:
            # The charity write above is already committed.
            logger.exception(
                f"Charity {updated.id} was credited {amount} but the donation record could not be written."
            )
            raise

        logger.info(
            f"Donation {donation.id} of {amount} to charity {updated.id}",
            extra={"donation_id": donation.id, "charity_id": updated.id, "amount": amount}
        )
        return updated

    def has_donated(self, charity_id: str, identity: str) -> bool:
        return identity in self.charities.get(charity_id).donors

    def total_funds(self, charity_id: str) -> Decimal:
        return self.charities.get(charity_id).fund_available

    def last_update_timestamp(self, charity_id: str) -> datetime | None:
        return self.charities.get(charity_id).updated_at

    def donors_of(self, charity_id: str) -> list[str]:
        return self.charities.get(charity_id).donors

    def count(self) -> int:
        return self.charities.count()

    def donations_for(self, charity_id: str) -> list[Donation]:
        return self.donations.list_for_charity(charity_id)

    def get_donation(self, donation_id: str) -> Donation:
        return self.donations.get(donation_id)

    def charities_by_location(self, location: str) -> list[Charity]:
        return self.charities.filter_by_location(location)
