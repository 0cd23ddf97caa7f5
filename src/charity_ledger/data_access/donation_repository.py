import logging
from decimal import Decimal

from charity_ledger.core.exceptions import NotFoundError
from charity_ledger.core.providers import Clock, IdFactory, new_id, utc_now
from charity_ledger.data_access.store import OrderedRecordStore
from charity_ledger.models.donation import Donation

logger = logging.getLogger(__name__)

class DonationRepository:
    """Append-only storage of donation records; charity ids are not checked here."""

    def __init__(
        self,
        store: OrderedRecordStore[Donation],
        clock: Clock = utc_now,
        id_factory: IdFactory = new_id
    ):
        self.store = store
        self.clock = clock
        self.id_factory = id_factory

    def create(self, charity_id: str, amount: Decimal, donor: str) -> Donation:
        donation = Donation(
            id=self.id_factory(),
            charity_id=charity_id,
            amount=amount,
            donor=donor,
            created_at=self.clock(),
        )
        self.store.insert(donation.id, donation)
        logger.info(f"Recorded donation {donation.id} to charity {charity_id}")
        return donation

    def get(self, donation_id: str) -> Donation:
        donation = self.store.get(donation_id) if donation_id else None
        if donation is None:
            raise NotFoundError(f"Donation with id={donation_id} not found.")
        return donation

    def list_for_charity(self, charity_id: str) -> list[Donation]:
        return [d for d in self.store.values() if d.charity_id == charity_id]
