"""
The operation set exposed to the outward dispatch layer.

Within one process every operation runs under a re-entrant lock, so
callers on FastAPI's threadpool see the credit and the donation record of
`donate_to_charity` land together. The lock does not reach other processes
sharing a DynamoDB table; there the conditional writes in the repositories
keep fund totals and name uniqueness intact. Expected domain failures come
back as `Result.err`; anything else (e.g. a storage ClientError) propagates.
"""

import functools
import logging
import threading

from charity_ledger.core.exceptions import CharityLedgerError
from charity_ledger.data_access.charity_repository import CharityRepository
from charity_ledger.models.charity import CharityPayload
from charity_ledger.models.result import Result
from charity_ledger.services.donation_service import DonationService

logger = logging.getLogger(__name__)


def operation(func):
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> Result:
        with self._lock:
            try:
                return Result.success(func(self, *args, **kwargs))
            except CharityLedgerError as e:
                logger.info(f"{func.__name__} failed with {e.kind.value}: {e.message}")
                return Result.failure(e)
    return wrapper


class CharityOperations:

    def __init__(self, charities: CharityRepository, donation_service: DonationService):
        self.charities = charities
        self.donation_service = donation_service
        self._lock = threading.RLock()

    @operation
    def create_charity(self, payload: CharityPayload):
        return self.charities.create(payload)

    @operation
    def get_charity(self, charity_id: str):
        return self.charities.get(charity_id)

    @operation
    def get_all_charities(self):
        return self.charities.list()

    @operation
    def update_charity(self, charity_id: str, payload: CharityPayload):
        return self.charities.update(charity_id, payload)

    @operation
    def delete_charity(self, charity_id: str):
        return self.charities.delete(charity_id)

    @operation
    def donate_to_charity(self, charity_id: str, amount, donor: str):
        return self.donation_service.donate(charity_id, amount, donor)

    @operation
    def get_donations_for_charity(self, charity_id: str):
        return self.donation_service.donations_for(charity_id)

    @operation
    def get_donation(self, donation_id: str):
        return self.donation_service.get_donation(donation_id)

    @operation
    def get_charity_funds(self, charity_id: str):
        return self.donation_service.total_funds(charity_id)

    @operation
    def has_donated_to_charity(self, charity_id: str, identity: str):
        return self.donation_service.has_donated(charity_id, identity)

    @operation
    def get_charity_donors(self, charity_id: str):
        return self.donation_service.donors_of(charity_id)

    @operation
    def get_last_charity_update_timestamp(self, charity_id: str):
        return self.donation_service.last_update_timestamp(charity_id)

    @operation
    def get_total_charities_count(self):
        return self.donation_service.count()

    @operation
    def get_charities_by_location(self, location: str):
        return self.donation_service.charities_by_location(location)
