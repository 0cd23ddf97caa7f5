from __future__ import annotations

import logging
from typing import Callable

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_random_exponential

from charity_ledger.core.exceptions import ConflictError, NotFoundError, StaleRecordError, ValidationError
from charity_ledger.core.providers import Clock, IdFactory, new_id, utc_now
from charity_ledger.data_access.store import OrderedRecordStore
from charity_ledger.models.charity import Charity, CharityPayload, NameClaim, merge_payload

logger = logging.getLogger(__name__)

MAX_WRITE_ATTEMPTS = 5

class CharityRepository:
    """
    Owns the charity collection and the name claims that guard it.

    Field presence is checked on create and update, name uniqueness on
    create only, so a rename through `update` may leave two charities
    sharing a name.

    A name claim is written with `insert_new` before the charity itself, so
    of two concurrent creates with the same name only one can win, even
    across processes. Every change to an existing charity goes through
    `apply`, a versioned read-modify-write that is re-attempted when another
    writer got in first.
    """

    def __init__(
        self,
        store: OrderedRecordStore[Charity],
        names: OrderedRecordStore[NameClaim],
        clock: Clock = utc_now,
        id_factory: IdFactory = new_id,
        max_write_attempts: int = MAX_WRITE_ATTEMPTS
    ):
        self.store = store
        self.names = names
        self.clock = clock
        self.id_factory = id_factory
        self.max_write_attempts = max_write_attempts

    @staticmethod
    def _validate_payload(payload: CharityPayload):
        missing = payload.missing_fields()
        if missing:
            raise ValidationError(f"Missing required fields in the payload: {', '.join(missing)}")

    @staticmethod
    def _validate_id(charity_id: str):
        if not charity_id or not charity_id.strip():
            raise ValidationError("Invalid charity id.")

    @staticmethod
    def _duplicate(name: str) -> ConflictError:
        logger.info(f"Rejected duplicate charity name {name!r}")
        return ConflictError(f"Charity with name {name!r} already exists.")

    def create(self, payload: CharityPayload) -> Charity:
        self._validate_payload(payload)

        if any(c.name == payload.name for c in self.store.values()):
            raise self._duplicate(payload.name)

        charity = Charity(
            id=self.id_factory(),
            name=payload.name,
            member=payload.member,
            location=payload.location,
            logo_image=payload.logo_image,
            created_at=self.clock(),
        )
        claim = NameClaim(charity_id=charity.id, claimed_at=charity.created_at)
        if not self.names.insert_new(charity.name, claim):
            raise self._duplicate(payload.name)

        try:
            self.store.insert(charity.id, charity)
        except Exception:
            self.names.remove(charity.name)
            raise

        logger.info(f"Created charity {charity.id}", extra={"charity_id": charity.id})
        return charity

    def get(self, charity_id: str) -> Charity:
        self._validate_id(charity_id)
        charity = self.store.get(charity_id)
        if charity is None:
            raise NotFoundError(f"Charity with id={charity_id} not found.")
        return charity

    def list(self) -> list[Charity]:
        return self.store.values()

    def update(self, charity_id: str, payload: CharityPayload) -> Charity:
        self._validate_payload(payload)

        before, updated = self._apply(charity_id, lambda c: merge_payload(c, payload))

        if before.name != updated.name:
            self._release_name(before.name, charity_id)
            self.names.insert_new(updated.name, NameClaim(charity_id=charity_id, claimed_at=updated.updated_at))

        logger.info(f"Updated charity {charity_id}", extra={"charity_id": charity_id})
        return updated

    def apply(self, charity_id: str, mutation: Callable[[Charity], Charity]) -> Charity:
        """
        Applies `mutation` to the stored charity and writes the result back
        only if nobody changed the record in the meantime, re-reading and
        re-applying on a lost race. `id` and `created_at` always come from the
        stored record and `updated_at` is stamped here. Raises NotFoundError
        if the charity is gone, StaleRecordError after `max_write_attempts`
        lost races.
        """
        return self._apply(charity_id, mutation)[1]

    def _apply(self, charity_id: str, mutation: Callable[[Charity], Charity]) -> tuple[Charity, Charity]:
        self._validate_id(charity_id)
        for attempt in Retrying(
            stop=stop_after_attempt(self.max_write_attempts),
            wait=wait_random_exponential(multiplier=0.01, max=0.2),
            retry=retry_if_exception_type(StaleRecordError),
            reraise=True
        ):
            with attempt:
                result = self._apply_once(charity_id, mutation)
        return result

    def _apply_once(self, charity_id: str, mutation: Callable[[Charity], Charity]) -> tuple[Charity, Charity]:
        current = self.store.get_versioned(charity_id)
        if current is None:
            raise NotFoundError(f"Charity with id={charity_id} not found.")

        before = current.value
        changed = mutation(before.model_copy(deep=True))
        after = changed.model_copy(
            update={"id": before.id, "created_at": before.created_at, "updated_at": self.clock()},
            deep=True,
        )

        if not self.store.replace(charity_id, after, current.version):
            raise StaleRecordError(f"Charity with id={charity_id} was modified concurrently, try again.")
        return before, after

    def _release_name(self, name: str, charity_id: str):
        claim = self.names.get(name)
        if claim is not None and claim.charity_id == charity_id:
            self.names.remove(name)

    def delete(self, charity_id: str) -> Charity:
        self._validate_id(charity_id)
        removed = self.store.remove(charity_id)
        if removed is None:
            raise NotFoundError(f"Charity with id={charity_id} not found.")
        self._release_name(removed.name, charity_id)
        logger.info(f"Deleted charity {charity_id}", extra={"charity_id": charity_id})
        return removed

    def filter_by_location(self, location: str) -> list[Charity]:
        return [c for c in self.store.values() if c.location == location]

    def count(self) -> int:
        return self.store.size()
