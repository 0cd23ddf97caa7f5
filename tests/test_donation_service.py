"""Unit tests for donation orchestration and derived reads"""

import pytest
from decimal import Decimal

from charity_ledger.core.exceptions import NotFoundError, ValidationError
from charity_ledger.services.donation_service import to_amount


@pytest.fixture
def charity(charities, red_cross):
    return charities.create(red_cross)


def test_donations_accumulate_funds_and_donors(service, donations, charity):
    service.donate(charity.id, 50, "donor1")
    updated = service.donate(charity.id, 30, "donor1")

    assert updated.fund_available == Decimal(80)
    assert updated.donors == ["donor1", "donor1"]
    recorded = donations.list_for_charity(charity.id)
    assert sorted(d.amount for d in recorded) == [Decimal(30), Decimal(50)]
    assert all(d.donor == "donor1" for d in recorded)


def test_fund_equals_sum_of_amounts(service, charity):
    amounts = ["0.1", "0.2", 3, 4.5, Decimal("10.25")]
    for amount in amounts:
        service.donate(charity.id, amount, "donor1")

    assert service.total_funds(charity.id) == Decimal("18.05")


def test_donate_appends_exactly_one_donor(service, charity):
    service.donate(charity.id, 5, "donor1")
    before = service.donors_of(charity.id)

    service.donate(charity.id, 5, "donor2")
    after = service.donors_of(charity.id)

    assert len(after) == len(before) + 1
    assert after[-1] == "donor2"


def test_donate_stamps_updated_at(service, charity, clock):
    assert service.last_update_timestamp(charity.id) is None

    updated = service.donate(charity.id, 5, "donor1")

    assert updated.updated_at == service.last_update_timestamp(charity.id)
    assert updated.updated_at > updated.created_at
    assert updated.created_at == charity.created_at


@pytest.mark.parametrize("amount", [-5, 0, "0.00", "NaN", "Infinity", "abc", None, True])
def test_donate_rejects_bad_amounts_without_state_change(service, donations, charity, amount):
    with pytest.raises(ValidationError):
        service.donate(charity.id, amount, "donor1")

    assert service.total_funds(charity.id) == 0
    assert service.donors_of(charity.id) == []
    assert donations.list_for_charity(charity.id) == []


def test_donate_to_unknown_charity(service, donations):
    with pytest.raises(NotFoundError):
        service.donate("missing", 10, "donor1")
    with pytest.raises(ValidationError):
        service.donate("", 10, "donor1")

    assert donations.store.size() == 0


def test_failed_donation_write_leaves_charity_credited(service, donations, charity, monkeypatch):
    def broken_create(**kwargs):
        raise RuntimeError("storage unavailable")

    monkeypatch.setattr(donations, "create", broken_create)

    with pytest.raises(RuntimeError):
        service.donate(charity.id, 25, "donor1")

    assert service.total_funds(charity.id) == Decimal(25)
    assert donations.list_for_charity(charity.id) == []


def test_has_donated(service, charity):
    assert service.has_donated(charity.id, "donor1") is False
    service.donate(charity.id, 1, "donor1")
    assert service.has_donated(charity.id, "donor1") is True
    assert service.has_donated(charity.id, "donor2") is False


@pytest.mark.parametrize(
    "read", ["has_donated", "total_funds", "last_update_timestamp", "donors_of"]
)
def test_reads_on_unknown_charity(service, read):
    args = ("missing", "donor1") if read == "has_donated" else ("missing",)
    with pytest.raises(NotFoundError):
        getattr(service, read)(*args)


def test_donations_survive_charity_delete(service, charities, charity):
    service.donate(charity.id, 50, "donor1")
    service.donate(charity.id, 30, "donor1")

    charities.delete(charity.id)

    assert len(service.donations_for(charity.id)) == 2
    with pytest.raises(NotFoundError):
        charities.get(charity.id)


def test_count_and_location(service, charities, red_cross, charity):
    charities.create(red_cross.model_copy(update={"name": "Oxfam", "location": "LA"}))

    assert service.count() == 2
    assert [c.name for c in service.charities_by_location("LA")] == ["Oxfam"]


def test_get_donation(service, charity):
    service.donate(charity.id, 50, "donor1")
    donation = service.donations_for(charity.id)[0]

    assert service.get_donation(donation.id) == donation
    with pytest.raises(NotFoundError):
        service.get_donation("missing")


def test_to_amount_converts_floats_through_str():
    assert to_amount(0.1) == Decimal("0.1")
    assert to_amount(Decimal("2.50")) == Decimal("2.50")
