"""Tests for data models."""

import pytest

from agency_manager.models import (
    Campaign,
    Collaboration,
    EntityKind,
    LinkTalent,
    PaymentStatus,
    Talent,
    derive_payment_status,
    patch_to_wire,
    to_camel,
    to_snake,
)


def test_name_conversion() -> None:
    """Test snake_case and camelCase conversion both ways."""
    assert to_camel("agency_fee_percent") == "agencyFeePercent"
    assert to_camel("id") == "id"
    assert to_snake("totalBudget") == "total_budget"
    assert to_snake("photoUrl") == "photo_url"
    assert to_snake("tipo") == "tipo"


def test_talent_defaults() -> None:
    """Test talent creation with defaults."""
    talent = Talent(first_name="Marco", last_name="Rossi")
    assert talent.id == ""
    assert talent.status == "active"
    assert talent.gallery == []
    assert talent.attachments == []
    assert talent.full_name == "Marco Rossi"
    assert talent.display_name == "Marco Rossi"


def test_from_wire_keeps_unknown_keys() -> None:
    """Test that wire keys without an attribute survive a round trip."""
    data = {
        "id": "t-1",
        "firstName": "Marco",
        "lastName": "Rossi",
        "stageName": "MarkRed",
        "instagramFollowers": 12000,
        "youtube_url": "https://youtube.com/@markred",
    }

    talent = Talent.from_wire(data)

    assert talent.first_name == "Marco"
    assert talent.stage_name == "MarkRed"
    assert talent.instagram_followers == 12000
    assert talent.extra == {"youtube_url": "https://youtube.com/@markred"}

    wire = talent.to_wire()
    assert wire["youtube_url"] == "https://youtube.com/@markred"
    assert wire["stageName"] == "MarkRed"
    assert wire["instagramFollowers"] == 12000


def test_from_wire_stringifies_numeric_id() -> None:
    """Test that numeric database IDs become strings."""
    campaign = Campaign.from_wire({"id": 42, "name": "Launch", "totalBudget": 1000})
    assert campaign.id == "42"
    assert campaign.total_budget == 1000


def test_to_wire_skip_none() -> None:
    """Test that unset optional fields can be left out of request bodies."""
    wire = Campaign(name="Launch", total_budget=1000).to_wire(skip_none=True)
    assert "deadline" not in wire
    assert wire["name"] == "Launch"
    assert wire["agencyFeePercent"] == 30


def test_merged_is_shallow_overlay() -> None:
    """Test shallow merge semantics of patches."""
    campaign = Campaign(id="c-1", name="Launch", brand="Acme", total_budget=1000)

    updated = campaign.merged({"total_budget": 2000, "status": "Attiva"})

    assert updated.id == "c-1"
    assert updated.name == "Launch"
    assert updated.brand == "Acme"
    assert updated.total_budget == 2000
    assert updated.status == "Attiva"
    assert campaign.total_budget == 1000


def test_merged_rejects_unknown_fields() -> None:
    """Test that patches naming unknown fields are refused."""
    with pytest.raises(ValueError, match="Invalid Campaign fields"):
        Campaign(id="c-1").merged({"budget": 10})


def test_campaign_budget_split() -> None:
    """Test the derived agency share and talent pool."""
    campaign = Campaign(total_budget=10000, agency_fee_percent=30)
    assert campaign.agency_share == 3000
    assert campaign.talent_pool == 7000


def test_patch_to_wire() -> None:
    """Test patch key conversion for request bodies."""
    assert patch_to_wire({"paid_amount": 10, "payment_status": "In attesa"}) == {
        "paidAmount": 10,
        "paymentStatus": "In attesa",
    }


@pytest.mark.parametrize(
    ("paid", "expected"),
    [
        (0, PaymentStatus.UNPAID),
        (1, PaymentStatus.PENDING),
        (999, PaymentStatus.PENDING),
        (1000, PaymentStatus.PAID),
        (1001, PaymentStatus.PAID),
    ],
)
def test_derive_payment_status_boundaries(paid: float, expected: PaymentStatus) -> None:
    """Test payment status at the boundaries around a fee of 1000."""
    assert derive_payment_status(1000, paid) is expected


def test_derive_payment_status_rejects_negative() -> None:
    """Test that negative payments are refused."""
    with pytest.raises(ValueError):
        derive_payment_status(1000, -1)


def test_payment_status_compares_with_wire_strings() -> None:
    """Test that stored status strings compare equal to the enum."""
    collaboration = Collaboration.from_wire({"id": "col-1", "paymentStatus": "Saldato"})
    assert collaboration.payment_status == PaymentStatus.PAID


def test_entity_kind_metadata() -> None:
    """Test model and prefix lookup per collection."""
    assert EntityKind.TALENTS.model is Talent
    assert EntityKind.COSTS.value == "costs"
    assert EntityKind.COLLABORATIONS.prefix == "col"
    assert EntityKind("income") is EntityKind.INCOME


def test_link_talent_wire() -> None:
    """Test the link-talent directive body."""
    link = LinkTalent(talent_id="t-1", activity_date="2025-06-01")
    assert link.to_wire() == {
        "enabled": True,
        "talentId": "t-1",
        "activityDate": "2025-06-01",
        "type": "Shooting + Social Kit",
    }
