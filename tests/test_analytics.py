"""Tests for analytics aggregates."""

from unittest.mock import MagicMock

import pytest

from agency_manager.analytics import Analytics, compute_analytics, margin_percentage
from agency_manager.backends.local import LocalBackend
from agency_manager.backends.remote import RemoteBackend
from agency_manager.client import ApiClient
from agency_manager.models import Campaign, Collaboration, EntityKind, ExtraCost, Income, Talent
from agency_manager.storage import LocalStorage


@pytest.fixture
def dataset() -> dict:
    """A small, consistent set of campaigns, collaborations, costs and income."""
    return {
        "campaigns": [
            Campaign(id="c-1", name="Launch", total_budget=10000, agency_fee_percent=30, status="Attiva"),
            Campaign(id="c-2", name="Relaunch", total_budget=5000, agency_fee_percent=30, status="Chiusa"),
        ],
        "collaborations": [
            Collaboration(id="col-1", campaign_id="c-1", fee=7000, payment_status="Saldato"),
            Collaboration(id="col-2", campaign_id="c-2", fee=3500, payment_status="Non Saldato"),
        ],
        "costs": [ExtraCost(id="cost-1", campaign_id="c-1", amount=1200, status="paid")],
        "income": [
            Income(id="inc-1", campaign_id="c-1", amount=10000, status="received"),
            Income(id="inc-2", campaign_id="c-2", amount=5000, status="pending"),
        ],
        "talents": [Talent(id="t-1", status="active"), Talent(id="t-2", status="inactive")],
    }


def _server_payload(data: dict) -> dict:
    """Build the /analytics response the way the server computes it."""
    fatturato = sum(c.total_budget for c in data["campaigns"])
    payouts = sum(c.fee for c in data["collaborations"])
    costs = sum(c.amount for c in data["costs"])
    utile = fatturato - payouts - costs
    return {
        "totals": {
            "fatturato": fatturato,
            "talentPayouts": payouts,
            "extraCosts": costs,
            "utile": utile,
            "marginPercentage": f"{utile / fatturato * 100:.1f}" if fatturato > 0 else 0,
        },
        "income": {"received": 10000, "pending": 5000},
        "collaborations": {"total": 2, "paid": 1, "unpaid": 1},
        "talents": {"total": 2, "active": 1},
        "campaigns": {"total": 2, "active": 1, "closed": 1},
    }


def test_compute_analytics(dataset: dict) -> None:
    """Test the locally computed aggregates."""
    result = compute_analytics(**dataset)

    assert result.revenue == 15000
    assert result.talent_payouts == 10500
    assert result.extra_costs == 1200
    assert result.margin == 3300
    assert result.margin_percentage == 22.0
    assert result.income_received == 10000
    assert result.income_pending == 5000
    assert result.collaborations_paid == 1
    assert result.collaborations_unpaid == 1
    assert result.talents_active == 1
    assert result.campaigns_active == 1
    assert result.campaigns_closed == 1


def test_zero_revenue_margin_is_zero() -> None:
    """Test that zero revenue yields a zero margin percentage instead of a division error."""
    result = compute_analytics(
        campaigns=[Campaign(id="c-1", total_budget=0)],
        collaborations=[Collaboration(id="col-1", fee=500)],
        costs=[],
        income=[],
    )
    assert result.revenue == 0
    assert result.margin == -500
    assert result.margin_percentage == 0.0


def test_empty_dataset() -> None:
    """Test aggregates over no data at all."""
    result = compute_analytics([], [], [], [])
    assert result == Analytics()


@pytest.mark.parametrize(
    ("revenue", "margin", "expected"),
    [
        (3, 1, 33.3),
        (3, 2, 66.7),
        (200, -50, -25.0),
        (0, 100, 0.0),
        (10000, 10000, 100.0),
    ],
)
def test_margin_percentage(revenue: float, margin: float, expected: float) -> None:
    """Test one-decimal rounding of the margin percentage."""
    assert margin_percentage(revenue, margin) == expected


def test_from_wire_parses_string_percentage() -> None:
    """Test that the server's string percentage becomes a float."""
    result = Analytics.from_wire({"totals": {"fatturato": 100, "utile": 25, "marginPercentage": "25.0"}})
    assert result.revenue == 100
    assert result.margin == 25
    assert result.margin_percentage == 25.0


def test_wire_round_trip(dataset: dict) -> None:
    """Test that serialized aggregates parse back to the same values."""
    result = compute_analytics(**dataset)
    assert Analytics.from_wire(result.to_wire()) == result


@pytest.mark.parametrize("with_revenue", [True, False])
def test_online_and_offline_analytics_agree(dataset: dict, tmp_path, with_revenue: bool) -> None:
    """Test that server-computed and locally computed aggregates match for the same data."""
    if not with_revenue:
        dataset["campaigns"] = [Campaign(id="c-1", name="Free", total_budget=0)]

    local = LocalBackend(LocalStorage(tmp_path))
    local.adopt(
        {
            EntityKind.CAMPAIGNS: dataset["campaigns"],
            EntityKind.COLLABORATIONS: dataset["collaborations"],
            EntityKind.COSTS: dataset["costs"],
            EntityKind.INCOME: dataset["income"],
            EntityKind.TALENTS: dataset["talents"],
        }
    )

    client = MagicMock(spec=ApiClient)
    client.base_url = "http://api.test/api"
    client.get.return_value = _server_payload(dataset)
    remote = RemoteBackend(client)

    offline = local.analytics()
    online = remote.analytics()

    assert online.revenue == offline.revenue
    assert online.margin == offline.margin
    assert online.margin_percentage == offline.margin_percentage
    client.get.assert_called_once_with("/analytics")
