"""Tests for the remote API backend."""

from unittest.mock import MagicMock, Mock

import pytest

from agency_manager.backends.remote import RemoteBackend
from agency_manager.client import ApiClient
from agency_manager.errors import RemoteOperationError
from agency_manager.models import (
    Appointment,
    Brand,
    Campaign,
    Collaboration,
    EntityKind,
    ExtraCost,
    LinkTalent,
    Talent,
)


@pytest.fixture
def mock_client() -> Mock:
    """Create a mock API client."""
    client = MagicMock(spec=ApiClient)
    client.base_url = "http://api.test/api"
    return client


@pytest.fixture
def remote_backend(mock_client: Mock) -> RemoteBackend:
    """Create a remote backend over the mock client."""
    return RemoteBackend(mock_client)


def test_list_entities(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test listing a collection."""
    mock_client.get.return_value = [
        {"id": "brand-1", "name": "Amazon Fashion", "contactName": "Anna"},
        {"id": 2, "name": "Sony PlayStation"},
    ]

    brands = remote_backend.list_entities(EntityKind.BRANDS)

    mock_client.get.assert_called_once_with("/brands", params=None)
    assert brands == [
        Brand(id="brand-1", name="Amazon Fashion", contact_name="Anna"),
        Brand(id="2", name="Sony PlayStation"),
    ]


def test_list_entities_with_filters(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test that filters become query parameters."""
    mock_client.get.return_value = []

    remote_backend.list_entities(EntityKind.NOTIFICATIONS, {"userId": "admin-1"})

    mock_client.get.assert_called_once_with("/notifications", params={"userId": "admin-1"})


def test_list_entities_unexpected_response(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test that a non-list answer is rejected."""
    mock_client.get.return_value = {"error": "nope"}

    with pytest.raises(RemoteOperationError):
        remote_backend.list_entities(EntityKind.TALENTS)


def test_create_strips_id_and_none(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test the create request body."""
    mock_client.post.return_value = {"id": "cost-9", "campaignId": "3", "amount": 40}

    created = remote_backend.create(EntityKind.COSTS, ExtraCost(id="ignored", campaign_id="3", amount=40))

    path, = mock_client.post.call_args.args
    body = mock_client.post.call_args.kwargs["json"]
    assert path == "/costs"
    assert "id" not in body
    assert "date" not in body
    assert body["amount"] == 40
    assert created.id == "cost-9"


def test_generic_create_campaign_sends_envelope(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test that campaigns are always posted inside the campaign envelope."""
    mock_client.post.return_value = {"id": "c-9", "name": "Launch", "totalBudget": 1000}

    created = remote_backend.create(EntityKind.CAMPAIGNS, Campaign(id="ignored", name="Launch", total_budget=1000))

    body = mock_client.post.call_args.kwargs["json"]
    assert mock_client.post.call_args.args == ("/campaigns",)
    assert set(body) == {"campaign"}
    assert "id" not in body["campaign"]
    assert body["campaign"]["totalBudget"] == 1000
    assert created.id == "c-9"


def test_generic_create_collaboration_sends_envelope(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test that collaborations are posted with an empty appointment list."""
    mock_client.post.return_value = {"id": "15", "talentId": "42", "fee": 500}

    remote_backend.create(EntityKind.COLLABORATIONS, Collaboration(talent_id="42", campaign_id="3", fee=500))

    body = mock_client.post.call_args.kwargs["json"]
    assert body["appointments"] == []
    assert body["collaboration"]["talentId"] == "42"


def test_create_talent_unwraps_credentials(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test that talent creation returns the talent without the credentials envelope."""
    mock_client.post.return_value = {
        "talent": {"id": "t-3", "firstName": "Luca", "lastName": "Verdi"},
        "credentials": {"username": "luca.verdi", "password": "generated"},
    }

    created = remote_backend.create(EntityKind.TALENTS, Talent(first_name="Luca", last_name="Verdi"))

    assert isinstance(created, Talent)
    assert created.id == "t-3"
    assert "credentials" not in created.extra


def test_update_sends_camel_case_patch(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test the update request."""
    mock_client.put.return_value = {"id": "col-1", "paidAmount": 500, "paymentStatus": "In attesa", "fee": 1000}

    updated = remote_backend.update(EntityKind.COLLABORATIONS, "col-1", {"paid_amount": 500})

    mock_client.put.assert_called_once_with("/collaborations/col-1", json={"paidAmount": 500})
    assert updated.paid_amount == 500


def test_delete(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test the delete request."""
    remote_backend.delete(EntityKind.COSTS, "cost-1")
    mock_client.delete.assert_called_once_with("/costs/cost-1")


def test_delete_failure_propagates(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test that API errors are not swallowed."""
    mock_client.delete.side_effect = RemoteOperationError("Income not found", status_code=404)

    with pytest.raises(RemoteOperationError, match="Income not found"):
        remote_backend.delete(EntityKind.INCOME, "inc-9")


def test_create_campaign_with_link(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test the composite campaign request."""
    mock_client.post.return_value = {"id": "c-3", "name": "Launch"}
    campaign = Campaign(name="Launch", brand="Acme", total_budget=10000, agency_fee_percent=30)

    created = remote_backend.create_campaign(campaign, LinkTalent("t-1", activity_date="2025-06-01"))

    body = mock_client.post.call_args.kwargs["json"]
    assert mock_client.post.call_args.args == ("/campaigns",)
    assert body["campaign"]["name"] == "Launch"
    assert body["campaign"]["agencyFeePercent"] == 30
    assert body["linkTalent"] == {
        "enabled": True,
        "talentId": "t-1",
        "activityDate": "2025-06-01",
        "type": "Shooting + Social Kit",
    }
    assert created.id == "c-3"


def test_create_campaign_without_link(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test that no link directive is sent when none is given."""
    mock_client.post.return_value = {"id": "c-4", "name": "Solo"}

    remote_backend.create_campaign(Campaign(name="Solo"))

    assert "linkTalent" not in mock_client.post.call_args.kwargs["json"]


def test_create_collaboration_with_appointments(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test the composite collaboration request."""
    mock_client.post.return_value = {"id": "col-7", "talentId": "t-1", "campaignId": "c-1"}
    collaboration = Collaboration(talent_id="t-1", campaign_id="c-1", fee=700)
    appointment = Appointment(id="draft", talent_id="t-1", type="Shooting", date="2025-06-01")

    created = remote_backend.create_collaboration(collaboration, [appointment])

    body = mock_client.post.call_args.kwargs["json"]
    assert body["collaboration"]["fee"] == 700
    assert body["appointments"] == [
        {"talentId": "t-1", "type": "Shooting", "date": "2025-06-01", "status": "planned"}
    ]
    assert created.id == "col-7"


def test_upload_file(remote_backend: RemoteBackend, mock_client: Mock, tmp_path) -> None:
    """Test uploading a gallery image."""
    mock_client.upload.return_value = {"url": "/uploads/1.jpg", "talent": {"id": "t-1"}}
    photo = tmp_path / "1.jpg"

    url = remote_backend.upload_file(EntityKind.TALENTS, "t-1", "gallery", photo)

    mock_client.upload.assert_called_once_with("/talents/t-1/upload/gallery", photo, fields=None)
    assert url == "/uploads/1.jpg"


def test_upload_rejects_unknown_category(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test that only known upload categories are accepted."""
    with pytest.raises(ValueError, match="Unsupported upload category"):
        remote_backend.upload_file(EntityKind.BRANDS, "brand-1", "gallery", "x.png")
    mock_client.upload.assert_not_called()


def test_mark_all_notifications_read(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test marking all notifications of a user as read."""
    remote_backend.mark_notifications_read(None, user_id="admin-1")
    mock_client.put.assert_called_once_with("/notifications/read-all", params={"userId": "admin-1"})


def test_mark_one_notification_read(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test marking a single notification as read."""
    remote_backend.mark_notifications_read(["notif-1"])
    mock_client.put.assert_called_once_with("/notifications/notif-1/read")


def test_search(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test global search."""
    mock_client.get.return_value = [
        {"type": "talent", "id": "t-1", "name": "Marco Rossi", "subtitle": "marco@example.com"},
        {"type": "brand", "id": "brand-1", "name": "Amazon Fashion", "subtitle": None},
    ]

    results = remote_backend.search("ma")

    mock_client.get.assert_called_once_with("/search", params={"q": "ma"})
    assert [r.type for r in results] == ["talent", "brand"]
    assert results[1].subtitle == ""


def test_authenticate_drops_password(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test that the login response is reduced to the user without the password."""
    mock_client.post.return_value = {
        "user": {"id": "u-t-1", "name": "Marco Rossi", "role": "talent", "talentId": "t-1", "password": "x"},
    }

    user = remote_backend.authenticate("marco.rossi", "secret")

    mock_client.post.assert_called_once_with(
        "/auth/login", json={"identifier": "marco.rossi", "password": "secret"}
    )
    assert user.id == "u-t-1"
    assert user.talent_id == "t-1"
    assert "password" not in user.to_wire()


def test_authenticate_rejected(remote_backend: RemoteBackend, mock_client: Mock) -> None:
    """Test that invalid credentials propagate as API errors."""
    mock_client.post.side_effect = RemoteOperationError("Invalid credentials", status_code=401)

    with pytest.raises(RemoteOperationError, match="Invalid credentials"):
        remote_backend.authenticate("nobody", "wrong")
