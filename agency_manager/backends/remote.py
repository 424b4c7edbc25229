"""Remote backend implementation over the agency REST API."""

from pathlib import Path
from typing import Any

import structlog

from agency_manager.analytics import Analytics
from agency_manager.backend import Backend
from agency_manager.client import ApiClient
from agency_manager.errors import RemoteOperationError
from agency_manager.models import (
    Appointment,
    AuthUser,
    Campaign,
    Collaboration,
    EntityKind,
    LinkTalent,
    Record,
    SearchResult,
    patch_to_wire,
)

logger = structlog.get_logger()

UPLOAD_CATEGORIES: dict[EntityKind, set[str]] = {
    EntityKind.TALENTS: {"gallery", "attachments", "photo"},
    EntityKind.BRANDS: {"logo"},
}


class RemoteBackend(Backend):
    """API-based backend; every call is a single HTTP request."""

    def __init__(self, client: ApiClient) -> None:
        self.client = client
        logger.debug("Remote backend initialized", base_url=client.base_url)

    def _to_record(self, kind: EntityKind, data: Any) -> Record:
        if not isinstance(data, dict):
            raise RemoteOperationError(f"Unexpected response for {kind.value}: {data!r}")
        return kind.model.from_wire(data)

    def list_entities(self, kind: EntityKind, filters: dict[str, str] | None = None) -> list[Record]:
        logger.info("Fetching entities", kind=kind.value, filters=filters)
        data = self.client.get(f"/{kind.value}", params=filters or None)
        if not isinstance(data, list):
            raise RemoteOperationError(f"Unexpected response for {kind.value} list")
        records = [kind.model.from_wire(item) for item in data]
        logger.debug("Fetched entities", kind=kind.value, count=len(records))
        return records

    def read(self, kind: EntityKind, entity_id: str) -> Record:
        logger.info("Reading entity", kind=kind.value, entity_id=entity_id)
        return self._to_record(kind, self.client.get(f"/{kind.value}/{entity_id}"))

    def create(self, kind: EntityKind, entity: Record) -> Record:
        # The API only creates these through their envelope bodies
        if kind is EntityKind.CAMPAIGNS:
            return self.create_campaign(entity)  # type: ignore[arg-type]
        if kind is EntityKind.COLLABORATIONS:
            return self.create_collaboration(entity, [])  # type: ignore[arg-type]

        logger.info("Creating entity", kind=kind.value)
        payload = entity.to_wire(skip_none=True)
        payload.pop("id", None)
        data = self.client.post(f"/{kind.value}", json=payload)

        # Talent creation answers with {"talent": ..., "credentials": ...}
        if kind is EntityKind.TALENTS and isinstance(data, dict) and "talent" in data:
            data = data["talent"]

        record = self._to_record(kind, data)
        logger.info("Entity created", kind=kind.value, entity_id=record.id)
        return record

    def update(self, kind: EntityKind, entity_id: str, patch: dict[str, Any]) -> Record:
        logger.info("Updating entity", kind=kind.value, entity_id=entity_id, fields=sorted(patch))
        data = self.client.put(f"/{kind.value}/{entity_id}", json=patch_to_wire(patch))
        return self._to_record(kind, data)

    def delete(self, kind: EntityKind, entity_id: str) -> None:
        logger.info("Deleting entity", kind=kind.value, entity_id=entity_id)
        self.client.delete(f"/{kind.value}/{entity_id}")

    def create_campaign(self, campaign: Campaign, link_talent: LinkTalent | None = None) -> Campaign:
        logger.info("Creating campaign", name=campaign.name, linked_talent=link_talent.talent_id if link_talent else None)
        payload = campaign.to_wire(skip_none=True)
        payload.pop("id", None)
        body: dict[str, Any] = {"campaign": payload}
        if link_talent is not None:
            body["linkTalent"] = link_talent.to_wire()
        data = self.client.post(f"/{EntityKind.CAMPAIGNS.value}", json=body)
        return self._to_record(EntityKind.CAMPAIGNS, data)

    def create_collaboration(self, collaboration: Collaboration, appointments: list[Appointment]) -> Collaboration:
        logger.info("Creating collaboration", talent_id=collaboration.talent_id, appointments=len(appointments))
        payload = collaboration.to_wire(skip_none=True)
        payload.pop("id", None)
        body = {
            "collaboration": payload,
            "appointments": [
                {k: v for k, v in a.to_wire(skip_none=True).items() if k != "id"} for a in appointments
            ],
        }
        data = self.client.post(f"/{EntityKind.COLLABORATIONS.value}", json=body)
        return self._to_record(EntityKind.COLLABORATIONS, data)

    def upload_file(
        self,
        kind: EntityKind,
        entity_id: str,
        category: str,
        file_path: str | Path,
        metadata: dict[str, str] | None = None,
    ) -> str:
        allowed = UPLOAD_CATEGORIES.get(kind, set())
        if category not in allowed:
            raise ValueError(f"Unsupported upload category for {kind.value}: {category}")
        data = self.client.upload(f"/{kind.value}/{entity_id}/upload/{category}", file_path, fields=metadata)
        if not isinstance(data, dict) or "url" not in data:
            raise RemoteOperationError("Upload failed")
        logger.info("File uploaded", kind=kind.value, entity_id=entity_id, url=data["url"])
        return data["url"]

    def mark_notifications_read(self, notification_ids: list[str] | None = None, user_id: str | None = None) -> None:
        if notification_ids is None:
            logger.info("Marking all notifications as read", user_id=user_id)
            self.client.put("/notifications/read-all", params={"userId": user_id} if user_id else None)
            return
        for notification_id in notification_ids:
            logger.info("Marking notification as read", notification_id=notification_id)
            self.client.put(f"/notifications/{notification_id}/read")

    def search(self, query: str) -> list[SearchResult]:
        logger.info("Searching", query=query)
        data = self.client.get("/search", params={"q": query}) or []
        return [SearchResult.from_wire(item) for item in data]

    def analytics(self) -> Analytics:
        logger.info("Fetching analytics")
        data = self.client.get("/analytics")
        if not isinstance(data, dict):
            raise RemoteOperationError("Unexpected analytics response")
        return Analytics.from_wire(data)

    def authenticate(self, identifier: str, password: str) -> AuthUser:
        logger.info("Logging in", identifier=identifier)
        data = self.client.post("/auth/login", json={"identifier": identifier, "password": password})
        if not isinstance(data, dict) or not isinstance(data.get("user"), dict):
            raise RemoteOperationError("Unexpected login response")
        user = dict(data["user"])
        user.pop("password", None)
        return AuthUser.from_wire(user)
