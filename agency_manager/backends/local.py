"""Local backend implementation over JSON snapshots in LocalStorage."""

import math
import uuid
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import structlog

from agency_manager.analytics import Analytics, compute_analytics
from agency_manager.backend import Backend
from agency_manager.errors import EntityNotFoundError, OfflineOperationError
from agency_manager.models import (
    Appointment,
    AppointmentType,
    AuthUser,
    Campaign,
    Collaboration,
    CollaborationStatus,
    EntityKind,
    Income,
    LinkTalent,
    Notification,
    PaymentStatus,
    Record,
    SearchResult,
    Talent,
    to_snake,
)
from agency_manager.storage import LocalStorage

logger = structlog.get_logger()

DEFAULT_AGENCY_FEE_PERCENT = 30


def talent_fee(total_budget: float, agency_fee_percent: float | None) -> int:
    """Talent payout for a campaign: the budget minus the agency's share, floored.

    A missing or zero percentage falls back to the default, as the API does.
    """
    percent = agency_fee_percent or DEFAULT_AGENCY_FEE_PERCENT
    return math.floor((total_budget or 0) * (1 - percent / 100))


class LocalBackend(Backend):
    """Offline backend.

    Collections are read lazily from their snapshot (or from seed data when
    no snapshot exists) and the whole collection is written back after every
    mutation. Identifiers are ``<prefix>-<uuid4 hex>``.
    """

    def __init__(
        self,
        storage: LocalStorage,
        seed: Callable[[], Mapping[EntityKind, list[Record]]] | None = None,
    ) -> None:
        """Initialize local backend.

        Args:
            storage: Key-value storage holding one snapshot per collection
            seed: Factory for fallback data used when a collection has no snapshot
        """
        self.storage = storage
        self._seed = seed
        self._seed_data: Mapping[EntityKind, list[Record]] | None = None
        self._collections: dict[EntityKind, list[Record]] = {}
        logger.debug("Local backend initialized", directory=str(storage.directory))

    def new_id(self, kind: EntityKind) -> str:
        return f"{kind.prefix}-{uuid.uuid4().hex}"

    def _seed_for(self, kind: EntityKind) -> list[Record]:
        if self._seed is None:
            return []
        if self._seed_data is None:
            self._seed_data = self._seed()
        return list(self._seed_data.get(kind, []))

    def _collection(self, kind: EntityKind) -> list[Record]:
        if kind not in self._collections:
            stored = self.storage.get(kind.value)
            if stored is None:
                logger.info("No local snapshot, using seed data", kind=kind.value)
                self._collections[kind] = self._seed_for(kind)
            else:
                self._collections[kind] = [kind.model.from_wire(item) for item in stored]
                logger.debug("Loaded local snapshot", kind=kind.value, count=len(stored))
        return self._collections[kind]

    def _persist(self, kind: EntityKind) -> None:
        self.storage.set(kind.value, [record.to_wire() for record in self._collection(kind)])

    def _index(self, kind: EntityKind, entity_id: str) -> int | None:
        for index, record in enumerate(self._collection(kind)):
            if record.id == entity_id:
                return index
        return None

    def adopt(self, collections: Mapping[EntityKind, Iterable[Record]]) -> None:
        """Replace the local collections with the given ones and persist them."""
        for kind, records in collections.items():
            self._collections[kind] = list(records)
            self._persist(kind)
        logger.info("Adopted in-memory collections", kinds=[kind.value for kind in collections])

    def list_entities(self, kind: EntityKind, filters: dict[str, str] | None = None) -> list[Record]:
        records = list(self._collection(kind))
        if filters:
            records = [r for r in records if all(_matches(r, key, value) for key, value in filters.items())]
        logger.debug("Listed local entities", kind=kind.value, count=len(records))
        return records

    def read(self, kind: EntityKind, entity_id: str) -> Record:
        index = self._index(kind, entity_id)
        if index is None:
            raise EntityNotFoundError(kind.value, entity_id)
        return self._collection(kind)[index]

    def create(self, kind: EntityKind, entity: Record) -> Record:
        record = replace(entity, id=self.new_id(kind))
        self._collection(kind).append(record)
        self._persist(kind)
        logger.info("Created local entity", kind=kind.value, entity_id=record.id)
        return record

    def update(self, kind: EntityKind, entity_id: str, patch: dict[str, Any]) -> Record:
        index = self._index(kind, entity_id)
        if index is None:
            raise EntityNotFoundError(kind.value, entity_id)
        collection = self._collection(kind)
        record = collection[index].merged(patch)
        collection[index] = record
        self._persist(kind)
        logger.info("Updated local entity", kind=kind.value, entity_id=entity_id, fields=sorted(patch))
        return record

    def delete(self, kind: EntityKind, entity_id: str) -> None:
        collection = self._collection(kind)
        remaining = [record for record in collection if record.id != entity_id]
        if len(remaining) == len(collection):
            logger.debug("Local entity already absent", kind=kind.value, entity_id=entity_id)
        self._collections[kind] = remaining
        self._persist(kind)
        logger.info("Deleted local entity", kind=kind.value, entity_id=entity_id)

    def create_campaign(self, campaign: Campaign, link_talent: LinkTalent | None = None) -> Campaign:
        created = self.create(EntityKind.CAMPAIGNS, campaign)

        if link_talent is not None:
            talent_index = self._index(EntityKind.TALENTS, link_talent.talent_id)
            if talent_index is None:
                logger.warning("Linked talent not found, skipping link", talent_id=link_talent.talent_id)
            else:
                talent = self._collection(EntityKind.TALENTS)[talent_index]
                self._link_talent(created, talent, link_talent)

        self.create(
            EntityKind.INCOME,
            Income(
                campaign_id=created.id,
                amount=created.total_budget or 0,
                status="pending",
                expected_date=created.deadline,
            ),
        )
        return created

    def _link_talent(self, campaign: Campaign, talent: Talent, link_talent: LinkTalent) -> None:
        collaboration = self.create(
            EntityKind.COLLABORATIONS,
            Collaboration(
                talent_id=talent.id,
                campaign_id=campaign.id,
                brand=campaign.brand,
                type=link_talent.type,
                fee=talent_fee(campaign.total_budget, campaign.agency_fee_percent),
                status=CollaborationStatus.CONFIRMED.value,
                payment_status=PaymentStatus.UNPAID.value,
                paid_amount=0,
                deadline=campaign.deadline,
            ),
        )
        activity_date = link_talent.activity_date or datetime.now(timezone.utc).date().isoformat()
        self.create(
            EntityKind.APPOINTMENTS,
            Appointment(
                talent_id=talent.id,
                talent_name=talent.display_name,
                brand=campaign.brand,
                type=AppointmentType.SHOOTING.value,
                date=activity_date,
                status="planned",
                collaboration_id=collaboration.id,
                description=f"Shooting per {campaign.name}",
            ),
        )
        self.create(
            EntityKind.NOTIFICATIONS,
            Notification(
                user_id=talent.id,
                type="new_collaboration",
                title="Nuova Collaborazione",
                message=f"Sei stato assegnato alla campagna {campaign.name} per {campaign.brand}",
                link="/my-calendar",
                created_at=datetime.now(timezone.utc).isoformat(),
            ),
        )

    def create_collaboration(self, collaboration: Collaboration, appointments: list[Appointment]) -> Collaboration:
        created = self.create(EntityKind.COLLABORATIONS, collaboration)
        for appointment in appointments:
            self.create(EntityKind.APPOINTMENTS, replace(appointment, collaboration_id=created.id))
        return created

    def upload_file(
        self,
        kind: EntityKind,
        entity_id: str,
        category: str,
        file_path: str | Path,
        metadata: dict[str, str] | None = None,
    ) -> str:
        raise OfflineOperationError("Upload not available offline")

    def mark_notifications_read(self, notification_ids: list[str] | None = None, user_id: str | None = None) -> None:
        collection = self._collection(EntityKind.NOTIFICATIONS)
        for index, notification in enumerate(collection):
            if notification_ids is None or notification.id in notification_ids:
                collection[index] = notification.merged({"read": True})
        self._persist(EntityKind.NOTIFICATIONS)

    def search(self, query: str) -> list[SearchResult]:
        q = query.lower()
        results: list[SearchResult] = []
        for talent in self._collection(EntityKind.TALENTS):
            names = (talent.first_name, talent.last_name, talent.stage_name)
            if any(name and q in name.lower() for name in names):
                results.append(SearchResult("talent", talent.id, talent.full_name, talent.email or ""))
        for campaign in self._collection(EntityKind.CAMPAIGNS):
            if q in (campaign.name or "").lower():
                results.append(SearchResult("campaign", campaign.id, campaign.name, campaign.tipo or ""))
        for brand in self._collection(EntityKind.BRANDS):
            if q in (brand.name or "").lower() or q in (brand.contact_name or "").lower():
                results.append(SearchResult("brand", brand.id, brand.name, brand.contact_name or ""))
        return results

    def analytics(self) -> Analytics:
        return compute_analytics(
            campaigns=self._collection(EntityKind.CAMPAIGNS),
            collaborations=self._collection(EntityKind.COLLABORATIONS),
            costs=self._collection(EntityKind.COSTS),
            income=self._collection(EntityKind.INCOME),
            talents=self._collection(EntityKind.TALENTS),
        )

    def authenticate(self, identifier: str, password: str) -> AuthUser:
        raise OfflineOperationError("Login not available offline")


def _matches(record: Record, key: str, value: str) -> bool:
    """Compare a record attribute (snake_case or camelCase key) with a query-string value."""
    name = key if key in record.field_names() else to_snake(key)
    return str(getattr(record, name, None)) == value
