"""Connectivity-aware store holding every agency collection in memory.

The store is the single writer of the in-memory collections. Each operation
asks the connectivity monitor which backend to use (remote API when online,
local snapshots when offline), runs the operation against that backend and
splices the result into memory. Consumers only get tuples back.
"""

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from pathlib import Path
from typing import Any

import structlog

from agency_manager.analytics import Analytics
from agency_manager.backend import Backend
from agency_manager.backends import LocalBackend, RemoteBackend
from agency_manager.client import ApiClient
from agency_manager.config import Settings
from agency_manager.connectivity import ConnectivityMonitor
from agency_manager.errors import EntityNotFoundError, OfflineOperationError, RemoteOperationError
from agency_manager.models import (
    Appointment,
    AuthUser,
    Brand,
    Campaign,
    Collaboration,
    EntityKind,
    ExtraCost,
    Income,
    LinkTalent,
    Notification,
    Record,
    Role,
    SearchResult,
    Talent,
    derive_payment_status,
)
from agency_manager.seed import seed_collections
from agency_manager.storage import AUTH_KEY, LocalStorage
from agency_manager.toasts import ToastCenter, ToastLevel

logger = structlog.get_logger()

MIN_SEARCH_LENGTH = 2

# Toast text per collection; creation messages are formatted with the new record
CREATED_MESSAGES = {
    EntityKind.TALENTS: "{record.full_name} added to roster",
    EntityKind.BRANDS: "{record.name} added to brands",
    EntityKind.CAMPAIGNS: 'Campaign "{record.name}" created',
    EntityKind.COLLABORATIONS: "Talent assigned to campaign",
    EntityKind.APPOINTMENTS: "Appointment added",
    EntityKind.INCOME: "Income recorded",
    EntityKind.COSTS: "Cost recorded",
    EntityKind.NOTIFICATIONS: "Notification created",
}

UPDATED_MESSAGES = {
    EntityKind.TALENTS: "Profile updated",
    EntityKind.BRANDS: "Brand updated",
    EntityKind.CAMPAIGNS: "Campaign updated",
    EntityKind.COLLABORATIONS: "Collaboration updated",
    EntityKind.APPOINTMENTS: "Appointment updated",
    EntityKind.INCOME: "Income updated",
    EntityKind.COSTS: "Cost updated",
    EntityKind.NOTIFICATIONS: "Notification updated",
}

DELETED_MESSAGES = {
    EntityKind.TALENTS: "Talent removed from roster",
    EntityKind.BRANDS: "Brand deleted",
    EntityKind.CAMPAIGNS: "Campaign deleted",
    EntityKind.COLLABORATIONS: "Talent removed from campaign",
    EntityKind.APPOINTMENTS: "Appointment deleted",
    EntityKind.INCOME: "Income deleted",
    EntityKind.COSTS: "Cost deleted",
    EntityKind.NOTIFICATIONS: "Notification deleted",
}


def _check_amount(name: str, value: Any) -> None:
    """Reject amounts that are not non-negative numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} cannot be negative: {value}")


class AgencyStore:
    """In-memory state of the agency plus every operation that changes it."""

    def __init__(
        self,
        remote: Backend,
        local: LocalBackend,
        monitor: ConnectivityMonitor,
        storage: LocalStorage,
        toasts: ToastCenter | None = None,
        max_workers: int = 8,
    ) -> None:
        """Initialize the store.

        Args:
            remote: Backend used while the API is reachable
            local: Backend used while offline
            monitor: Decides, per call, whether the API is reachable
            storage: Local storage, also used for the session user
            toasts: Sink for user-facing notifications
            max_workers: Thread count for the start-up fan-out
        """
        self.remote = remote
        self.local = local
        self.monitor = monitor
        self.storage = storage
        self.toasts = toasts or ToastCenter()
        self.max_workers = max_workers
        self._collections: dict[EntityKind, list[Record]] = {kind: [] for kind in EntityKind}
        self._online: bool | None = None

        stored_user = storage.get(AUTH_KEY)
        self._user: AuthUser | None = AuthUser.from_wire(stored_user) if stored_user else None

    @classmethod
    def from_settings(cls, settings: Settings) -> "AgencyStore":
        """Wire a store from resolved settings."""
        client = ApiClient(settings.base_url, timeout=settings.timeout)
        storage = LocalStorage(settings.data_dir, namespace=settings.namespace)
        return cls(
            remote=RemoteBackend(client),
            local=LocalBackend(storage, seed=seed_collections),
            monitor=ConnectivityMonitor(client, reprobe_interval=settings.reprobe_interval),
            storage=storage,
        )

    # =========================================================================
    # State
    # =========================================================================

    @property
    def is_online(self) -> bool:
        """Mode used by the most recent operation."""
        return bool(self._online)

    @property
    def user(self) -> AuthUser | None:
        return self._user

    def collection(self, kind: EntityKind) -> tuple[Record, ...]:
        return tuple(self._collections[kind])

    @property
    def talents(self) -> tuple[Talent, ...]:
        return self.collection(EntityKind.TALENTS)  # type: ignore[return-value]

    @property
    def brands(self) -> tuple[Brand, ...]:
        return self.collection(EntityKind.BRANDS)  # type: ignore[return-value]

    @property
    def campaigns(self) -> tuple[Campaign, ...]:
        return self.collection(EntityKind.CAMPAIGNS)  # type: ignore[return-value]

    @property
    def collaborations(self) -> tuple[Collaboration, ...]:
        return self.collection(EntityKind.COLLABORATIONS)  # type: ignore[return-value]

    @property
    def appointments(self) -> tuple[Appointment, ...]:
        return self.collection(EntityKind.APPOINTMENTS)  # type: ignore[return-value]

    @property
    def income(self) -> tuple[Income, ...]:
        return self.collection(EntityKind.INCOME)  # type: ignore[return-value]

    @property
    def costs(self) -> tuple[ExtraCost, ...]:
        return self.collection(EntityKind.COSTS)  # type: ignore[return-value]

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return self.collection(EntityKind.NOTIFICATIONS)  # type: ignore[return-value]

    def find(self, kind: EntityKind, entity_id: str) -> Record | None:
        for record in self._collections[kind]:
            if record.id == entity_id:
                return record
        return None

    # =========================================================================
    # Mode selection and loading
    # =========================================================================

    def _backend(self) -> Backend:
        online = self.monitor.is_online()
        if self._online is not None and online != self._online:
            self._on_mode_change(online)
        self._online = online
        return self.remote if online else self.local

    def _on_mode_change(self, online: bool) -> None:
        if online:
            logger.info("Connection restored, switching to online mode")
            try:
                self._collections = self._fetch_all(self.remote)
            except RemoteOperationError as e:
                logger.warning("Failed to reload from API after reconnecting", error=str(e))
            self.toasts.show("Back online: changes made offline were kept locally only", ToastLevel.INFO)
        else:
            logger.warning("Connection lost, switching to offline mode")
            self.local.adopt(self._collections)
            self.toasts.show("Connection lost: working offline", ToastLevel.INFO)

    def _filters_for(self, kind: EntityKind) -> dict[str, str] | None:
        if kind is EntityKind.NOTIFICATIONS and self._user is not None:
            return {"userId": self._user.id}
        return None

    def _fetch_all(self, backend: Backend) -> dict[EntityKind, list[Record]]:
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {kind: pool.submit(backend.list_entities, kind, self._filters_for(kind)) for kind in EntityKind}
            return {kind: future.result() for kind, future in futures.items()}

    def load(self) -> None:
        """Probe the API and load every collection.

        When the API is unreachable, or any single fetch fails, all
        collections come from local snapshots (or seed data).
        """
        online = self.monitor.refresh()
        self._online = online
        loaded: dict[EntityKind, list[Record]] | None = None

        if online:
            try:
                loaded = self._fetch_all(self.remote)
            except RemoteOperationError as e:
                logger.warning("Failed to load from API, using local fallback", error=str(e))

        if loaded is None:
            loaded = {kind: self.local.list_entities(kind) for kind in EntityKind}

        self._collections = {kind: list(records) for kind, records in loaded.items()}
        logger.info(
            "Store loaded",
            online=online,
            counts={kind.value: len(records) for kind, records in self._collections.items()},
        )

    # =========================================================================
    # Generic operations
    # =========================================================================

    def _refresh(self, backend: Backend, *kinds: EntityKind) -> None:
        for kind in kinds:
            self._collections[kind] = list(backend.list_entities(kind, self._filters_for(kind)))

    def _splice(self, kind: EntityKind, record: Record) -> None:
        collection = self._collections[kind]
        for index, existing in enumerate(collection):
            if existing.id == record.id:
                collection[index] = record
                return
        collection.append(record)

    def _notify(self, message: str) -> None:
        if self._online:
            self.toasts.show(message, ToastLevel.SUCCESS)
        else:
            self.toasts.show(f"{message} (offline)", ToastLevel.INFO)

    def fetch(self, kind: EntityKind) -> tuple[Record, ...]:
        """Reload a collection from the active backend."""
        self._refresh(self._backend(), kind)
        return self.collection(kind)

    def create(self, kind: EntityKind, entity: Record) -> Record:
        """Create an entity in any collection.

        Campaigns and collaborations go through their composite operations so
        that related collections are refreshed and derived fields are set.
        """
        if not isinstance(entity, kind.model):
            raise TypeError(f"Expected {kind.model.__name__} for {kind.value}, got {type(entity).__name__}")
        if kind is EntityKind.CAMPAIGNS:
            return self.add_campaign(entity)  # type: ignore[arg-type]
        if kind is EntityKind.COLLABORATIONS:
            return self.add_collaboration(entity)  # type: ignore[arg-type]

        created = self._backend().create(kind, entity)
        self._splice(kind, created)
        self._notify(CREATED_MESSAGES[kind].format(record=created))
        return created

    def update(self, kind: EntityKind, entity_id: str, patch: dict[str, Any]) -> Record:
        """Shallow-merge a patch into an entity.

        Campaign budgets are validated and collaboration payment fields are
        re-derived before anything is sent to a backend.
        """
        invalid = set(patch) - (kind.model.field_names() - {"id"})
        if invalid:
            raise ValueError(f"Invalid {kind.value} fields: {sorted(invalid)}")
        if kind is EntityKind.CAMPAIGNS and "total_budget" in patch:
            _check_amount("total_budget", patch["total_budget"])
        if kind is EntityKind.COLLABORATIONS:
            patch = self._with_payment_status(entity_id, patch)

        updated = self._backend().update(kind, entity_id, patch)
        self._splice(kind, updated)
        self._notify(UPDATED_MESSAGES[kind])
        return updated

    def delete(self, kind: EntityKind, entity_id: str) -> None:
        self._backend().delete(kind, entity_id)
        self._collections[kind] = [record for record in self._collections[kind] if record.id != entity_id]
        self._notify(DELETED_MESSAGES[kind])

    def _upload(
        self,
        kind: EntityKind,
        entity_id: str,
        category: str,
        file_path: str | Path,
        metadata: dict[str, str] | None = None,
    ) -> str:
        backend = self._backend()
        try:
            url = backend.upload_file(kind, entity_id, category, file_path, metadata)
        except OfflineOperationError:
            self.toasts.show("Upload not available offline", ToastLevel.ERROR)
            raise
        self._refresh(backend, kind)
        return url

    # =========================================================================
    # Talents
    # =========================================================================

    def fetch_talents(self) -> tuple[Talent, ...]:
        return self.fetch(EntityKind.TALENTS)  # type: ignore[return-value]

    def add_talent(self, talent: Talent) -> Talent:
        return self.create(EntityKind.TALENTS, talent)  # type: ignore[return-value]

    def update_talent(self, talent_id: str, patch: dict[str, Any]) -> Talent:
        return self.update(EntityKind.TALENTS, talent_id, patch)  # type: ignore[return-value]

    def delete_talent(self, talent_id: str) -> None:
        self.delete(EntityKind.TALENTS, talent_id)

    def upload_talent_file(
        self,
        talent_id: str,
        category: str,
        file_path: str | Path,
        metadata: dict[str, str] | None = None,
    ) -> str:
        """Upload a gallery image, attachment or profile photo; online only."""
        url = self._upload(EntityKind.TALENTS, talent_id, category, file_path, metadata)
        self._notify("File uploaded")
        return url

    # =========================================================================
    # Brands
    # =========================================================================

    def fetch_brands(self) -> tuple[Brand, ...]:
        return self.fetch(EntityKind.BRANDS)  # type: ignore[return-value]

    def add_brand(self, brand: Brand) -> Brand:
        return self.create(EntityKind.BRANDS, brand)  # type: ignore[return-value]

    def update_brand(self, brand_id: str, patch: dict[str, Any]) -> Brand:
        return self.update(EntityKind.BRANDS, brand_id, patch)  # type: ignore[return-value]

    def delete_brand(self, brand_id: str) -> None:
        self.delete(EntityKind.BRANDS, brand_id)

    def upload_brand_logo(self, brand_id: str, file_path: str | Path) -> str:
        url = self._upload(EntityKind.BRANDS, brand_id, "logo", file_path)
        self._notify("Logo uploaded")
        return url

    # =========================================================================
    # Campaigns
    # =========================================================================

    def fetch_campaigns(self) -> tuple[Campaign, ...]:
        return self.fetch(EntityKind.CAMPAIGNS)  # type: ignore[return-value]

    def add_campaign(self, campaign: Campaign, link_talent: LinkTalent | None = None) -> Campaign:
        """Create a campaign, optionally linking a talent.

        Linking books a collaboration, a shooting appointment and a
        notification for the talent; a pending income entry is always
        recorded. The affected collections are reloaded from the backend
        that ran the operation.
        """
        _check_amount("total_budget", campaign.total_budget)
        backend = self._backend()
        created = backend.create_campaign(campaign, link_talent)
        self._refresh(
            backend,
            EntityKind.CAMPAIGNS,
            EntityKind.COLLABORATIONS,
            EntityKind.APPOINTMENTS,
            EntityKind.INCOME,
            EntityKind.NOTIFICATIONS,
        )
        self._notify(CREATED_MESSAGES[EntityKind.CAMPAIGNS].format(record=created))
        return created

    def update_campaign(self, campaign_id: str, patch: dict[str, Any]) -> Campaign:
        return self.update(EntityKind.CAMPAIGNS, campaign_id, patch)  # type: ignore[return-value]

    def delete_campaign(self, campaign_id: str) -> None:
        self.delete(EntityKind.CAMPAIGNS, campaign_id)

    # =========================================================================
    # Collaborations
    # =========================================================================

    def fetch_collaborations(self) -> tuple[Collaboration, ...]:
        return self.fetch(EntityKind.COLLABORATIONS)  # type: ignore[return-value]

    def add_collaboration(
        self, collaboration: Collaboration, appointments: Iterable[Appointment] = ()
    ) -> Collaboration:
        """Create a collaboration with its appointments; payment fields are derived first."""
        _check_amount("fee", collaboration.fee)
        _check_amount("paid_amount", collaboration.paid_amount)
        paid = min(collaboration.paid_amount, collaboration.fee)
        collaboration = replace(
            collaboration,
            paid_amount=paid,
            payment_status=derive_payment_status(collaboration.fee, paid).value,
        )

        backend = self._backend()
        created = backend.create_collaboration(collaboration, list(appointments))
        self._refresh(backend, EntityKind.COLLABORATIONS, EntityKind.APPOINTMENTS)
        self._notify(CREATED_MESSAGES[EntityKind.COLLABORATIONS].format(record=created))
        return created

    def _with_payment_status(self, collaboration_id: str, patch: dict[str, Any]) -> dict[str, Any]:
        """Clamp the paid amount at the fee and derive the payment status."""
        if "paid_amount" not in patch and "fee" not in patch:
            return patch

        current = self.find(EntityKind.COLLABORATIONS, collaboration_id)
        if current is None and ("paid_amount" not in patch or "fee" not in patch):
            raise EntityNotFoundError(EntityKind.COLLABORATIONS.value, collaboration_id)

        fee = patch["fee"] if "fee" in patch else current.fee
        paid = patch["paid_amount"] if "paid_amount" in patch else current.paid_amount
        _check_amount("fee", fee)
        _check_amount("paid_amount", paid)
        paid = min(paid, fee)
        return {**patch, "paid_amount": paid, "payment_status": derive_payment_status(fee, paid).value}

    def update_collaboration(self, collaboration_id: str, patch: dict[str, Any]) -> Collaboration:
        return self.update(EntityKind.COLLABORATIONS, collaboration_id, patch)  # type: ignore[return-value]

    def register_payment(self, collaboration_id: str, paid_amount: float) -> Collaboration:
        """Record the total amount paid so far for a collaboration."""
        return self.update_collaboration(collaboration_id, {"paid_amount": paid_amount})

    def delete_collaboration(self, collaboration_id: str) -> None:
        self.delete(EntityKind.COLLABORATIONS, collaboration_id)

    # =========================================================================
    # Appointments
    # =========================================================================

    def fetch_appointments(self) -> tuple[Appointment, ...]:
        return self.fetch(EntityKind.APPOINTMENTS)  # type: ignore[return-value]

    def add_appointment(self, appointment: Appointment) -> Appointment:
        return self.create(EntityKind.APPOINTMENTS, appointment)  # type: ignore[return-value]

    def update_appointment(self, appointment_id: str, patch: dict[str, Any]) -> Appointment:
        return self.update(EntityKind.APPOINTMENTS, appointment_id, patch)  # type: ignore[return-value]

    def delete_appointment(self, appointment_id: str) -> None:
        self.delete(EntityKind.APPOINTMENTS, appointment_id)

    # =========================================================================
    # Finance
    # =========================================================================

    def fetch_finance_data(self) -> None:
        self._refresh(self._backend(), EntityKind.INCOME, EntityKind.COSTS)

    def add_income(self, income: Income) -> Income:
        return self.create(EntityKind.INCOME, income)  # type: ignore[return-value]

    def update_income(self, income_id: str, patch: dict[str, Any]) -> Income:
        return self.update(EntityKind.INCOME, income_id, patch)  # type: ignore[return-value]

    def delete_income(self, income_id: str) -> None:
        self.delete(EntityKind.INCOME, income_id)

    def add_extra_cost(self, cost: ExtraCost) -> ExtraCost:
        return self.create(EntityKind.COSTS, cost)  # type: ignore[return-value]

    def update_extra_cost(self, cost_id: str, patch: dict[str, Any]) -> ExtraCost:
        return self.update(EntityKind.COSTS, cost_id, patch)  # type: ignore[return-value]

    def delete_extra_cost(self, cost_id: str) -> None:
        self.delete(EntityKind.COSTS, cost_id)

    def analytics(self) -> Analytics:
        """Server-computed aggregates online, locally computed ones offline."""
        return self._backend().analytics()

    # =========================================================================
    # Notifications
    # =========================================================================

    def fetch_notifications(self) -> tuple[Notification, ...]:
        return self.fetch(EntityKind.NOTIFICATIONS)  # type: ignore[return-value]

    def _set_read(self, notification_ids: list[str] | None) -> None:
        collection = self._collections[EntityKind.NOTIFICATIONS]
        for index, notification in enumerate(collection):
            if notification_ids is None or notification.id in notification_ids:
                collection[index] = notification.merged({"read": True})

    def mark_notification_read(self, notification_id: str) -> None:
        self._backend().mark_notifications_read([notification_id])
        self._set_read([notification_id])

    def mark_all_notifications_read(self) -> None:
        self._backend().mark_notifications_read(None, user_id=self._user.id if self._user else None)
        self._set_read(None)

    # =========================================================================
    # Search
    # =========================================================================

    def global_search(self, query: str) -> list[SearchResult]:
        if len(query) < MIN_SEARCH_LENGTH:
            return []
        return self._backend().search(query)

    # =========================================================================
    # Auth
    # =========================================================================

    def _set_user(self, user: AuthUser | None) -> None:
        self._user = user
        if user is None:
            self.storage.remove(AUTH_KEY)
        else:
            self.storage.set(AUTH_KEY, user.to_wire())

    def login(self, identifier: str, password: str) -> AuthUser:
        """Sign in against the API; not available offline."""
        user = self._backend().authenticate(identifier, password)
        self._set_user(user)
        self.toasts.show(f"Welcome, {user.name}", ToastLevel.SUCCESS)
        return user

    def logout(self) -> None:
        self._set_user(None)
        self.toasts.show("Logged out", ToastLevel.INFO)

    def switch_role(self, role: Role | str, talent_id: str | None = None) -> AuthUser:
        """Impersonate a role locally for development."""
        role = Role(role)
        if role is Role.ADMIN:
            user = AuthUser(id="admin-1", name="Agency Admin", role=role.value)
        elif role is Role.TEAM:
            user = AuthUser(id="team-1", name="Team Member", role=role.value)
        elif role is Role.FINANCE:
            user = AuthUser(id="finance-1", name="Finance Manager", role=role.value)
        else:
            if not talent_id:
                raise ValueError("A talent ID is required to switch to the talent role")
            talent = self.find(EntityKind.TALENTS, talent_id)
            name = talent.full_name if isinstance(talent, Talent) else "Talent"
            user = AuthUser(id=f"u-{talent_id}", name=name, role=role.value, talent_id=talent_id)
        self._set_user(user)
        self.toasts.show(f"Role switched to {role.value} (dev mode)", ToastLevel.INFO)
        return user
