"""Backend interface for the agency store."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from agency_manager.analytics import Analytics
from agency_manager.models import (
    Appointment,
    AuthUser,
    Campaign,
    Collaboration,
    EntityKind,
    LinkTalent,
    Record,
    SearchResult,
)


class Backend(ABC):
    """Abstract repository over every entity collection.

    Implemented once against the remote API and once against local storage;
    the store picks one per call depending on connectivity.
    """

    @abstractmethod
    def list_entities(self, kind: EntityKind, filters: dict[str, str] | None = None) -> list[Record]:
        """List the entities of a collection."""
        pass

    @abstractmethod
    def read(self, kind: EntityKind, entity_id: str) -> Record:
        """Read an entity by ID."""
        pass

    @abstractmethod
    def create(self, kind: EntityKind, entity: Record) -> Record:
        """Create an entity and return it with its identifier."""
        pass

    @abstractmethod
    def update(self, kind: EntityKind, entity_id: str, patch: dict[str, Any]) -> Record:
        """Shallow-merge a snake_case patch into an entity and return the result."""
        pass

    @abstractmethod
    def delete(self, kind: EntityKind, entity_id: str) -> None:
        """Delete an entity."""
        pass

    @abstractmethod
    def create_campaign(self, campaign: Campaign, link_talent: LinkTalent | None = None) -> Campaign:
        """Create a campaign, optionally linking a talent through a collaboration and a shooting."""
        pass

    @abstractmethod
    def create_collaboration(self, collaboration: Collaboration, appointments: list[Appointment]) -> Collaboration:
        """Create a collaboration together with its appointments."""
        pass

    @abstractmethod
    def upload_file(
        self,
        kind: EntityKind,
        entity_id: str,
        category: str,
        file_path: str | Path,
        metadata: dict[str, str] | None = None,
    ) -> str:
        """Upload a file attached to an entity and return its URL."""
        pass

    @abstractmethod
    def mark_notifications_read(self, notification_ids: list[str] | None = None, user_id: str | None = None) -> None:
        """Mark the given notifications as read, or all of them when no IDs are given."""
        pass

    @abstractmethod
    def search(self, query: str) -> list[SearchResult]:
        """Search talents, campaigns and brands."""
        pass

    @abstractmethod
    def analytics(self) -> Analytics:
        """Compute the financial aggregates."""
        pass

    @abstractmethod
    def authenticate(self, identifier: str, password: str) -> AuthUser:
        """Exchange credentials for the signed-in user."""
        pass
