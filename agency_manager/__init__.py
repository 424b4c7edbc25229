"""Agency manager - offline-capable store for a talent agency back office."""

from agency_manager.store import AgencyStore

__all__ = ["AgencyStore"]
