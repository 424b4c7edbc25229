"""Backend implementations."""

from agency_manager.backends.local import LocalBackend
from agency_manager.backends.remote import RemoteBackend

__all__ = ["RemoteBackend", "LocalBackend"]
