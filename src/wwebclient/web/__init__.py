"""HTTP surface for room listings."""

from .app import RoomService, create_app

__all__ = ["RoomService", "create_app"]
