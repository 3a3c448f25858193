"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- USGS API client (HTTP)
- Event stores (in-memory, Firestore)
- WebSocket broadcast channel
- Plate boundary and configuration loading (files/environment)

Keep this layer thin and simple. All business logic should be in core.
"""

from quakewatch.shell.usgs_client import USGSClient
from quakewatch.shell.event_store import EventStore, InMemoryEventStore
from quakewatch.shell.firestore_client import FirestoreEventStore
from quakewatch.shell.broadcast import BroadcastChannel, WebSocketChannel
from quakewatch.shell.boundary_loader import load_boundaries
from quakewatch.shell.config_loader import load_config, load_config_from_env

__all__ = [
    "USGSClient",
    "EventStore",
    "InMemoryEventStore",
    "FirestoreEventStore",
    "BroadcastChannel",
    "WebSocketChannel",
    "load_boundaries",
    "load_config",
    "load_config_from_env",
]
