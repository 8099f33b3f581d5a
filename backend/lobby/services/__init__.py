"""Lobby domain services: registries, stats, outbound delivery and the
matchmaking/relay service that ties them together.

Nothing in this package imports Flask or Socket.IO; the transport binding
in ``lobby.socketio_events`` feeds events in and supplies the send/close
callables the outbox needs.
"""

from .lobby import LobbyService
from .outbox import Outbox
from .registry import ConnectionRegistry
from .sessions import SessionRegistry
from .stats import StatsLedger

__all__ = ['LobbyService', 'Outbox', 'ConnectionRegistry', 'SessionRegistry', 'StatsLedger']
