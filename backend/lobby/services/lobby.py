import logging
import random
import threading

from lobby import protocol
from lobby.models import ClientStatus, Color, sanitize_avatar, sanitize_name
from .registry import ConnectionRegistry
from .sessions import SessionRegistry
from .stats import StatsLedger


SELF_CHALLENGE = 'You cannot challenge yourself'
PLAYER_NOT_FOUND = 'Player not found'
PLAYER_UNAVAILABLE = 'Player is no longer available'
NOT_IN_LOBBY = 'You are not in the lobby'
ALREADY_IN_GAME = 'You are already in a game'
ROOM_UNAVAILABLE = 'Room not found or full'

# Statuses from which a connection may enter a new session
_SESSION_READY = (ClientStatus.CONNECTING, ClientStatus.LOBBY)


class LobbyService:
    """Presence, matchmaking and move relay for two-player sessions.

    One instance holds all state for a server process: the connection
    registry, the session table and the stats ledger. Every outbound
    message is pushed through ``outbox``; the service never talks to the
    transport directly. Callers must feed events in one at a time (the
    Socket.IO binding holds a lock around each call).
    """

    def __init__(self, outbox, logger=None, rng=None):
        self.registry = ConnectionRegistry()
        self.sessions = SessionRegistry()
        self.stats = StatsLedger()
        self.outbox = outbox
        self.logger = logger or logging.getLogger(__name__)
        self.rng = rng or random.Random()
        # Held by the transport around each event so handlers run one at a time
        self.lock = threading.RLock()
        self._handlers = {
            protocol.Login: self.login,
            protocol.CreatePrivate: self.create_private,
            protocol.JoinPrivate: self.join_private,
            protocol.ChallengeRequest: self.challenge_request,
            protocol.ChallengeAccept: self.challenge_accept,
            protocol.Move: self.move,
            protocol.GameOver: self.game_over,
            protocol.ReturnLobby: self.return_lobby,
        }
        missing = set(protocol.INBOUND.values()) - set(self._handlers)
        if missing:
            raise RuntimeError(f'no handler for message types: {sorted(m.type for m in missing)}')

    # ---- Connection lifecycle ----

    def connect(self, sid: str):
        client = self.registry.add(sid)
        self.logger.info(f"[connect] sid={sid} id={client.identity}")
        return client

    def handle(self, sid: str, raw) -> None:
        """Dispatch one raw inbound message from ``sid``."""
        client = self.registry.get(sid)
        if client is None:
            return
        message = protocol.parse_message(raw)
        if message is None:
            self.logger.debug(f"[drop] sid={sid} malformed message")
            return
        self._handlers[type(message)](client, message)

    def disconnect(self, sid: str) -> None:
        session = self.sessions.session_of(sid)
        if session is not None:
            survivors = self._end_session(session, sid)
            self.logger.info(
                f"[disconnect] sid={sid} session={session.session_id} survivors={len(survivors)}"
            )
        client = self.registry.remove(sid)
        self.outbox.discard(sid)
        if client is not None:
            self.logger.info(f"[disconnect] sid={sid} id={client.identity} name={client.name}")
        self.broadcast_lobby()

    def _end_session(self, session, leaver: str):
        """Destroy ``session`` and send every other member back to the lobby."""
        survivors = session.others(leaver)
        self.sessions.destroy(session.session_id)
        for other in survivors:
            peer = self.registry.get(other)
            if peer is not None:
                peer.status = ClientStatus.LOBBY
            self._send(other, protocol.opponent_disconnected())
        return survivors

    # ---- Presence ----

    def login(self, client, message) -> None:
        if client.status not in _SESSION_READY:
            self._error(client, ALREADY_IN_GAME)
            return
        self._apply_identity(client, message.name, message.avatar)
        client.status = ClientStatus.LOBBY
        self.logger.info(f"[login] id={client.identity} name={client.name}")
        self._send(client.sid, protocol.login_success(client.identity))
        self.broadcast_lobby()

    def broadcast_lobby(self) -> None:
        members = self.registry.in_status(ClientStatus.LOBBY)
        payload = protocol.lobby_update(
            [m.to_dict(self.stats.snapshot(m.name)) for m in members]
        )
        for member in members:
            self._send(member.sid, payload)

    # ---- Matchmaking ----

    def challenge_request(self, client, message) -> None:
        if message.target_id == client.identity:
            self._error(client, SELF_CHALLENGE)
            return
        target = self.registry.find_by_identity(message.target_id)
        if target is None or target.status != ClientStatus.LOBBY:
            # Stale target: nothing to tell the challenger
            return
        self.logger.info(f"[challenge] from={client.identity} to={target.identity}")
        self._send(target.sid, protocol.challenge_received(client.identity, client.name))

    def challenge_accept(self, client, message) -> None:
        if message.target_id == client.identity:
            self._error(client, SELF_CHALLENGE)
            return
        if client.status != ClientStatus.LOBBY:
            self._error(client, NOT_IN_LOBBY)
            return
        opponent = self.registry.find_by_identity(message.target_id)
        if opponent is None:
            self._error(client, PLAYER_NOT_FOUND)
            return
        if opponent.status != ClientStatus.LOBBY:
            self._error(client, PLAYER_UNAVAILABLE)
            return
        session = self.sessions.create([client.sid, opponent.sid])
        self._start_session(session)

    def create_private(self, client, message) -> None:
        if client.status not in _SESSION_READY:
            self._error(client, ALREADY_IN_GAME)
            return
        was_in_lobby = client.status == ClientStatus.LOBBY
        self._apply_identity(client, message.name, message.avatar)
        session = self.sessions.create([client.sid], is_private=True)
        client.status = ClientStatus.WAITING_PRIVATE
        self.logger.info(f"[private-create] id={client.identity} session={session.session_id}")
        self._send(client.sid, protocol.private_created(session.session_id))
        if was_in_lobby:
            self.broadcast_lobby()

    def join_private(self, client, message) -> None:
        if client.status not in _SESSION_READY:
            self._error(client, ALREADY_IN_GAME)
            return
        session = self.sessions.get(message.session_id)
        if (session is None or not session.is_private or session.started
                or len(session.members) != 1):
            self._error(client, ROOM_UNAVAILABLE)
            return
        self._apply_identity(client, message.name, message.avatar)
        self.sessions.add_member(session, client.sid)
        self._start_session(session)

    def _start_session(self, session) -> None:
        members = [self.registry.get(sid) for sid in session.members]
        for member in members:
            member.status = ClientStatus.PLAYING
        session.assign_colors(Color.WHITE if self.rng.random() < 0.5 else Color.BLACK)
        first, second = members
        for member, opponent in ((first, second), (second, first)):
            color = session.colors[member.sid]
            self._send(member.sid, protocol.game_start(session.session_id, color.value, opponent.name))
        self.logger.info(
            f"[session-start] session={session.session_id} private={session.is_private} "
            f"white={self._player_with(session, Color.WHITE)} black={self._player_with(session, Color.BLACK)}"
        )
        self.broadcast_lobby()

    # ---- In-game relay ----

    def move(self, client, message) -> None:
        session = self.sessions.get(message.session_id)
        if session is None or client.sid not in session.members:
            return
        payload = protocol.move(message.move)
        for other in session.others(client.sid):
            self._send(other, payload)

    def game_over(self, client, message) -> None:
        self.stats.record_result(message.winner_name, message.loser_name)
        self.logger.info(
            f"[game-over] reporter={client.identity} winner={message.winner_name} loser={message.loser_name}"
        )

    def return_lobby(self, client, message) -> None:
        session = self.sessions.session_of(client.sid)
        if session is not None and session.started:
            # Leaving a running game ends it for the peer as well
            self._end_session(session, client.sid)
        elif session is not None:
            self.sessions.remove_member(client.sid)
        client.status = ClientStatus.LOBBY
        if session is not None:
            self.logger.info(f"[return-lobby] id={client.identity} session={session.session_id}")
        self.broadcast_lobby()

    # ---- Helpers ----

    def _apply_identity(self, client, name, avatar) -> None:
        client.name = sanitize_name(name)
        client.avatar = sanitize_avatar(avatar)
        self.stats.ensure(client.name)

    def _player_with(self, session, color):
        for sid, assigned in session.colors.items():
            if assigned is color:
                return self.registry.get(sid).identity
        return None

    def _send(self, sid: str, payload: dict) -> None:
        self.outbox.push(sid, payload)

    def _error(self, client, message: str) -> None:
        self.logger.info(f"[error] id={client.identity} status={client.status.value} message={message}")
        self._send(client.sid, protocol.error(message))
