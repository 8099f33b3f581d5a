"""Wire protocol for the lobby channel.

Every message is a JSON object with a ``type`` discriminator. Inbound
messages are parsed into one of the frozen dataclasses registered in
``INBOUND``; anything else (bad JSON, unknown type, wrongly typed
fields) is rejected by ``parse_message`` returning None. Outbound
messages are plain dicts built by the helpers at the bottom.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional, Type
import json


class MalformedMessage(ValueError):
    pass


def _text(data: dict, *keys: str, required: bool = False) -> Optional[str]:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise MalformedMessage(f'{key} must be a string')
        return value
    if required:
        raise MalformedMessage(f'{keys[0]} is required')
    return None


@dataclass(frozen=True)
class Login:
    type: ClassVar[str] = 'login'
    name: Optional[str] = None
    avatar: Optional[str] = None

    @classmethod
    def from_wire(cls, data):
        return cls(name=_text(data, 'name'), avatar=_text(data, 'avatar'))


@dataclass(frozen=True)
class CreatePrivate:
    type: ClassVar[str] = 'create_private'
    name: Optional[str] = None
    avatar: Optional[str] = None

    @classmethod
    def from_wire(cls, data):
        return cls(name=_text(data, 'name'), avatar=_text(data, 'avatar'))


@dataclass(frozen=True)
class JoinPrivate:
    type: ClassVar[str] = 'join_private'
    session_id: str
    name: Optional[str] = None
    avatar: Optional[str] = None

    @classmethod
    def from_wire(cls, data):
        return cls(
            session_id=_text(data, 'sessionId', 'roomId', required=True),
            name=_text(data, 'name'),
            avatar=_text(data, 'avatar'),
        )


@dataclass(frozen=True)
class ChallengeRequest:
    type: ClassVar[str] = 'challenge_request'
    target_id: str

    @classmethod
    def from_wire(cls, data):
        return cls(target_id=_text(data, 'targetId', required=True))


@dataclass(frozen=True)
class ChallengeAccept:
    type: ClassVar[str] = 'challenge_accept'
    target_id: str

    @classmethod
    def from_wire(cls, data):
        return cls(target_id=_text(data, 'targetId', required=True))


@dataclass(frozen=True)
class Move:
    type: ClassVar[str] = 'move'
    session_id: str
    move: Any

    @classmethod
    def from_wire(cls, data):
        if 'move' not in data:
            raise MalformedMessage('move is required')
        # The original client calls the session a room
        return cls(session_id=_text(data, 'sessionId', 'roomId', required=True), move=data['move'])


@dataclass(frozen=True)
class GameOver:
    type: ClassVar[str] = 'game_over'
    winner_name: Optional[str] = None
    loser_name: Optional[str] = None

    @classmethod
    def from_wire(cls, data):
        return cls(winner_name=_text(data, 'winnerName'), loser_name=_text(data, 'loserName'))


@dataclass(frozen=True)
class ReturnLobby:
    type: ClassVar[str] = 'return_lobby'

    @classmethod
    def from_wire(cls, data):
        return cls()


INBOUND: Dict[str, Type] = {
    cls.type: cls
    for cls in (Login, CreatePrivate, JoinPrivate, ChallengeRequest,
                ChallengeAccept, Move, GameOver, ReturnLobby)
}


def parse_message(raw):
    """Return the inbound message variant for ``raw``, or None if malformed."""
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            return None
    if not isinstance(raw, dict):
        return None
    kind = INBOUND.get(raw.get('type')) if isinstance(raw.get('type'), str) else None
    if kind is None:
        return None
    try:
        return kind.from_wire(raw)
    except MalformedMessage:
        return None


# ---- Server -> client messages ----

def login_success(identity: str) -> dict:
    return {'type': 'login_success', 'myId': identity}


def lobby_update(players: List[dict]) -> dict:
    return {'type': 'lobby_update', 'players': players}


def private_created(session_id: str) -> dict:
    return {'type': 'private_created', 'sessionId': session_id}


def challenge_received(from_id: str, from_name: str) -> dict:
    return {'type': 'challenge_received', 'fromId': from_id, 'fromName': from_name}


def game_start(session_id: str, color: str, opponent: str) -> dict:
    return {'type': 'game_start', 'sessionId': session_id, 'color': color, 'opponent': opponent}


def move(payload) -> dict:
    return {'type': 'move', 'move': payload}


def opponent_disconnected() -> dict:
    return {'type': 'opponent_disconnected'}


def error(message: str) -> dict:
    return {'type': 'error', 'message': message}
