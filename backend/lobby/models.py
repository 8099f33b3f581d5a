from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List
import uuid


GUEST_NAME = 'Guest'
FALLBACK_NAME = 'Player'
CONNECT_AVATAR = 'w_p'
LOGIN_AVATAR = 'w_k'
MAX_NAME_LENGTH = 15


def new_token() -> str:
    return str(uuid.uuid4())


class ClientStatus(str, Enum):
    CONNECTING = 'connecting'
    LOBBY = 'lobby'
    WAITING_PRIVATE = 'waiting_private'
    PLAYING = 'playing'


class Color(str, Enum):
    WHITE = 'w'
    BLACK = 'b'

    @property
    def opposite(self) -> 'Color':
        return Color.BLACK if self is Color.WHITE else Color.WHITE


def sanitize_name(name) -> str:
    """Trim a client-asserted display name; empty names become 'Player'."""
    name = (name or '').strip()[:MAX_NAME_LENGTH]
    return name or FALLBACK_NAME


def sanitize_avatar(avatar) -> str:
    return avatar or LOGIN_AVATAR


@dataclass
class ClientRecord:
    sid: str
    identity: str = field(default_factory=new_token)
    name: str = GUEST_NAME
    avatar: str = CONNECT_AVATAR
    status: ClientStatus = ClientStatus.CONNECTING

    def to_dict(self, stats=None):
        return {
            'id': self.identity,
            'name': self.name,
            'avatar': self.avatar,
            'stats': stats if stats is not None else {'wins': 0, 'losses': 0},
        }


@dataclass
class SessionRecord:
    members: List[str]
    is_private: bool = False
    session_id: str = field(default_factory=new_token)
    # sid -> Color, filled in once by assign_colors
    colors: Dict[str, Color] = field(default_factory=dict)

    @property
    def started(self) -> bool:
        return bool(self.colors)

    @property
    def is_full(self) -> bool:
        return len(self.members) >= 2

    def others(self, sid: str) -> List[str]:
        return [m for m in self.members if m != sid]

    def assign_colors(self, first_color: Color) -> None:
        if self.started:
            raise ValueError(f'colors already assigned for session {self.session_id}')
        if len(self.members) != 2:
            raise ValueError('colors are assigned only to a full session')
        first, second = self.members
        self.colors = {first: first_color, second: first_color.opposite}


@dataclass
class StatsRecord:
    wins: int = 0
    losses: int = 0

    def to_dict(self):
        return {'wins': self.wins, 'losses': self.losses}
