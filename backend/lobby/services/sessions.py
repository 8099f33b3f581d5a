from typing import Dict, Iterable, Optional

from lobby.models import SessionRecord


class SessionRegistry:
    """Live game sessions keyed by id, with a connection -> session index.

    A connection belongs to at most one session. Sessions never exist
    with zero members: removing the last member destroys the session.
    """

    def __init__(self):
        self._sessions: Dict[str, SessionRecord] = {}
        self._session_by_sid: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, members: Iterable[str], is_private: bool = False) -> SessionRecord:
        members = list(members)
        if not 1 <= len(members) <= 2 or len(set(members)) != len(members):
            raise ValueError(f'invalid session membership: {members!r}')
        busy = [m for m in members if m in self._session_by_sid]
        if busy:
            raise ValueError(f'connections already in a session: {busy!r}')
        session = SessionRecord(members=members, is_private=is_private)
        self._sessions[session.session_id] = session
        for sid in members:
            self._session_by_sid[sid] = session.session_id
        return session

    def get(self, session_id) -> Optional[SessionRecord]:
        if not isinstance(session_id, str):
            return None
        return self._sessions.get(session_id)

    def session_of(self, sid: str) -> Optional[SessionRecord]:
        session_id = self._session_by_sid.get(sid)
        return self._sessions.get(session_id) if session_id is not None else None

    def add_member(self, session: SessionRecord, sid: str) -> None:
        if session.is_full:
            raise ValueError(f'session {session.session_id} is full')
        if sid in self._session_by_sid:
            raise ValueError(f'connection {sid} is already in a session')
        session.members.append(sid)
        self._session_by_sid[sid] = session.session_id

    def remove_member(self, sid: str) -> Optional[SessionRecord]:
        """Detach ``sid`` from its session, destroying the session if emptied.

        Returns the session the connection was in, or None.
        """
        session = self.session_of(sid)
        if session is None:
            return None
        session.members.remove(sid)
        del self._session_by_sid[sid]
        if not session.members:
            self._sessions.pop(session.session_id, None)
        return session

    def destroy(self, session_id: str) -> Optional[SessionRecord]:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return None
        for sid in session.members:
            self._session_by_sid.pop(sid, None)
        return session
