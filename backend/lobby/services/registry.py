from typing import Dict, List, Optional

from lobby.models import ClientRecord, ClientStatus


class ConnectionRegistry:
    """Live connections keyed by socket sid, with an identity index."""

    def __init__(self):
        self._by_sid: Dict[str, ClientRecord] = {}
        self._sid_by_identity: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._by_sid)

    def __iter__(self):
        return iter(list(self._by_sid.values()))

    def add(self, sid: str) -> ClientRecord:
        if sid in self._by_sid:
            raise ValueError(f'connection {sid} is already registered')
        record = ClientRecord(sid=sid)
        self._by_sid[sid] = record
        self._sid_by_identity[record.identity] = sid
        return record

    def get(self, sid: str) -> Optional[ClientRecord]:
        return self._by_sid.get(sid)

    def find_by_identity(self, identity) -> Optional[ClientRecord]:
        sid = self._sid_by_identity.get(identity)
        return self._by_sid.get(sid) if sid is not None else None

    def in_status(self, status: ClientStatus) -> List[ClientRecord]:
        return [r for r in self._by_sid.values() if r.status == status]

    def remove(self, sid: str) -> Optional[ClientRecord]:
        record = self._by_sid.pop(sid, None)
        if record is not None:
            self._sid_by_identity.pop(record.identity, None)
        return record
