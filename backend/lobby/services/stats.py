from typing import Dict, Optional

from lobby.models import StatsRecord


class StatsLedger:
    """In-memory win/loss counters keyed by display name. Reset on restart."""

    def __init__(self):
        self._records: Dict[str, StatsRecord] = {}

    def __contains__(self, name) -> bool:
        return name in self._records

    def ensure(self, name: str) -> StatsRecord:
        record = self._records.get(name)
        if record is None:
            record = self._records[name] = StatsRecord()
        return record

    def get(self, name) -> Optional[StatsRecord]:
        if not isinstance(name, str):
            return None
        return self._records.get(name)

    def snapshot(self, name: str) -> dict:
        record = self._records.get(name)
        return record.to_dict() if record else StatsRecord().to_dict()

    def record_result(self, winner_name, loser_name) -> None:
        # Only names that have logged in before are counted
        winner = self.get(winner_name)
        if winner is not None:
            winner.wins += 1
        loser = self.get(loser_name)
        if loser is not None:
            loser.losses += 1
