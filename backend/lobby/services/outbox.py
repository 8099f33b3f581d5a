from collections import deque
from typing import Callable, Deque, Dict, Optional, Set
import logging
import threading


DROP_MESSAGE = 'drop_message'
DISCONNECT = 'disconnect'
OVERFLOW_POLICIES = (DROP_MESSAGE, DISCONNECT)


class Outbox:
    """Bounded per-connection send queues.

    ``emit(sid, payload)`` performs the actual delivery and ``close(sid)``
    drops a connection. ``spawn(fn, *args)`` runs a drain or a close
    out-of-band (``socketio.start_background_task`` in production); when
    it is None both run inline, which is what tests use.

    When a connection's queue already holds ``limit`` messages the
    overflow policy applies: ``drop_message`` discards the new message,
    ``disconnect`` discards the queue and closes the connection.
    """

    def __init__(self, emit: Callable[[str, dict], None], close: Callable[[str], None],
                 limit: int = 256, overflow: str = DROP_MESSAGE,
                 spawn: Optional[Callable] = None, logger=None):
        if overflow not in OVERFLOW_POLICIES:
            raise ValueError(f'unknown overflow policy {overflow!r}')
        if limit < 1:
            raise ValueError('outbox limit must be positive')
        self._emit = emit
        self._close = close
        self._spawn = spawn
        self.limit = limit
        self.overflow = overflow
        self.logger = logger or logging.getLogger(__name__)
        self._queues: Dict[str, Deque[dict]] = {}
        self._draining: Set[str] = set()
        self._closing: Set[str] = set()
        self._lock = threading.Lock()

    def pending(self, sid: str) -> int:
        queue = self._queues.get(sid)
        return len(queue) if queue else 0

    def push(self, sid: str, payload: dict) -> bool:
        """Queue ``payload`` for ``sid``. Returns False if it was not accepted."""
        with self._lock:
            if sid in self._closing:
                return False
            queue = self._queues.setdefault(sid, deque())
            if len(queue) >= self.limit:
                if self.overflow == DROP_MESSAGE:
                    self.logger.warning(
                        f"[outbox-overflow] sid={sid} policy=drop_message dropped={payload.get('type')}"
                    )
                    return False
                self.logger.warning(f"[outbox-overflow] sid={sid} policy=disconnect pending={len(queue)}")
                del self._queues[sid]
                self._closing.add(sid)
                start, accepted = self._close, False
            else:
                queue.append(payload)
                if sid in self._draining:
                    return True
                self._draining.add(sid)
                start, accepted = self._drain, True
        self._run(start, sid)
        return accepted

    def discard(self, sid: str) -> None:
        """Forget everything queued for a closed connection."""
        with self._lock:
            self._queues.pop(sid, None)
            self._draining.discard(sid)
            self._closing.discard(sid)

    def _drain(self, sid: str) -> None:
        while True:
            with self._lock:
                queue = self._queues.get(sid)
                if not queue or sid in self._closing:
                    self._draining.discard(sid)
                    return
                payload = queue.popleft()
            try:
                self._emit(sid, payload)
            except Exception:
                # A failed send must not stall the rest of the queue
                self.logger.exception(f"[outbox-emit-error] sid={sid} type={payload.get('type')}")

    def _run(self, fn, *args) -> None:
        if self._spawn is None:
            fn(*args)
        else:
            self._spawn(fn, *args)
