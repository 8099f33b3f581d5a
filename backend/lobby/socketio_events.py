from flask import current_app, request

from lobby import socketio
from lobby.services import LobbyService, Outbox


def _service() -> LobbyService:
    return current_app.extensions['lobby']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    service = _service()
    with service.lock:
        service.connect(_get_sid())


def handle_disconnect(reason=None):
    service = _service()
    with service.lock:
        service.disconnect(_get_sid())


def handle_message(data):
    service = _service()
    sid = _get_sid()
    with service.lock:
        try:
            service.handle(sid, data)
        except Exception:
            # One client's message must never take the server down
            current_app.logger.exception(f"[handler-error] sid={sid}")


def build_lobby_service(flask_app) -> LobbyService:
    """Create the lobby service with an outbox bound to ``socketio``.

    Outbound messages travel on the ``message`` event. In TESTING mode the
    outbox drains inline so test clients see messages deterministically;
    otherwise each connection's queue drains on a background task.
    """
    namespace = flask_app.config['SOCKETIO_NAMESPACE']

    def _emit(sid, payload):
        socketio.emit('message', payload, to=sid, namespace=namespace)

    def _close(sid):
        # Always deferred: the disconnect handler must not run inside the
        # handler that overflowed the queue
        socketio.start_background_task(socketio.server.disconnect, sid, namespace=namespace)

    spawn = None if flask_app.config.get('TESTING') else socketio.start_background_task
    outbox = Outbox(
        _emit,
        _close,
        limit=int(flask_app.config.get('OUTBOX_LIMIT', 256)),
        overflow=flask_app.config.get('OUTBOX_OVERFLOW', 'drop_message'),
        spawn=spawn,
        logger=flask_app.logger,
    )
    return LobbyService(outbox, logger=flask_app.logger)


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``.

    Every lobby message, in both directions, uses the ``message`` event
    with a ``type`` field inside the payload.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('message', handle_message, namespace=namespace)
