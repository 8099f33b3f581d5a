from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from config import Config

socketio = SocketIO(async_mode=None)


def _allowed_origins(value):
    origins = [o.strip() for o in (value or '').split(',') if o.strip()]
    if not origins or '*' in origins:
        return '*'
    return origins


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = _allowed_origins(flask_app.config.get('CORS_ALLOWED_ORIGINS'))
    CORS(flask_app, origins=allowed_origins, send_wildcard=allowed_origins == '*')
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from lobby.main import main
    flask_app.register_blueprint(main)

    # One service instance per app holds all lobby state
    from lobby.socketio_events import build_lobby_service, register_socketio_handlers
    flask_app.extensions['lobby'] = build_lobby_service(flask_app)
    register_socketio_handlers(namespace=flask_app.config['SOCKETIO_NAMESPACE'])

    return flask_app
