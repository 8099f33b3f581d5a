import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '8080'))
    # Socket.IO namespace the lobby protocol is served on
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Comma separated list; '*' allows any origin
    CORS_ALLOWED_ORIGINS = os.environ.get('CORS_ALLOWED_ORIGINS', '*')
    # Per-connection outbound queue bound and what to do when it is exceeded
    # ('drop_message' or 'disconnect')
    OUTBOX_LIMIT = int(os.environ.get('OUTBOX_LIMIT', '256'))
    OUTBOX_OVERFLOW = os.environ.get('OUTBOX_OVERFLOW', 'drop_message')
