def test_liveness(client):
    res = client.get('/')
    assert res.status_code == 200
    assert res.mimetype == 'text/plain'
    assert res.get_data(as_text=True) == 'Lobby Server Running'


def test_cors_allows_any_origin_by_default(client):
    res = client.get('/', headers={'Origin': 'http://localhost:5173'})
    assert res.headers.get('Access-Control-Allow-Origin') == '*'


def test_lobby_state_lives_on_the_app(flask_app):
    service = flask_app.extensions['lobby']
    assert len(service.registry) == 0
    assert len(service.sessions) == 0
    assert service.outbox.limit == 256


def test_cors_echoes_configured_origin():
    from lobby import create_app

    class OriginsConfig:
        TESTING = True
        SOCKETIO_NAMESPACE = '/ws'
        CORS_ALLOWED_ORIGINS = 'http://localhost:5173, http://127.0.0.1:5173'

    client = create_app(OriginsConfig).test_client()
    res = client.get('/', headers={'Origin': 'http://127.0.0.1:5173'})
    assert res.headers.get('Access-Control-Allow-Origin') == 'http://127.0.0.1:5173'
    res = client.get('/', headers={'Origin': 'http://evil.example'})
    assert res.headers.get('Access-Control-Allow-Origin') is None
