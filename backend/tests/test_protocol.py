import pytest

from lobby import protocol


def test_parse_known_messages():
    assert protocol.parse_message({'type': 'login', 'name': 'Alice', 'avatar': 'w_k'}) == \
        protocol.Login(name='Alice', avatar='w_k')
    assert protocol.parse_message('{"type": "challenge_request", "targetId": "abc"}') == \
        protocol.ChallengeRequest(target_id='abc')
    assert protocol.parse_message({'type': 'return_lobby', 'extra': 1}) == protocol.ReturnLobby()
    assert protocol.parse_message({'type': 'game_over', 'winnerName': 'A'}) == \
        protocol.GameOver(winner_name='A', loser_name=None)


def test_move_payload_is_opaque():
    payload = {'from': 'e2', 'to': 'e4', 'meta': [1, 2, {'x': None}]}
    message = protocol.parse_message({'type': 'move', 'sessionId': 's', 'move': payload})
    assert message.move == payload
    # A null move is still a move
    assert protocol.parse_message({'type': 'move', 'sessionId': 's', 'move': None}).move is None


def test_session_id_accepts_room_id_alias():
    assert protocol.parse_message({'type': 'join_private', 'roomId': 'r1'}).session_id == 'r1'
    assert protocol.parse_message({'type': 'move', 'roomId': 'r1', 'move': 'e2e4'}).session_id == 'r1'


@pytest.mark.parametrize('raw', [
    None,
    42,
    'not json',
    b'\xff\xfe',
    '[1, 2]',
    {},
    {'type': None},
    {'type': 'unknown'},
    {'type': 'challenge_accept'},
    {'type': 'challenge_accept', 'targetId': 5},
    {'type': 'move', 'sessionId': 's'},
    {'type': 'login', 'avatar': {'img': 'x'}},
])
def test_malformed_messages_parse_to_none(raw):
    assert protocol.parse_message(raw) is None


def test_every_inbound_type_is_registered():
    assert set(protocol.INBOUND) == {
        'login', 'create_private', 'join_private', 'challenge_request',
        'challenge_accept', 'move', 'game_over', 'return_lobby',
    }


def test_outbound_shapes():
    assert protocol.login_success('id1') == {'type': 'login_success', 'myId': 'id1'}
    assert protocol.game_start('s', 'w', 'Bob') == {
        'type': 'game_start', 'sessionId': 's', 'color': 'w', 'opponent': 'Bob'
    }
    assert protocol.opponent_disconnected() == {'type': 'opponent_disconnected'}
    assert protocol.error('nope') == {'type': 'error', 'message': 'nope'}
