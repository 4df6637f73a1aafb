from scoping import socketio


def _states(sio_client):
    return [pkt['args'][0] for pkt in sio_client.get_received('/') if pkt['name'] == 'gameState']


def _seat(flask_app, code, role, name):
    c = socketio.test_client(flask_app, namespace='/')
    c.emit('joinRoom', {'roomCode': code, 'role': role, 'name': name}, namespace='/')
    return c


def test_socket_connect_and_join(sio_client):
    assert sio_client.is_connected('/')
    received = sio_client.get_received('/')
    assert any(pkt['name'] == 'connected' for pkt in received)

    sio_client.emit('joinRoom', {'roomCode': 'ABCD', 'role': 'designer', 'name': 'Ann'}, namespace='/')
    states = _states(sio_client)
    assert len(states) == 1
    assert states[0]['phase'] == 'waiting'
    assert states[0]['players'] == {'designer': 'Ann'}
    assert states[0]['timeRemaining'] == 1800


def test_ping(sio_client):
    sio_client.get_received('/')
    sio_client.emit('ping', {'n': 1}, namespace='/')
    received = sio_client.get_received('/')
    assert any(pkt['name'] == 'pong' and pkt['args'][0] == {'n': 1} for pkt in received)


def test_full_workshop_over_sockets(flask_app):
    ann = _seat(flask_app, 'AB12CD', 'designer', 'Ann')
    cal = _seat(flask_app, 'AB12CD', 'coder', 'Cal')
    pat = _seat(flask_app, 'AB12CD', 'pm', 'Pat')
    for c in (ann, cal, pat):
        assert _states(c)[-1]['phase'] == 'design'

    # The web client sends bare payloads and relies on the joined room
    ann.emit('submitWishlist', [1, 3, 5], namespace='/')
    assert _states(pat)[-1]['phase'] == 'review'

    cal.emit('submitCoderFeedback', {'1': {'feasible': True, 'effort': '1-2 days', 'notes': ''}}, namespace='/')
    latest = _states(ann)[-1]
    assert latest['phase'] == 'review'
    assert latest['coderFeedback'] == {'1': {'feasible': True, 'effort': '1-2 days', 'notes': ''}}

    pat.emit('submitPMDecisions', {'1': {'include': True, 'priority': 'Must Have', 'notes': ''}}, namespace='/')
    assert _states(cal)[-1]['phase'] == 'decision'

    ann.emit('submitFinalVotes', {'1': True, '3': False}, namespace='/')
    final = _states(pat)[-1]
    assert final['phase'] == 'summary'
    assert final['finalScope'] == {'kept': [1], 'cut': [3]}
    assert final['wishlist'] == [1, 3, 5]

    for c in (ann, cal, pat):
        c.get_received('/')
    pat.emit('submitReflection', {'role': 'pm', 'reflection': 'Good call on search'}, namespace='/')
    assert _states(ann) == []

    cal.emit('restartWorkshop', namespace='/')
    reset = _states(ann)[-1]
    assert reset['phase'] == 'waiting'
    assert reset['players'] == {}
    assert reset['timeRemaining'] == 1800

    for c in (ann, cal, pat):
        c.disconnect(namespace='/')


def test_join_from_query_string(flask_app):
    c = socketio.test_client(flask_app, namespace='/', query_string='roomCode=QS1&role=coder&name=Cal')
    states = _states(c)
    assert states and states[-1]['players'] == {'coder': 'Cal'}
    router = flask_app.extensions['workshop']
    assert len(router.store.get('QS1').connections) == 1
    c.disconnect(namespace='/')


def test_malformed_payload_errors_to_sender_only(flask_app):
    ann = _seat(flask_app, 'ERR1', 'designer', 'Ann')
    cal = _seat(flask_app, 'ERR1', 'coder', 'Cal')
    ann.get_received('/')
    cal.get_received('/')

    ann.emit('submitWishlist', 'not-a-list', namespace='/')
    errors = [pkt for pkt in ann.get_received('/') if pkt['name'] == 'error']
    assert errors and errors[0]['args'][0]['event'] == 'submitWishlist'
    assert cal.get_received('/') == []

    ann.disconnect(namespace='/')
    cal.disconnect(namespace='/')


def test_disconnect_unbinds_connection(flask_app):
    router = flask_app.extensions['workshop']
    ann = _seat(flask_app, 'DC1', 'designer', 'Ann')
    cal = _seat(flask_app, 'DC1', 'coder', 'Cal')
    room = router.store.get('DC1')
    assert len(room.connections) == 2

    cal.disconnect(namespace='/')
    assert len(room.connections) == 1
    assert room.participants['coder'] == 'Cal'

    # Remaining player still gets snapshots
    ann.get_received('/')
    ann.emit('joinRoom', {'roomCode': 'DC1', 'role': 'pm', 'name': 'Pat'}, namespace='/')
    assert _states(ann)[-1]['players']['pm'] == 'Pat'
    ann.disconnect(namespace='/')
