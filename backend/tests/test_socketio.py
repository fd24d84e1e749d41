QUESTIONS = [{'q': 'Largest planet?', 'a': 'Jupiter'}, {'q': 'H2O is?', 'a': 'Water'}]


def payloads(received, name):
    return [pkt['args'][0] for pkt in received if pkt['name'] == name]


def create_room(sio, name='Alice', **extra):
    sio.emit('createRoom', {'displayName': name, 'questions': QUESTIONS, **extra})
    return payloads(sio.get_received(), 'room-created')[0]


def test_connect_reports_connection_id(flask_app):
    from quizroom import socketio as _sio
    sio = _sio.test_client(flask_app)
    received = sio.get_received()
    connected = payloads(received, 'connected')
    assert connected and connected[0]['connectionId']
    sio.disconnect()


def test_ping_pong(sio_factory):
    sio = sio_factory()
    sio.emit('ping', {'n': 1})
    assert payloads(sio.get_received(), 'pong') == [{'n': 1}]


def test_create_room_is_unicast(sio_factory):
    host = sio_factory()
    bystander = sio_factory()
    room = create_room(host, gameMode='speed')
    assert room['state'] == 'LOBBY'
    assert room['progress'] == []
    assert room['gameMode'] == 'speed'
    assert [p['isHost'] for p in room['players']] == [True]
    assert room['players'][0]['connectionId'] == room['hostConnectionId']
    assert bystander.get_received() == []


def test_end_to_end_game(flask_app, sio_factory):
    a = sio_factory()
    b = sio_factory()
    room = create_room(a)
    code = room['code']
    host_id = room['hostConnectionId']

    b.emit('joinRoom', {'displayName': 'Bob', 'code': code})
    b_received = b.get_received()
    joined = payloads(b_received, 'join-success')[0]
    assert joined['code'] == code
    assert joined['questions'] == QUESTIONS
    for received in (a.get_received(), b_received):
        roster = payloads(received, 'update-player-list')[-1]
        assert [p['displayName'] for p in roster] == ['Alice', 'Bob']

    a.emit('startGame', {'code': code})
    for sio in (a, b):
        started = payloads(sio.get_received(), 'game-started')
        assert started == [{'questions': QUESTIONS, 'gameMode': 'classic'}]

    a.emit('playerFinished', {'code': code, 'finishTime': 5000})
    a_received = a.get_received()
    progress = payloads(a_received, 'update-progress')[-1]
    assert [(p['displayName'], p['finishTime']) for p in progress] == [('Alice', 5000), ('Bob', None)]
    assert progress[0]['connectionId'] == host_id
    assert payloads(a_received, 'game-finished') == []
    b.get_received()

    b.emit('playerFinished', {'code': code, 'finishTime': 3000})
    for sio in (a, b):
        received = sio.get_received()
        progress = payloads(received, 'update-progress')[-1]
        assert [(p['displayName'], p['finishTime']) for p in progress] == [('Alice', 5000), ('Bob', 3000)]
        board = payloads(received, 'game-finished')
        assert len(board) == 1
        assert [(p['displayName'], p['finishTime']) for p in board[0]] == [('Bob', 3000), ('Alice', 5000)]

    assert flask_app.extensions['rooms'].registry.get(code).state == 'FINISHED'


def test_join_errors_go_to_caller_only(sio_factory):
    a = sio_factory()
    b = sio_factory()
    code = create_room(a)['code']

    b.emit('joinRoom', {'displayName': 'Alice', 'code': code})
    assert payloads(b.get_received(), 'error') == ['Player name already taken']
    assert a.get_received() == []

    b.emit('joinRoom', {'displayName': 'Bob', 'code': 'NOPE00'})
    assert payloads(b.get_received(), 'error') == ['Room does not exist']


def test_join_after_start_rejected(sio_factory):
    a = sio_factory()
    b = sio_factory()
    code = create_room(a)['code']
    a.emit('startGame', {'code': code})
    a.get_received()

    b.emit('joinRoom', {'displayName': 'Bob', 'code': code})
    received = b.get_received()
    assert payloads(received, 'error') == ['Game already started']
    assert payloads(received, 'game-started') == []


def test_only_host_can_start(flask_app, sio_factory):
    a = sio_factory()
    b = sio_factory()
    code = create_room(a)['code']
    b.emit('joinRoom', {'displayName': 'Bob', 'code': code})
    a.get_received()
    b.get_received()

    b.emit('startGame', {'code': code})
    assert payloads(b.get_received(), 'error') == ['Only host can start the game']
    assert payloads(a.get_received(), 'game-started') == []
    assert flask_app.extensions['rooms'].registry.get(code).state == 'LOBBY'


def test_host_disconnect_hands_over_host(flask_app, sio_factory):
    a = sio_factory()
    b = sio_factory()
    c = sio_factory()
    code = create_room(a)['code']
    b.emit('joinRoom', {'displayName': 'Bob', 'code': code})
    c.emit('joinRoom', {'displayName': 'Carol', 'code': code})
    bob_id = payloads(b.get_received(), 'join-success')[0]['players'][1]['connectionId']
    c.get_received()

    a.disconnect()

    for sio in (b, c):
        received = sio.get_received()
        roster = payloads(received, 'update-player-list')[-1]
        assert [p['displayName'] for p in roster] == ['Bob', 'Carol']
        changed = payloads(received, 'host-changed')
        assert len(changed) == 1
        assert changed[0]['newHostId'] == bob_id
        assert [p['isHost'] for p in changed[0]['players']] == [True, False]

    room = flask_app.extensions['rooms'].registry.get(code)
    assert room.host_connection_id == bob_id

    b.emit('startGame', {'code': code})
    assert payloads(c.get_received(), 'game-started')


def test_last_player_disconnect_deletes_room(flask_app, sio_factory):
    a = sio_factory()
    b = sio_factory()
    code = create_room(a)['code']
    a.disconnect()
    assert code not in flask_app.extensions['rooms'].registry

    b.emit('joinRoom', {'displayName': 'Bob', 'code': code})
    assert payloads(b.get_received(), 'error') == ['Room does not exist']


def test_leave_room_stops_broadcasts(sio_factory):
    a = sio_factory()
    b = sio_factory()
    code = create_room(a)['code']
    b.emit('joinRoom', {'displayName': 'Bob', 'code': code})
    a.get_received()
    b.get_received()

    b.emit('leaveRoom', {'code': code})
    assert payloads(b.get_received(), 'left') == [{'code': code}]
    roster = payloads(a.get_received(), 'update-player-list')[-1]
    assert [p['displayName'] for p in roster] == ['Alice']

    a.emit('startGame', {'code': code})
    assert payloads(b.get_received(), 'game-started') == []


def test_player_finished_unknown_room_is_silent(sio_factory):
    a = sio_factory()
    a.emit('playerFinished', {'code': 'NOPE00', 'finishTime': 1})
    assert a.get_received() == []


def test_legacy_field_names(sio_factory):
    a = sio_factory()
    b = sio_factory()
    a.emit('createRoom', {'playerName': 'Alice', 'questions': QUESTIONS})
    code = payloads(a.get_received(), 'room-created')[0]['code']
    b.emit('joinRoom', {'playerName': 'Bob', 'roomCode': code})
    assert payloads(b.get_received(), 'join-success')
