def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_list_maps(client):
    res = client.get('/api/maps')
    assert res.status_code == 200
    assert res.get_json() == [
        {'mapId': 'small', 'radius': 3, 'tiles': 49},
        {'mapId': 'medium', 'radius': 4, 'tiles': 81},
        {'mapId': 'large', 'radius': 5, 'tiles': 121},
    ]


def test_room_state_unknown(client, room_store):
    unused = next(c for c in ('ZZZZ', 'YYYY') if c not in room_store.codes())
    res = client.get(f'/api/rooms/{unused}')
    assert res.status_code == 404
    assert res.get_json() == {'error': 'Room not found'}


def test_room_state_matches_socket_snapshot(client, sio_client):
    ack = sio_client.emit('createRoom', {'playerName': 'Alice', 'mapId': 'medium'}, callback=True)
    code = ack['roomCode']

    res = client.get(f'/api/rooms/{code.lower()}')
    assert res.status_code == 200
    data = res.get_json()
    assert data['roomCode'] == code
    assert data['roomState'] == ack['roomState']


def test_maps_cli_command(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['maps'])
    assert result.exit_code == 0
    assert 'small: radius=3 tiles=49 (default)' in result.output
    assert 'large: radius=5 tiles=121' in result.output
