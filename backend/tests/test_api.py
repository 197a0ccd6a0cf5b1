def test_health(client):
    res = client.get('/api/health')
    assert res.status_code == 200
    assert res.get_json() == {'ok': True, 'rooms': 0}


def test_unknown_room_is_404(client):
    res = client.get('/api/rooms/NOPE42')
    assert res.status_code == 404
    assert res.get_json()['error'] == 'room_not_found'


def test_room_snapshot(flask_app, client):
    registry = flask_app.extensions['doodleduel']
    room = registry.create_room()
    room.join('sid-alice', 'Alice', '')

    res = client.get(f'/api/rooms/{room.code.lower()}')
    assert res.status_code == 200
    data = res.get_json()
    assert data['roomCode'] == room.code
    assert data['phase'] == 'idle'
    assert [p['name'] for p in data['players']] == ['Alice']
    assert client.get('/api/health').get_json()['rooms'] == 1


def test_words_endpoint_clamps_count(client):
    assert len(client.get('/api/words').get_json()['words']) == 3
    assert len(client.get('/api/words?count=2').get_json()['words']) == 2
    assert len(client.get('/api/words?count=500').get_json()['words']) == 20
    assert len(client.get('/api/words?count=0').get_json()['words']) == 1
    assert len(client.get('/api/words?count=lots').get_json()['words']) == 3
