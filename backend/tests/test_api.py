from quizroom.server import create_app

from conftest import FlakyStore, TestConfig, make_scenario


def test_health(client):
    res = client.get('/api/health')
    assert res.status_code == 200
    assert res.get_json() == {'ok': True, 'status': 'ok'}


def test_fallback_walkthrough(client):
    res = client.post('/api/create?code=ABCD', json={})
    assert res.status_code == 200
    assert res.get_json() == {'ok': True, 'code': 'ABCD', 'mode': 'serious', 'title': 'Fallback Scenario'}

    res = client.post('/api/start?code=ABCD')
    room = res.get_json()['room']
    assert (room['phase'], room['idx']) == ('round', 0)

    res = client.post('/api/join?code=ABCD', json={'name': 'Alice'})
    assert res.status_code == 200
    alice = res.get_json()['playerId']

    res = client.post('/api/answer?code=ABCD', json={'playerId': alice, 'choiceId': 'B'})
    assert res.get_json() == {'ok': True, 'correct': True, 'score': 10}

    res = client.post('/api/answer?code=ABCD', json={'playerId': alice, 'choiceId': 'c'})
    assert res.get_json() == {'ok': True, 'already': True, 'score': 10}

    res = client.post('/api/next?code=ABCD')
    assert res.get_json() == {'ok': True, 'phase': 'results'}

    res = client.get('/api/scoreboard?code=ABCD')
    assert res.get_json() == {'ok': True, 'players': [{'id': alice, 'name': 'Alice', 'score': 10}]}


def test_create_with_scenario_and_mode(client):
    res = client.post('/api/create?code=Q1', json={'mode': 'funny', 'scenario': make_scenario(rounds=2)})
    assert res.get_json() == {'ok': True, 'code': 'Q1', 'mode': 'funny', 'title': 'Network Basics'}

    client.post('/api/start?code=Q1')
    current = client.get('/api/current?code=Q1').get_json()
    assert current['ok'] is True
    assert current['phase'] == 'round'
    assert current['idx'] == 0
    assert current['round']['id'] == 'q1'
    assert all('correct' not in c for c in current['round']['choices'])

    assert client.post('/api/next?code=Q1').get_json() == {'ok': True, 'idx': 1}


def test_malformed_bodies_are_treated_as_empty(client):
    res = client.post('/api/create?code=M', data='{{{', content_type='application/json')
    assert res.status_code == 200
    assert res.get_json()['title'] == 'Fallback Scenario'

    res = client.post('/api/join?code=M', data='not json', content_type='application/json')
    assert res.status_code == 400
    assert res.get_json() == {'ok': False, 'error': 'Missing name'}

    res = client.post('/api/join?code=M', json=['Alice'])
    assert res.status_code == 400


def test_client_errors(client):
    res = client.post('/api/answer?code=E', json={'playerId': 'x'})
    assert res.status_code == 400
    assert res.get_json() == {'ok': False, 'error': 'Missing playerId or choiceId'}

    pid = client.post('/api/join?code=E', json={'name': 'Alice'}).get_json()['playerId']
    res = client.post('/api/answer?code=E', json={'playerId': pid, 'choiceId': 'B'})
    assert res.status_code == 400
    assert res.get_json() == {'ok': False, 'error': 'No active round'}

    res = client.post('/api/next?code=E')
    assert res.status_code == 400
    assert res.get_json() == {'ok': False, 'error': 'Not in round'}

    client.post('/api/start?code=E')
    res = client.post('/api/start?code=E')
    assert res.status_code == 400
    assert res.get_json() == {'ok': False, 'error': 'Already started'}

    res = client.post('/api/answer?code=E', json={'playerId': 'ghost', 'choiceId': 'B'})
    assert res.status_code == 400
    assert res.get_json() == {'ok': False, 'error': 'Unknown player'}


def test_current_in_lobby(client):
    res = client.get('/api/current?code=LOBBY')
    assert res.get_json() == {'ok': True, 'phase': 'lobby', 'round': None, 'idx': -1}


def test_missing_code_uses_default_room(client):
    client.post('/api/join', json={'name': 'Bob'})
    state = client.get('/api/state').get_json()
    assert state['room']['code'] == 'demo'
    assert [p['name'] for p in state['room']['players']] == ['Bob']

    # Other rooms stay untouched.
    other = client.get('/api/state?code=OTHER').get_json()
    assert other['room']['players'] == []


def test_unknown_api_route(client):
    res = client.get('/api/nope')
    assert res.status_code == 404
    assert res.get_json() == {'ok': False, 'error': 'Route not found'}


def test_wrong_method_is_json(client):
    res = client.get('/api/join')
    assert res.status_code == 405
    assert res.get_json()['ok'] is False


def test_storage_failure_is_internal_error():
    store = FlakyStore()

    class FailingConfig(TestConfig):
        ROOM_STORE = store

    client = create_app(FailingConfig).test_client()
    pid = client.post('/api/join?code=F', json={'name': 'Alice'}).get_json()['playerId']
    client.post('/api/start?code=F')

    store.fail = True
    res = client.post('/api/answer?code=F', json={'playerId': pid, 'choiceId': 'B'})
    assert res.status_code == 500
    assert res.get_json() == {'ok': False, 'error': 'Internal server error'}

    store.fail = False
    scores = client.get('/api/scoreboard?code=F').get_json()['players']
    assert scores == [{'id': pid, 'name': 'Alice', 'score': 0}]


def test_unexpected_error_is_generic_500():
    class BrokenStore:
        def load(self, code):
            raise RuntimeError('boom')

        def save(self, code, snapshot):
            raise RuntimeError('boom')

    class BrokenConfig(TestConfig):
        ROOM_STORE = BrokenStore()

    client = create_app(BrokenConfig).test_client()
    res = client.get('/api/state?code=X')
    assert res.status_code == 500
    assert res.get_json() == {'ok': False, 'error': 'Internal server error'}


def test_json_storage_dir_config(tmp_path):
    class DiskConfig(TestConfig):
        STORAGE_DIR = str(tmp_path)

    client = create_app(DiskConfig).test_client()
    client.post('/api/create?code=DISK', json={'mode': 'easter'})
    assert (tmp_path / 'DISK.json').exists()

    # A fresh app over the same directory sees the room.
    restarted = create_app(DiskConfig).test_client()
    assert restarted.get('/api/state?code=DISK').get_json()['room']['mode'] == 'easter'


def test_static_frontend_is_served(tmp_path):
    (tmp_path / 'index.html').write_text('<html>quiz</html>', encoding='utf-8')
    (tmp_path / 'assets').mkdir()
    (tmp_path / 'assets' / 'app.js').write_text('console.log(1)', encoding='utf-8')

    class StaticConfig(TestConfig):
        STATIC_DIR = str(tmp_path)

    client = create_app(StaticConfig).test_client()

    res = client.get('/')
    assert res.status_code == 200
    assert b'quiz' in res.data

    res = client.get('/assets/app.js')
    assert res.status_code == 200
    assert res.data == b'console.log(1)'

    # Client-side routes fall back to the SPA entry point.
    res = client.get('/host/room/ABCD')
    assert res.status_code == 200
    assert b'quiz' in res.data

    res = client.get('/api/nope')
    assert res.status_code == 404
    assert res.get_json() == {'ok': False, 'error': 'Route not found'}

    assert client.get('/api/health').get_json() == {'ok': True, 'status': 'ok'}


def test_static_frontend_missing_dir_is_skipped(tmp_path):
    class StaticConfig(TestConfig):
        STATIC_DIR = str(tmp_path / 'absent')

    client = create_app(StaticConfig).test_client()
    assert client.get('/').status_code == 404
