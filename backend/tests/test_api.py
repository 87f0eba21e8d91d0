import json


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_state_snapshot(client):
    res = client.get('/api/state')
    assert res.status_code == 200
    state = res.get_json()
    assert set(state) == {'homeTeam', 'awayTeam', 'clock', 'period'}
    assert state['clock']['timeRemaining'] == 20 * 60 * 1000


def test_shortcuts_missing_is_null(client):
    res = client.get('/api/shortcuts')
    assert res.status_code == 200
    assert res.get_json() is None


def test_shortcuts_saved_wholesale(client):
    first = [{'key': ' ', 'action': 'toggleClock', 'description': 'Toggle Clock'}]
    second = [{'key': 'ArrowUp', 'action': 'clockIncrease', 'description': 'Increase Clock'}]
    assert client.post('/api/shortcuts', json=first).get_json() == {'success': True}
    assert client.post('/api/shortcuts', json=second).get_json() == {'success': True}
    assert client.get('/api/shortcuts').get_json() == second


def test_shortcuts_rejects_non_list(client):
    res = client.post('/api/shortcuts', json={'key': 'x'})
    assert res.status_code == 400
    assert res.get_json()['success'] is False


def test_corrupt_shortcuts_file_reads_as_null(client, data_dir):
    data_dir.mkdir(parents=True, exist_ok=True)
    (data_dir / 'shortcuts.json').write_text('{not json', encoding='utf-8')
    res = client.get('/api/shortcuts')
    assert res.status_code == 200
    assert res.get_json() is None


def test_shortcuts_write_failure_returns_500(client, data_dir):
    # A file where the data directory should be makes every write fail
    data_dir.parent.mkdir(parents=True, exist_ok=True)
    data_dir.write_text('', encoding='utf-8')
    res = client.post('/api/shortcuts', json=[])
    assert res.status_code == 500
    assert res.get_json()['success'] is False


def test_team_defaults_merge_identity_per_team(client):
    assert client.get('/api/team-defaults').get_json() is None

    res = client.post('/api/team-defaults', json={
        'homeTeam': {'name': 'Wolves', 'abbreviation': 'WLV', 'logo': '', 'color': '#111', 'score': 9},
    })
    assert res.status_code == 200

    client.post('/api/team-defaults', json={'homeTeam': {'color': '#222'}, 'awayTeam': {'name': 'Falcons'}})
    defaults = client.get('/api/team-defaults').get_json()
    assert defaults['homeTeam'] == {'name': 'Wolves', 'abbreviation': 'WLV', 'logo': '', 'color': '#222'}
    assert defaults['awayTeam'] == {'name': 'Falcons'}


def test_team_defaults_requires_a_team(client):
    assert client.post('/api/team-defaults', json={'period': '1st'}).status_code == 400


def test_team_presets_upsert_case_insensitive(client):
    assert client.get('/api/team-presets').get_json() == []

    home = {'name': 'Wolves', 'abbreviation': 'WLV', 'logo': '', 'color': '#111'}
    away = {'name': 'Falcons', 'abbreviation': 'FAL', 'logo': '', 'color': '#222'}
    res = client.post('/api/team-presets', json={'name': 'Wolves vs Falcons', 'homeTeam': home, 'awayTeam': away})
    body = res.get_json()
    assert body['success'] is True
    assert len(body['presets']) == 1

    res = client.post('/api/team-presets', json={'name': 'WOLVES VS FALCONS', 'homeTeam': away, 'awayTeam': home})
    presets = res.get_json()['presets']
    assert len(presets) == 1
    assert presets[0]['name'] == 'WOLVES VS FALCONS'
    assert presets[0]['homeTeam'] == away
    assert isinstance(presets[0]['updatedAt'], int)

    client.post('/api/team-presets', json={'name': 'alpha', 'homeTeam': home, 'awayTeam': away})
    names = [p['name'] for p in client.get('/api/team-presets').get_json()]
    assert names == ['alpha', 'WOLVES VS FALCONS']


def test_team_presets_require_name(client):
    res = client.post('/api/team-presets', json={'name': '   '})
    assert res.status_code == 400


def test_delete_team_preset(client):
    client.post('/api/team-presets', json={'name': 'Derby', 'homeTeam': {}, 'awayTeam': {}})
    res = client.delete('/api/team-presets/derby')
    assert res.status_code == 200
    assert res.get_json() == {'success': True, 'presets': []}


def test_apply_team_preset_updates_live_match(client, sio_client):
    home = {'name': 'Wolves', 'abbreviation': 'WLV', 'logo': '/w.png', 'color': '#111'}
    away = {'name': 'Falcons', 'abbreviation': 'FAL', 'logo': '/f.png', 'color': '#222'}
    client.post('/api/team-presets', json={'name': 'Derby', 'homeTeam': home, 'awayTeam': away})
    sio_client.get_received()

    res = client.post('/api/team-presets/Derby/apply')
    assert res.status_code == 200
    state = res.get_json()['gameState']
    assert state['homeTeam']['name'] == 'Wolves'
    assert state['awayTeam']['abbreviation'] == 'FAL'
    assert state['homeTeam']['score'] == 0

    pushed = [e for e in sio_client.get_received() if e['name'] == 'gameState']
    assert pushed and pushed[-1]['args'][0]['homeTeam']['name'] == 'Wolves'


def test_apply_missing_preset_is_404(client):
    assert client.post('/api/team-presets/nothing/apply').status_code == 404


def test_saved_defaults_seed_new_app(data_dir):
    from conftest import TestConfig
    from scoreboard import create_app

    data_dir.mkdir(parents=True, exist_ok=True)
    (data_dir / 'team-defaults.json').write_text(json.dumps({
        'homeTeam': {'name': 'Wolves', 'abbreviation': 'WLV'},
        'awayTeam': {},
    }), encoding='utf-8')

    class _Config(TestConfig):
        DATA_DIR = str(data_dir)

    app = create_app(_Config)
    state = app.test_client().get('/api/state').get_json()
    assert state['homeTeam']['name'] == 'Wolves'
    assert state['homeTeam']['color'] == '#3b82f6'
    assert state['awayTeam']['name'] == 'Away Team'
