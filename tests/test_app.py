"""
Unit tests for the Flask JSON API.
"""
import pytest
import sys
import os
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

import app as app_module


SNAPSHOT = {
    'divisions': [{'id': 'A'}, {'id': 'B'}],
    'courts': [
        {'name': 'Court 1', 'active': True},
        {'name': 'Court 2', 'active': True, 'currentMatchId': 'live'},
        {'name': 'Court 3', 'active': True},
    ],
    'matches': [
        {'id': 'live', 'divisionId': 'A', 'roundNumber': 1, 'status': 'in_progress',
         'teamAId': 't1', 'teamBId': 't2', 'court': 'Court 2'},
        {'id': 'a2', 'divisionId': 'A', 'roundNumber': 2, 'status': 'not_started', 'teamAId': 't1', 'teamBId': 't3'},
        {'id': 'b1', 'divisionId': 'B', 'roundNumber': 1, 'status': 'not_started', 'teamAId': 't5', 'teamBId': 't6',
         'stage': 'Main Bracket'},
        {'id': 'a1', 'divisionId': 'A', 'roundNumber': 1, 'status': 'waiting', 'teamAId': 't3', 'teamBId': 't4'},
    ],
}


class TestQueueRoutes:
    """Tests for the queue endpoints."""

    def test_queue_default_strategy(self, client):
        response = client.post('/api/queue', json=SNAPSHOT)
        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['strategy'] == 'round_balanced'
        assert [m['id'] for m in data['queue']] == ['a1', 'b1', 'a2']
        assert data['wait_times'] == {'a1': 0, 'b1': 1, 'a2': 2}

    def test_queue_stage_weighted(self, client):
        response = client.post('/api/queue', json=dict(SNAPSHOT, strategy='stage_weighted'))
        data = response.get_json()
        assert data['strategy'] == 'stage_weighted'
        assert data['queue'][0]['id'] == 'b1'
        # Three active courts: first three matches wait one slot
        assert set(data['wait_times'].values()) == {15}

    def test_queue_uses_configured_strategy(self, client):
        client.post('/api/settings/update', json={'strategy': 'stage_weighted'})
        data = client.post('/api/queue', json=SNAPSHOT).get_json()
        assert data['strategy'] == 'stage_weighted'

    def test_unknown_strategy_rejected(self, client):
        response = client.post('/api/queue', json=dict(SNAPSHOT, strategy='coin_flip'))
        assert response.status_code == 400
        assert 'Unknown scheduling strategy' in response.get_json()['error']

    def test_non_object_body_rejected(self, client):
        response = client.post('/api/queue', json=['not', 'an', 'object'])
        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_malformed_match_gives_empty_queue(self, client):
        body = {'matches': [{'id': 'x', 'roundNumber': 'one', 'status': 'not_started'}], 'divisions': []}
        data = client.post('/api/queue', json=body).get_json()
        assert data['success'] is True
        assert data['queue'] == []

    def test_first_wave(self, client):
        data = client.post('/api/queue/first-wave', json=SNAPSHOT).get_json()
        assert data['assignments'] == [
            {'match_id': 'a1', 'court_name': 'Court 1'},
            {'match_id': 'b1', 'court_name': 'Court 3'},
        ]

    def test_court_free(self, client):
        body = dict(SNAPSHOT, court={'name': 'Court 2'})
        data = client.post('/api/queue/court-free', json=body).get_json()
        assert data['assignment'] == {'match_id': 'a1', 'court_name': 'Court 2'}

    def test_court_free_accepts_name(self, client):
        data = client.post('/api/queue/court-free', json=dict(SNAPSHOT, court='Court 9')).get_json()
        assert data['assignment']['court_name'] == 'Court 9'

    def test_court_free_requires_court(self, client):
        response = client.post('/api/queue/court-free', json=SNAPSHOT)
        assert response.status_code == 400

    def test_court_free_empty_queue(self, client):
        data = client.post('/api/queue/court-free', json={'matches': [], 'court': 'Court 1'}).get_json()
        assert data['assignment'] is None

    def test_next_match_skips_placed(self, client):
        body = {
            'divisions': ['A'],
            'courts': [{'name': 'Court 1'}],
            'matches': [
                {'id': 'placed', 'divisionId': 'A', 'status': 'not_started', 'teamAId': 'a', 'teamBId': 'b',
                 'court': 'Court 1'},
                {'id': 'open', 'divisionId': 'A', 'status': 'not_started', 'teamAId': 'c', 'teamBId': 'd'},
            ],
        }
        data = client.post('/api/queue/next-match', json=body).get_json()
        assert data['match']['id'] == 'open'

    def test_court_status(self, client):
        data = client.post('/api/courts/status', json=SNAPSHOT).get_json()
        assert [c['status'] for c in data['courts']] == ['AVAILABLE', 'IN_USE', 'AVAILABLE']


class TestBoxRoutes:
    """Tests for the box rotation endpoints."""

    def test_pairings(self, client):
        players = [{'id': f'p{i}', 'name': n} for i, n in enumerate(['Ann', 'Ben', 'Cal', 'Dee', 'Eli'])]
        data = client.post('/api/box/pairings', json={'players': players, 'box_size': 5}).get_json()
        assert data['success'] is True
        assert len(data['pairings']) == 5
        assert data['pairings'][0]['bye_player_id'] == 'p4'
        assert data['schedule'][0] == {'round_number': 1, 'matchup': 'Ann + Ben vs Cal + Dee', 'bye': 'Eli'}

    def test_pairings_box_size_defaults_to_setting(self, client):
        data = client.post('/api/box/pairings', json={'players': ['a', 'b', 'c', 'd', 'e']}).get_json()
        assert len(data['pairings']) == 5

    def test_pairings_follow_updated_default_box_size(self, client):
        client.post('/api/settings/update', json={'default_box_size': 4})
        data = client.post('/api/box/pairings', json={'players': ['a', 'b', 'c', 'd']}).get_json()
        assert len(data['pairings']) == 3

    def test_pairings_without_size_check_against_default(self, client):
        response = client.post('/api/box/pairings', json={'players': ['a', 'b', 'c', 'd']})
        assert response.status_code == 400
        assert 'must match box size (5)' in response.get_json()['error']

    def test_pairings_mismatch(self, client):
        response = client.post('/api/box/pairings', json={'players': ['a', 'b', 'c', 'd'], 'box_size': 5})
        assert response.status_code == 400
        assert 'must match box size' in response.get_json()['error']

    def test_pattern(self, client):
        data = client.get('/api/box/patterns/6').get_json()
        assert data['pattern']['total_rounds'] == 6
        assert data['pattern']['rounds'][0]['team_a'] == [0, 1]
        assert data['validation']['valid'] is True

    def test_pattern_without_size_uses_default(self, client):
        client.post('/api/settings/update', json={'default_box_size': 6})
        data = client.get('/api/box/patterns').get_json()
        assert data['pattern']['box_size'] == 6

    def test_pattern_unsupported(self, client):
        response = client.get('/api/box/patterns/3')
        assert response.status_code == 400

    def test_packing(self, client):
        data = client.get('/api/box/packing/19').get_json()
        assert data['success'] is True
        assert data['display'] == '3 boxes of 5, 1 box of 4 (19 players)'
        assert data['suggestions'] == []

    def test_packing_impossible(self, client):
        data = client.get('/api/box/packing/7').get_json()
        assert data['success'] is False
        assert [s['type'] for s in data['suggestions']] == ['add', 'remove']


class TestSettingsRoutes:
    """Tests for reading and updating settings."""

    def test_defaults(self, client):
        data = client.get('/api/settings').get_json()
        assert data['settings']['strategy'] == 'round_balanced'

    def test_update_persists(self, client):
        response = client.post('/api/settings/update', json={'match_duration_minutes': '20', 'ignored': 1})
        assert response.get_json()['success'] is True
        with open(app_module.SETTINGS_FILE, encoding='utf-8') as f:
            saved = yaml.safe_load(f)
        assert saved['match_duration_minutes'] == 20
        assert 'ignored' not in saved

    def test_update_rejects_invalid(self, client):
        response = client.post('/api/settings/update', json={'default_box_size': 7})
        assert response.status_code == 400
        assert not os.path.exists(app_module.SETTINGS_FILE)

    def test_reset(self, client):
        client.post('/api/settings/update', json={'strategy': 'stage_weighted'})
        data = client.post('/api/settings/reset').get_json()
        assert data['settings']['strategy'] == 'round_balanced'
        assert client.get('/api/settings').get_json()['settings']['strategy'] == 'round_balanced'

    def test_update_rejects_non_numeric_stage_weight(self, client):
        """Test that a bad stage weight is refused instead of emptying later queues."""
        body = {'strategy': 'stage_weighted', 'stage_weights': {'pool': 'high'}}
        response = client.post('/api/settings/update', json=body)
        assert response.status_code == 400
        assert 'must be a number' in response.get_json()['error']
        assert not os.path.exists(app_module.SETTINGS_FILE)

        match = {'id': 'p1', 'divisionId': 'A', 'status': 'not_started', 'stage': 'Pool',
                 'teamAId': 't1', 'teamBId': 't2'}
        data = client.post('/api/queue', json={'matches': [match], 'divisions': ['A']}).get_json()
        assert [m['id'] for m in data['queue']] == ['p1']

    def test_invalid_settings_file(self, client):
        with open(app_module.SETTINGS_FILE, 'w', encoding='utf-8') as f:
            yaml.dump({'strategy': 'coin_flip'}, f)
        response = client.get('/api/settings')
        assert response.status_code == 400
        assert response.get_json()['success'] is False
        assert 'Unknown scheduling strategy' in response.get_json()['error']

    def test_reset_repairs_invalid_settings_file(self, client):
        with open(app_module.SETTINGS_FILE, 'w', encoding='utf-8') as f:
            yaml.dump({'strategy': 'coin_flip'}, f)
        assert client.post('/api/settings/reset').status_code == 200
        assert client.get('/api/settings').get_json()['settings']['strategy'] == 'round_balanced'


class TestSettingsLocation:
    def test_settings_file_comes_from_config(self):
        from scheduling import config
        assert app_module.SETTINGS_FILE == config.SETTINGS_FILE
