"""
Shared pytest fixtures for court scheduler tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - skip exhaustive checks
"""
import pytest
import sys
import os
import yaml

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from scheduling.models import Match, Court, Division, QueueMatch, Player


def make_match(id, division_id='division-1', round_number=1, status='not_started',
               stage='pool', team_a_id='team-a', team_b_id='team-b', court=None):
    return Match(id=id, division_id=division_id, team_a_id=team_a_id, team_b_id=team_b_id,
                 status=status, round_number=round_number, stage=stage, court=court)


def make_queue_match(id, court=None, round_number=1, team_a_id='a', team_b_id='b'):
    return QueueMatch(id=id, division_id='div-1', team_a_id=team_a_id, team_b_id=team_b_id,
                      status='not_started', round_number=round_number, stage='pool', court=court)


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Test client with settings stored in a temporary file."""
    import app as app_module

    monkeypatch.setattr(app_module, 'SETTINGS_FILE', str(tmp_path / 'settings.yaml'))
    app_module.app.config['TESTING'] = True
    with app_module.app.test_client() as client:
        yield client


@pytest.fixture
def single_division():
    return [Division(id='division-1')]


@pytest.fixture
def two_divisions():
    return [Division(id='div-a', name='Division A'), Division(id='div-b', name='Division B')]


@pytest.fixture
def two_free_courts():
    return [Court(name='Court 1'), Court(name='Court 2')]


@pytest.fixture
def mixed_status_matches():
    """One match in every status of division-1, round 1."""
    return [
        make_match('match-1', status='completed'),
        make_match('match-2', status='not_started'),
        make_match('match-3', status='in_progress'),
        make_match('match-4', status='waiting'),
        make_match('match-5', status='pending'),
    ]


@pytest.fixture
def five_players():
    return [Player(id=f'p{i}', name=name) for i, name in enumerate(['Alice', 'Bob', 'Carol', 'Dan', 'Eve'])]


@pytest.fixture
def six_players():
    return [Player(id=f'p{i}', name=f'Player {i}') for i in range(6)]


@pytest.fixture
def snapshot_file(tmp_path):
    """YAML snapshot with two divisions, two courts and four matches."""
    path = tmp_path / 'snapshot.yaml'
    path.write_text(yaml.dump({
        'divisions': [{'id': 'mens'}, {'id': 'womens'}],
        'courts': [
            {'name': 'Court 1', 'active': True},
            {'name': 'Court 2', 'active': True, 'currentMatchId': 'm0'},
            {'name': 'Court 3', 'active': False},
        ],
        'matches': [
            {'id': 'm0', 'divisionId': 'mens', 'roundNumber': 1, 'status': 'in_progress',
             'teamAId': 't1', 'teamBId': 't2', 'court': 'Court 2'},
            {'id': 'm1', 'divisionId': 'mens', 'roundNumber': 2, 'status': 'not_started',
             'teamAId': 't1', 'teamBId': 't3'},
            {'id': 'm2', 'divisionId': 'womens', 'roundNumber': 1, 'status': 'not_started',
             'teamAId': 't5', 'teamBId': 't6'},
            {'id': 'm3', 'divisionId': 'mens', 'roundNumber': 1, 'status': 'waiting',
             'teamAId': 't3', 'teamBId': 't4'},
        ],
    }, default_flow_style=False))
    return str(path)
