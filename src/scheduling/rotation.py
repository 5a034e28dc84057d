"""
Rotating doubles box patterns.

Each box size has a fixed round table of 0-based player indices. The tables
are data, not generated: every player plays the same number of matches and
sits out the same number of rounds.

    4 players: 3 rounds, 3 matches each, no byes, every pair partners once
    5 players: 5 rounds, 4 matches each, 1 bye each
    6 players: 6 rounds, 4 matches each, 2 rests each, four different
               partners and all five others as opponents (one court per box)
"""
import copy
import logging

from scheduling.models import build_players

logger = logging.getLogger(__name__)

SUPPORTED_BOX_SIZES = (4, 5, 6)


class UnsupportedBoxSize(ValueError):
    pass


class PlayerCountMismatch(ValueError):
    pass


FOUR_PLAYER_PATTERN = {
    'box_size': 4,
    'total_rounds': 3,
    'matches_per_player': 3,
    'byes_per_player': 0,
    'rounds': [
        {'round_number': 1, 'team_a': (0, 1), 'team_b': (2, 3)},
        {'round_number': 2, 'team_a': (0, 2), 'team_b': (1, 3)},
        {'round_number': 3, 'team_a': (0, 3), 'team_b': (1, 2)},
    ],
}

FIVE_PLAYER_PATTERN = {
    'box_size': 5,
    'total_rounds': 5,
    'matches_per_player': 4,
    'byes_per_player': 1,
    'rounds': [
        {'round_number': 1, 'team_a': (0, 1), 'team_b': (2, 3), 'bye_player_index': 4},
        {'round_number': 2, 'team_a': (0, 2), 'team_b': (3, 4), 'bye_player_index': 1},
        {'round_number': 3, 'team_a': (0, 3), 'team_b': (1, 4), 'bye_player_index': 2},
        {'round_number': 4, 'team_a': (0, 4), 'team_b': (1, 2), 'bye_player_index': 3},
        {'round_number': 5, 'team_a': (1, 3), 'team_b': (2, 4), 'bye_player_index': 0},
    ],
}

SIX_PLAYER_PATTERN = {
    'box_size': 6,
    'total_rounds': 6,
    'matches_per_player': 4,
    'byes_per_player': 2,
    'rounds': [
        {'round_number': 1, 'team_a': (0, 1), 'team_b': (2, 3), 'resting_player_indices': (4, 5)},
        {'round_number': 2, 'team_a': (4, 5), 'team_b': (0, 2), 'resting_player_indices': (1, 3)},
        {'round_number': 3, 'team_a': (1, 4), 'team_b': (3, 5), 'resting_player_indices': (0, 2)},
        {'round_number': 4, 'team_a': (1, 2), 'team_b': (0, 4), 'resting_player_indices': (3, 5)},
        {'round_number': 5, 'team_a': (1, 3), 'team_b': (2, 5), 'resting_player_indices': (0, 4)},
        {'round_number': 6, 'team_a': (0, 5), 'team_b': (3, 4), 'resting_player_indices': (1, 2)},
    ],
}

_PATTERNS = {4: FOUR_PLAYER_PATTERN, 5: FIVE_PLAYER_PATTERN, 6: SIX_PLAYER_PATTERN}


def _pattern(box_size):
    if box_size not in _PATTERNS:
        raise UnsupportedBoxSize(
            f"Box size must be one of {', '.join(map(str, SUPPORTED_BOX_SIZES))} (got {box_size})"
        )
    return _PATTERNS[box_size]


def get_rotation_pattern(box_size):
    """Return a copy of the rotation pattern for a box size."""
    return copy.deepcopy(_pattern(box_size))


def _sitting_out(round_def):
    """Indices not playing in a round (bye or resting)."""
    if round_def.get('bye_player_index') is not None:
        return (round_def['bye_player_index'],)
    return tuple(round_def.get('resting_player_indices') or ())


def get_bye_rounds(player_index, box_size):
    """Round numbers in which the player at this index sits out."""
    return [
        round_def['round_number']
        for round_def in _pattern(box_size)['rounds']
        if player_index in _sitting_out(round_def)
    ]


def get_round_count(box_size):
    return _pattern(box_size)['total_rounds']


def get_matches_per_player(box_size):
    return _pattern(box_size)['matches_per_player']


def get_byes_per_player(box_size):
    return _pattern(box_size)['byes_per_player']


def generate_box_pairings(players, box_size):
    """
    Map the fixed pattern onto the players of one box.

    Args:
        players: Players in box order (Player records, dicts with id/name, or ids).
        box_size: 4, 5 or 6. Must equal len(players).

    Returns:
        One pairing dict per round with player ids and names for both teams,
        plus the bye player (5-player boxes) or resting players (6-player boxes).

    Raises:
        PlayerCountMismatch: if the number of players differs from box_size.
        UnsupportedBoxSize: if box_size is not 4, 5 or 6.
    """
    players = build_players(players)
    if len(players) != box_size:
        raise PlayerCountMismatch(f"Player count ({len(players)}) must match box size ({box_size})")

    pairings = []
    for round_def in _pattern(box_size)['rounds']:
        team_a = [players[i] for i in round_def['team_a']]
        team_b = [players[i] for i in round_def['team_b']]
        pairing = {
            'round_number': round_def['round_number'],
            'team_a_player_ids': [p.id for p in team_a],
            'team_a_player_names': [p.name for p in team_a],
            'team_b_player_ids': [p.id for p in team_b],
            'team_b_player_names': [p.name for p in team_b],
        }
        if round_def.get('bye_player_index') is not None:
            bye_player = players[round_def['bye_player_index']]
            pairing['bye_player_id'] = bye_player.id
            pairing['bye_player_name'] = bye_player.name
        if round_def.get('resting_player_indices'):
            resting = [players[i] for i in round_def['resting_player_indices']]
            pairing['resting_player_ids'] = [p.id for p in resting]
            pairing['resting_player_names'] = [p.name for p in resting]
        pairings.append(pairing)

    logger.debug(f"Generated {len(pairings)} rounds for a box of {box_size}")
    return pairings


def _failed(error, plays_correct_matches=False):
    return {
        'valid': False,
        'error': error,
        'warnings': None,
        'checks': {
            'each_player_plays_correct_matches': plays_correct_matches,
            'each_player_rests_correct_times': False,
            'partner_distribution_balanced': False,
            'opponent_distribution_balanced': False,
        },
    }


def validate_pattern_fairness(pattern):
    """
    Check that a rotation pattern is fair.

    Wrong match or bye counts make the pattern invalid. Partner and opponent
    spread are best effort and only produce warnings.
    """
    box_size = pattern['box_size']
    matches_per_player = pattern['matches_per_player']
    byes_per_player = pattern['byes_per_player']

    stats = [
        {'matches': 0, 'byes': 0, 'partners': set(), 'opponents': set()}
        for _ in range(box_size)
    ]

    for round_def in pattern['rounds']:
        team_a = tuple(round_def['team_a'])
        team_b = tuple(round_def['team_b'])
        for team, other in ((team_a, team_b), (team_b, team_a)):
            for player in team:
                stats[player]['matches'] += 1
                stats[player]['partners'].add(team[1] if team[0] == player else team[0])
                stats[player]['opponents'].update(other)
        for player in _sitting_out(round_def):
            stats[player]['byes'] += 1

    match_mismatches = [
        {'player': index, 'matches': s['matches']}
        for index, s in enumerate(stats) if s['matches'] != matches_per_player
    ]
    if match_mismatches:
        return _failed(f"Players have incorrect match counts: {match_mismatches}")

    bye_mismatches = [
        {'player': index, 'byes': s['byes']}
        for index, s in enumerate(stats) if s['byes'] != byes_per_player
    ]
    if bye_mismatches:
        return _failed(f"Players have incorrect bye counts: {bye_mismatches}", plays_correct_matches=True)

    warnings = []
    expected_partners = 3 if box_size == 4 else 4
    partners_balanced = all(len(s['partners']) >= expected_partners - 1 for s in stats)
    if not partners_balanced:
        warnings.append('Partner distribution is not perfectly balanced')

    opponents_balanced = all(len(s['opponents']) >= box_size - 2 for s in stats)
    if not opponents_balanced:
        warnings.append('Opponent distribution is not perfectly balanced')

    return {
        'valid': True,
        'error': None,
        'warnings': warnings or None,
        'checks': {
            'each_player_plays_correct_matches': True,
            'each_player_rests_correct_times': True,
            'partner_distribution_balanced': partners_balanced,
            'opponent_distribution_balanced': opponents_balanced,
        },
    }


def format_pairing_for_display(pairing):
    """e.g. "Alice + Bob vs Carol + Dan (Eve has bye)"."""
    team_a = ' + '.join(pairing.get('team_a_player_names') or []) or 'Team A'
    team_b = ' + '.join(pairing.get('team_b_player_names') or []) or 'Team B'
    display = f"{team_a} vs {team_b}"
    if pairing.get('bye_player_name'):
        display += f" ({pairing['bye_player_name']} has bye)"
    elif pairing.get('resting_player_names'):
        display += f" ({' and '.join(pairing['resting_player_names'])} resting)"
    return display


def get_schedule_display(players, box_size):
    return [
        {
            'round_number': pairing['round_number'],
            'matchup': f"{' + '.join(pairing['team_a_player_names'])} vs {' + '.join(pairing['team_b_player_names'])}",
            'bye': pairing.get('bye_player_name'),
        }
        for pairing in generate_box_pairings(players, box_size)
    ]
