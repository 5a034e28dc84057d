"""
Plain records consumed and produced by the scheduling core.

Records are built from dicts coming from storage or request bodies. Keys are
accepted in snake_case or in the camelCase used by the web front end.
"""

WAITING_STATUSES = ('not_started', 'waiting')
COMPLETED = 'completed'
IN_PROGRESS = 'in_progress'
MATCH_STATUSES = ('not_started', 'waiting', 'in_progress', 'completed', 'pending')


def _pick(data, *keys, default=None):
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


class Match:
    def __init__(self, id, division_id, team_a_id, team_b_id, status='not_started',
                 round_number=1, stage='', court=None):
        self.id = id
        self.division_id = division_id
        self.team_a_id = team_a_id
        self.team_b_id = team_b_id
        self.status = status
        self.round_number = round_number if round_number else 1
        self.stage = stage or ''
        self.court = court or None

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            division_id=_pick(data, 'division_id', 'divisionId'),
            team_a_id=_pick(data, 'team_a_id', 'teamAId'),
            team_b_id=_pick(data, 'team_b_id', 'teamBId'),
            status=_pick(data, 'status', default='not_started'),
            round_number=int(_pick(data, 'round_number', 'roundNumber', default=1)),
            stage=_pick(data, 'stage', default=''),
            court=_pick(data, 'court'),
        )

    @property
    def is_waiting(self):
        return self.status in WAITING_STATUSES

    def to_dict(self):
        return {
            'id': self.id,
            'division_id': self.division_id,
            'round_number': self.round_number,
            'stage': self.stage,
            'team_a_id': self.team_a_id,
            'team_b_id': self.team_b_id,
            'status': self.status,
            'court': self.court,
        }

    def __repr__(self):
        return f"Match(id={self.id}, division_id={self.division_id}, round={self.round_number}, status={self.status})"


class QueueMatch(Match):
    """A waiting match as it appears in the scheduling queue."""

    @classmethod
    def from_match(cls, match):
        return cls(
            id=match.id,
            division_id=match.division_id,
            team_a_id=match.team_a_id,
            team_b_id=match.team_b_id,
            status=match.status,
            round_number=match.round_number,
            stage=match.stage,
            court=match.court,
        )

    def __repr__(self):
        return f"QueueMatch(id={self.id}, division_id={self.division_id}, round={self.round_number}, court={self.court})"


class Court:
    def __init__(self, name, active=True, current_match_id=None):
        self.name = name
        self.active = active
        self.current_match_id = current_match_id  # Occupied when set

    @classmethod
    def from_dict(cls, data):
        return cls(
            name=data['name'].strip(),
            active=bool(_pick(data, 'active', default=True)),
            current_match_id=_pick(data, 'current_match_id', 'currentMatchId'),
        )

    @property
    def is_free(self):
        return self.active and not self.current_match_id

    def to_dict(self):
        return {'name': self.name, 'active': self.active, 'current_match_id': self.current_match_id}

    def __repr__(self):
        return f"Court(name={self.name}, active={self.active}, current_match_id={self.current_match_id})"


class Division:
    def __init__(self, id, name=None):
        self.id = id
        self.name = name or id

    @classmethod
    def from_dict(cls, data):
        return cls(id=data['id'], name=data.get('name'))

    def __repr__(self):
        return f"Division(id={self.id}, name={self.name})"


class Player:
    def __init__(self, id, name=None):
        self.id = id
        self.name = name or id

    @classmethod
    def from_dict(cls, data):
        if isinstance(data, str):
            return cls(id=data)
        return cls(id=data['id'], name=data.get('name'))

    def __repr__(self):
        return f"Player(id={self.id}, name={self.name})"


def build_matches(rows):
    return [row if isinstance(row, Match) else Match.from_dict(row) for row in rows or []]


def build_courts(rows):
    return [row if isinstance(row, Court) else Court.from_dict(row) for row in rows or []]


def build_divisions(rows):
    divisions = []
    for row in rows or []:
        if isinstance(row, Division):
            divisions.append(row)
        elif isinstance(row, str):
            divisions.append(Division(id=row))
        else:
            divisions.append(Division.from_dict(row))
    return divisions


def build_players(rows):
    return [row if isinstance(row, Player) else Player.from_dict(row) for row in rows or []]
