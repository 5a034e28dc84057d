"""
Match queue scheduling and court allocation.

The queue is recomputed from scratch on every call from the full snapshot of
matches, courts and divisions. Two scoring strategies are available:

    round_balanced  - (default) a division never starts a later round while an
                      earlier one is outstanding; divisions take turns in the
                      order they are supplied.
    stage_weighted  - bracket stage first, then earlier rounds, then teams that
                      have played less. Wait times are estimated in minutes.
"""
import logging

from scheduling.models import COMPLETED, IN_PROGRESS, QueueMatch, build_matches, build_courts, build_divisions

logger = logging.getLogger(__name__)

DEFAULT_MATCH_DURATION_MINUTES = 15

DEFAULT_STAGE_WEIGHTS = {
    'main bracket': 1000,
    'pool': 750,
    'bronze': 500,
    'plate': 250,
}


def _empty_result():
    return {'queue': [], 'wait_times': {}}


def get_active_rounds(matches):
    """Lowest round number per division among matches that are not completed."""
    active_rounds = {}
    for match in matches:
        if match.status == COMPLETED:
            continue
        current = active_rounds.get(match.division_id)
        if current is None or match.round_number < current:
            active_rounds[match.division_id] = match.round_number
    return active_rounds


def round_balanced_queue(waiting, matches, courts, divisions, **options):
    """Ascending score: round priority * 100 + division index * 10 + round number."""
    active_rounds = get_active_rounds(matches)
    division_index = {}
    for index, division in enumerate(divisions):
        division_index.setdefault(division.id, index)
    unknown_index = len(divisions)

    def score(match):
        round_priority = 0 if match.round_number == active_rounds.get(match.division_id) else 1
        index = division_index.get(match.division_id, unknown_index)
        return round_priority * 100 + index * 10 + match.round_number

    queue = sorted(waiting, key=score)
    wait_times = {match.id: position for position, match in enumerate(queue)}
    return queue, wait_times


def count_played_matches(matches):
    """Matches completed or on court, per team id."""
    played = {}
    for match in matches:
        if match.status not in (COMPLETED, IN_PROGRESS):
            continue
        for team_id in (match.team_a_id, match.team_b_id):
            played[team_id] = played.get(team_id, 0) + 1
    return played


def stage_weighted_queue(waiting, matches, courts, divisions, stage_weights=None,
                         match_duration_minutes=DEFAULT_MATCH_DURATION_MINUTES, **options):
    """Descending score: stage weight + round recency + fairness. Waits in minutes."""
    weights = {stage.lower(): weight for stage, weight in (stage_weights or DEFAULT_STAGE_WEIGHTS).items()}
    played = count_played_matches(matches)

    def score(match):
        stage_weight = weights.get(match.stage.strip().lower(), 0)
        recency = 100 - match.round_number * 10
        fairness = 50 - (played.get(match.team_a_id, 0) + played.get(match.team_b_id, 0))
        return stage_weight + recency + fairness

    queue = sorted(waiting, key=score, reverse=True)
    # sorted(reverse=True) keeps equal scores in source order
    active_court_count = max(1, sum(1 for court in courts if court.active))
    wait_times = {
        match.id: (position // active_court_count + 1) * match_duration_minutes
        for position, match in enumerate(queue)
    }
    return queue, wait_times


STRATEGIES = {
    'round_balanced': round_balanced_queue,
    'stage_weighted': stage_weighted_queue,
}
DEFAULT_STRATEGY = 'round_balanced'


def get_strategy(name):
    if name not in STRATEGIES:
        raise ValueError(f"Unknown scheduling strategy '{name}'. Valid strategies: {', '.join(sorted(STRATEGIES))}")
    return STRATEGIES[name]


def get_scheduled_queue(matches, courts, divisions, strategy=DEFAULT_STRATEGY, **options):
    """
    Build the priority-ordered queue of matches waiting for a court.

    Args:
        matches: Match records or dicts, any status mix.
        courts: Court records or dicts.
        divisions: Division records, dicts or ids. Their order is the
            tie-break between divisions and must be kept stable across calls.
        strategy: 'round_balanced' or 'stage_weighted'.
        **options: Strategy options (stage_weights, match_duration_minutes).

    Returns:
        {'queue': [QueueMatch, ...], 'wait_times': {match_id: value}}. An
        empty result is returned when scoring fails; the error is logged.
    """
    scorer = get_strategy(strategy)
    match_count = None
    try:
        matches = build_matches(matches)
        match_count = len(matches)
        courts = build_courts(courts)
        divisions = build_divisions(divisions)
        waiting = [QueueMatch.from_match(match) for match in matches if match.is_waiting]
        queue, wait_times = scorer(waiting, matches, courts, divisions, **options)
    except Exception:
        logger.exception(
            f"Queue scheduling failed (strategy={strategy}, matches={match_count}); "
            "returning empty queue"
        )
        return _empty_result()

    logger.debug(f"Scheduled {len(queue)} waiting matches with strategy {strategy}")
    return {'queue': queue, 'wait_times': wait_times}


def get_next_match_for_court(queue, active_court_names):
    """First queued match that is not already sitting on an active court."""
    active = set(active_court_names)
    for match in queue:
        if not match.court or match.court not in active:
            return match
    return None


def auto_assign_first_wave(queue, courts):
    """Pair free active courts with the head of the queue, in order."""
    free_courts = [court for court in build_courts(courts) if court.is_free]
    return [
        {'match_id': match.id, 'court_name': court.name}
        for match, court in zip(queue, free_courts)
    ]


def auto_assign_on_court_free(queue, court):
    """
    Assign the head of the queue to a court that has just been freed.

    The match that was playing on the court must already be out of the queue.
    """
    if not queue:
        return None
    court_name = court if isinstance(court, str) else build_courts([court])[0].name
    return {'match_id': queue[0].id, 'court_name': court_name}


def get_busy_team_ids(matches):
    """Teams currently holding a court."""
    busy = set()
    for match in build_matches(matches):
        if not match.court or match.status == COMPLETED:
            continue
        busy.add(match.team_a_id)
        busy.add(match.team_b_id)
    return busy


def get_court_statuses(courts, matches):
    """
    Status view for each court, in the order the courts were supplied.

    A court holding a current_match_id is occupied even when no supplied
    match names the court; the referenced match decides IN_USE or ASSIGNED.
    """
    matches = build_matches(matches)
    by_id = {m.id: m for m in matches}
    statuses = []
    for court in build_courts(courts):
        current = next(
            (m for m in matches if m.court == court.name and m.status != COMPLETED),
            None,
        )
        if current is None and court.current_match_id:
            current = by_id.get(court.current_match_id)
        current_id = current.id if current else court.current_match_id
        if not court.active:
            status = 'OUT_OF_SERVICE'
        elif not current_id:
            status = 'AVAILABLE'
        elif current is not None and current.status == IN_PROGRESS:
            status = 'IN_USE'
        else:
            status = 'ASSIGNED'
        statuses.append({
            'court_name': court.name,
            'status': status,
            'current_match_id': current_id,
        })
    return statuses
