"""
Split a league roster into boxes of 4, 5 or 6 players.

Boxes of 5 are preferred, then 4s; 6s are used only when nothing else fits.
3-player boxes cannot play rotating doubles.

    Players  Boxes
    10       5 + 5
    11       5 + 6
    13       5 + 4 + 4
    16       5 + 5 + 6
    17       5 + 4 + 4 + 4
    7        impossible
"""
import logging

logger = logging.getLogger(__name__)

MIN_PLAYERS = 4


def _failed_packing(error):
    return {
        'success': False,
        'box_sizes': [],
        'box_count': 0,
        'distribution': {'fives': 0, 'fours': 0, 'sixes': 0},
        'error': error,
    }


def pack_players_into_boxes(player_count):
    """Box sizes for a roster, as many 5s as possible, then 4s, then 6s."""
    if player_count < MIN_PLAYERS:
        return _failed_packing(f"Cannot create boxes with only {player_count} players. Minimum is {MIN_PLAYERS}.")

    for fives in range(player_count // 5, -1, -1):
        remaining = player_count - fives * 5
        for fours in range(remaining // 4, -1, -1):
            leftover = remaining - fours * 4
            if leftover % 6 == 0:
                sixes = leftover // 6
                box_sizes = [5] * fives + [4] * fours + [6] * sixes
                return {
                    'success': True,
                    'box_sizes': box_sizes,
                    'box_count': len(box_sizes),
                    'distribution': {'fives': fives, 'fours': fours, 'sixes': sixes},
                    'error': None,
                }

    return _failed_packing(f"Cannot create valid boxes with {player_count} players. Try adding or removing players.")


def distribute_players_to_boxes(player_ids, packing):
    """
    Slice an ordered roster into boxes.

    Box 1 gets the first players (usually the highest rated), box 2 the next
    tier and so on.
    """
    if not packing['success']:
        raise ValueError(packing.get('error') or 'Invalid packing result')

    total = sum(packing['box_sizes'])
    if len(player_ids) != total:
        raise ValueError(f"Player count ({len(player_ids)}) doesn't match packing total ({total})")

    boxes = []
    start = 0
    for box_number, box_size in enumerate(packing['box_sizes'], start=1):
        boxes.append({
            'box_number': box_number,
            'box_size': box_size,
            'player_ids': list(player_ids[start:start + box_size]),
        })
        start += box_size
    return boxes


def can_pack_players(player_count):
    return pack_players_into_boxes(player_count)['success']


def get_valid_player_counts(minimum, maximum):
    return [count for count in range(max(MIN_PLAYERS, minimum), maximum + 1) if can_pack_players(count)]


def get_invalid_player_counts(minimum, maximum):
    return [count for count in range(max(MIN_PLAYERS, minimum), maximum + 1) if not can_pack_players(count)]


def get_packing_adjustment_suggestions(player_count):
    """Smallest number of players to add, and to remove, to make a roster packable."""
    if can_pack_players(player_count):
        return []

    suggestions = []
    for add in range(1, 4):
        packing = pack_players_into_boxes(player_count + add)
        if packing['success']:
            suggestions.append({'type': 'add', 'count': add,
                                'resulting_count': player_count + add, 'packing': packing})
            break

    for remove in range(1, 4):
        if player_count - remove < MIN_PLAYERS:
            break
        packing = pack_players_into_boxes(player_count - remove)
        if packing['success']:
            suggestions.append({'type': 'remove', 'count': remove,
                                'resulting_count': player_count - remove, 'packing': packing})
            break

    return suggestions


def _count_box_sizes(box_sizes):
    return {
        'fours': box_sizes.count(4),
        'fives': box_sizes.count(5),
        'sixes': box_sizes.count(6),
    }


def check_rebalance_needed(current_box_sizes):
    """Compare boxes after promotion/relegation with the ideal packing of the same roster."""
    current = _count_box_sizes(list(current_box_sizes))
    total = sum(current_box_sizes)
    ideal = pack_players_into_boxes(total)

    if not ideal['success']:
        return {
            'needs_rebalance': True,
            'current_distribution': current,
            'suggestion': f"Player count {total} cannot form valid boxes. Add or remove players.",
        }

    target = ideal['distribution']
    if any(current[key] != target[key] for key in ('fours', 'fives', 'sixes')):
        logger.info(f"Boxes {list(current_box_sizes)} differ from ideal packing {ideal['box_sizes']}")
        return {
            'needs_rebalance': True,
            'current_distribution': current,
            'suggestion': (f"Rebalance to {target['fives']} boxes of 5, {target['fours']} boxes of 4, "
                           f"{target['sixes']} boxes of 6."),
        }

    return {'needs_rebalance': False, 'current_distribution': current, 'suggestion': None}


def format_packing_for_display(packing):
    """e.g. "3 boxes of 5, 1 box of 4 (19 players)"."""
    if not packing['success']:
        return packing.get('error') or 'Invalid packing'

    parts = []
    distribution = packing['distribution']
    for key, size in (('fives', 5), ('fours', 4), ('sixes', 6)):
        count = distribution[key]
        if count > 0:
            parts.append(f"{count} {'box' if count == 1 else 'boxes'} of {size}")
    return f"{', '.join(parts)} ({sum(packing['box_sizes'])} players)"
