# Command line entry point for the court scheduler and box rotation tools

import argparse
import logging
import sys
import yaml
from scheduling.config import load_settings, queue_options
from scheduling.allocation import get_scheduled_queue, auto_assign_first_wave, STRATEGIES
from scheduling.rotation import generate_box_pairings, format_pairing_for_display, get_rotation_pattern, validate_pattern_fairness
from scheduling.packing import pack_players_into_boxes, format_packing_for_display, get_packing_adjustment_suggestions, distribute_players_to_boxes

logger = logging.getLogger('main')


def load_yaml(file_path):
    with open(file_path, mode='r', encoding='utf-8') as file:
        return yaml.safe_load(file) or {}


def load_snapshot(file_path):
    """Matches, courts and divisions from a YAML snapshot file."""
    data = load_yaml(file_path)
    if not isinstance(data, dict):
        raise ValueError(f"{file_path} must contain a mapping with matches, courts and divisions")
    return data.get('matches') or [], data.get('courts') or [], data.get('divisions') or []


def load_players(file_path):
    """Players of one box, either a plain list or {'players': [...], 'box_size': N}."""
    data = load_yaml(file_path)
    if isinstance(data, list):
        return data, None
    return data.get('players') or [], data.get('box_size')


def print_queue(args, settings):
    matches, courts, divisions = load_snapshot(args.snapshot)
    strategy = args.strategy or settings['strategy']
    result = get_scheduled_queue(matches, courts, divisions, strategy=strategy, **queue_options(settings))

    unit = 'min' if strategy == 'stage_weighted' else 'ahead'
    print(f"# Queue ({strategy}, {len(result['queue'])} waiting)")
    for position, match in enumerate(result['queue'], start=1):
        wait = result['wait_times'][match.id]
        print(f"{position:>3}. {match.id} [{match.division_id} R{match.round_number}] "
              f"{match.team_a_id} vs {match.team_b_id} (~{wait} {unit})")

    assignments = auto_assign_first_wave(result['queue'], courts)
    print("\n# First wave")
    if assignments:
        for assignment in assignments:
            print(f"{assignment['court_name']}: {assignment['match_id']}")
    else:
        print("No free courts or no waiting matches.")


def print_box(args, settings):
    players, box_size = load_players(args.players)
    box_size = args.box_size or box_size or settings['default_box_size']
    pairings = generate_box_pairings(players, box_size)

    print(f"# Box of {box_size}")
    for pairing in pairings:
        print(f"Round {pairing['round_number']}: {format_pairing_for_display(pairing)}")

    validation = validate_pattern_fairness(get_rotation_pattern(box_size))
    print(f"\nPattern fair: {'yes' if validation['valid'] else 'no'}")
    for warning in validation['warnings'] or []:
        print(f"WARNING: {warning}")


def print_packing(args, settings):
    packing = pack_players_into_boxes(args.count)
    print(format_packing_for_display(packing))
    if packing['success']:
        ids = [f"P{i}" for i in range(1, args.count + 1)]
        for box in distribute_players_to_boxes(ids, packing):
            print(f"  Box {box['box_number']}: {box['box_size']} players ({box['player_ids'][0]}-{box['player_ids'][-1]})")
        return
    for suggestion in get_packing_adjustment_suggestions(args.count):
        print(f"  {suggestion['type'].capitalize()} {suggestion['count']} -> "
              f"{format_packing_for_display(suggestion['packing'])}")


def build_parser():
    parser = argparse.ArgumentParser(description='Court scheduling and box rotation tools')
    parser.add_argument('--settings', help='Path to settings.yaml (defaults to data/settings.yaml)')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    queue_parser = subparsers.add_parser('queue', help='Show the match queue and first-wave court assignments')
    queue_parser.add_argument('snapshot', help='YAML file with matches, courts and divisions')
    queue_parser.add_argument('--strategy', choices=sorted(STRATEGIES), help='Scoring strategy')
    queue_parser.set_defaults(handler=print_queue)

    box_parser = subparsers.add_parser('box', help='Show the rotation schedule for one box')
    box_parser.add_argument('players', help='YAML file with the players of the box, in order')
    box_parser.add_argument('--box-size', type=int, choices=[4, 5, 6], help='Box size (defaults to the default_box_size setting)')
    box_parser.set_defaults(handler=print_box)

    pack_parser = subparsers.add_parser('pack', help='Split a roster into boxes of 4, 5 or 6')
    pack_parser.add_argument('count', type=int, help='Number of players')
    pack_parser.set_defaults(handler=print_packing)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.settings)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: could not load settings: {e}", file=sys.stderr)
        return 1

    level = logging.DEBUG if args.verbose else getattr(logging, str(settings['log_level']).upper())
    logging.basicConfig(level=level, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    try:
        args.handler(args, settings)
    except (OSError, ValueError, KeyError, yaml.YAMLError) as e:
        logger.debug('Command failed', exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
