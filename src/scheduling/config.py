"""
Scheduler settings stored as YAML.
"""
import os

import yaml
from filelock import FileLock

from scheduling.allocation import DEFAULT_MATCH_DURATION_MINUTES, DEFAULT_STAGE_WEIGHTS, STRATEGIES
from scheduling.rotation import SUPPORTED_BOX_SIZES

BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
SETTINGS_FILE = os.environ.get('SCHEDULER_SETTINGS_FILE', os.path.join(BASE_DIR, 'data', 'settings.yaml'))

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


def get_default_settings():
    """Return default settings."""
    return {
        'strategy': 'round_balanced',
        'match_duration_minutes': DEFAULT_MATCH_DURATION_MINUTES,
        'stage_weights': dict(DEFAULT_STAGE_WEIGHTS),
        'default_box_size': 5,
        'log_level': 'INFO',
    }


def validate_settings(settings):
    if settings['strategy'] not in STRATEGIES:
        raise ValueError(f"Unknown scheduling strategy '{settings['strategy']}'")
    duration = settings['match_duration_minutes']
    if not isinstance(duration, int) or isinstance(duration, bool) or duration <= 0:
        raise ValueError(f"match_duration_minutes must be a positive integer (got {duration!r})")
    if settings['default_box_size'] not in SUPPORTED_BOX_SIZES:
        raise ValueError(f"default_box_size must be one of {SUPPORTED_BOX_SIZES}")
    weights = settings['stage_weights']
    if not isinstance(weights, dict):
        raise ValueError('stage_weights must be a mapping of stage name to weight')
    for stage, weight in weights.items():
        if not isinstance(stage, str):
            raise ValueError(f"stage_weights keys must be stage names (got {stage!r})")
        if not isinstance(weight, (int, float)) or isinstance(weight, bool):
            raise ValueError(f"stage weight for '{stage}' must be a number (got {weight!r})")
    if str(settings['log_level']).upper() not in LOG_LEVELS:
        raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
    return settings


def load_settings(path=None):
    """Load settings from YAML file, merging with defaults."""
    path = path or SETTINGS_FILE
    defaults = get_default_settings()
    if not os.path.exists(path):
        return defaults
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if not data:
        return defaults
    for key, value in defaults.items():
        if key not in data:
            data[key] = value
    return validate_settings(data)


def save_settings(settings, path=None):
    """Save settings to YAML file."""
    path = path or SETTINGS_FILE
    validate_settings(settings)
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with FileLock(f"{path}.lock", timeout=10):
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(settings, f, default_flow_style=False)


def queue_options(settings):
    """Keyword options passed through to the scheduling strategy."""
    return {
        'stage_weights': settings['stage_weights'],
        'match_duration_minutes': settings['match_duration_minutes'],
    }
