"""
Configuration Loading System

Loads YAML run configurations, fills in defaults, validates them and turns
them into the objects the experiment runner needs.
"""

import copy
from pathlib import Path
from typing import Dict, Any, List, Optional, Union

import numpy as np
import yaml

from .io_utils import load_spp_instance, validate_spp_format
from .spp import SPProblem
from .strategies import ImprovementStrategy, RowSelectionStrategy


class ConfigValidationError(Exception):
    """Raised when run configuration is invalid."""
    pass


DEFAULT_RUN_CONFIG: Dict[str, Any] = {
    'penalty_factor': 1,
    'trials': 20,
    'random_seed': None,
    'algorithm': {
        'pop_size': 100,
        'generations': 500,
        'improvements': 1,
        'sel_rate': 0.5,
        'x_rate': 0.7,
    },
    'strategies': {
        'improvement': ['best', 'first'],
        'row_selection': ['max', 'random'],
    },
    'output': {
        'overwrite': False,
        'plots': False,
    },
}


def load_run_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load run configuration from YAML file.

    Args:
        config_path: Path to run configuration YAML file

    Returns:
        Dictionary containing run configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ConfigValidationError: If config is invalid YAML or empty
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in configuration file: {e}")

    if config is None:
        raise ConfigValidationError("Configuration file is empty")

    if not isinstance(config, dict):
        raise ConfigValidationError("Configuration file must contain a mapping")

    # Relative instance paths are resolved against the config's directory
    instance = config.get('instance')
    if isinstance(instance, str) and not Path(instance).is_absolute():
        candidate = config_file.parent / instance
        if candidate.exists():
            config['instance'] = str(candidate)

    return config


def apply_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge a run configuration over the defaults.

    Nested sections are merged key by key; the input is not modified.

    Args:
        config: Partial run configuration

    Returns:
        Complete run configuration
    """
    merged = copy.deepcopy(DEFAULT_RUN_CONFIG)
    for key, value in config.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = value
    return merged


def _check_positive_int(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigValidationError(f"'{name}' must be a positive integer, got: {value}")


def _check_rate(value: Any, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 < value <= 1:
        raise ConfigValidationError(f"'{name}' must be a number within (0, 1], got: {value}")


def validate_run_config(config: Dict[str, Any]) -> None:
    """
    Validate a (defaults-applied) run configuration.

    Args:
        config: Run configuration dictionary

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    if 'instance' not in config or not config['instance']:
        raise ConfigValidationError("Missing required field: 'instance'")

    if not isinstance(config.get('output'), dict):
        raise ConfigValidationError("'output' must be a dictionary")

    if not config['output'].get('root'):
        raise ConfigValidationError("Missing required field: 'output.root'")

    _check_positive_int(config.get('trials'), 'trials')

    penalty = config.get('penalty_factor')
    if isinstance(penalty, bool) or not isinstance(penalty, (int, float)) or penalty <= 0:
        raise ConfigValidationError(f"'penalty_factor' must be a positive number, got: {penalty}")

    seed = config.get('random_seed')
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int) or seed < 0):
        raise ConfigValidationError(f"'random_seed' must be a non-negative integer, got: {seed}")

    algorithm = config.get('algorithm')
    if not isinstance(algorithm, dict):
        raise ConfigValidationError("'algorithm' must be a dictionary")

    for name in ('pop_size', 'generations', 'improvements'):
        _check_positive_int(algorithm.get(name), f"algorithm.{name}")
    for name in ('sel_rate', 'x_rate'):
        _check_rate(algorithm.get(name), f"algorithm.{name}")

    strategies = config.get('strategies')
    if not isinstance(strategies, dict):
        raise ConfigValidationError("'strategies' must be a dictionary")

    for name, enum_type in (('improvement', ImprovementStrategy),
                            ('row_selection', RowSelectionStrategy)):
        names = strategies.get(name)
        if not isinstance(names, list) or not names:
            raise ConfigValidationError(f"'strategies.{name}' must be a non-empty list")
        for value in names:
            try:
                enum_type.from_name(value)
            except ValueError as e:
                raise ConfigValidationError(str(e))


def get_strategies(config: Dict[str, Any]) -> tuple:
    """
    Strategy enums listed in a validated run configuration.

    Returns:
        Tuple of (improvement_strategies, row_selection_strategies)
    """
    strategies = config['strategies']
    improvement = [ImprovementStrategy.from_name(s) for s in strategies['improvement']]
    row_selection = [RowSelectionStrategy.from_name(s) for s in strategies['row_selection']]
    return improvement, row_selection


def resolve_seed(config: Dict[str, Any]) -> int:
    """Seed of a run; a fresh one is drawn when the config has none."""
    seed = config.get('random_seed')
    if seed is None:
        seed = int(np.random.default_rng().integers(0, 2**31))
    return seed


def create_problem_from_config(
    config: Dict[str, Any],
    rng: Optional[np.random.Generator] = None
) -> SPProblem:
    """
    Load the configured instance and build its SPProblem.

    Args:
        config: Validated run configuration
        rng: Random number generator for the problem

    Returns:
        Configured SPProblem
    """
    instance = load_spp_instance(config['instance'])
    return instance.to_problem(config.get('penalty_factor', 1), rng=rng)


def config_issues(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of issues

    Returns:
        List of validation error messages (empty if valid)
    """
    try:
        validate_run_config(config)
    except ConfigValidationError as e:
        return [str(e)]

    is_valid, error = validate_spp_format(config['instance'])
    return [] if is_valid else [f"Invalid instance: {error}"]


def print_config_summary(config: Dict[str, Any]) -> None:
    """Print a summary of the run configuration"""
    print("=" * 50)
    print("CONFIGURATION SUMMARY")
    print("=" * 50)

    print(f"Instance: {config.get('instance', 'N/A')}")
    print(f"Penalty factor: {config.get('penalty_factor', 1)}")
    print(f"Trials per strategy pair: {config.get('trials', 'N/A')}")
    print(f"Random seed: {config.get('random_seed') if config.get('random_seed') is not None else 'Random'}")

    algorithm = config.get('algorithm', {})
    print("\nAlgorithm:")
    for key in ('pop_size', 'generations', 'improvements', 'sel_rate', 'x_rate'):
        print(f"  {key}: {algorithm.get(key, 'N/A')}")

    strategies = config.get('strategies', {})
    print("\nStrategies:")
    print(f"  improvement: {', '.join(map(str, strategies.get('improvement', [])))}")
    print(f"  row_selection: {', '.join(map(str, strategies.get('row_selection', [])))}")

    print(f"\nOutput root: {config.get('output', {}).get('root', 'N/A')}")

    issues = config_issues(config)
    if issues:
        print(f"\nValidation Issues ({len(issues)}):")
        for issue in issues:
            print(f"  - {issue}")
    else:
        instance = load_spp_instance(config['instance'])
        print(f"\nInstance size: {instance.rows} rows x {instance.columns} sets "
              f"(density {instance.density():.3f})")
        print("\nConfiguration is valid ✓")

    print("=" * 50)
