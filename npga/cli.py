"""
CLI module for the genetic algorithm toolkit.

Builds a run configuration from a YAML file or from command-line flags and
dispatches it to the experiment runner.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Any, List, Optional

from .config_loader import (
    ConfigValidationError,
    load_run_config,
    apply_defaults,
    validate_run_config,
    print_config_summary,
)

DEFAULT_INSTANCE = "examples/custom.spp"


def build_parser() -> argparse.ArgumentParser:
    """Argument parser of the npga command."""
    parser = argparse.ArgumentParser(
        prog="npga",
        description="Hybrid steady state genetic algorithm for the Set Partitioning Problem",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  npga examples/custom_run.yaml                  # Run an experiment from YAML
  npga --config examples/custom_run.yaml         # Same, explicit flag
  npga --instance examples/custom.spp -t 5       # Run from flags, 5 trials per pair
  npga --instance data.spp --seed 42 --plots     # Reproducible run with plots
  npga examples/custom_run.yaml --summary        # Print the configuration only
        """
    )

    parser.add_argument('config_file', nargs='?', help='Run configuration YAML file')
    parser.add_argument('--config', '-c', dest='config_flag', help='Run configuration YAML file')
    parser.add_argument('--instance', '-i', help=f'SPP instance file (default: {DEFAULT_INSTANCE})')
    parser.add_argument('--penalty-factor', type=float, help='Penalty multiplier (default: 1)')
    parser.add_argument('--trials', '-t', type=int, metavar='N', help='Runs per strategy pair')
    parser.add_argument('--pop-size', type=int, help='Population size')
    parser.add_argument('--generations', '-g', type=int, help='Number of generations')
    parser.add_argument('--improvements', type=int, help='Local search passes per solution')
    parser.add_argument('--sel-rate', type=float, help='Fraction of population selected per generation')
    parser.add_argument('--x-rate', type=float, help='Crossover probability per candidate')
    parser.add_argument('--improvement', nargs='+', choices=['best', 'first'],
                        help='Improvement strategies to sweep')
    parser.add_argument('--row-selection', nargs='+', choices=['max', 'random'],
                        help='Row selection strategies to sweep')
    parser.add_argument('--seed', type=int, help='Random seed')
    parser.add_argument('--output', '-o', help='Output directory')
    parser.add_argument('--overwrite', action='store_true', help='Overwrite the output directory')
    parser.add_argument('--plots', action='store_true', help='Save report and convergence plots')
    parser.add_argument('--summary', action='store_true', help='Print the configuration and exit')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')

    return parser


def config_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Build a run configuration from parsed arguments.

    Flags override values loaded from a YAML file.

    Raises:
        ConfigValidationError: If both a positional and a --config file are given
    """
    if args.config_file and args.config_flag:
        raise ConfigValidationError("Specify the configuration file only once")

    config_path = args.config_file or args.config_flag
    config: Dict[str, Any] = load_run_config(config_path) if config_path else {}

    if args.instance:
        config['instance'] = args.instance
    config.setdefault('instance', DEFAULT_INSTANCE)

    if args.penalty_factor is not None:
        config['penalty_factor'] = args.penalty_factor
    if args.trials is not None:
        config['trials'] = args.trials
    if args.seed is not None:
        config['random_seed'] = args.seed

    algorithm = config.setdefault('algorithm', {})
    for key, value in (('pop_size', args.pop_size), ('generations', args.generations),
                       ('improvements', args.improvements), ('sel_rate', args.sel_rate),
                       ('x_rate', args.x_rate)):
        if value is not None:
            algorithm[key] = value

    strategies = config.setdefault('strategies', {})
    if args.improvement:
        strategies['improvement'] = args.improvement
    if args.row_selection:
        strategies['row_selection'] = args.row_selection

    output = config.setdefault('output', {})
    if args.output:
        output['root'] = args.output
    if 'root' not in output:
        output['root'] = f"output/{Path(config['instance']).stem}"
    if args.overwrite:
        output['overwrite'] = True
    if args.plots:
        output['plots'] = True

    return config


def run_from_config(config: Dict[str, Any]):
    """
    Validate a run configuration and execute the experiment.

    Args:
        config: Run configuration

    Returns:
        Report rows of the experiment

    Raises:
        ConfigValidationError: If config is invalid
        Various exceptions from the experiment
    """
    print("Validating configuration...")
    config = apply_defaults(config)
    validate_run_config(config)

    from .orchestration import run_experiment
    rows = run_experiment(config)

    print("\n✅ Run completed successfully!")
    return rows


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the npga CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        config = config_from_args(args)
        if args.summary:
            print_config_summary(apply_defaults(config))
            return 0
        run_from_config(config)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return 1
    except Exception as e:
        print(f"\nError: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
