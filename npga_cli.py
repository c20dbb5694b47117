#!/usr/bin/env python3
"""
H-SSGA ROW CLI - Minimal entry point.

Runs the hybrid steady state genetic algorithm over every configured
improvement / row selection strategy pair and writes a CSV report.

Usage:
    python3 npga_cli.py run_config.yaml
    python3 npga_cli.py --config run_config.yaml
    python3 npga_cli.py --instance instance.spp [--trials N] [--seed S]
    python3 npga_cli.py --help

Examples:
    # Sweep all strategies on the bundled instance
    python3 npga_cli.py examples/custom_run.yaml

    # Quick reproducible run from flags
    python3 npga_cli.py --instance examples/custom.spp -t 3 -g 50 --seed 7
"""

import sys
from pathlib import Path

# Add project root to path if needed
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


if __name__ == '__main__':
    from npga.cli import main
    sys.exit(main())
