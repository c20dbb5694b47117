"""
Orchestration module for the genetic algorithm toolkit.

Implements the strategy sweep experiment: every improvement / row selection
strategy pair is run for a number of trials and summarised in a report.
"""

import time
from typing import Dict, List, Optional, Tuple
from pathlib import Path
import numpy as np

from .config_loader import (
    apply_defaults,
    validate_run_config,
    get_strategies,
    resolve_seed,
    create_problem_from_config,
)
from .data_models import TrialRecord, ReportRow, strategy_label
from .io_utils import (
    prepare_output_root,
    report_file_name,
    save_report_csv,
    save_solution,
    save_metadata,
)
from .spp import SPProblem
from .strategies import ImprovementStrategy, RowSelectionStrategy
from .ssga import ssgarow


def run_trials(
    problem: SPProblem,
    improvement_strategy: ImprovementStrategy,
    row_selection_strategy: RowSelectionStrategy,
    trials: int,
    algorithm: Dict,
    rng: np.random.Generator,
    progress=None
) -> List[TrialRecord]:
    """
    Run the driver repeatedly with one strategy pair.

    Args:
        problem: Problem to solve
        improvement_strategy: Local search improvement strategy
        row_selection_strategy: Local search row selection strategy
        trials: Number of runs
        algorithm: Driver tunables (pop_size, generations, improvements,
            sel_rate, x_rate)
        rng: Random number generator shared by the runs
        progress: Optional callable invoked after every run

    Returns:
        One TrialRecord per run
    """
    params = strategy_label(improvement_strategy, row_selection_strategy)
    records = []

    for trial in range(trials):
        history = []
        start = time.perf_counter()
        s = ssgarow(
            problem,
            pop_size=algorithm['pop_size'],
            gen_n=algorithm['generations'],
            improvements=algorithm['improvements'],
            improvement_strategy=improvement_strategy,
            row_selection_strategy=row_selection_strategy,
            sel_rate=algorithm['sel_rate'],
            x_rate=algorithm['x_rate'],
            rng=rng,
            history=history
        )
        elapsed_ms = (time.perf_counter() - start) * 1000

        records.append(
            TrialRecord(
                params=params,
                trial=trial,
                value=problem.value(s),
                elapsed_ms=elapsed_ms,
                feasible=problem.validate(s),
                solution=s,
                metadata={'history': history}
            )
        )

        if progress is not None:
            progress()

    return records


def run_experiment(run_config: Dict) -> List[ReportRow]:
    """
    Sweep all configured strategy pairs and write the report.

    Args:
        run_config: Run configuration dict from YAML or CLI flags

    Algorithm:
        1. Apply defaults, validate, setup RNG from random_seed
        2. Load the instance and build the SPProblem
        3. For each improvement strategy, for each row selection strategy:
           a. Run `trials` driver runs
           b. Aggregate min/max/avg value, avg time, any-feasible
           c. Print the best solution of the pair
        4. Save <instance>.SSGAROWReport.csv, best_solution.txt and
           run_metadata.yaml into output.root
        5. Optionally save report/convergence plots

    Returns:
        ReportRow per strategy pair
    """
    config = apply_defaults(run_config)
    validate_run_config(config)

    print("=" * 70)
    print("H-SSGA ROW EXPERIMENT")
    print("=" * 70)

    seed = resolve_seed(config)
    print(f"Random seed: {seed}")
    rng = np.random.default_rng(seed)

    print(f"Loading instance from: {config['instance']}")
    problem = create_problem_from_config(config, rng=rng)
    instance_name = Path(config['instance']).stem
    print(f"Instance: {instance_name} ({problem.rows} rows, {problem.n} sets)")

    output_root = prepare_output_root(
        config['output']['root'], config['output'].get('overwrite', False)
    )
    print(f"Output directory: {output_root}\n")

    improvement_strategies, row_selection_strategies = get_strategies(config)
    trials = config['trials']
    algorithm = config['algorithm']

    total = len(improvement_strategies) * len(row_selection_strategies) * trials
    done = 0

    def progress():
        nonlocal done
        done += 1
        if done % 10 == 0 or done == total:
            print(f"  Progress: {done}/{total} runs")

    report_rows = []
    histories = {}
    overall_best: Optional[Tuple[float, TrialRecord]] = None

    for improvement_strategy in improvement_strategies:
        for row_selection_strategy in row_selection_strategies:
            params = strategy_label(improvement_strategy, row_selection_strategy)
            print(f"New parameters -- Improve strategy: {improvement_strategy.label}, "
                  f"Row Select. Strategy: {row_selection_strategy.label}")

            records = run_trials(
                problem, improvement_strategy, row_selection_strategy,
                trials, algorithm, rng, progress
            )
            row = ReportRow.from_trials(params, records)
            report_rows.append(row)

            best_record = min(records, key=lambda r: r.value)
            histories[params] = best_record.metadata['history']
            if overall_best is None or best_record.value < overall_best[0]:
                overall_best = (best_record.value, best_record)

            print(f"  Best solution found is {'' if problem.validate(row.best) else 'in'}"
                  f"feasible: v = {row.h_min} for '{SPProblem.string_solution(row.best)}'")

    overwrite = config['output'].get('overwrite', False)
    report_path = save_report_csv(
        report_rows, output_root / report_file_name(instance_name), overwrite=overwrite
    )

    best_record = overall_best[1]
    solution_path = save_solution(
        best_record.solution, output_root / 'best_solution.txt', overwrite=overwrite
    )

    save_metadata(
        {
            'instance': str(config['instance']),
            'random_seed': seed,
            'penalty_factor': config['penalty_factor'],
            'trials': trials,
            'algorithm': dict(algorithm),
            'best': {
                'params': best_record.params,
                **problem.describe(best_record.solution),
            },
        },
        output_root / 'run_metadata.yaml',
        overwrite=overwrite
    )

    if config['output'].get('plots', False):
        from .visualization import plot_strategy_report, plot_convergence

        plot_strategy_report(report_rows, output_root / 'report.png')
        plot_convergence(histories, output_root / 'convergence.png')
        print(f"  Saved plots: {output_root / 'report.png'}, {output_root / 'convergence.png'}")

    print()
    print("=" * 70)
    print("SUMMARY")
    print("=" * 70)
    print(f"Strategy pairs: {len(report_rows)} x {trials} trials")
    print(f"Best value: {best_record.value:.2f} ({best_record.params})")
    print(f"Report saved at {report_path}")
    print(f"Best solution: {solution_path}")

    return report_rows
