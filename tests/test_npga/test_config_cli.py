"""
Tests for run configuration, the experiment runner and the CLI.
"""

import unittest
import tempfile
import shutil
import io
from contextlib import redirect_stdout
from pathlib import Path

import yaml

from npga.cli import build_parser, config_from_args, main
from npga.config_loader import (
    ConfigValidationError,
    DEFAULT_RUN_CONFIG,
    apply_defaults,
    validate_run_config,
    load_run_config,
    get_strategies,
    resolve_seed,
    create_problem_from_config,
    config_issues,
    print_config_summary,
)
from npga.io_utils import load_report_csv, load_solution
from npga.orchestration import run_experiment
from npga.strategies import ImprovementStrategy, RowSelectionStrategy

CUSTOM_SPP = """6 8
3 2 1 2
2 2 3 4
4 2 5 6
5 3 1 2 3
3 3 4 5 6
2 2 1 4
6 4 2 3 5 6
1 1 6
"""


class TestRunConfig(unittest.TestCase):
    """Test defaults, validation and loading of run configurations."""

    def setUp(self):
        """Set up temporary directory with an instance file."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.instance_path = self.temp_dir / "tiny.spp"
        self.instance_path.write_text(CUSTOM_SPP)

    def tearDown(self):
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir)

    def valid_config(self):
        """Complete configuration pointing at the temporary instance."""
        return apply_defaults({
            'instance': str(self.instance_path),
            'output': {'root': str(self.temp_dir / "out")},
        })

    def test_apply_defaults_merges_sections(self):
        """Test merging nested sections over the defaults."""
        config = apply_defaults({'algorithm': {'pop_size': 10}, 'trials': 3})

        self.assertEqual(config['algorithm']['pop_size'], 10)
        self.assertEqual(config['algorithm']['generations'], 500)
        self.assertEqual(config['trials'], 3)
        self.assertEqual(config['strategies']['improvement'], ['best', 'first'])
        self.assertEqual(DEFAULT_RUN_CONFIG['algorithm']['pop_size'], 100)

    def test_valid_config(self):
        """Test that a complete configuration passes."""
        validate_run_config(self.valid_config())
        self.assertEqual(config_issues(self.valid_config()), [])

    def test_config_issues_reports_malformed_instance(self):
        """Test that instance file problems are listed as issues."""
        config = self.valid_config()
        self.instance_path.write_text("6 2\n1 3 1 2\n")
        issues = config_issues(config)

        self.assertEqual(len(issues), 1)
        self.assertIn("Invalid instance", issues[0])

        self.instance_path.unlink()
        self.assertIn("not found", config_issues(config)[0])

    def test_summary_lists_issues(self):
        """Test that the summary prints instance issues instead of its size."""
        self.instance_path.write_text("2 1\n1 1 3\n")
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            print_config_summary(self.valid_config())

        self.assertIn("Validation Issues (1)", stdout.getvalue())
        self.assertNotIn("density", stdout.getvalue())

    def test_missing_instance(self):
        """Test rejection of a configuration without instance."""
        config = self.valid_config()
        del config['instance']
        with self.assertRaises(ConfigValidationError):
            validate_run_config(config)

    def test_missing_output_root(self):
        """Test rejection of a configuration without output root."""
        config = apply_defaults({'instance': str(self.instance_path)})
        with self.assertRaises(ConfigValidationError):
            validate_run_config(config)

    def test_invalid_values(self):
        """Test rejection of out-of-range values."""
        cases = [
            ('trials', 0),
            ('penalty_factor', -1),
            ('random_seed', -5),
        ]
        for key, value in cases:
            config = self.valid_config()
            config[key] = value
            with self.assertRaises(ConfigValidationError, msg=key):
                validate_run_config(config)

        for key, value in (('pop_size', 0), ('sel_rate', 0.0), ('x_rate', 1.5)):
            config = self.valid_config()
            config['algorithm'][key] = value
            with self.assertRaises(ConfigValidationError, msg=key):
                validate_run_config(config)

    def test_invalid_strategies(self):
        """Test rejection of unknown or empty strategy lists."""
        config = self.valid_config()
        config['strategies']['improvement'] = ['worst']
        with self.assertRaises(ConfigValidationError):
            validate_run_config(config)

        config = self.valid_config()
        config['strategies']['row_selection'] = []
        with self.assertRaises(ConfigValidationError):
            validate_run_config(config)

    def test_get_strategies(self):
        """Test converting strategy names to enums."""
        improvement, row_selection = get_strategies(self.valid_config())
        self.assertEqual(improvement, [ImprovementStrategy.BEST, ImprovementStrategy.FIRST])
        self.assertEqual(row_selection, [RowSelectionStrategy.MAX, RowSelectionStrategy.RANDOM])

    def test_resolve_seed(self):
        """Test configured and fresh seeds."""
        config = self.valid_config()
        config['random_seed'] = 11
        self.assertEqual(resolve_seed(config), 11)

        config['random_seed'] = None
        self.assertIsInstance(resolve_seed(config), int)

    def test_create_problem(self):
        """Test building the problem from a configuration."""
        config = self.valid_config()
        config['penalty_factor'] = 5
        problem = create_problem_from_config(config)

        self.assertEqual(problem.rows, 6)
        self.assertEqual(problem.n, 8)
        self.assertAlmostEqual(problem.penalty, 3.25 * 5)

    def test_load_run_config_resolves_instance(self):
        """Test resolving the instance next to the config file."""
        config_path = self.temp_dir / "run.yaml"
        with open(config_path, 'w') as f:
            yaml.dump({'instance': 'tiny.spp', 'trials': 2}, f)

        config = load_run_config(config_path)
        self.assertEqual(Path(config['instance']), self.instance_path)
        self.assertEqual(config['trials'], 2)

    def test_load_run_config_errors(self):
        """Test missing, empty and non-mapping files."""
        with self.assertRaises(FileNotFoundError):
            load_run_config(self.temp_dir / "missing.yaml")

        empty = self.temp_dir / "empty.yaml"
        empty.write_text("")
        with self.assertRaises(ConfigValidationError):
            load_run_config(empty)

        listing = self.temp_dir / "list.yaml"
        listing.write_text("- a\n- b\n")
        with self.assertRaises(ConfigValidationError):
            load_run_config(listing)


class TestExperiment(unittest.TestCase):
    """Test the strategy sweep end to end on a small instance."""

    def setUp(self):
        """Set up temporary directory with an instance file."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.instance_path = self.temp_dir / "tiny.spp"
        self.instance_path.write_text(CUSTOM_SPP)

    def tearDown(self):
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir)

    def small_config(self, plots=False):
        """Quick sweep configuration."""
        return {
            'instance': str(self.instance_path),
            'penalty_factor': 5,
            'trials': 2,
            'random_seed': 42,
            'algorithm': {'pop_size': 10, 'generations': 5, 'improvements': 2},
            'output': {'root': str(self.temp_dir / "out"), 'plots': plots},
        }

    def test_run_experiment(self):
        """Test the sweep report, solution and metadata files."""
        with redirect_stdout(io.StringIO()):
            rows = run_experiment(self.small_config())

        self.assertEqual([row.params for row in rows], [
            "is:Best|rss:Max",
            "is:Best|rss:Random",
            "is:First|rss:Max",
            "is:First|rss:Random",
        ])
        for row in rows:
            self.assertLessEqual(row.h_min, row.h_avg)
            self.assertLessEqual(row.h_avg, row.h_max)

        out = self.temp_dir / "out"
        report = load_report_csv(out / "tiny.SSGAROWReport.csv")
        self.assertEqual(len(report), 4)
        self.assertEqual(load_solution(out / "best_solution.txt").size, 8)
        with open(out / "run_metadata.yaml") as f:
            metadata = yaml.safe_load(f)
        self.assertEqual(metadata['random_seed'], 42)
        self.assertEqual(metadata['best']['value'], min(row.h_min for row in rows))

    def test_run_experiment_refuses_existing_output(self):
        """Test that an existing output root is not reused."""
        with redirect_stdout(io.StringIO()):
            run_experiment(self.small_config())
            with self.assertRaises(FileExistsError):
                run_experiment(self.small_config())

    def test_run_experiment_with_plots(self):
        """Test saving report and convergence plots."""
        with redirect_stdout(io.StringIO()):
            run_experiment(self.small_config(plots=True))

        out = self.temp_dir / "out"
        self.assertTrue((out / "report.png").exists())
        self.assertTrue((out / "convergence.png").exists())


class TestCLI(unittest.TestCase):
    """Test argument handling of the npga command."""

    def setUp(self):
        """Set up temporary directory with an instance file."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.instance_path = self.temp_dir / "tiny.spp"
        self.instance_path.write_text(CUSTOM_SPP)
        self.parser = build_parser()

    def tearDown(self):
        """Clean up temporary directory."""
        shutil.rmtree(self.temp_dir)

    def test_config_from_flags(self):
        """Test building a configuration from flags."""
        args = self.parser.parse_args([
            '--instance', 'data/a.spp', '-t', '3', '--seed', '5',
            '--pop-size', '12', '--improvement', 'first', '--plots',
        ])
        config = config_from_args(args)

        self.assertEqual(config['instance'], 'data/a.spp')
        self.assertEqual(config['trials'], 3)
        self.assertEqual(config['random_seed'], 5)
        self.assertEqual(config['algorithm'], {'pop_size': 12})
        self.assertEqual(config['strategies'], {'improvement': ['first']})
        self.assertEqual(config['output']['root'], 'output/a')
        self.assertTrue(config['output']['plots'])

    def test_flags_override_yaml(self):
        """Test that flags take precedence over the YAML file."""
        config_path = self.temp_dir / "run.yaml"
        with open(config_path, 'w') as f:
            yaml.dump({'instance': 'tiny.spp', 'trials': 7,
                       'output': {'root': 'somewhere'}}, f)

        args = self.parser.parse_args([str(config_path), '--trials', '2'])
        config = config_from_args(args)

        self.assertEqual(config['trials'], 2)
        self.assertEqual(config['output']['root'], 'somewhere')
        self.assertEqual(Path(config['instance']), self.instance_path)

    def test_config_given_twice(self):
        """Test rejection of two configuration files."""
        args = self.parser.parse_args(['a.yaml', '--config', 'b.yaml'])
        with self.assertRaises(ConfigValidationError):
            config_from_args(args)

    def test_main_runs_experiment(self):
        """Test a full run through the entry point."""
        out = self.temp_dir / "out"
        with redirect_stdout(io.StringIO()):
            code = main([
                '--instance', str(self.instance_path), '-o', str(out),
                '-t', '1', '-g', '3', '--pop-size', '6', '--seed', '1',
            ])

        self.assertEqual(code, 0)
        self.assertTrue((out / "tiny.SSGAROWReport.csv").exists())

    def test_main_summary(self):
        """Test printing the configuration summary."""
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            code = main(['--instance', str(self.instance_path), '--summary'])

        self.assertEqual(code, 0)
        self.assertIn("CONFIGURATION SUMMARY", stdout.getvalue())
        self.assertIn("6 rows x 8 sets (density 0.396)", stdout.getvalue())

    def test_main_reports_failure(self):
        """Test the exit code and message of a failed run."""
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            code = main([
                '--instance', str(self.temp_dir / "missing.spp"),
                '-o', str(self.temp_dir / "out"),
            ])

        self.assertEqual(code, 1)
        self.assertIn("Error:", stdout.getvalue())


if __name__ == '__main__':
    unittest.main()
