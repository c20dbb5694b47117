"""
I/O utilities for the genetic algorithm toolkit.

Handles SPP instance parsing/serialization, CSV report writing, solution
files, YAML metadata sidecars and output folder management.
"""

import csv
import re
from pathlib import Path
from typing import Optional, Union
from datetime import datetime
import yaml

from .bitset import BitVector
from .data_models import SPPInstance, ReportRow
from .errors import ConfigurationError

NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?")


def parse_spp(text: str, name: str = "instance") -> SPPInstance:
    """
    Parse the text of an SPP instance.

    Format:
        <rows> <columns>
        <cost> <count> <row_1> ... <row_count>
        ...

    One line per column; rows are 1-based in the file and 0-based in the
    returned instance. Lines without numbers are ignored.

    Args:
        text: Raw instance text
        name: Instance name

    Returns:
        SPPInstance with the parsed data

    Raises:
        ConfigurationError: If the header is missing, a set's declared size
            differs from its row list, or the column count is wrong
    """
    lines = text.splitlines()
    header = NUMBER_PATTERN.findall(lines[0]) if lines else []
    if len(header) < 2:
        raise ConfigurationError("Missing '<rows> <columns>' header line")

    rows = int(float(header[0]))
    columns = int(float(header[1]))

    costs = []
    sets = []
    for line_number, line in enumerate(lines[1:], start=2):
        values = NUMBER_PATTERN.findall(line)
        if not values:
            continue

        if len(values) < 2:
            raise ConfigurationError(
                f"Line {line_number}: expected '<cost> <count> <rows...>'"
            )

        cost = float(values[0])
        declared = int(float(values[1]))
        members = [int(float(v)) - 1 for v in values[2:]]

        if len(members) != declared:
            raise ConfigurationError(
                f"Line {line_number}: number of rows in set ({len(members)}) "
                f"differs from specified ({declared})"
            )

        costs.append(cost)
        sets.append(members)

    if columns != len(sets):
        raise ConfigurationError(
            f"The actual number of sets ({len(sets)}) is not the specified ({columns})"
        )

    return SPPInstance(rows=rows, sets=sets, costs=costs, name=name)


def load_spp_instance(spp_path: Union[str, Path]) -> SPPInstance:
    """
    Load an SPP instance file.

    Args:
        spp_path: Path to the .spp file

    Returns:
        SPPInstance named after the file stem

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the file content is invalid
    """
    spp_path = Path(spp_path)

    if not spp_path.exists():
        raise FileNotFoundError(f"Instance file not found: {spp_path}")

    with open(spp_path, 'r') as f:
        instance = parse_spp(f.read(), name=spp_path.stem)

    instance.path = spp_path
    return instance


def format_cost(cost: float) -> str:
    return str(int(cost)) if float(cost).is_integer() else str(cost)


def save_spp_instance(
    instance: SPPInstance,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save an SPP instance in the .spp text format.

    Args:
        instance: Instance to save
        output_path: Path for output file
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved file

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        f.write(f"{instance.rows} {instance.columns}\n")
        for cost, rows in zip(instance.costs, instance.sets):
            members = " ".join(str(r + 1) for r in rows)
            f.write(f"{format_cost(cost)} {len(rows)} {members}".rstrip() + "\n")

    return output_path


def save_report_csv(
    report_rows: list[ReportRow],
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save aggregated experiment results to CSV.

    Columns: Params,hMin,hMax,hAvg,tAvg,F?

    Args:
        report_rows: ReportRow objects, one per strategy pair
        output_path: Path for output CSV
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved report

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Report already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=ReportRow.FIELDNAMES)
        writer.writeheader()
        for row in report_rows:
            writer.writerow(row.to_dict())

    return output_path


def load_report_csv(report_path: Union[str, Path]) -> list[ReportRow]:
    """
    Load a report written by save_report_csv.

    Raises:
        FileNotFoundError: If the report doesn't exist
        ValueError: If the header is not the report header
    """
    report_path = Path(report_path)

    if not report_path.exists():
        raise FileNotFoundError(f"Report not found: {report_path}")

    with open(report_path, 'r', newline='') as f:
        reader = csv.DictReader(f)
        if reader.fieldnames != ReportRow.FIELDNAMES:
            raise ValueError(
                f"Invalid report format in {report_path}. "
                f"Expected columns: {','.join(ReportRow.FIELDNAMES)}"
            )
        return [ReportRow.from_dict(row) for row in reader]


def save_solution(
    solution: BitVector,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save a solution as its literal bit string.

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Output file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(solution.to_string() + "\n")

    return output_path


def load_solution(solution_path: Union[str, Path]) -> BitVector:
    """
    Load a solution saved by save_solution.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a bit string
    """
    solution_path = Path(solution_path)

    if not solution_path.exists():
        raise FileNotFoundError(f"Solution file not found: {solution_path}")

    return BitVector.from_string(solution_path.read_text())


def report_file_name(instance_name: str) -> str:
    """Report file name for an instance, e.g. custom.SSGAROWReport.csv."""
    return f"{instance_name}.SSGAROWReport.csv"


def prepare_output_root(root: Union[str, Path], overwrite: bool = False) -> Path:
    """
    Create the output directory of a run.

    Raises:
        FileExistsError: If the directory exists and overwrite=False
    """
    root = Path(root)

    if root.exists() and not overwrite:
        raise FileExistsError(
            f"Output directory already exists: {root}\n"
            f"Set 'output.overwrite: true' in config to overwrite"
        )

    root.mkdir(parents=True, exist_ok=overwrite)
    return root


def save_metadata(
    metadata: dict,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Save metadata to YAML sidecar file.

    Args:
        metadata: Metadata dictionary
        output_path: Path for output YAML
        overwrite: If True, overwrite existing file

    Returns:
        Path to saved metadata file

    Raises:
        FileExistsError: If file exists and overwrite=False
    """
    output_path = Path(output_path)

    if output_path.exists() and not overwrite:
        raise FileExistsError(f"Metadata file already exists: {output_path}")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    metadata = dict(metadata)
    metadata.setdefault('saved_at', datetime.now().isoformat())

    with open(output_path, 'w') as f:
        yaml.dump(metadata, f, default_flow_style=False, sort_keys=False)

    return output_path


def validate_spp_format(spp_path: Union[str, Path]) -> tuple[bool, Optional[str]]:
    """
    Validate that a file is a well-formed SPP instance.

    Args:
        spp_path: Path to instance file

    Returns:
        Tuple of (is_valid, error_message)
    """
    spp_path = Path(spp_path)

    if not spp_path.exists():
        return False, f"File not found: {spp_path}"

    try:
        instance = load_spp_instance(spp_path)
    except ConfigurationError as e:
        return False, str(e)

    for j, rows in enumerate(instance.sets):
        bad = [r for r in rows if not 0 <= r < instance.rows]
        if bad:
            return False, f"Set {j + 1} covers rows outside [1, {instance.rows}]: {[r + 1 for r in bad]}"

    return True, None
