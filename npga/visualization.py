"""
Visualization for experiment results.

Plots the per-strategy value ranges of a report and the convergence of the
population's best and worst values across generations.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import numpy as np

from .data_models import ReportRow


def plot_strategy_report(
    report_rows: List[ReportRow],
    save_path: Optional[Union[str, Path]] = None,
    figsize: Tuple[int, int] = (10, 6)
):
    """
    Bar chart of hMin / hAvg / hMax per strategy pair.

    Feasible pairs get a check mark above their bars.

    Args:
        report_rows: Aggregated results
        save_path: Optional path to save the figure (closed after saving)
        figsize: Figure size (width, height)

    Returns:
        The matplotlib Figure
    """
    fig, ax = plt.subplots(figsize=figsize)

    labels = [row.params for row in report_rows]
    x = np.arange(len(labels))
    width = 0.25

    ax.bar(x - width, [r.h_min for r in report_rows], width, label='hMin', color='seagreen')
    ax.bar(x, [r.h_avg for r in report_rows], width, label='hAvg', color='steelblue')
    ax.bar(x + width, [r.h_max for r in report_rows], width, label='hMax', color='indianred')

    for i, row in enumerate(report_rows):
        if row.feasible:
            ax.annotate('✓', (x[i], row.h_max), ha='center', va='bottom')

    ax.set_xticks(x)
    ax.set_xticklabels(labels, rotation=15)
    ax.set_ylabel('Value (lower is better)')
    ax.set_title('H-SSGA ROW results by strategy')
    ax.legend()
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150)
        plt.close(fig)

    return fig


def plot_convergence(
    histories: Dict[str, List[Tuple[int, float, float]]],
    save_path: Optional[Union[str, Path]] = None,
    figsize: Tuple[int, int] = (10, 6)
):
    """
    Best (solid) and worst (dashed) population values per generation.

    Args:
        histories: Maps a strategy label to (generation, best, worst) tuples
        save_path: Optional path to save the figure (closed after saving)
        figsize: Figure size (width, height)

    Returns:
        The matplotlib Figure
    """
    fig, ax = plt.subplots(figsize=figsize)

    for label, history in histories.items():
        if not history:
            continue
        generations, best, worst = zip(*history)
        line, = ax.plot(generations, best, label=f"{label} best")
        ax.plot(generations, worst, linestyle='--', color=line.get_color(), alpha=0.5)

    ax.set_xlabel('Generation')
    ax.set_ylabel('Value (lower is better)')
    ax.set_title('Population convergence')
    if ax.get_legend_handles_labels()[0]:
        ax.legend()
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150)
        plt.close(fig)

    return fig
