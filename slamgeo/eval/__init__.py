"""
Evaluation and Visualization Module.

Modules:
    metrics: Per-pose trajectory errors (translational, rotational) and stats
    plots: Visualization of aligned trajectories and error series
"""

from .metrics import (
    TrajectoryErrorReport,
    compute_error_stats,
    compute_rotational_errors,
    compute_translational_errors,
    evaluate_trajectory,
)
from .plots import plot_pose_errors, plot_trajectory_alignment, save_figure

__all__ = [
    # Metrics
    "compute_translational_errors",
    "compute_rotational_errors",
    "compute_error_stats",
    "evaluate_trajectory",
    "TrajectoryErrorReport",
    # Plots
    "plot_trajectory_alignment",
    "plot_pose_errors",
    "save_figure",
]
