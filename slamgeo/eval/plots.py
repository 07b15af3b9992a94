"""
Visualization utilities for trajectory alignment.

All functions return matplotlib Figure objects for flexible display/saving.
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np


def plot_trajectory_alignment(
    reference: np.ndarray,
    estimate: np.ndarray,
    aligned: Optional[np.ndarray] = None,
    title: str = "Trajectory Alignment",
) -> plt.Figure:
    """
    Plot the top view (x-y) of a ground-truth and an estimated trajectory.

    Args:
        reference: Ground-truth positions, shape (N, 3)
        estimate: Estimated positions before alignment, shape (M, 3)
        aligned: Estimated positions after alignment, shape (M, 3) (optional)
        title: Plot title

    Returns:
        fig: Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=(10, 8))

    ax.plot(
        reference[:, 0],
        reference[:, 1],
        "k-",
        linewidth=2,
        label="Ground Truth",
        zorder=10,
    )
    if len(reference):
        ax.plot(reference[0, 0], reference[0, 1], "go", markersize=10, label="Start", zorder=11)

    ax.plot(
        estimate[:, 0],
        estimate[:, 1],
        linestyle="--",
        color="red",
        linewidth=1.5,
        label="Estimate (raw)",
        alpha=0.7,
    )
    if aligned is not None:
        ax.plot(
            aligned[:, 0],
            aligned[:, 1],
            linestyle="-",
            color="blue",
            linewidth=1.5,
            label="Estimate (aligned)",
            alpha=0.7,
        )

    ax.set_xlabel("X (m)", fontsize=12)
    ax.set_ylabel("Y (m)", fontsize=12)
    ax.set_title(title, fontsize=14, fontweight="bold")
    ax.legend(fontsize=10)
    ax.grid(True, alpha=0.3)
    ax.axis("equal")

    plt.tight_layout()
    return fig


def plot_pose_errors(
    errors_dict: Dict[str, np.ndarray],
    units: Dict[str, str],
    title: str = "Per-pose Errors",
) -> plt.Figure:
    """
    Plot per-pose error series, one subplot per error kind.

    Args:
        errors_dict: {name: errors} e.g. {"translational": ..., "rotational": ...}
        units: {name: unit label} for the y axes
        title: Figure title

    Returns:
        fig: Matplotlib figure
    """
    n = len(errors_dict)
    fig, axes = plt.subplots(n, 1, figsize=(10, 3 * max(n, 1)), sharex=True, squeeze=False)

    for ax, (name, errors) in zip(axes[:, 0], errors_dict.items()):
        ax.plot(np.arange(len(errors)), errors, linewidth=1.2)
        rmse = np.sqrt(np.mean(np.asarray(errors) ** 2)) if len(errors) else np.nan
        ax.axhline(rmse, color="red", linestyle="--", linewidth=1, label=f"RMSE={rmse:.3f}")
        ax.set_ylabel(f"{name} ({units.get(name, '')})", fontsize=11)
        ax.legend(fontsize=9)
        ax.grid(True, alpha=0.3)

    axes[-1, 0].set_xlabel("Pose index", fontsize=11)
    fig.suptitle(title, fontsize=14, fontweight="bold")
    plt.tight_layout()
    return fig


def save_figure(
    fig: plt.Figure,
    out_dir: Union[str, Path],
    name: str,
    formats: Tuple[str, ...] = ("svg", "pdf", "png"),
) -> List[Path]:
    """
    Save figure in multiple formats.

    Args:
        fig: Matplotlib figure to save
        out_dir: Output directory
        name: Base filename (without extension)
        formats: Tuple of format extensions

    Returns:
        paths: List of saved file paths
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    paths = []
    for fmt in formats:
        filepath = out_dir / f"{name}.{fmt}"
        fig.savefig(filepath, dpi=150, bbox_inches="tight")
        paths.append(filepath)

    return paths
