"""
Calibration plots: uncompensated vs compensated sample clouds.
"""

from pathlib import Path
from typing import Optional, Union

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from .config import MAG_UNIT

PROJECTIONS = (('XY', 0, 1), ('XZ', 0, 2), ('YZ', 1, 2))


def plot_calibration(raw_data: np.ndarray, cal_data: Optional[np.ndarray] = None,
                     output_path: Optional[Union[str, Path]] = None):
    """
    Visualize raw vs calibrated magnetometer data.

    Three planar projections (raw red, compensated blue, equal aspect) plus a
    magnitude histogram. The figure is saved if output_path is given and
    returned either way.
    """
    fig, axes = plt.subplots(1, 4, figsize=(20, 5))

    for ax, (name, i, j) in zip(axes, PROJECTIONS):
        ax.scatter(raw_data[:, i], raw_data[:, j], c='red', marker='x', s=8,
                   label='Uncompensated')
        if cal_data is not None:
            ax.scatter(cal_data[:, i], cal_data[:, j], c='blue', marker='x', s=8,
                       label='Compensated')
        ax.set_xlabel(f'{name[0]} ({MAG_UNIT})')
        ax.set_ylabel(f'{name[1]} ({MAG_UNIT})')
        ax.set_title(name)
        ax.set_aspect('equal', adjustable='datalim')
        ax.grid(True, alpha=0.3)
        ax.legend(loc='upper right', fontsize=8)

    ax = axes[3]
    raw_mags = np.linalg.norm(raw_data, axis=1)
    mags = [raw_mags]
    if cal_data is not None:
        cal_mags = np.linalg.norm(cal_data, axis=1)
        mags.append(cal_mags)
    # Shared edges; a near-perfect calibration has no spread of its own to bin
    all_mags = np.concatenate(mags)
    lo, hi = all_mags.min(), all_mags.max()
    if np.isclose(lo, hi):
        lo, hi = lo - 0.5, hi + 0.5
    edges = np.histogram_bin_edges(all_mags, bins=50, range=(lo, hi))
    ax.hist(raw_mags, bins=edges, alpha=0.5, color='red', label=f'Raw (σ={np.std(raw_mags):.2f})')
    if cal_data is not None:
        ax.hist(cal_mags, bins=edges, alpha=0.5, color='blue',
                label=f'Compensated (σ={np.std(cal_mags):.2f})')
    ax.set_xlabel(f'Magnitude ({MAG_UNIT})')
    ax.set_ylabel('Count')
    ax.set_title('Magnitude Distribution')
    ax.legend()

    fig.tight_layout()

    if output_path:
        fig.savefig(output_path, dpi=150)

    return fig
