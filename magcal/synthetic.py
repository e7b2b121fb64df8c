"""
Synthetic Magnetometer Samples

Generates point clouds lying on a known ellipsoid, i.e. what a magnetometer
with a given hard-iron bias and soft-iron distortion reports while it is
rotated through all orientations.

Usage:
    from magcal.synthetic import generate_ellipsoid_samples

    samples = generate_ellipsoid_samples(
        center=[12.0, -7.0, 9.0],
        radii=[60.0, 45.0, 38.0],
        rotation=Rotation.from_euler('xyz', [20, -35, 50], degrees=True),
    )
"""

from typing import Optional, Sequence

import numpy as np
from scipy.spatial.transform import Rotation

# Default distortion used by the CLI demo: ~50 µT field, strong soft iron
DEMO_CENTER = (12.5, -8.0, 15.0)
DEMO_RADII = (58.0, 47.0, 39.0)
DEMO_EULER_DEG = (25.0, -40.0, 65.0)


def fibonacci_sphere(n: int) -> np.ndarray:
    """n roughly evenly spread unit vectors, deterministic."""
    k = np.arange(n) + 0.5
    polar = np.arccos(1.0 - 2.0 * k / n)
    azimuth = np.pi * (1.0 + np.sqrt(5.0)) * k
    return np.column_stack([
        np.cos(azimuth) * np.sin(polar),
        np.sin(azimuth) * np.sin(polar),
        np.cos(polar),
    ])


def generate_ellipsoid_samples(center: Sequence[float],
                               radii: Sequence[float],
                               rotation: Optional[Rotation] = None,
                               n: int = 500,
                               noise: float = 0.0,
                               seed: Optional[int] = None) -> np.ndarray:
    """
    Sample points on an ellipsoid.

    Args:
        center: Ellipsoid center (hard-iron bias)
        radii: Semi-axis lengths along the rotated x, y, z axes
        rotation: Orientation of the semi-axes (identity if None)
        n: Number of samples
        noise: Std of additive Gaussian noise per axis
        seed: Seed for the noise generator

    Returns:
        [n, 3] array of samples
    """
    unit = fibonacci_sphere(n)
    points = unit * np.asarray(radii, dtype=float)
    if rotation is not None:
        points = rotation.apply(points)
    points = points + np.asarray(center, dtype=float)

    if noise > 0:
        rng = np.random.default_rng(seed)
        points = points + rng.normal(0.0, noise, size=points.shape)

    return points


def demo_samples(n: int = 500, noise: float = 0.0, seed: Optional[int] = 0) -> np.ndarray:
    """Samples from the built-in demo distortion."""
    rotation = Rotation.from_euler('xyz', DEMO_EULER_DEG, degrees=True)
    return generate_ellipsoid_samples(DEMO_CENTER, DEMO_RADII, rotation, n=n, noise=noise, seed=seed)
