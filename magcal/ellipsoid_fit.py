"""
Least-Squares Ellipsoid Fitting

Fits the general quadric

    a*x^2 + b*y^2 + c*z^2 + 2d*xy + 2e*xz + 2f*yz + 2g*x + 2h*y + 2i*z = 1

to a magnetometer point cloud. Fixing the right-hand side to 1 is the same as
assuming the constant term of the quadric is -1, which leaves 9 unknowns
solved from the normal equations

    (D^T D) v = D^T 1

with one design-matrix row D_k = [x^2, y^2, z^2, 2xy, 2xz, 2yz, 2x, 2y, 2z]
per sample. The fit is closed-form: no random initialisation, no iteration,
so identical input always gives identical coefficients.

References:
- Ellipsoid fit: http://www.mathworks.com/matlabcentral/fileexchange/24693-ellipsoid-fit
"""

import logging
from typing import Iterable, Sequence, Union

import numpy as np

from .config import MIN_FIT_SAMPLES
from .errors import InsufficientSamples
from .linalg import solve_checked
from .schema import QuadricCoefficients

logger = logging.getLogger(__name__)


def as_sample_array(samples: Union[np.ndarray, Iterable[Sequence[float]]]) -> np.ndarray:
    """Coerce a sample collection to an [N, 3] float array."""
    if not isinstance(samples, np.ndarray):
        samples = list(samples)
    data = np.asarray(samples, dtype=float)
    if data.size == 0:
        return np.empty((0, 3))
    if data.ndim != 2 or data.shape[1] != 3:
        raise ValueError(f"Expected [N, 3] samples, got shape {data.shape}")
    return data


def design_matrix(data: np.ndarray) -> np.ndarray:
    """[N, 9] design matrix of the quadric fit."""
    x, y, z = data[:, 0], data[:, 1], data[:, 2]
    return np.column_stack([
        x * x,
        y * y,
        z * z,
        2.0 * x * y,
        2.0 * x * z,
        2.0 * y * z,
        2.0 * x,
        2.0 * y,
        2.0 * z,
    ])


def fit_ellipsoid(samples) -> QuadricCoefficients:
    """
    Fit a general quadric to magnetometer samples.

    Args:
        samples: [N, 3] array, SampleStore or iterable of (x, y, z)

    Returns:
        QuadricCoefficients a..i

    Raises:
        InsufficientSamples: fewer than 9 samples
        SingularSystemError: D^T D is not invertible (samples coplanar,
            collinear or otherwise degenerate)
    """
    data = as_sample_array(samples)
    n = len(data)
    if n < MIN_FIT_SAMPLES:
        raise InsufficientSamples(n, MIN_FIT_SAMPLES)

    D = design_matrix(data)
    DtD = D.T @ D
    Dt1 = D.sum(axis=0)  # D^T @ ones

    v = solve_checked(DtD, Dt1, "normal equations of the ellipsoid fit")
    logger.debug("Fitted quadric to %d samples: %s", n, np.array2string(v, precision=6))

    return QuadricCoefficients.from_array(v)


def quadric_residuals(samples, coefficients: QuadricCoefficients) -> np.ndarray:
    """Algebraic residual D @ v - 1 of each sample (zero on the surface)."""
    data = as_sample_array(samples)
    return design_matrix(data) @ coefficients.as_array() - 1.0
