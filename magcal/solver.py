"""
Hard-Iron + Soft-Iron Calibration Solver

Reduces fitted quadric coefficients to calibration parameters:

1. Center (hard-iron bias): c = -A33^-1 @ [g, h, i]
2. Translate the quadric to the origin with the congruence R = T A T^T,
   where T is the 4x4 identity with c in its last row
3. Shape matrix S = R33 / (-R44); its eigenvalues are 1/r^2 for the
   ellipsoid semi-axes r
4. Compensation C = V diag(r_min / r) V^T, which maps the ellipsoid onto a
   sphere of radius r_min in the original sample frame

Eigenvalues are taken in ascending order (scipy.linalg.eigh), so the radii
come out largest first. The ordering only decides which axis gets which
radius label; C does not depend on it.
"""

import logging

import numpy as np

from .errors import NonEllipsoidError
from .linalg import solve_checked, symmetric_eigen
from .schema import CalibrationResult, QuadricCoefficients

logger = logging.getLogger(__name__)


def ellipsoid_center(A: np.ndarray) -> np.ndarray:
    """Center of the quadric given its homogeneous 4x4 matrix."""
    return -solve_checked(A[:3, :3], A[:3, 3], "quadric shape block")


def translate_quadric(A: np.ndarray, center: np.ndarray) -> np.ndarray:
    """Express the quadric in coordinates centered on `center`."""
    T = np.eye(4)
    T[3, :3] = center
    return T @ A @ T.T


def solve_calibration(coefficients: QuadricCoefficients) -> CalibrationResult:
    """
    Derive hard-iron center and soft-iron compensation from a quadric fit.

    Args:
        coefficients: Output of fit_ellipsoid()

    Returns:
        CalibrationResult with center, compensation and radii

    Raises:
        SingularSystemError: the 3x3 shape block cannot be inverted
        NonEllipsoidError: the quadric is not a proper ellipsoid
    """
    A = coefficients.quadric_matrix()

    center = ellipsoid_center(A)
    R = translate_quadric(A, center)

    r44 = R[3, 3]
    if r44 == 0.0 or not np.isfinite(r44):
        raise NonEllipsoidError(f"Degenerate quadric: translated constant term is {r44}")

    S = R[:3, :3] / -r44
    eigenvalues, eigenvectors = symmetric_eigen(S)

    if np.any(eigenvalues <= 0):
        raise NonEllipsoidError(
            f"Fitted quadric is not an ellipsoid (eigenvalues {np.array2string(eigenvalues, precision=6)})",
            eigenvalues=eigenvalues,
        )

    radii = np.sqrt(1.0 / eigenvalues)
    scale = np.diag(np.min(radii) / radii)
    compensation = eigenvectors @ scale @ eigenvectors.T

    logger.debug("Center %s, radii %s",
                 np.array2string(center, precision=4), np.array2string(radii, precision=4))

    return CalibrationResult(center=center, compensation=compensation, radii=radii)
