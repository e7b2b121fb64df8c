"""
Checked dense linear algebra for the fixed-size calibration systems.

scipy.linalg.solve raises LinAlgError for exactly singular matrices and only
warns (LinAlgWarning) when the reciprocal condition number drops below
machine precision. Both cases are reported here as SingularSystemError.
"""

import warnings

import numpy as np
import scipy.linalg
from scipy.linalg import LinAlgError, LinAlgWarning

from .errors import SingularSystemError


def solve_checked(A: np.ndarray, b: np.ndarray, what: str = "linear system") -> np.ndarray:
    """
    Solve A @ x = b, refusing singular or numerically singular A.

    Args:
        A: Square coefficient matrix
        b: Right-hand side
        what: Name of the system, used in the error message

    Raises:
        SingularSystemError: A is singular, ill-conditioned or non-finite
    """
    if not (np.all(np.isfinite(A)) and np.all(np.isfinite(b))):
        raise SingularSystemError(f"{what} contains non-finite values")

    with warnings.catch_warnings():
        warnings.simplefilter('error', LinAlgWarning)
        try:
            return scipy.linalg.solve(A, b)
        except LinAlgError as e:
            raise SingularSystemError(f"{what} is singular") from e
        except LinAlgWarning as e:
            raise SingularSystemError(f"{what} is numerically singular: {e}") from e


def symmetric_eigen(S: np.ndarray):
    """
    Eigen-decomposition of a symmetric matrix.

    Returns:
        eigenvalues: ascending order
        eigenvectors: orthonormal, one per column, same order
    """
    S = 0.5 * (S + S.T)
    return scipy.linalg.eigh(S)
