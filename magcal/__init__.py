"""
Magnetometer Ellipsoid Calibration

Modules:
    schema - Sample, quadric and calibration result data structures
    sample_store - Ordered sample collection and sample text files
    ellipsoid_fit - Least-squares quadric fit
    solver - Quadric to hard-iron center + soft-iron compensation
    compensation - Applying a calibration to raw readings
    session - Calibration session (state owner, lazy/eager recompute)
"""

from .errors import (
    CalibrationError,
    InsufficientSamples,
    FormatError,
    IoError,
    SingularSystemError,
    NonEllipsoidError,
)
from .schema import Sample, QuadricCoefficients, CalibrationResult, MagCalibrationConfig
from .sample_store import SampleStore
from .ellipsoid_fit import fit_ellipsoid
from .solver import solve_calibration
from .compensation import apply_compensation, apply_compensation_array, validate_calibration
from .session import CalibrationSession, SessionState

__all__ = [
    'CalibrationError',
    'InsufficientSamples',
    'FormatError',
    'IoError',
    'SingularSystemError',
    'NonEllipsoidError',
    'Sample',
    'QuadricCoefficients',
    'CalibrationResult',
    'MagCalibrationConfig',
    'SampleStore',
    'fit_ellipsoid',
    'solve_calibration',
    'apply_compensation',
    'apply_compensation_array',
    'validate_calibration',
    'CalibrationSession',
    'SessionState',
]
