"""
Calibration Errors

Every failure of the calibration engine is raised as a subclass of
CalibrationError, so callers embedding a session can catch one type.
"""

from typing import Optional


class CalibrationError(Exception):
    """Base class for magnetometer calibration failures."""


class InsufficientSamples(CalibrationError, ValueError):
    """Fit attempted on fewer samples than a general quadric needs."""

    def __init__(self, count: int, required: int):
        super().__init__(f"Need at least {required} samples for an ellipsoid fit, got {count}")
        self.count = count
        self.required = required


class FormatError(CalibrationError, ValueError):
    """Malformed line in a sample text file."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class IoError(CalibrationError, OSError):
    """Sample file could not be read or written."""


class SingularSystemError(CalibrationError, ArithmeticError):
    """A linear system required by the fit or the centering step is singular."""


class NonEllipsoidError(CalibrationError, ArithmeticError):
    """The fitted quadric is not a proper ellipsoid."""

    def __init__(self, message: str, eigenvalues=None):
        super().__init__(message)
        self.eigenvalues = eigenvalues
