"""
Magnetometer Calibration Data Schema

Defines the data structures passed between the calibration stages:

    Sample               raw or calibrated (x, y, z) reading
    QuadricCoefficients  least-squares quadric fit (9 coefficients)
    CalibrationResult    hard-iron center + soft-iron compensation matrix
    MagCalibrationConfig the 12 named values of the vehicle configuration record

Calibration model:
    m_cal = C @ (m_raw - c)

Where:
    c = hard-iron bias (3-vector) - the ellipsoid center
    C = soft-iron compensation (3x3 symmetric matrix)
"""

from dataclasses import dataclass, asdict, fields
from typing import Dict, List, NamedTuple, Sequence

import numpy as np

from .config import CONFIG_FIELD_NAMES


class Sample(NamedTuple):
    """Single 3-axis magnetic field reading (µT or any consistent unit)."""
    x: float
    y: float
    z: float

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> 'Sample':
        x, y, z = values
        return cls(float(x), float(y), float(z))


@dataclass(frozen=True)
class QuadricCoefficients:
    """
    Coefficients of the general second-degree surface

        a*x^2 + b*y^2 + c*z^2 + 2d*xy + 2e*xz + 2f*yz + 2g*x + 2h*y + 2i*z = 1
    """
    a: float
    b: float
    c: float
    d: float
    e: float
    f: float
    g: float
    h: float
    i: float

    def as_array(self) -> np.ndarray:
        return np.array([getattr(self, f.name) for f in fields(self)], dtype=float)

    @classmethod
    def from_array(cls, v: Sequence[float]) -> 'QuadricCoefficients':
        if len(v) != 9:
            raise ValueError(f"Expected 9 quadric coefficients, got {len(v)}")
        return cls(*(float(x) for x in v))

    def quadric_matrix(self) -> np.ndarray:
        """Homogeneous 4x4 symmetric matrix of the quadric (constant term -1)."""
        return np.array([
            [self.a, self.d, self.e, self.g],
            [self.d, self.b, self.f, self.h],
            [self.e, self.f, self.c, self.i],
            [self.g, self.h, self.i, -1.0],
        ])


@dataclass(eq=False)
class CalibrationResult:
    """Magnetometer calibration parameters."""
    center: np.ndarray         # hard-iron bias, 3-vector
    compensation: np.ndarray   # soft-iron correction, 3x3 symmetric
    radii: np.ndarray          # ellipsoid semi-axes, ascending-eigenvalue order

    def __post_init__(self):
        self.center = np.asarray(self.center, dtype=float).reshape(3)
        self.compensation = np.asarray(self.compensation, dtype=float).reshape(3, 3)
        self.radii = np.asarray(self.radii, dtype=float).reshape(3)

    @property
    def sphere_radius(self) -> float:
        """Radius of the sphere the compensated samples land on."""
        return float(np.min(self.radii))

    def config_values(self) -> List[float]:
        """Center (x, y, z) followed by the compensation matrix row-major."""
        return self.center.tolist() + self.compensation.flatten().tolist()

    def to_dict(self) -> dict:
        return {
            'center': self.center.tolist(),
            'compensation': self.compensation.tolist(),
            'radii': self.radii.tolist(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> 'CalibrationResult':
        return cls(
            center=np.array(d['center']),
            compensation=np.array(d['compensation']),
            radii=np.array(d['radii']),
        )


@dataclass
class MagCalibrationConfig:
    """
    Magnetometer calibration block of the vehicle configuration record.

    Only the values are produced here; serialising and transmitting the
    enclosing record is the job of the configuration collaborator.
    """
    mag_cal_cx: float = 0.0
    mag_cal_cy: float = 0.0
    mag_cal_cz: float = 0.0
    mag_cal_xx: float = 1.0
    mag_cal_xy: float = 0.0
    mag_cal_xz: float = 0.0
    mag_cal_yx: float = 0.0
    mag_cal_yy: float = 1.0
    mag_cal_yz: float = 0.0
    mag_cal_zx: float = 0.0
    mag_cal_zy: float = 0.0
    mag_cal_zz: float = 1.0

    @classmethod
    def from_result(cls, result: CalibrationResult) -> 'MagCalibrationConfig':
        return cls(**dict(zip(CONFIG_FIELD_NAMES, result.config_values())))

    def values(self) -> List[float]:
        return [getattr(self, name) for name in CONFIG_FIELD_NAMES]

    def center(self) -> np.ndarray:
        return np.array(self.values()[:3])

    def compensation(self) -> np.ndarray:
        return np.array(self.values()[3:]).reshape(3, 3)

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)
