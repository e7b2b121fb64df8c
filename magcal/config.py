"""
Calibration Constants

Authoritative constants for the magnetometer calibration engine and the
vehicle configuration record it feeds.

FIT POLICY:
- A general quadric has 9 free coefficients, so a fit needs at least 9 samples
- Linear systems whose reciprocal condition number falls below machine
  precision are treated as singular rather than solved into noise
- Eigenvalues are reported in ascending order (radii therefore descending)
"""

# ===== Fit =====

MIN_FIT_SAMPLES = 9

# ===== Sample file format =====

SAVE_SEPARATOR = '\t'
FILE_ENCODING = 'utf-8'

MAG_UNIT = 'µT'

# ===== Vehicle configuration record =====

# Field names in the car configuration record, in transmission order:
# center first, then the compensation matrix row-major.
CENTER_FIELD_NAMES = ('mag_cal_cx', 'mag_cal_cy', 'mag_cal_cz')
COMPENSATION_FIELD_NAMES = (
    'mag_cal_xx', 'mag_cal_xy', 'mag_cal_xz',
    'mag_cal_yx', 'mag_cal_yy', 'mag_cal_yz',
    'mag_cal_zx', 'mag_cal_zy', 'mag_cal_zz',
)
CONFIG_FIELD_NAMES = CENTER_FIELD_NAMES + COMPENSATION_FIELD_NAMES
