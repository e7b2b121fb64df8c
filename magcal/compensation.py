"""
Applying a magnetometer calibration.

    m_cal = C @ (m_raw - c)
"""

from typing import Dict, Sequence

import numpy as np

from .schema import CalibrationResult, Sample


def apply_compensation(sample: Sequence[float], result: CalibrationResult) -> Sample:
    """Map one raw sample onto the calibrated sphere."""
    m = result.compensation @ (np.asarray(sample, dtype=float) - result.center)
    return Sample(float(m[0]), float(m[1]), float(m[2]))


def apply_compensation_array(mag_data: np.ndarray, result: CalibrationResult) -> np.ndarray:
    """Vectorised apply_compensation() for an [N, 3] array."""
    centered = np.asarray(mag_data, dtype=float).reshape(-1, 3) - result.center
    return (result.compensation @ centered.T).T


def validate_calibration(raw_data: np.ndarray, cal_data: np.ndarray) -> Dict[str, float]:
    """
    Compute validation metrics for calibration.

    A good calibration leaves calibrated magnitudes nearly constant, so the
    interesting numbers are the calibrated std / CV and the improvement ratio.
    """
    raw_mags = np.linalg.norm(raw_data, axis=1)
    cal_mags = np.linalg.norm(cal_data, axis=1)

    raw_std = float(np.std(raw_mags))
    cal_std = float(np.std(cal_mags))

    return {
        'n_samples': int(len(raw_mags)),
        'raw_mean_magnitude': float(np.mean(raw_mags)),
        'raw_std_magnitude': raw_std,
        'raw_cv': raw_std / float(np.mean(raw_mags)),
        'cal_mean_magnitude': float(np.mean(cal_mags)),
        'cal_std_magnitude': cal_std,
        'cal_cv': cal_std / float(np.mean(cal_mags)),
        'std_improvement_ratio': raw_std / cal_std if cal_std > 0 else float('inf'),
    }
