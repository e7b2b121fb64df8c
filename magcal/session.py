"""
Magnetometer Calibration Session

Owns the sample store and the most recent calibration result. The session is
the only holder of calibration state; there is nothing process-wide.

State machine:

    EMPTY --add/load--> COLLECTING --recalculate--> FITTED
      ^                                               |
      +------------------- clear() -------------------+

Adding or loading samples after a fit does NOT invalidate the cached result.
The result only changes on clear() or an explicit recalculate(); `stale`
reports whether the samples changed since the last successful fit.

Rendering collaborators are never driven from here. They either poll
consume_updated() on their own schedule or subscribe() a callback that is
invoked after every successful recalculate() and every clear().
"""

import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence

import numpy as np

from .compensation import apply_compensation, apply_compensation_array
from .ellipsoid_fit import fit_ellipsoid
from .errors import CalibrationError
from .sample_store import PathLike, SampleStore
from .schema import CalibrationResult, MagCalibrationConfig, Sample
from .solver import solve_calibration

logger = logging.getLogger(__name__)

Listener = Callable[['CalibrationSession'], None]


class SessionState(str, Enum):
    """Lifecycle of a calibration session."""
    EMPTY = "empty"              # No samples, no result
    COLLECTING = "collecting"    # Samples present, nothing fitted yet
    FITTED = "fitted"            # A calibration result is cached


class CalibrationSession:
    """
    Calibration workflow for one magnetometer.

    Handles:
    - Sample collection (live add() or bulk load())
    - Ellipsoid fit + solve, eagerly via recalculate() or lazily via get_or_compute()
    - Applying the cached result to new raw readings
    """

    def __init__(self, samples: Iterable[Sequence[float]] = ()):
        self._store = SampleStore(samples)
        self._result: Optional[CalibrationResult] = None
        self._stale = False
        self._updated = False
        self._listeners: List[Listener] = []

    def __repr__(self) -> str:
        return f"CalibrationSession({self.state.value}, {len(self._store)} samples)"

    # ----- state -----

    @property
    def store(self) -> SampleStore:
        return self._store

    @property
    def result(self) -> Optional[CalibrationResult]:
        """Cached result, or None if nothing has been fitted since the last clear()."""
        return self._result

    @property
    def state(self) -> SessionState:
        if self._result is not None:
            return SessionState.FITTED
        if len(self._store) > 0:
            return SessionState.COLLECTING
        return SessionState.EMPTY

    @property
    def stale(self) -> bool:
        """True when samples changed after the cached result was computed."""
        return self._result is not None and self._stale

    def __len__(self) -> int:
        return len(self._store)

    # ----- result-updated signal -----

    def subscribe(self, listener: Listener):
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener):
        self._listeners.remove(listener)

    def consume_updated(self) -> bool:
        """Return and reset the dirty flag set when the result changes."""
        updated = self._updated
        self._updated = False
        return updated

    def _notify(self):
        self._updated = True
        for listener in list(self._listeners):
            listener(self)

    # ----- samples -----

    def add(self, sample: Sequence[float]) -> Sample:
        """Append one raw reading from the telemetry stream."""
        s = self._store.add(sample)
        self._stale = True
        return s

    def extend(self, samples: Iterable[Sequence[float]]):
        self._store.extend(samples)
        self._stale = True

    def clear(self):
        """Drop all samples and the cached result."""
        self._store.clear()
        self._result = None
        self._stale = False
        logger.info("Calibration session cleared")
        self._notify()

    def load(self, path: PathLike) -> int:
        """Replace the samples with a sample file (all-or-nothing)."""
        n = self._store.load_from_text(path)
        self._stale = True
        return n

    def save(self, path: PathLike):
        self._store.save_to_text(path)

    # ----- calibration -----

    def recalculate(self) -> CalibrationResult:
        """
        Fit and solve from the current samples.

        On failure the error propagates and the previously cached result,
        if any, is kept.

        Raises:
            InsufficientSamples, SingularSystemError, NonEllipsoidError
        """
        try:
            coefficients = fit_ellipsoid(self._store.as_array())
            result = solve_calibration(coefficients)
        except CalibrationError as e:
            logger.warning("Calibration with %d samples failed: %s", len(self._store), e)
            raise

        self._result = result
        self._stale = False
        logger.info("Calibrated from %d samples: center %s, sphere radius %.3f",
                    len(self._store), np.array2string(result.center, precision=3),
                    result.sphere_radius)
        self._notify()
        return result

    def get_or_compute(self) -> CalibrationResult:
        """Cached result if present, otherwise recalculate()."""
        if self._result is not None:
            return self._result
        return self.recalculate()

    def compensate(self, sample: Sequence[float]) -> Sample:
        """Calibrate one raw reading with the (lazily computed) result."""
        return apply_compensation(sample, self.get_or_compute())

    def compensated_samples(self) -> np.ndarray:
        """All stored samples after compensation, as an [N, 3] array."""
        return apply_compensation_array(self._store.as_array(), self.get_or_compute())

    def config_record(self) -> MagCalibrationConfig:
        """The 12 values for the vehicle configuration record."""
        return MagCalibrationConfig.from_result(self.get_or_compute())
