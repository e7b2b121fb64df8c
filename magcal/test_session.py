"""
Test the calibration session state machine.

Covers the lazy get_or_compute() contract, failed recalculations keeping the
previous result, and the no-auto-invalidation staleness policy.
"""

import numpy as np
import pytest

from magcal.errors import FormatError, InsufficientSamples, SingularSystemError
from magcal.schema import MagCalibrationConfig
from magcal.session import CalibrationSession, SessionState
from magcal.synthetic import demo_samples, DEMO_CENTER, DEMO_RADII


@pytest.fixture
def fitted_session():
    session = CalibrationSession(demo_samples(n=200))
    session.recalculate()
    return session


def test_new_session_is_empty():
    session = CalibrationSession()
    assert session.state == SessionState.EMPTY
    assert session.result is None
    assert len(session) == 0


def test_add_moves_to_collecting():
    session = CalibrationSession()
    session.add((1.0, 2.0, 3.0))
    assert session.state == SessionState.COLLECTING


def test_too_few_samples_leave_result_unset():
    session = CalibrationSession(demo_samples(n=8))

    with pytest.raises(InsufficientSamples):
        session.recalculate()
    with pytest.raises(InsufficientSamples):
        session.get_or_compute()

    assert session.result is None
    assert session.state == SessionState.COLLECTING


def test_too_few_samples_keep_previous_result(fitted_session, tmp_path):
    cached = fitted_session.result
    path = tmp_path / 'short.txt'
    path.write_text("1 2 3\n4 5 6\n")

    assert fitted_session.load(path) == 2
    with pytest.raises(InsufficientSamples):
        fitted_session.recalculate()

    assert fitted_session.result is cached
    assert fitted_session.get_or_compute() is cached
    assert fitted_session.state == SessionState.FITTED
    assert fitted_session.stale


def test_recalculate_reaches_fitted(fitted_session):
    assert fitted_session.state == SessionState.FITTED
    np.testing.assert_allclose(fitted_session.result.center, DEMO_CENTER, atol=1e-3)
    assert fitted_session.result.sphere_radius == pytest.approx(min(DEMO_RADII), rel=1e-4)


def test_get_or_compute_is_lazy():
    session = CalibrationSession(demo_samples(n=100))
    first = session.get_or_compute()
    assert session.get_or_compute() is first


def test_adding_samples_keeps_cached_result(fitted_session):
    cached = fitted_session.result
    assert not fitted_session.stale

    fitted_session.add((0.0, 0.0, 0.0))

    assert fitted_session.result is cached
    assert fitted_session.get_or_compute() is cached
    assert fitted_session.state == SessionState.FITTED
    assert fitted_session.stale

    refreshed = fitted_session.recalculate()
    assert refreshed is not cached
    assert not fitted_session.stale


def test_failed_recalculate_keeps_previous_result(fitted_session, tmp_path):
    cached = fitted_session.result

    path = tmp_path / 'planar.txt'
    path.write_text("".join(f"{x} {y} 0\n" for x, y in
                            zip(np.cos(np.arange(20)) * 40, np.sin(np.arange(20)) * 30)))
    fitted_session.load(path)

    with pytest.raises(SingularSystemError):
        fitted_session.recalculate()
    assert fitted_session.result is cached
    assert fitted_session.state == SessionState.FITTED


def test_failed_load_keeps_samples(fitted_session, tmp_path):
    before = fitted_session.store.samples
    path = tmp_path / 'bad.txt'
    path.write_text("1 2 3\n4 5\n")

    with pytest.raises(FormatError):
        fitted_session.load(path)
    assert fitted_session.store.samples == before


def test_clear_discards_everything(fitted_session):
    fitted_session.clear()

    assert fitted_session.state == SessionState.EMPTY
    assert fitted_session.result is None
    assert len(fitted_session.store) == 0

    for sample in demo_samples(n=5):
        fitted_session.add(sample)
    with pytest.raises(InsufficientSamples):
        fitted_session.get_or_compute()


def test_updated_flag_and_listeners():
    session = CalibrationSession(demo_samples(n=50))
    calls = []
    session.subscribe(lambda s: calls.append(s.state))

    assert not session.consume_updated()
    session.recalculate()
    assert session.consume_updated()
    assert not session.consume_updated()

    session.clear()
    assert session.consume_updated()
    assert calls == [SessionState.FITTED, SessionState.EMPTY]


def test_failed_recalculate_does_not_signal():
    session = CalibrationSession(demo_samples(n=3))
    calls = []
    session.subscribe(calls.append)

    with pytest.raises(InsufficientSamples):
        session.recalculate()
    assert calls == []
    assert not session.consume_updated()


def test_save_and_reload(fitted_session, tmp_path):
    path = tmp_path / 'samples.txt'
    fitted_session.save(path)

    other = CalibrationSession()
    assert other.load(path) == len(fitted_session)
    np.testing.assert_allclose(other.recalculate().center, fitted_session.result.center)


def test_compensate_and_config_record(fitted_session):
    calibrated = fitted_session.compensated_samples()
    np.testing.assert_allclose(np.linalg.norm(calibrated, axis=1), min(DEMO_RADII), rtol=1e-4)

    single = fitted_session.compensate(fitted_session.store[0])
    np.testing.assert_allclose(single, calibrated[0])

    record = fitted_session.config_record()
    assert isinstance(record, MagCalibrationConfig)
    assert record.values() == fitted_session.result.config_values()
    np.testing.assert_allclose(record.compensation(), fitted_session.result.compensation)
