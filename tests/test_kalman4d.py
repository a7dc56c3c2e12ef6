import pytest

from variolog.kalman2 import KF_A_MEAS_VARIANCE_4D, KF_ACCELBIAS_VARIANCE
from variolog.kalman4d import KalmanFilter4D


def test_initial_configuration():
    kf = KalmanFilter4D(100000.0, 1.0, 800.0, 0.0, 0.0)
    assert kf.a_meas_variance == KF_A_MEAS_VARIANCE_4D
    assert kf.k_adapt == 1.0
    assert (kf.z, kf.v, kf.a, kf.b) == (800.0, 0.0, 0.0, 0.0)
    assert kf.a_bias_variance == KF_ACCELBIAS_VARIANCE


def test_predict_constant_velocity_moves_altitude():
    kf = KalmanFilter4D(1000.0, 1.0, 0.0, 50.0, 0.0)
    kf.predict(2.0)
    assert kf.z == pytest.approx(100.0)
    assert kf.v == pytest.approx(50.0)


def test_zero_acceleration_keeps_bias_variance():
    kf = KalmanFilter4D(100000.0, 1.0, 0.0, 0.0, 0.0)
    kf.predict(0.02)
    kf.update(0.0, 0.0)
    assert kf.a_bias_variance == KF_ACCELBIAS_VARIANCE


def test_large_acceleration_shrinks_bias_variance():
    kf = KalmanFilter4D(100000.0, 1.0, 0.0, 0.0, 0.0)
    kf.predict(0.02)
    kf.update(0.0, 500.0)
    assert 0.0 < kf.a_bias_variance < KF_ACCELBIAS_VARIANCE


def test_adaptation_slows_acceleration_response():
    plain = KalmanFilter4D(100000.0, 0.0, 0.0, 0.0, 0.0)
    adaptive = KalmanFilter4D(100000.0, 1.0, 0.0, 0.0, 0.0)
    for kf in (plain, adaptive):
        kf.predict(0.02)
        kf.update(0.0, 1000.0)
    assert 0.0 < adaptive.a < plain.a


def test_update_with_matching_measurements_keeps_state():
    kf = KalmanFilter4D(100000.0, 1.0, 250.0, 0.0, 0.0)
    assert kf.update(250.0, 0.0) == (250.0, 0.0)


def test_covariance_stays_symmetric():
    kf = KalmanFilter4D(100000.0, 1.0, 0.0, 0.0, 0.0)
    for step in range(20):
        kf.predict(0.02)
        kf.update(float(step), -20.0)
        cov = kf.covariance
        rows = [[cov[r][c] for c in range(4)] for r in range(4)]
        columns = [[cov[c][r] for c in range(4)] for r in range(4)]
        assert rows == columns


def test_converges_to_constant_altitude():
    kf = KalmanFilter4D(100000.0, 1.0, 0.0, 0.0, 0.0)
    for _ in range(2000):
        kf.predict(0.02)
        z, v = kf.update(-300.0, 0.0)
    assert z == pytest.approx(-300.0, abs=1.0)
    assert v == pytest.approx(0.0, abs=1.0)


def test_tracks_constant_sink():
    kf = KalmanFilter4D(100000.0, 1.0, 0.0, 0.0, 0.0)
    dt = 0.02
    for step in range(1, 3001):
        kf.predict(dt)
        z, v = kf.update(-150.0 * step * dt, 0.0)
    assert v == pytest.approx(-150.0, abs=5.0)
    assert z == pytest.approx(-150.0 * 3000 * dt, abs=5.0)