import pytest

from variolog.kalman2 import KF_ACCELBIAS_VARIANCE, KF_Z_MEAS_VARIANCE
from variolog.kalman3 import KalmanFilter3


def make_filter(z=0.0, v=0.0):
    return KalmanFilter3(KF_Z_MEAS_VARIANCE, 100000.0, z, v)


def test_initial_state():
    kf = make_filter(500.0, 2.0)
    assert (kf.z, kf.v, kf.b) == (500.0, 2.0, 0.0)
    assert kf.pzz == kf.pvv == kf.pbb == 1500.0
    assert kf.bias_variance == KF_ACCELBIAS_VARIANCE


def test_first_update_uses_initial_gain():
    kf = make_filter()
    z, v = kf.update(1700.0)
    assert z == pytest.approx(1500.0)
    assert v == 0.0
    assert kf.b == 0.0


def test_predict_zero_dt_only_adds_bias_noise():
    kf = make_filter(10.0, 1.0)
    kf.predict(50.0, 0.0)
    assert kf.z == 10.0
    assert kf.v == 1.0
    assert kf.pbb == pytest.approx(1500.0 + KF_ACCELBIAS_VARIANCE)


def test_predict_acceleration_raises_velocity():
    kf = make_filter()
    kf.predict(100.0, 0.02)
    assert kf.v > 0.0
    kf_down = make_filter()
    kf_down.predict(-100.0, 0.02)
    assert kf_down.v == pytest.approx(-kf.v)


def test_covariance_stays_symmetric():
    kf = make_filter()
    for _ in range(10):
        kf.predict(10.0, 0.02)
        kf.update(0.0)
    assert kf.pvz == kf.pzv
    assert kf.pbz == kf.pzb
    assert kf.pbv == kf.pvb


def test_update_moves_towards_measurement_and_shrinks_variance():
    kf = make_filter(100.0)
    kf.predict(0.0, 0.02)
    before = kf.pzz
    z, _ = kf.update(200.0)
    assert 100.0 < z < 200.0
    assert kf.pzz < before


def test_converges_to_constant_altitude():
    kf = make_filter(0.0)
    for _ in range(3000):
        kf.predict(0.0, 0.02)
        z, v = kf.update(300.0)
    assert z == pytest.approx(300.0, abs=1.0)
    assert v == pytest.approx(0.0, abs=1.0)


def test_bias_estimate_tracks_constant_accel_offset():
    kf = make_filter(0.0)
    for _ in range(5000):
        kf.predict(20.0, 0.02)
        z, v = kf.update(0.0)
    assert kf.b == pytest.approx(20.0, abs=2.0)
    assert v == pytest.approx(0.0, abs=1.0)