"""Two-state (altitude, climb rate) Kalman filter driven by altitude measurements.

Also holds the static filter configuration shared by the other filters.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

# Environmental acceleration variance, divided by 1000.
KF_ACCEL_VARIANCE = 100
# Adaptive uncertainty injection, in percent.
KF_ADAPT_DEFAULT = 100
KF_ACCELBIAS_VARIANCE = 0.005
# Acceleration measurement noise variance.
KF_A_MEAS_VARIANCE_4 = 10000.0
KF_A_MEAS_VARIANCE_4D = 10.0
# Altitude measurement noise variance.
KF_Z_MEAS_VARIANCE = 200.0
# IMU sensor samples at 500 Hz, the filter runs at 50 Hz.
IMU_SAMPLE_PERIOD_SECS = 0.002
KF_SAMPLE_PERIOD_SECS = 0.02

_INITIAL_VARIANCE = 1500.0


class KalmanFilter2:
    """Tracks position ``z`` and velocity ``v`` perturbed by random accelerations."""

    def __init__(
        self,
        z_variance: float,
        z_accel_variance: float,
        z_initial: float,
        v_initial: float,
    ) -> None:
        self.z_accel_variance = z_accel_variance
        self.z_variance = z_variance
        self.z = z_initial
        self.v = v_initial
        self.pzz = _INITIAL_VARIANCE
        self.pzv = 0.0
        self.pvz = self.pzv
        self.pvv = _INITIAL_VARIANCE

    def predict(self, z_accel_variance: float, dt: float) -> None:
        """Advance the state by ``dt`` seconds, mixing in acceleration noise."""
        self.z_accel_variance = z_accel_variance
        q = z_accel_variance
        self.z += self.v * dt
        self.pzz += (
            dt * self.pzv
            + dt * self.pvz
            + dt * dt * self.pvv
            + q * dt * dt * dt * dt / 4.0
        )
        self.pzv += dt * self.pvv + q * dt * dt * dt / 2.0
        self.pvz = self.pzv
        self.pvv += q * dt * dt

    def update(self, z: float) -> tuple[float, float]:
        """Correct the state with an altitude measurement; return ``(z, v)``."""
        innovation = z - self.z
        s_inv = 1.0 / (self.pzz + self.z_variance)
        kz = self.pzz * s_inv
        kv = self.pzv * s_inv

        self.z += kz * innovation
        self.v += kv * innovation

        self.pvv -= self.pzv * kv
        self.pzv -= self.pzv * kz
        self.pvz = self.pzv
        self.pzz -= self.pzz * kz

        logger.debug(
            "%.1f %.1f %.1f %.1f %.1f", z, self.z, self.pzz, self.v, self.pvv
        )
        return self.z, self.v