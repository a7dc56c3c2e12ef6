"""Three-state (altitude, climb rate, acceleration bias) Kalman filter.

Acceleration drives the prediction; altitude measurements drive the update.
"""

from __future__ import annotations

import logging

from .kalman2 import KF_ACCELBIAS_VARIANCE

logger = logging.getLogger(__name__)

_INITIAL_VARIANCE = 1500.0


class KalmanFilter3:
    """Tracks altitude ``z``, climb rate ``v`` and accelerometer bias ``b``."""

    def __init__(
        self,
        z_sensor_variance: float,
        a_variance: float,
        z_initial: float,
        v_initial: float,
    ) -> None:
        self.z_sensor_variance = z_sensor_variance
        self.accel_variance = a_variance
        self.bias_variance = KF_ACCELBIAS_VARIANCE

        self.z = z_initial
        self.v = v_initial
        self.b = 0.0

        self.pzz = _INITIAL_VARIANCE
        self.pzv = 0.0
        self.pzb = 0.0
        self.pvz = self.pzv
        self.pvv = _INITIAL_VARIANCE
        self.pvb = 0.0
        self.pbz = self.pzb
        self.pbv = self.pvb
        self.pbb = _INITIAL_VARIANCE

    def predict(self, a: float, dt: float) -> None:
        """Advance the state by ``dt`` seconds given earth-z acceleration ``a`` (cm/s/s)."""
        accel_true = a - self.b
        self.z += self.v * dt
        self.v += accel_true * dt

        dt2 = dt * dt
        dt3 = dt2 * dt
        dt2div2 = dt2 * 0.5
        dt3div2 = dt3 * 0.5
        dt4div4 = dt2div2 * dt2div2

        pzz, pzv, pzb = self.pzz, self.pzv, self.pzb
        pvv, pvb, pbb = self.pvv, self.pvb, self.pbb

        p00 = pzz + 2.0 * dt * pzv + dt2 * (pvv - pzb) - dt3 * pvb + dt4div4 * pbb
        p01 = pzv + dt * (pvv - pzb) - 3.0 * dt2div2 * pvb + dt3div2 * pbb
        p02 = pzb + dt * pvb - dt2div2 * pbb
        p11 = pvv - 2.0 * dt * pvb + dt2 * pbb
        p12 = pvb - dt * pbb

        q = self.accel_variance
        self.pzz = p00 + dt4div4 * q
        self.pzv = p01 + dt3div2 * q
        self.pzb = p02
        self.pvv = p11 + dt2 * q
        self.pvb = p12
        self.pbb = pbb + self.bias_variance

        self.pvz = self.pzv
        self.pbz = self.pzb
        self.pbv = self.pvb

    def update(self, zm: float) -> tuple[float, float]:
        """Correct the state with altitude measurement ``zm``; return ``(z, v)``."""
        innovation = zm - self.z
        s_inv = 1.0 / (self.pzz + self.z_sensor_variance)

        kz = self.pzz * s_inv
        kv = self.pvz * s_inv
        kb = self.pbz * s_inv

        self.z += kz * innovation
        self.v += kv * innovation
        self.b += kb * innovation

        p00 = self.pzz - kz * self.pzz
        p01 = self.pzv - kz * self.pzv
        p02 = self.pzb - kz * self.pzb
        p11 = self.pvv - kv * self.pzv
        p12 = self.pvb - kv * self.pzb
        p22 = self.pbb - kb * self.pzb

        self.pzz = p00
        self.pzv = p01
        self.pzb = p02
        self.pvv = p11
        self.pvb = p12
        self.pbb = p22

        self.pvz = self.pzv
        self.pbz = self.pzb
        self.pbv = self.pvb

        logger.debug(
            "%.1f %.1f %.1f %.1f %.1f %.1f %.1f",
            zm, self.z, self.pzz, self.v, self.pvv, self.b, self.pbb,
        )
        return self.z, self.v