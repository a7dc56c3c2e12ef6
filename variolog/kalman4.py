"""Four-state Kalman filter fusing altitude and earth-z acceleration measurements.

The state is altitude ``z``, climb rate ``v``, gravity-compensated earth-z
acceleration ``a`` and residual accelerometer bias ``b``.
"""

from __future__ import annotations

import logging

from .kalman2 import KF_A_MEAS_VARIANCE_4, KF_ACCELBIAS_VARIANCE, KF_Z_MEAS_VARIANCE

logger = logging.getLogger(__name__)

_INITIAL_VARIANCE = 1500.0
_INITIAL_ACCEL_VARIANCE = 100000.0

Matrix4 = tuple[
    tuple[float, float, float, float],
    tuple[float, float, float, float],
    tuple[float, float, float, float],
    tuple[float, float, float, float],
]


class KalmanFilter4:
    """Tracks altitude, climb rate, acceleration and accelerometer bias.

    ``a_variance`` is the environmental acceleration variance; it should be
    large enough for the true state to stay within the uncertainty estimate.
    The covariance matrix is symmetric, so only its upper triangle is kept.
    """

    def __init__(
        self,
        a_variance: float,
        z_initial: float,
        v_initial: float,
        a_initial: float,
    ) -> None:
        self.z_meas_variance = KF_Z_MEAS_VARIANCE
        self.a_meas_variance = KF_A_MEAS_VARIANCE_4
        self.a_bias_variance = KF_ACCELBIAS_VARIANCE
        self.accel_variance = a_variance

        self.z = z_initial
        self.v = v_initial
        self.a = a_initial
        self.b = 0.0

        self.pzz = _INITIAL_VARIANCE
        self.pzv = 0.0
        self.pza = 0.0
        self.pzb = 0.0
        self.pvv = _INITIAL_VARIANCE
        self.pva = 0.0
        self.pvb = 0.0
        self.paa = _INITIAL_ACCEL_VARIANCE
        self.pab = 0.0
        self.pbb = _INITIAL_VARIANCE

    @property
    def covariance(self) -> Matrix4:
        """The full 4x4 state covariance matrix, rows in z, v, a, b order."""
        return (
            (self.pzz, self.pzv, self.pza, self.pzb),
            (self.pzv, self.pvv, self.pva, self.pvb),
            (self.pza, self.pva, self.paa, self.pab),
            (self.pzb, self.pvb, self.pab, self.pbb),
        )

    def predict(self, dt: float) -> None:
        """Advance the state estimate and its covariance by ``dt`` seconds."""
        accel_true = self.a - self.b
        self.z += self.v * dt + accel_true * dt * dt * 0.5
        self.v += accel_true * dt

        dt2 = dt * dt
        dt3 = dt2 * dt
        dt4 = dt2 * dt2
        dt2div2 = dt2 * 0.5
        dt3div2 = dt3 * 0.5
        dt4div2 = dt4 * 0.5
        dt4div4 = dt4 * 0.25

        pzz, pzv, pza, pzb = self.pzz, self.pzv, self.pza, self.pzb
        pvv, pva, pvb = self.pvv, self.pva, self.pvb
        paa, pab, pbb = self.paa, self.pab, self.pbb

        self.pzz = (
            pzz
            + 2.0 * pzv * dt
            + (pza - pzb) * dt2
            + pvv * dt2div2
            + (pva - pvb) * dt3
            + (paa + pbb) * dt4div4
            - pab * dt4div2
        )
        self.pzv = (
            pzv
            + dt * (pza - pzb + pvv)
            + 3.0 * dt2div2 * (pva - pvb)
            - pab * dt3
            + (paa + pbb) * dt3div2
        )
        self.pza = pza + pva * dt + (paa - pab) * dt2div2
        self.pzb = pzb + pvb * dt + (pab - pbb) * dt2div2

        self.pvv = pvv + 2.0 * dt * (pva - pvb) + dt2 * (paa - 2.0 * pab + pbb)
        self.pva = pva + dt * (paa - pab)
        self.pvb = pvb + dt * (pab - pbb)

        self.paa = paa + self.accel_variance
        self.pbb = pbb + self.a_bias_variance

    def update(self, zm: float, am: float) -> tuple[float, float]:
        """Correct the state with altitude ``zm`` and acceleration ``am``.

        Returns the updated ``(z, v)``.
        """
        return self._correct(zm, am, self.a_meas_variance)

    def _correct(self, zm: float, am: float, a_noise: float) -> tuple[float, float]:
        z_err = zm - self.z
        a_err = am - self.a

        pzz, pzv, pza, pzb = self.pzz, self.pzv, self.pza, self.pzb
        pvv, pva, pvb = self.pvv, self.pva, self.pvb
        paa, pab, pbb = self.paa, self.pab, self.pbb

        # Innovation covariance S = H P H' + R and its inverse.
        s00 = pzz + self.z_meas_variance
        s01 = pza
        s11 = paa + a_noise
        sdetinv = 1.0 / (s00 * s11 - s01 * s01)
        sinv00 = sdetinv * s11
        sinv01 = -sdetinv * s01
        sinv11 = sdetinv * s00

        # Kalman gain K = P H' S^-1.
        k00 = pzz * sinv00 + pza * sinv01
        k01 = pzz * sinv01 + pza * sinv11
        k10 = pzv * sinv00 + pva * sinv01
        k11 = pzv * sinv01 + pva * sinv11
        k20 = pza * sinv00 + paa * sinv01
        k21 = pza * sinv01 + paa * sinv11
        k30 = pzb * sinv00 + pab * sinv01
        k31 = pzb * sinv01 + pab * sinv11

        self.z += k00 * z_err + k01 * a_err
        self.v += k10 * z_err + k11 * a_err
        self.a += k20 * z_err + k21 * a_err
        self.b += k30 * z_err + k31 * a_err

        # P = (I - K H) P
        tmp = 1.0 - k00
        self.pzz = tmp * pzz - k01 * pza
        self.pzv = tmp * pzv - k01 * pva
        self.pza = tmp * pza - k01 * paa
        self.pzb = tmp * pzb - k01 * pab

        self.pvv = -k10 * pzv + pvv - k11 * pva
        self.pva = -k10 * pza + pva - k11 * paa
        self.pvb = -k10 * pzb + pvb - k11 * pab

        self.paa = -k20 * pza + (1.0 - k21) * paa
        self.pab = -k20 * pzb + (1.0 - k21) * pab

        self.pbb = -k30 * pzb - k31 * pab + pbb

        logger.debug(
            "%.1f %.1f %.1f %.1f %.1f %.1f %.1f %.1f %.1f",
            zm, self.z, self.pzz, self.v, self.pvv,
            self.a - self.b, self.paa, self.b, self.pbb,
        )
        return self.z, self.v