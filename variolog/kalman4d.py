"""Four-state Kalman filter with adaptive uncertainty for high accelerations."""

from __future__ import annotations

from .kalman2 import KF_A_MEAS_VARIANCE_4D, KF_ACCELBIAS_VARIANCE
from .kalman4 import KalmanFilter4


class KalmanFilter4D(KalmanFilter4):
    """Altitude/climb-rate filter that distrusts large acceleration readings.

    ``k_adapt`` scales the extra acceleration measurement noise injected in
    proportion to the square of the external acceleration, letting the filter
    respond quicker. The bias estimate is allowed to move mostly when the
    acceleration is low.
    """

    def __init__(
        self,
        a_variance: float,
        k_adapt: float,
        z_initial: float,
        v_initial: float,
        a_initial: float,
    ) -> None:
        super().__init__(a_variance, z_initial, v_initial, a_initial)
        self.a_meas_variance = KF_A_MEAS_VARIANCE_4D
        self.k_adapt = k_adapt

    def predict(self, dt: float) -> None:
        """Advance the state and its covariance by ``dt`` seconds."""
        super().predict(dt)

    def update(self, zm: float, am: float) -> tuple[float, float]:
        """Correct the state with altitude ``zm`` and acceleration ``am``.

        Returns the updated ``(z, v)``.
        """
        accel_ext = abs(am - self.b)
        a_noise = self.a_meas_variance + self.k_adapt * accel_ext * accel_ext
        self.a_bias_variance = KF_ACCELBIAS_VARIANCE / (1.0 + accel_ext)
        return self._correct(zm, am, a_noise)