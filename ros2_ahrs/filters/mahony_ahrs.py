# -*- coding: utf-8 -*-
"""
    Mahony's nonlinear complementary filter with proportional-integral feedback.

    See: http://www.x-io.co.uk/node/8#open_source_ahrs_and_imu_algorithms
"""

import numpy as np

from .ahrs_base import AHRSBase
from .primitives import normalize, quaternion_multiply

TWO_KP = 2.0 * 0.5  # 2 * proportional gain (Kp)
TWO_KI = 2.0 * 0.0  # 2 * integral gain (Ki)


class MahonyAHRS(AHRSBase):

    # tunable at runtime, see ros2_ahrs.ahrs.ahrs_set_gain
    GAINS = ("two_kp", "two_ki")

    def __init__(self, sample_rate, two_kp=TWO_KP, two_ki=TWO_KI, precision=np.float32):
        """
        Initialize the filter at the identity orientation, zero integral error.
        :param sample_rate: The sample rate in Hz, must be > 0
        :param two_kp: 2 * proportional gain
        :param two_ki: 2 * integral gain, 0 disables gyro bias compensation
        :param precision: np.float32 or np.float64
        """
        super().__init__(sample_rate, precision=precision)
        self.two_kp = float(two_kp)
        self.two_ki = float(two_ki)

    def reset(self):
        super().reset()
        # integral error terms scaled by Ki
        self._integral_fb = np.zeros(3, dtype=self._dtype)

    @property
    def integral_feedback(self):
        return tuple(float(c) for c in self._integral_fb)

    def update_imu(self, gx, gy, gz, ax, ay, az):
        """
        Perform one update step with data from an IMU sensor array
        :param gx, gy, gz: gyroscope data in radians per second.
        :param ax, ay, az: accelerometer data. Any unit, only the direction is used.
        """
        g = self._vector(gx, gy, gz)

        # Compute feedback only if accelerometer measurement valid (avoids NaN in accelerometer normalisation)
        if not (ax == 0.0 and ay == 0.0 and az == 0.0):
            a = normalize(self._vector(ax, ay, az), self._dtype)

            # Error is cross product between estimated and measured direction of gravity
            g = self._apply_feedback(g, np.cross(a, self._half_gravity()))

        self._integrate(g)

    def update(self, gx, gy, gz, ax, ay, az, mx, my, mz):
        """
        Perform one update step with data from an AHRS sensor array
        :param gx, gy, gz: gyroscope data in radians per second.
        :param ax, ay, az: accelerometer data. Any unit, only the direction is used.
        :param mx, my, mz: magnetometer data. Any unit, only the direction is used.
        """
        # Use IMU algorithm if magnetometer measurement invalid (avoids NaN in magnetometer normalisation)
        if mx == 0.0 and my == 0.0 and mz == 0.0:
            self.update_imu(gx, gy, gz, ax, ay, az)
            return

        g = self._vector(gx, gy, gz)

        if not (ax == 0.0 and ay == 0.0 and az == 0.0):
            a = normalize(self._vector(ax, ay, az), self._dtype)
            m = normalize(self._vector(mx, my, mz), self._dtype)

            # Estimated direction of magnetic field
            q = self._q
            bx, bz = self._earth_field(m)
            half_w = np.array([
                bx*(0.5 - q[2]**2 - q[3]**2) + bz*(q[1]*q[3] - q[0]*q[2]),
                bx*(q[1]*q[2] - q[0]*q[3]) + bz*(q[0]*q[1] + q[2]*q[3]),
                bx*(q[0]*q[2] + q[1]*q[3]) + bz*(0.5 - q[1]**2 - q[2]**2)
            ], dtype=self._dtype)

            # Error is sum of cross product between estimated direction and measured direction of field vectors
            error = np.cross(a, self._half_gravity()) + np.cross(m, half_w)
            g = self._apply_feedback(g, error)

        self._integrate(g)

    def _half_gravity(self):
        # Estimated direction of gravity, halved
        q = self._q
        return np.array([
            q[1]*q[3] - q[0]*q[2],
            q[0]*q[1] + q[2]*q[3],
            q[0]**2 - 0.5 + q[3]**2
        ], dtype=self._dtype)

    def _apply_feedback(self, g, half_error):
        # Compute and apply integral feedback if enabled
        if self.two_ki > 0.0:
            self._integral_fb = self._integral_fb + half_error * (self.two_ki * (1.0 / self._sample_rate))
            g = g + self._integral_fb
        else:
            self._integral_fb = np.zeros(3, dtype=self._dtype)  # prevent integral windup

        # Apply proportional feedback
        return g + half_error * self.two_kp

    def _integrate(self, g):
        # Integrate rate of change of quaternion
        g = g * (0.5 / self._sample_rate)  # pre-multiply common factors
        self._q = self._q + quaternion_multiply(self._q, self._gyro_quaternion(*g))
        self._normalize_quaternion()
