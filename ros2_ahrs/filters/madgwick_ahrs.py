# -*- coding: utf-8 -*-
"""
    Copyright (c) 2015 Jonas Böer, jonas.boeer@student.kit.edu

    This program is free software: you can redistribute it and/or modify
    it under the terms of the GNU Lesser General Public License as published by
    the Free Software Foundation, either version 3 of the License, or
    (at your option) any later version.

    This program is distributed in the hope that it will be useful,
    but WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
    GNU Lesser General Public License for more details.

    You should have received a copy of the GNU Lesser General Public License
    along with this program.  If not, see <http://www.gnu.org/licenses/>.

    Madgwick's gradient descent AHRS algorithm.

    See: http://www.x-io.co.uk/node/8#open_source_ahrs_and_imu_algorithms

    One instance per sensor stream; call update() or update_imu() once per
    sample period (1 / sample_rate seconds).
"""

import numpy as np

from .ahrs_base import AHRSBase
from .primitives import normalize, quaternion_multiply

BETA = 0.033  # 2 * proportional gain


class MadgwickAHRS(AHRSBase):

    GAINS = ("beta",)

    def __init__(self, sample_rate, beta=BETA, precision=np.float32):
        """
        Initialize the filter at the identity orientation.
        :param sample_rate: The sample rate in Hz, must be > 0
        :param beta: Algorithm gain beta
        :param precision: np.float32 or np.float64
        """
        super().__init__(sample_rate, precision=precision)
        self.beta = float(beta)

    def update_imu(self, gx, gy, gz, ax, ay, az):
        """
        Perform one update step with data from an IMU sensor array
        :param gx, gy, gz: gyroscope data in radians per second.
        :param ax, ay, az: accelerometer data. Any unit, only the direction is used.
        """
        q = self._q

        # Rate of change of quaternion from gyroscope
        qdot = quaternion_multiply(q, self._gyro_quaternion(gx, gy, gz)) * 0.5

        # Compute feedback only if accelerometer measurement valid (avoids NaN in accelerometer normalisation)
        if not (ax == 0.0 and ay == 0.0 and az == 0.0):
            a = normalize(self._vector(ax, ay, az), self._dtype)

            # Gradient descent algorithm corrective step
            f = np.array([
                2*(q[1]*q[3] - q[0]*q[2]) - a[0],
                2*(q[0]*q[1] + q[2]*q[3]) - a[1],
                2*(0.5 - q[1]**2 - q[2]**2) - a[2]
            ], dtype=self._dtype)
            j = np.array([
                [-2*q[2], 2*q[3], -2*q[0], 2*q[1]],
                [2*q[1],  2*q[0], 2*q[3],  2*q[2]],
                [0,       -4*q[1], -4*q[2], 0]
            ], dtype=self._dtype)
            qdot = self._apply_feedback(qdot, j.T.dot(f))

        self._integrate(qdot)

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

        q = self._q

        # Rate of change of quaternion from gyroscope
        qdot = quaternion_multiply(q, self._gyro_quaternion(gx, gy, gz)) * 0.5

        if not (ax == 0.0 and ay == 0.0 and az == 0.0):
            a = normalize(self._vector(ax, ay, az), self._dtype)
            m = normalize(self._vector(mx, my, mz), self._dtype)

            # Reference direction of Earth's magnetic field, b = [0, bx, 0, bz]
            # _2bx holds |h_xy| itself, not twice it
            _2bx, _2bz = self._earth_field(m)
            _4bx = 2*_2bx
            _4bz = 2*_2bz

            f = np.array([
                2*(q[1]*q[3] - q[0]*q[2]) - a[0],
                2*(q[0]*q[1] + q[2]*q[3]) - a[1],
                2*(0.5 - q[1]**2 - q[2]**2) - a[2],
                _2bx*(0.5 - q[2]**2 - q[3]**2) + _2bz*(q[1]*q[3] - q[0]*q[2]) - m[0],
                _2bx*(q[1]*q[2] - q[0]*q[3]) + _2bz*(q[0]*q[1] + q[2]*q[3]) - m[1],
                _2bx*(q[0]*q[2] + q[1]*q[3]) + _2bz*(0.5 - q[1]**2 - q[2]**2) - m[2]
            ], dtype=self._dtype)
            j = np.array([
                [-2*q[2],                  2*q[3],                  -2*q[0],                  2*q[1]],
                [2*q[1],                   2*q[0],                  2*q[3],                   2*q[2]],
                [0,                        -4*q[1],                 -4*q[2],                  0],
                [-_2bz*q[2],               _2bz*q[3],               -_4bx*q[2] - _2bz*q[0],   -_4bx*q[3] + _2bz*q[1]],
                [-_2bx*q[3] + _2bz*q[1],   _2bx*q[2] + _2bz*q[0],   _2bx*q[1] + _2bz*q[3],    -_2bx*q[0] + _2bz*q[2]],
                [_2bx*q[2],                _2bx*q[3] - _4bz*q[1],   _2bx*q[0] - _4bz*q[2],    _2bx*q[1]]
            ], dtype=self._dtype)
            qdot = self._apply_feedback(qdot, j.T.dot(f))

        self._integrate(qdot)

    def _apply_feedback(self, qdot, step):
        # A zero gradient means the estimate already matches the measurement
        if not np.any(step):
            return qdot
        step = normalize(step, self._dtype)  # normalize step magnitude
        return qdot - step * self.beta

    def _integrate(self, qdot):
        # Integrate rate of change of quaternion to yield quaternion
        self._q = self._q + qdot * (1.0 / self._sample_rate)
        self._normalize_quaternion()
