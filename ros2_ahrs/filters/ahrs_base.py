import math

import numpy as np

from ..helpers import quaternion_from_rpy, rotation_xyz
from .primitives import compute_euler_angles, normalize, quaternion_conj, quaternion_multiply


class AHRSBase:
    """
    State shared by both orientation filters: sample rate, orientation
    quaternion (w, x, y, z) and the cached yaw/pitch/roll in degrees.

    Subclasses implement update_imu() and update(); the quaternion is only
    ever changed by those, by reset() and by initialize_from_accel_mag().
    """

    def __init__(self, sample_rate, precision=np.float32):
        """
        :param sample_rate: update rate in Hz, must be > 0
        :param precision: numpy float dtype used for all filter arithmetic
        """
        if not sample_rate > 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")
        self._dtype = np.dtype(precision)
        self._sample_rate = float(sample_rate)
        self.reset()

    def reset(self):
        """Back to the identity orientation."""
        self._q = np.array([1.0, 0.0, 0.0, 0.0], dtype=self._dtype)
        self._compute_euler()

    def set_sample_rate(self, sample_rate):
        """
        Adopt a new sample rate. State integrated at the old rate is discarded,
        so a different positive rate resets the filter. Non-positive or
        unchanged rates are ignored.

        Returns True if the rate changed and the filter was reset.
        """
        if not sample_rate > 0:
            return False
        if sample_rate == self._sample_rate:
            return False
        self._sample_rate = float(sample_rate)
        self.reset()
        return True

    @property
    def sample_rate(self):
        return self._sample_rate

    @property
    def precision(self):
        return self._dtype.type

    @property
    def quaternion(self):
        """(q0, q1, q2, q3), q0 is the scalar part."""
        return tuple(float(c) for c in self._q)

    @property
    def euler(self):
        """(yaw, pitch, roll) in degrees."""
        return self._euler

    @property
    def yaw(self):
        return self._euler[0]

    @property
    def pitch(self):
        return self._euler[1]

    @property
    def roll(self):
        return self._euler[2]

    def quaternion_xyzw(self):
        # ROS uses x,y,z,w
        q0, q1, q2, q3 = self.quaternion
        return (q1, q2, q3, q0)

    def initialize_from_accel_mag(self, ax, ay, az, mx=None, my=None, mz=None):
        """
        Seed the orientation from a single accel (+ optional mag) sample.

        Roll/pitch make the estimated gravity direction match the measured
        accelerometer direction; yaw comes from the tilt-compensated
        magnetometer, or stays 0 without one.

        Returns True on success, False if the accelerometer vector is zero.
        """
        if ax == 0.0 and ay == 0.0 and az == 0.0:
            return False
        ax, ay, az = (float(c) for c in normalize([ax, ay, az], np.float64))

        roll = math.atan2(ay, az)
        pitch = math.atan2(-ax, math.sqrt(ay*ay + az*az))

        yaw = 0.0
        use_mag = mx is not None and my is not None and mz is not None
        if use_mag and not (mx == 0.0 and my == 0.0 and mz == 0.0):
            # rotate mag into the level (yaw only) frame
            m_level = rotation_xyz(roll, pitch, 0.0) @ np.array([mx, my, mz], dtype=float)
            if m_level[0] != 0.0 or m_level[1] != 0.0:
                yaw = math.atan2(-m_level[1], m_level[0])

        self._q = normalize(quaternion_from_rpy(roll, pitch, yaw), self._dtype)
        self._compute_euler()
        return True

    def _vector(self, x, y, z):
        return np.array([x, y, z], dtype=self._dtype)

    def _gyro_quaternion(self, gx, gy, gz):
        return np.array([0.0, gx, gy, gz], dtype=self._dtype)

    def _earth_field(self, m):
        """
        Reference direction of Earth's magnetic field for the current estimate:
        h = q (x) m (x) q*, returned as (|h_xy|, h_z).
        """
        q = self._q
        m_quat = np.array([0.0, m[0], m[1], m[2]], dtype=self._dtype)
        h = quaternion_multiply(q, quaternion_multiply(m_quat, quaternion_conj(q)))
        return np.sqrt(h[1]*h[1] + h[2]*h[2]), h[3]

    def _normalize_quaternion(self):
        self._q = normalize(self._q, self._dtype)
        self._compute_euler()

    def _compute_euler(self):
        self._euler = compute_euler_angles(self._q)
