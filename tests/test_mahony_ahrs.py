import math
import sys
from pathlib import Path

import numpy as np
import pytest

# Add the package root to PYTHONPATH
sys.path.append(str(Path(__file__).resolve().parents[1]))

from ros2_ahrs.filters import TWO_KI, TWO_KP, MahonyAHRS


def _tilted_accel(roll_deg):
    r = math.radians(roll_deg)
    return 0.0, 9.81 * math.sin(r), 9.81 * math.cos(r)


def test__default_gains():
    ahrs = MahonyAHRS(512.0)
    assert ahrs.two_kp == TWO_KP == 1.0
    assert ahrs.two_ki == TWO_KI == 0.0
    assert ahrs.integral_feedback == (0.0, 0.0, 0.0)


def test__integral_stays_zero_when_disabled():
    ahrs = MahonyAHRS(100.0, two_ki=0.0)
    for _ in range(100):
        ahrs.update_imu(0.02, -0.01, 0.0, *_tilted_accel(20.0))
    assert ahrs.integral_feedback == (0.0, 0.0, 0.0)


def test__integral_accumulates_error():
    ahrs = MahonyAHRS(100.0, two_ki=0.5)
    ahrs.update_imu(0.0, 0.0, 0.0, *_tilted_accel(20.0))
    ix, iy, iz = ahrs.integral_feedback
    # a roll error only produces feedback about x
    assert ix != 0.0
    assert iy == pytest.approx(0.0, abs=1e-9)
    assert iz == pytest.approx(0.0, abs=1e-9)


def test__integral_compensates_gyro_bias():
    bias = 0.05  # rad/s about x
    ahrs = MahonyAHRS(100.0, two_kp=1.0, two_ki=0.5, precision=np.float64)
    for _ in range(4000):
        ahrs.update_imu(bias, 0.0, 0.0, 0.0, 0.0, 9.81)

    ix, iy, iz = ahrs.integral_feedback
    assert ix == pytest.approx(-bias, abs=5e-3)
    assert ahrs.roll == pytest.approx(0.0, abs=0.5)


def test__proportional_only_leaves_steady_state_bias_error():
    bias = 0.05
    ahrs = MahonyAHRS(100.0, two_kp=1.0, two_ki=0.0)
    for _ in range(4000):
        ahrs.update_imu(bias, 0.0, 0.0, 0.0, 0.0, 9.81)
    # without the integral term the gyro bias shows up as a constant tilt
    assert abs(ahrs.roll) > 1.0


def test__sample_rate_change_resets_integral():
    ahrs = MahonyAHRS(100.0, two_ki=1.0)
    for _ in range(20):
        ahrs.update_imu(0.0, 0.0, 0.0, *_tilted_accel(30.0))
    assert ahrs.integral_feedback != (0.0, 0.0, 0.0)

    ahrs.set_sample_rate(100.0)
    assert ahrs.integral_feedback != (0.0, 0.0, 0.0)

    ahrs.set_sample_rate(50.0)
    assert ahrs.integral_feedback == (0.0, 0.0, 0.0)
    assert ahrs.quaternion == (1.0, 0.0, 0.0, 0.0)


def test__integral_uses_instance_sample_rate():
    fast = MahonyAHRS(1000.0, two_ki=1.0, precision=np.float64)
    slow = MahonyAHRS(100.0, two_ki=1.0, precision=np.float64)
    fast.update_imu(0.0, 0.0, 0.0, *_tilted_accel(30.0))
    slow.update_imu(0.0, 0.0, 0.0, *_tilted_accel(30.0))
    assert slow.integral_feedback[0] == pytest.approx(10.0 * fast.integral_feedback[0], rel=1e-9)
