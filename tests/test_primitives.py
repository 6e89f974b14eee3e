import sys
from pathlib import Path

import numpy as np
import pytest

# Add the package root to PYTHONPATH
sys.path.append(str(Path(__file__).resolve().parents[1]))

from ros2_ahrs.filters.primitives import (
    compute_euler_angles,
    inv_sqrt,
    normalize,
    quaternion_multiply,
)
from ros2_ahrs.helpers import quaternion_from_rpy


@pytest.mark.parametrize("precision", [np.float32, np.float64])
@pytest.mark.parametrize("x", [0.5, 1.0, 2.0, 100.0])
def test__inv_sqrt_within_half_percent(x, precision):
    y = inv_sqrt(x, precision)
    exact = 1.0 / np.sqrt(x)
    assert abs(float(y) - exact) / exact < 0.005


def test__inv_sqrt_keeps_precision_and_shape():
    x = np.array([[0.25, 4.0], [9.0, 1e-3]], dtype=np.float32)
    y = inv_sqrt(x)
    assert y.shape == x.shape
    assert y.dtype == np.float32
    np.testing.assert_allclose(y, 1.0 / np.sqrt(x), rtol=5e-3)

    y64 = inv_sqrt(np.float64(3.0), np.float64)
    assert isinstance(y64, np.float64)


def test__inv_sqrt_rejects_unknown_precision():
    with pytest.raises(ValueError):
        inv_sqrt(2.0, np.float16)


def test__normalize_gives_unit_vector():
    v = normalize([3.0, -4.0, 12.0])
    assert abs(np.linalg.norm(v) - 1.0) < 2e-3
    # direction preserved
    np.testing.assert_allclose(v / np.linalg.norm(v), np.array([3.0, -4.0, 12.0]) / 13.0, atol=1e-6)


def test__quaternion_multiply_identity_and_inverse():
    q = np.array([0.5, 0.5, -0.5, 0.5])
    identity = np.array([1.0, 0.0, 0.0, 0.0])
    np.testing.assert_allclose(quaternion_multiply(identity, q), q)
    np.testing.assert_allclose(quaternion_multiply(q, identity), q)
    q_conj = np.array([q[0], -q[1], -q[2], -q[3]])
    np.testing.assert_allclose(quaternion_multiply(q, q_conj), identity, atol=1e-12)


def test__euler_identity_is_zero():
    assert compute_euler_angles([1.0, 0.0, 0.0, 0.0]) == (0.0, 0.0, 0.0)


@pytest.mark.parametrize("roll,pitch,yaw", [
    (10.0, -20.0, 30.0),
    (-170.0, 45.0, 120.0),
    (0.0, 0.0, -90.0),
])
def test__euler_recovers_rpy(roll, pitch, yaw):
    q = quaternion_from_rpy(np.radians(roll), np.radians(pitch), np.radians(yaw))
    y, p, r = compute_euler_angles(q)
    assert y == pytest.approx(yaw, abs=1e-9)
    assert p == pytest.approx(pitch, abs=1e-9)
    assert r == pytest.approx(roll, abs=1e-9)


def test__euler_pitch_saturates_at_gimbal_lock():
    yaw, pitch, roll = compute_euler_angles([0.7071, 0.0, 0.7071, 0.0])
    assert np.isfinite(pitch)
    assert pitch == pytest.approx(90.0, abs=0.5)
    assert -180.0 <= yaw <= 180.0
    assert -180.0 <= roll <= 180.0

    # asin argument 2(q0q2 - q1q3) = +-2, clipped instead of a domain error
    _, pitch_up, _ = compute_euler_angles([1.0, 0.0, 1.0, 0.0])
    _, pitch_down, _ = compute_euler_angles([1.0, 0.0, -1.0, 0.0])
    assert pitch_up == pytest.approx(90.0, abs=1e-9)
    assert pitch_down == pytest.approx(-90.0, abs=1e-9)
