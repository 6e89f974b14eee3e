"""
    Numerical building blocks shared by the Madgwick and Mahony filters.

    All functions take an optional numpy ``precision`` (``np.float32`` or
    ``np.float64``) and keep their arithmetic in that dtype.
"""

import math

import numpy as np

# Fast inverse square root magic numbers, keyed by float dtype.
# See: http://en.wikipedia.org/wiki/Fast_inverse_square_root
_INV_SQRT_MAGIC = {
    np.dtype(np.float32): (np.int32, 0x5f3759df),
    np.dtype(np.float64): (np.int64, 0x5fe6eb50c7b537a9),
}


def inv_sqrt(x, precision=np.float32):
    """
    Approximate 1/sqrt(x) with the bit-trick plus one Newton-Raphson step.

    The float bits are reinterpreted as an integer of the same width (numpy
    view, no aliasing), shifted and subtracted from the magic constant, then
    reinterpreted back as a float.

    :param x: scalar or array, every element must be > 0
    :param precision: np.float32 or np.float64
    :return: scalar or array of the same shape, ~0.2% relative error
    """
    dtype = np.dtype(precision)
    if dtype not in _INV_SQRT_MAGIC:
        raise ValueError(f"Unsupported precision for inv_sqrt: {dtype}")
    int_type, magic = _INV_SQRT_MAGIC[dtype]

    x = np.asarray(x, dtype=dtype)
    xs = np.atleast_1d(x)
    half_x = xs * 0.5

    i = xs.view(int_type)
    i = (np.array(magic, dtype=int_type) - (i >> 1)).astype(int_type)
    y = i.view(dtype)
    y = y * (1.5 - (half_x * y * y))

    if x.ndim == 0:
        return y[0]
    return y.reshape(x.shape)


def normalize(v, precision=np.float32):
    """Scale a quaternion (or sensor vector) to unit length. v must not be all zero."""
    v = np.asarray(v, dtype=precision)
    return v * inv_sqrt(np.dot(v, v), precision)


def quaternion_multiply(p, q):
    """Hamilton product p (x) q, both given as (w, x, y, z)."""
    p0, p1, p2, p3 = p
    q0, q1, q2, q3 = q
    return np.array([
        p0*q0 - p1*q1 - p2*q2 - p3*q3,
        p0*q1 + p1*q0 + p2*q3 - p3*q2,
        p0*q2 - p1*q3 + p2*q0 + p3*q1,
        p0*q3 + p1*q2 - p2*q1 + p3*q0,
    ], dtype=np.result_type(np.asarray(p), np.asarray(q)))


def quaternion_conj(q):
    return np.array([q[0], -q[1], -q[2], -q[3]], dtype=np.asarray(q).dtype)


def compute_euler_angles(q):
    """
    Convert a unit quaternion (w, x, y, z) to (yaw, pitch, roll) in degrees.

    ZYX convention: yaw about Z, pitch about Y, roll about X.
    The asin argument is clipped to [-1, 1] so pitch saturates at +-90 deg
    near gimbal lock instead of returning NaN.
    """
    q0, q1, q2, q3 = (float(c) for c in q)

    # Yaw (z-axis)
    yaw = math.atan2(2.0 * (q0*q3 + q1*q2), 1.0 - 2.0 * (q2*q2 + q3*q3))

    # Pitch (y-axis)
    sinp = float(np.clip(2.0 * (q0*q2 - q1*q3), -1.0, 1.0))
    pitch = math.asin(sinp)

    # Roll (x-axis)
    roll = math.atan2(2.0 * (q0*q1 + q2*q3), 1.0 - 2.0 * (q1*q1 + q2*q2))

    return math.degrees(yaw), math.degrees(pitch), math.degrees(roll)
