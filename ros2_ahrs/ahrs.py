"""
Handle style front end for the orientation filters.

create_*() returns None instead of raising for a non-positive sample rate;
every other call accepts that None and does nothing. free_ahrs() drops the
caller's reference; Python reclaims the instance once nothing else holds it.
"""

import warnings

from .filters import MadgwickAHRS, MahonyAHRS

_FILTERS = {
    "madgwick": MadgwickAHRS,
    "mahony": MahonyAHRS,
}

def create_ahrs(kind, sample_rate, **kwargs):
    """
    Build a filter by name ("madgwick" or "mahony").

    Extra keyword arguments (beta, two_kp, two_ki, precision) go to the filter.
    Returns None if sample_rate <= 0.
    """
    if kind not in _FILTERS:
        raise ValueError(f"Unknown filter type: {kind} (expected one of {sorted(_FILTERS)})")
    if not sample_rate > 0:
        warnings.warn(f"sample_rate must be positive, got {sample_rate}; no {kind} filter created")
        return None
    return _FILTERS[kind](sample_rate, **kwargs)

def create_madgwick_ahrs(sample_rate, **kwargs):
    return create_ahrs("madgwick", sample_rate, **kwargs)

def create_mahony_ahrs(sample_rate, **kwargs):
    return create_ahrs("mahony", sample_rate, **kwargs)

def ahrs_set_sample_rate(ahrs, sample_rate):
    if ahrs is None:
        return
    ahrs.set_sample_rate(sample_rate)

def ahrs_update_imu(ahrs, gx, gy, gz, ax, ay, az):
    if ahrs is None:
        return
    ahrs.update_imu(gx, gy, gz, ax, ay, az)

def ahrs_update(ahrs, gx, gy, gz, ax, ay, az, mx, my, mz):
    if ahrs is None:
        return
    ahrs.update(gx, gy, gz, ax, ay, az, mx, my, mz)

def ahrs_quaternion(ahrs):
    """(q0, q1, q2, q3) or None for an invalid handle."""
    if ahrs is None:
        return None
    return ahrs.quaternion

def ahrs_euler(ahrs):
    """(yaw, pitch, roll) in degrees or None for an invalid handle."""
    if ahrs is None:
        return None
    return ahrs.euler

def ahrs_set_gain(ahrs, name, value):
    """
    Change one gain of a running filter without touching its orientation.
    Raises ValueError if the filter has no gain of that name.
    """
    if ahrs is None:
        return
    if name not in ahrs.GAINS:
        raise ValueError(f"{type(ahrs).__name__} has no gain {name} (expected one of {ahrs.GAINS})")
    setattr(ahrs, name, float(value))

def free_ahrs(ahrs):
    # ahrs = free_ahrs(ahrs)
    return None
