import math

import numpy as np

# Floating point precisions the filters can run in
_PRECISIONS = {
    "float32": np.float32,  # default, matches single precision MCU builds
    "float64": np.float64,
}

def precision_from_name(name: str):
    if name not in _PRECISIONS:
        raise ValueError(f"Unknown precision: {name} (expected one of {sorted(_PRECISIONS)})")
    return _PRECISIONS[name]

def rotation_xyz(roll, pitch, yaw):
    """
    Body->world rotation matrix for intrinsic yaw (Z), pitch (Y), roll (X).

    Args:
        roll, pitch, yaw : radians

    Returns:
        3x3 numpy array R = Rz(yaw) @ Ry(pitch) @ Rx(roll)
    """
    cr = math.cos(roll);  sr = math.sin(roll)
    cp = math.cos(pitch); sp = math.sin(pitch)
    cy = math.cos(yaw);   sy = math.sin(yaw)

    Rx = np.array([[1.0, 0.0, 0.0], [0.0, cr, -sr], [0.0, sr, cr]])
    Ry = np.array([[cp, 0.0, sp], [0.0, 1.0, 0.0], [-sp, 0.0, cp]])
    Rz = np.array([[cy, -sy, 0.0], [sy, cy, 0.0], [0.0, 0.0, 1.0]])
    return Rz @ Ry @ Rx

def quaternion_from_rpy(roll, pitch, yaw):
    """Quaternion (w, x, y, z) for the same ZYX rotation as rotation_xyz(). Angles in radians."""
    cr = math.cos(roll * 0.5);  sr = math.sin(roll * 0.5)
    cp = math.cos(pitch * 0.5); sp = math.sin(pitch * 0.5)
    cy = math.cos(yaw * 0.5);   sy = math.sin(yaw * 0.5)

    qw = cy*cp*cr + sy*sp*sr
    qx = cy*cp*sr - sy*sp*cr
    qy = sy*cp*sr + cy*sp*cr
    qz = sy*cp*cr - cy*sp*sr
    return qw, qx, qy, qz
