"""Filter package for IMU orientation estimation."""

from .madgwick_ahrs import BETA, MadgwickAHRS
from .mahony_ahrs import TWO_KI, TWO_KP, MahonyAHRS

__all__ = [
    "BETA",
    "TWO_KI",
    "TWO_KP",
    "MadgwickAHRS",
    "MahonyAHRS",
]
