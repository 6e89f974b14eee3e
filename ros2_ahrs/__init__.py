from .filters import MadgwickAHRS, MahonyAHRS

__all__ = [
    "MadgwickAHRS",
    "MahonyAHRS",
]
