import os
from glob import glob
from setuptools import setup

"""
ROS2 setup file for the ros2_ahrs package.

Madgwick and Mahony orientation filters, usable standalone or through the
ahrs_node that fuses /imu/data_raw and /imu/mag_raw into /imu/data.

"""

package_name = "ros2_ahrs"

setup(
    name=package_name,
    version="0.0.1",
    packages=[package_name, package_name + ".filters"],
    data_files=[
        ("share/ament_index/resource_index/packages", ["resource/" + package_name]),
        ("share/" + package_name, ["package.xml"]),
        # Include all launch files.
        (os.path.join("share", package_name), glob("launch/*launch.[pxy][yma]*")),
    ],
    install_requires=[
        "setuptools",
        "numpy",
    ],
    extras_require={
        "test": ["pytest"],
    },
    zip_safe=True,
    maintainer="Simon-Pierre Deschênes",
    maintainer_email="simon-pierre.deschenes.1@ulaval.ca",
    description="Madgwick / Mahony AHRS orientation filters",
    license="BSD-2.0 AND LGPL-3.0-or-later",
    tests_require=["pytest"],
    entry_points={
        "console_scripts": [
            "ahrs_node = ros2_ahrs.ahrs_node:main",
        ],
    },
)
