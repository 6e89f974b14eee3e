import logging
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

pytest.importorskip("rclpy")

# Add the package root to PYTHONPATH
sys.path.append(str(Path(__file__).resolve().parents[1]))

from ros2_ahrs.ahrs import create_ahrs
from ros2_ahrs.ahrs_node import AHRSNode


def _node(filter_type="madgwick"):
    """Just the state parameters_cback touches, no ROS context needed."""
    return SimpleNamespace(
        logger=logging.getLogger("ahrs_node"),
        filter=create_ahrs(filter_type, 100.0),
        filter_type=filter_type,
        sample_rate=100.0,
        frame_id="imu_icm20948",
        use_mag=True,
        init_from_first_sample=True,
        _initialized=True,
    )


def _set(node, **values):
    params = [SimpleNamespace(name=name, value=value) for name, value in values.items()]
    return AHRSNode.parameters_cback(node, params)


def _settle(node):
    for _ in range(20):
        node.filter.update_imu(0.1, 0.0, 0.0, 1.0, 2.0, 9.0)
    return node.filter.quaternion


def test__same_sample_rate_keeps_orientation_and_seed():
    node = _node()
    q = _settle(node)

    assert _set(node, sample_rate=100.0).successful
    assert node._initialized
    assert node.filter.quaternion == q

    assert _set(node, sample_rate=200.0).successful
    assert not node._initialized
    assert node.sample_rate == 200.0
    assert node.filter.quaternion == (1.0, 0.0, 0.0, 0.0)


def test__non_positive_sample_rate_rejected():
    node = _node()
    result = _set(node, sample_rate=0.0)
    assert not result.successful
    assert node.filter.sample_rate == 100.0


@pytest.mark.parametrize("name,value", [
    ("filter_type", "mahony"),
    ("precision", "float64"),
    ("init_from_first_sample", False),
])
def test__startup_only_parameters_rejected(name, value):
    node = _node()
    result = _set(node, **{name: value})
    assert not result.successful
    assert name in result.reason


def test__gains_applied_to_running_filter():
    node = _node("mahony")
    q = _settle(node)

    assert _set(node, two_kp=3.0, two_ki=0.2, use_mag=False).successful
    assert (node.filter.two_kp, node.filter.two_ki) == (3.0, 0.2)
    assert node.use_mag is False
    assert node.filter.quaternion == q


def test__gain_of_other_filter_rejected_without_side_effects():
    node = _node("madgwick")
    result = _set(node, beta=0.2, two_kp=3.0)
    assert not result.successful
    assert node.filter.beta == 0.033
