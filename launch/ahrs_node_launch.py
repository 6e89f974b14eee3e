from launch_ros.actions import Node
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration
from launch import LaunchDescription


def generate_launch_description():

    sample_rate = LaunchConfiguration('sample_rate', default='100.0')
    filter_type = LaunchConfiguration('filter_type', default='madgwick')

    return LaunchDescription(
        [
            DeclareLaunchArgument('sample_rate', default_value='100.0', description='Rate of /imu/data_raw in Hz'),
            DeclareLaunchArgument('filter_type', default_value='madgwick', description='madgwick or mahony'),

            Node(
                package="ros2_ahrs",
                executable="ahrs_node",
                name="ahrs_node",
                parameters=[
                    {"frame_id": "imu_icm20948"},
                    {"sample_rate": sample_rate},
                    {"filter_type": filter_type},
                    {"use_mag": True},
                    {"precision": "float32"},
                ],
            )
        ]
    )
