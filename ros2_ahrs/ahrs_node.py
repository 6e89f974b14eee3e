import rclpy
import geometry_msgs.msg
import sensor_msgs.msg
from rcl_interfaces.msg import SetParametersResult
from rclpy.node import Node

from .ahrs import ahrs_set_gain, create_ahrs
from .helpers import precision_from_name

# Parameters that pick the filter itself; changing them needs a restart
STARTUP_ONLY_PARAMETERS = ("filter_type", "precision", "init_from_first_sample")
GAIN_PARAMETERS = ("beta", "two_kp", "two_ki")


class AHRSNode(Node):
    def __init__(self):
        super().__init__("ahrs_node")

        # Logger
        self.logger = self.get_logger()

        self.logger.info("IP: AHRS orientation filter node has been started")

        # Parameters
        self.declare_parameter("frame_id", "imu_icm20948")
        self.frame_id = self.get_parameter("frame_id").get_parameter_value().string_value
        self.logger.info(f"   frame_id: {self.frame_id}")

        # Rate at which /imu/data_raw arrives; one filter step per message
        self.declare_parameter("sample_rate", 100.0)
        self.sample_rate = float(self.get_parameter("sample_rate").value)
        self.logger.info(f"   sample_rate: {self.sample_rate} Hz")

        self.declare_parameter("filter_type", "madgwick")  # madgwick | mahony
        self.filter_type = self.get_parameter("filter_type").get_parameter_value().string_value

        # Filter gains
        self.declare_parameter("beta", 0.033)    # madgwick, 2 * proportional gain
        self.declare_parameter("two_kp", 1.0)    # mahony, 2 * Kp
        self.declare_parameter("two_ki", 0.0)    # mahony, 2 * Ki, 0 disables bias compensation
        self.declare_parameter("use_mag", True)
        self.declare_parameter("precision", "float32")
        self.declare_parameter("init_from_first_sample", True)
        self.use_mag = bool(self.get_parameter("use_mag").value)
        self.init_from_first_sample = bool(self.get_parameter("init_from_first_sample").value)
        precision = precision_from_name(self.get_parameter("precision").get_parameter_value().string_value)

        if self.filter_type == "madgwick":
            gains = {"beta": float(self.get_parameter("beta").value)}
        else:
            gains = {
                "two_kp": float(self.get_parameter("two_kp").value),
                "two_ki": float(self.get_parameter("two_ki").value),
            }
        self.logger.info(f"   filter_type: {self.filter_type}  gains: {gains}  use_mag: {self.use_mag}  precision: {precision.__name__}")

        self.filter = create_ahrs(self.filter_type, self.sample_rate, precision=precision, **gains)
        if self.filter is None:
            raise ValueError(f"Invalid sample_rate: {self.sample_rate}")

        self._mag = (0.0, 0.0, 0.0)  # zero field -> filter falls back to 6-axis update
        self._initialized = not self.init_from_first_sample
        self._shutting_down = False

        self.add_on_set_parameters_callback(self.parameters_cback)

        # Publishers
        self.imu_pub = self.create_publisher(sensor_msgs.msg.Imu, "/imu/data", 10)
        self.rpy_pub = self.create_publisher(geometry_msgs.msg.Vector3Stamped, "/imu/rpy", 10)

        # Subscribers
        self.imu_raw_sub = self.create_subscription(sensor_msgs.msg.Imu, "/imu/data_raw", self.imu_raw_cback, 10)
        self.mag_sub = self.create_subscription(sensor_msgs.msg.MagneticField, "/imu/mag_raw", self.mag_cback, 10)

        self.logger.info("OK: AHRS Node: init successful")

    def parameters_cback(self, params):
        # Check the whole set first, a rejected set must leave the filter untouched
        for param in params:
            reason = None
            if param.name in STARTUP_ONLY_PARAMETERS:
                reason = f"{param.name} can only be set at start-up"
            elif param.name == "sample_rate" and not float(param.value) > 0.0:
                reason = "sample_rate must be positive"
            elif param.name in GAIN_PARAMETERS and param.name not in self.filter.GAINS:
                reason = f"{param.name} does not apply to the {self.filter_type} filter"
            if reason is not None:
                self.logger.warning(f"rejected {param.name}={param.value}: {reason}")
                return SetParametersResult(successful=False, reason=reason)

        for param in params:
            if param.name == "sample_rate":
                rate = float(param.value)
                # Different rate resets the orientation, same rate is a no-op
                if self.filter.set_sample_rate(rate):
                    self.sample_rate = rate
                    self._initialized = not self.init_from_first_sample
                    self.logger.info(f"   sample_rate: {self.sample_rate} Hz")
            elif param.name in GAIN_PARAMETERS:
                ahrs_set_gain(self.filter, param.name, param.value)
                self.logger.info(f"   {param.name}: {float(param.value)}")
            elif param.name == "use_mag":
                self.use_mag = bool(param.value)
                self.logger.info(f"   use_mag: {self.use_mag}")
            elif param.name == "frame_id":
                self.frame_id = str(param.value)
                self.logger.info(f"   frame_id: {self.frame_id}")
        return SetParametersResult(successful=True)

    def mag_cback(self, msg):
        self._mag = (msg.magnetic_field.x, msg.magnetic_field.y, msg.magnetic_field.z)

    def imu_raw_cback(self, msg):

        """
          /imu/data_raw = raw accel+gyro, orientation unknown (cov[0] = -1)
          /imu/data = accel+gyro + orientation estimated
          /imu/rpy = roll, pitch, yaw in degrees (x, y, z)
        """

        if self._shutting_down:
            return

        try:
            gx = msg.angular_velocity.x
            gy = msg.angular_velocity.y
            gz = msg.angular_velocity.z
            ax = msg.linear_acceleration.x
            ay = msg.linear_acceleration.y
            az = msg.linear_acceleration.z
            mx, my, mz = self._mag

            if not self._initialized:
                if self.use_mag:
                    self._initialized = self.filter.initialize_from_accel_mag(ax, ay, az, mx, my, mz)
                else:
                    self._initialized = self.filter.initialize_from_accel_mag(ax, ay, az)
                if self._initialized:
                    yaw, pitch, roll = self.filter.euler
                    self.logger.info(f"   initial orientation: roll={roll:.1f} pitch={pitch:.1f} yaw={yaw:.1f} deg")

            # ---- Run filter to compute orientation ----
            if self.use_mag:
                self.filter.update(gx, gy, gz, ax, ay, az, mx, my, mz)
            else:
                self.filter.update_imu(gx, gy, gz, ax, ay, az)

            qx, qy, qz, qw = self.filter.quaternion_xyzw()

            # Fill fused IMU message: copy accel/gyro + add orientation
            imu_msg = sensor_msgs.msg.Imu()
            imu_msg.header = msg.header
            imu_msg.header.frame_id = self.frame_id
            imu_msg.linear_acceleration = msg.linear_acceleration
            imu_msg.angular_velocity = msg.angular_velocity
            imu_msg.angular_velocity_covariance = msg.angular_velocity_covariance
            imu_msg.linear_acceleration_covariance = msg.linear_acceleration_covariance

            imu_msg.orientation.x = qx
            imu_msg.orientation.y = qy
            imu_msg.orientation.z = qz
            imu_msg.orientation.w = qw

            # Provide non-negative covariances (tune later)
            imu_msg.orientation_covariance[0] = 0.05
            imu_msg.orientation_covariance[4] = 0.05
            imu_msg.orientation_covariance[8] = 0.10

            rpy_msg = geometry_msgs.msg.Vector3Stamped()
            rpy_msg.header = imu_msg.header
            yaw, pitch, roll = self.filter.euler
            rpy_msg.vector.x = roll
            rpy_msg.vector.y = pitch
            rpy_msg.vector.z = yaw

            self.imu_pub.publish(imu_msg)
            self.rpy_pub.publish(rpy_msg)

        except Exception as e:
            # During shutdown, suppress noise; otherwise log
            if not self._shutting_down:
                self.logger.error(f"imu_raw_cback exception: {e}")

    def destroy_node(self):
        self._shutting_down = True
        return super().destroy_node()

def main(args=None):
    rclpy.init(args=args)
    node = AHRSNode()
    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        node.get_logger().info("Ctrl-C received, shutting down...")
    finally:
        node.destroy_node()
        if rclpy.ok():
            rclpy.shutdown()

if __name__ == "__main__":
    main()
