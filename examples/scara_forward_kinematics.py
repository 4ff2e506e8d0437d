from dualframe import DualQuaternion, multiply
import numpy as np
import math

UNIT_Z = np.array([0.0, 0.0, 1.0])


def forward_kinematics(theta1: float, theta2: float, theta3: float, z: float) -> np.ndarray:
    """
    End effector position of an EPSON E2L SCARA robot.

    The three revolute joints are rotations about vertical lines through
    (0, 0, 0), (300, 0, 0) and (650, 0, 0); the fourth joint lowers the tool
    along -z. The end effector sits at (650, 0, 318) in the reference pose.
    """
    r1 = DualQuaternion.from_rotation(theta1, UNIT_Z, [0, 0, 0])
    r2 = DualQuaternion.from_rotation(theta2, UNIT_Z, [300, 0, 0])
    r3 = DualQuaternion.from_rotation(theta3, UNIT_Z, [650, 0, 0])
    t = DualQuaternion.from_translation(-UNIT_Z, amount=z)
    end_effector = DualQuaternion.from_translation([650, 0, 318])

    # right-most is applied first
    displacement = multiply(r1, r2, r3, t, end_effector)
    return displacement.transform_point()


if __name__ == "__main__":
    poses = [
        (0, 0, 0, 0),
        (0, 0, 0, 318),
        (-math.pi / 2, -math.pi / 2, 0, 318),
        (math.pi / 4, -math.pi / 3, math.pi / 6, 100),
    ]
    for pose in poses:
        print(pose, "->", forward_kinematics(*pose))
