import math
import unittest
import numpy as np
import dualframe
from dualframe import DualQuaternion

X = np.array([1.0, 0.0, 0.0])
Y = np.array([0.0, 1.0, 0.0])
Z = np.array([0.0, 0.0, 1.0])
ORIGIN = np.zeros(3)


class TestSpecialValues(unittest.TestCase):
    def test_default(self):
        np.testing.assert_array_equal(
            DualQuaternion.DEFAULT.to_array(), [0, 0, 0, 1, 0, 0, 0, 0])
        self.assertEqual(DualQuaternion.identity(), DualQuaternion.DEFAULT)
        self.assertEqual(DualQuaternion(), DualQuaternion.DEFAULT)

    def test_zero_is_not_default(self):
        np.testing.assert_array_equal(DualQuaternion.ZERO.to_array(), np.zeros(8))
        self.assertNotEqual(DualQuaternion.ZERO, DualQuaternion.DEFAULT)
        # real part of ZERO is the zero quaternion, not the identity
        np.testing.assert_array_equal(DualQuaternion.ZERO.real, np.zeros(4))

    def test_origin_point(self):
        np.testing.assert_array_equal(
            DualQuaternion.ORIGIN_POINT.to_array(), [0, 0, 0, 1, 0, 0, 0, 0])


class TestConstructor(unittest.TestCase):
    def test_real_is_normalized(self):
        dq = DualQuaternion([0, 0, 0, 2], [1, 2, 3, 4])
        np.testing.assert_array_equal(dq.real, [0, 0, 0, 1])
        # the dual part is stored as given
        np.testing.assert_array_equal(dq.dual, [1, 2, 3, 4])

    def test_real_is_normalized_general(self):
        dq = DualQuaternion([0, 3, 0, 4], [0, 0, 0, 0])
        np.testing.assert_allclose(dq.real, [0, 0.6, 0, 0.8], atol=1e-12)
        self.assertAlmostEqual(dq.length, 1.0, places=12)

    def test_zero_real_stays_zero(self):
        dq = DualQuaternion([0, 0, 0, 0], [1, 0, 0, 0])
        np.testing.assert_array_equal(dq.real, np.zeros(4))
        self.assertFalse(np.any(np.isnan(dq.to_array())))

    def test_from_components(self):
        a = DualQuaternion.from_components(0, 0, 0, 2, 1, 2, 3, 4)
        b = DualQuaternion([0, 0, 0, 2], [1, 2, 3, 4])
        self.assertEqual(a, b)

    def test_from_array(self):
        dq = DualQuaternion.from_array([0, 0, 1, 0, 5, 6, 7, 8])
        np.testing.assert_array_equal(dq.to_array(), [0, 0, 1, 0, 5, 6, 7, 8])
        self.assertEqual(DualQuaternion.from_array(dq.to_list()), dq)

    def test_from_array_bad_shape(self):
        with self.assertRaises(ValueError):
            DualQuaternion.from_array([1, 2, 3])
        with self.assertRaises(ValueError):
            DualQuaternion.from_array(np.zeros((2, 4)))

    def test_bad_quaternion_shape(self):
        with self.assertRaises(ValueError):
            DualQuaternion([0, 0, 1], [0, 0, 0, 0])


class TestNamedConstructors(unittest.TestCase):
    def test_rotation_plucker_half_turn(self):
        dq = DualQuaternion.from_rotation_plucker(math.pi, Z, ORIGIN)
        # cos(pi/2) is snapped to exactly zero
        np.testing.assert_array_equal(dq.to_array(), [0, 0, 1, 0, 0, 0, 0, 0])

    def test_rotation_plucker_quarter_turn(self):
        dq = DualQuaternion.from_rotation_plucker(math.pi / 2, Z, ORIGIN)
        h = math.sqrt(0.5)
        np.testing.assert_allclose(dq.to_array(), [0, 0, h, h, 0, 0, 0, 0], atol=1e-12)

    def test_rotation_plucker_zero_angle(self):
        dq = DualQuaternion.from_rotation_plucker(0.0, Z, [0, -300, 0])
        np.testing.assert_array_equal(dq.to_array(), [0, 0, 0, 1, 0, 0, 0, 0])

    def test_rotation_through_point(self):
        # moment = point x axis = (300, 0, 0) x (0, 0, 1) = (0, -300, 0)
        dq = DualQuaternion.from_rotation(math.pi / 2, Z, [300, 0, 0])
        s = math.sin(math.pi / 4)
        np.testing.assert_allclose(dq.real, [0, 0, s, s], atol=1e-12)
        np.testing.assert_allclose(dq.dual, [0, -300 * s, 0, 0], atol=1e-9)

    def test_rotation_matches_plucker(self):
        point = np.array([1.0, 2.0, 3.0])
        axis = np.array([1.0, 1.0, 1.0]) / math.sqrt(3)
        a = DualQuaternion.from_rotation(0.8, axis, point)
        b = DualQuaternion.from_rotation_plucker(0.8, axis, np.cross(point, axis))
        self.assertEqual(a, b)

    def test_translation(self):
        dq = DualQuaternion.from_translation([2, 4, 6])
        np.testing.assert_array_equal(dq.to_array(), [0, 0, 0, 1, 1, 2, 3, 0])

    def test_translation_with_amount(self):
        dq = DualQuaternion.from_translation(X, amount=5)
        np.testing.assert_array_equal(dq.to_array(), [0, 0, 0, 1, 2.5, 0, 0, 0])
        self.assertEqual(dq, DualQuaternion.from_translation([5, 0, 0]))

    def test_translation_bad_shape(self):
        with self.assertRaises(ValueError):
            DualQuaternion.from_translation([1, 2])

    def test_point(self):
        dq = DualQuaternion.from_point([1, 2, 3])
        np.testing.assert_array_equal(dq.to_array(), [0, 0, 0, 1, 1, 2, 3, 0])

    def test_line(self):
        # moment = (1, 0, 0) x (0, 0, 2) = (0, -2, 0); the direction is normalized
        dq = DualQuaternion.from_line([0, 0, 2], [1, 0, 0])
        np.testing.assert_array_equal(dq.to_array(), [0, 0, 1, 0, 0, -2, 0, 0])

    def test_line_plucker(self):
        dq = DualQuaternion.from_line_plucker(Y, [3, 0, 0])
        np.testing.assert_array_equal(dq.to_array(), [0, 1, 0, 0, 3, 0, 0, 0])

    def test_plane(self):
        dq = DualQuaternion.from_plane(Z, 5)
        np.testing.assert_array_equal(dq.to_array(), [0, 0, 1, 0, 0, 0, 0, 5])

    def test_rotation_then_translation(self):
        dq = DualQuaternion.from_rotation_then_translation([0, 0, 0, 1], [1, 2, 3])
        self.assertEqual(dq, DualQuaternion.from_translation([1, 2, 3]))

    def test_rotation_then_translation_order(self):
        h = math.sqrt(0.5)
        dq = DualQuaternion.from_rotation_then_translation([0, 0, h, h], [1, 2, 3])
        # x is rotated onto y first, then moved by (1, 2, 3)
        point = dualframe.transform_point(X, dq, rounded=True)
        np.testing.assert_allclose(point, [1, 3, 3], atol=1e-9)

    def test_rotation_then_translation_unnormalized_rotation(self):
        h = math.sqrt(0.5)
        a = DualQuaternion.from_rotation_then_translation([0, 0, 3 * h, 3 * h], [1, 2, 3])
        b = DualQuaternion.from_rotation_then_translation([0, 0, h, h], [1, 2, 3])
        np.testing.assert_allclose(a.to_array(), b.to_array(), atol=1e-12)


class TestFromRotationMatrix(unittest.TestCase):
    def test_identity(self):
        dq = DualQuaternion.from_rotation_matrix(np.eye(3))
        np.testing.assert_array_equal(dq.to_array(), [0, 0, 0, 1, 0, 0, 0, 0])

    def test_quarter_turn_about_z(self):
        R = np.array([[0, -1, 0],
                      [1, 0, 0],
                      [0, 0, 1]])
        dq = DualQuaternion.from_rotation_matrix(R)
        expected = DualQuaternion.from_rotation_plucker(math.pi / 2, Z, ORIGIN)
        np.testing.assert_allclose(dq.to_array(), expected.to_array(), atol=1e-12)

    def test_quarter_turn_about_x(self):
        R = np.array([[1, 0, 0],
                      [0, 0, -1],
                      [0, 1, 0]])
        dq = DualQuaternion.from_rotation_matrix(R)
        h = math.sqrt(0.5)
        np.testing.assert_allclose(dq.to_array(), [h, 0, 0, h, 0, 0, 0, 0], atol=1e-12)

    def test_general_rotation(self):
        axis = np.array([1.0, -2.0, 0.5])
        axis /= np.linalg.norm(axis)
        angle = 1.2
        # Rodrigues' formula
        K = np.array([[0, -axis[2], axis[1]],
                      [axis[2], 0, -axis[0]],
                      [-axis[1], axis[0], 0]])
        R = np.eye(3) + math.sin(angle) * K + (1 - math.cos(angle)) * (K @ K)
        dq = DualQuaternion.from_rotation_matrix(R)
        expected = DualQuaternion.from_rotation_plucker(angle, axis, ORIGIN)
        self.assertEqual(dualframe.compare(dq, expected, 1e-9), 0)

    def test_half_turn_falls_back(self):
        R = np.diag([-1.0, -1.0, 1.0])
        with self.assertLogs("dualframe._dualframe", level="DEBUG"):
            dq = DualQuaternion.from_rotation_matrix(R)
        np.testing.assert_allclose(dq.to_array(), [0, 0, 1, 0, 0, 0, 0, 0], atol=1e-12)

    def test_bad_shape(self):
        with self.assertRaises(ValueError):
            DualQuaternion.from_rotation_matrix(np.eye(4))


if __name__ == "__main__":
    unittest.main()
