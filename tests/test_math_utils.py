import numpy as np

from utils.math_utils import axis_angle_to_matrix, make_transform


def test_axis_angle_identity() -> None:
    assert np.allclose(axis_angle_to_matrix([0, 0, 1], 0.0), np.eye(3))
    assert np.allclose(axis_angle_to_matrix([0, 0, 0], 1.0), np.eye(3))


def test_axis_angle_normalizes_axis() -> None:
    R = axis_angle_to_matrix([0, 0, 5], np.pi / 2)
    assert np.allclose(R @ [1, 0, 0], [0, 1, 0])


def test_make_transform_layout() -> None:
    R = axis_angle_to_matrix([1, 1, 0], 0.3)
    T = make_transform(R, np.array([[0.1], [0.2], [0.3]]))
    assert T.shape == (4, 4)
    assert np.allclose(T[:3, :3], R)
    assert np.allclose(T[:3, 3], [0.1, 0.2, 0.3])
    assert np.allclose(T[3], [0, 0, 0, 1])
