"""Tests for forward kinematics."""

import math

import numpy as np
import pytest

from src.kinematics import arm_6dof_chain, planar_3r_chain
from src.kinematics.dh_params import ARM_6DOF_DH_PARAMS, PLANAR_3R_DH_PARAMS, DHParam
from src.kinematics.forward import KinematicChain, _dh_transform


class TestDHParams:
    def test_num_joints(self):
        assert len(PLANAR_3R_DH_PARAMS) == 3
        assert len(ARM_6DOF_DH_PARAMS) == 6

    def test_params_are_frozen(self):
        param = ARM_6DOF_DH_PARAMS[0]
        with pytest.raises(AttributeError):
            param.a = 99.0


class TestDHTransform:
    def test_identity_params_zero_angle(self):
        """With all-zero DH params and zero angle, result should be identity."""
        T = _dh_transform(DHParam(a=0, alpha=0, d=0, theta=0), 0.0)
        np.testing.assert_array_almost_equal(T, np.eye(4))

    def test_pure_translation_d(self):
        T = _dh_transform(DHParam(a=0, alpha=0, d=0.5, theta=0), 0.0)
        expected = np.eye(4)
        expected[2, 3] = 0.5
        np.testing.assert_array_almost_equal(T, expected)

    def test_pure_translation_a(self):
        T = _dh_transform(DHParam(a=0.3, alpha=0, d=0, theta=0), 0.0)
        expected = np.eye(4)
        expected[0, 3] = 0.3
        np.testing.assert_array_almost_equal(T, expected)

    def test_rotation_90_degrees(self):
        T = _dh_transform(DHParam(a=0, alpha=0, d=0, theta=0), math.pi / 2)
        # x -> y, y -> -x
        assert abs(T[0, 0]) < 1e-10
        assert abs(T[0, 1] - (-1)) < 1e-10
        assert abs(T[1, 0] - 1) < 1e-10

    def test_theta_offset_adds_to_joint(self):
        T1 = _dh_transform(DHParam(a=0.1, alpha=0.2, d=0.3, theta=0.5), 0.25)
        T2 = _dh_transform(DHParam(a=0.1, alpha=0.2, d=0.3, theta=0.0), 0.75)
        np.testing.assert_array_almost_equal(T1, T2)


class TestPlanarChain:
    @pytest.fixture
    def chain(self):
        return planar_3r_chain()

    def test_frame_names(self, chain):
        assert chain.link_names == ["base_link", "link_1", "link_2", "link_3", "tool0"]
        assert chain.link_index("tool0") == 4

    def test_zero_configuration(self, chain):
        np.testing.assert_allclose(chain.end_effector_position([0, 0, 0]), [0.9, 0.0, 0.0], atol=1e-12)

    def test_base_rotation(self, chain):
        np.testing.assert_allclose(
            chain.end_effector_position([math.pi / 2, 0, 0]), [0.0, 0.9, 0.0], atol=1e-12
        )

    def test_elbow_bend(self, chain):
        np.testing.assert_allclose(
            chain.end_effector_position([0, math.pi / 2, 0]), [0.4, 0.5, 0.0], atol=1e-12
        )

    def test_poses_start_at_identity(self, chain):
        poses = chain.compute_link_poses([0.3, -0.2, 0.1])
        assert len(poses) == 5
        np.testing.assert_array_equal(poses[0], np.eye(4))

    def test_stays_in_plane(self, chain):
        for q in ([0.1, 0.2, 0.3], [-2.0, 1.0, -1.5]):
            for pose in chain.compute_link_poses(q):
                assert abs(pose[2, 3]) < 1e-12


class TestSpatialChain:
    @pytest.fixture
    def chain(self):
        return arm_6dof_chain()

    def test_pose_count(self, chain):
        assert chain.n_joints == 6
        assert len(chain.compute_link_poses(np.zeros(6))) == 8

    def test_rotation_matrix_is_orthonormal(self, chain):
        for T in chain.compute_link_poses([0.1, -0.2, 0.3, 0.4, -0.1, 0.2]):
            R = T[:3, :3]
            np.testing.assert_array_almost_equal(R @ R.T, np.eye(3), decimal=10)
            assert np.linalg.det(R) == pytest.approx(1.0)
            np.testing.assert_array_almost_equal(T[3, :], [0, 0, 0, 1])

    def test_reach_is_bounded(self, chain):
        rng = np.random.default_rng(0)
        total = sum(p.a + abs(p.d) for p in ARM_6DOF_DH_PARAMS) + chain.tool.d
        for _ in range(50):
            q = rng.uniform(-3.0, 3.0, size=6)
            assert np.linalg.norm(chain.end_effector_position(q)) <= total + 1e-9

    def test_effector_pose_is_last_frame(self, chain):
        q = [0.2, 0.1, -0.3, 0.0, 0.5, 0.0]
        np.testing.assert_array_equal(chain.end_effector_pose(q), chain.compute_link_poses(q)[-1])


class TestChainErrors:
    def test_wrong_joint_count(self):
        with pytest.raises(ValueError):
            planar_3r_chain().compute_link_poses([0.0, 0.0])

    def test_wrong_name_count(self):
        with pytest.raises(ValueError):
            KinematicChain(PLANAR_3R_DH_PARAMS, link_names=["a", "b"])

    def test_unknown_link(self):
        with pytest.raises(KeyError):
            planar_3r_chain().link_index("gripper")

    def test_chain_without_tool(self):
        chain = KinematicChain(PLANAR_3R_DH_PARAMS)
        assert chain.link_names[-1] == "link_3"
        np.testing.assert_allclose(chain.end_effector_position([0, 0, 0]), [0.7, 0.0, 0.0], atol=1e-12)
