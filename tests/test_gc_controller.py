"""
Tests for the joint-space controller.
Run with: pytest tests/ -v
"""

import numpy as np
import pytest

from opspace_control import ErrorKind, GcController
from opspace_control.core import ComInfo, GcControllerData, RigidBody

from conftest import CartesianDynamics, make_robot


@pytest.fixture
def controller(gc_data, dynamics):
    ctrl = GcController()
    assert ctrl.init(gc_data, dynamics)
    return ctrl


class TestInit:
    """Validation and COM record binding"""

    def test_init_succeeds(self, controller, gc_data):
        assert controller.has_been_init()
        assert [c.name for c in gc_data.gc_model.coms] == ['link0', 'link1', 'link2']
        assert [c.link_dynamic_id for c in gc_data.gc_model.coms] == [0, 1, 2]

    def test_total_mass_excludes_root(self, dynamics):
        robot = make_robot(3, masses=[1.0, 2.0, 3.5])
        robot.links[0].mass = 100.0  # root
        data = GcControllerData.from_dict({}, robot)
        ctrl = GcController()
        assert ctrl.init(data, dynamics)
        assert data.gc_model.mass == pytest.approx(6.5)

    def test_null_data_fails(self, dynamics):
        ctrl = GcController()
        status = ctrl.init(None, dynamics)
        assert not status
        assert status.kind == ErrorKind.CONFIGURATION
        assert not ctrl.has_been_init()

    def test_uninitialized_data_fails(self, gc_data, dynamics):
        gc_data.has_been_init = False
        status = GcController().init(gc_data, dynamics)
        assert not status
        assert "Uninitialized data" in status.message

    def test_null_dynamics_fails(self, gc_data):
        status = GcController().init(gc_data, None)
        assert not status
        assert "NULL dynamics" in status.message

    def test_uninitialized_dynamics_fails(self, gc_data):
        dyn = CartesianDynamics(3)
        dyn._has_been_init = False
        status = GcController().init(gc_data, dyn)
        assert not status
        assert "Uninitialized dynamics" in status.message

    def test_more_com_records_than_links_fails(self, gc_data, dynamics):
        gc_data.gc_model.coms.append(ComInfo())
        ctrl = GcController()
        status = ctrl.init(gc_data, dynamics)
        assert not status
        assert "more entries" in status.message
        assert not ctrl.has_been_init()

    def test_fewer_com_records_than_links_fails(self, gc_data, dynamics):
        gc_data.gc_model.coms.pop()
        status = GcController().init(gc_data, dynamics)
        assert not status
        assert "less entries" in status.message

    def test_root_at_end_is_skipped(self, dynamics):
        robot = make_robot(3)
        root = robot.links.pop(0)
        robot.links.append(root)
        data = GcControllerData.from_dict({}, robot)
        ctrl = GcController()
        assert ctrl.init(data, dynamics)
        assert [c.name for c in data.gc_model.coms] == ['link0', 'link1', 'link2']

    def test_extra_link_after_root_fails(self, dynamics):
        robot = make_robot(3)
        data = GcControllerData.from_dict({}, robot)
        robot.links.append(RigidBody(name='extra', mass=1.0))
        status = GcController().init(data, dynamics)
        assert not status

    def test_reset(self, controller):
        assert controller.reset()
        assert not controller.has_been_init()
        assert controller.data is None
        assert controller.dynamics is None
        assert not controller.compute_control_forces()


class TestControlLaws:
    """Decoupled force, saturation and mass-matrix mapping"""

    def test_pd_example(self, controller, gc_data):
        # q = 0, q_des = [0.1, 0, 0], kp = 10, kv = 3, A = I, g = 0
        assert controller.compute_dynamics()
        assert controller.compute_control_forces()
        np.testing.assert_allclose(gc_data.force_gc_star, [1.0, 0.0, 0.0])
        np.testing.assert_allclose(controller.get_control_forces(), [1.0, 0.0, 0.0])
        assert controller.get_control_forces().shape == (3,)

    def test_full_law_feedforward_and_damping(self, controller, gc_data):
        gc_data.des_ddq = np.array([0.5, 0.0, -0.5])
        gc_data.des_dq = np.array([0.0, 1.0, 0.0])
        gc_data.io.sensors.dq[:] = [1.0, 0.0, 0.0]
        controller.compute_dynamics()
        controller.compute_control_forces()
        expected = np.array([0.5 - 3.0 + 1.0, 3.0, -0.5])
        np.testing.assert_allclose(gc_data.des_force_gc, expected)

    def test_pd_only_law(self, controller, gc_data):
        gc_data.des_ddq = np.array([5.0, 5.0, 5.0])  # ignored
        gc_data.io.sensors.q[:] = [0.2, 0.0, -0.1]
        gc_data.io.sensors.dq[:] = [0.0, 1.0, 0.0]
        controller.compute_dynamics()
        assert controller.compute_pd_control_forces()
        expected = -3.0 * np.array([0.0, 1.0, 0.0]) - 10.0 * (np.array([0.2, 0.0, -0.1]) - gc_data.des_q)
        np.testing.assert_allclose(gc_data.des_force_gc, expected)

    def test_float_law_is_damping_only(self, controller, gc_data):
        gc_data.io.sensors.q[:] = [3.0, 3.0, 3.0]
        gc_data.io.sensors.dq[:] = [1.0, -2.0, 0.0]
        controller.compute_dynamics()
        assert controller.compute_float_forces()
        np.testing.assert_allclose(gc_data.des_force_gc, [-3.0, 6.0, 0.0])

    @pytest.mark.parametrize("law", [
        "compute_control_forces",
        "compute_pd_control_forces",
        "compute_float_forces",
    ])
    def test_saturation_before_mass_matrix(self, gc_data, law):
        A = np.diag([2.0, 3.0, 4.0])
        g = np.array([0.0, 0.0, -9.81])
        dyn = CartesianDynamics(3, A=A, g=g)
        gc_data.force_gc_max = np.array([0.5, 0.5, 0.5])
        gc_data.force_gc_min = np.array([-0.5, -0.5, -0.5])
        gc_data.io.sensors.q[:] = [-1.0, 2.0, 0.0]
        gc_data.io.sensors.dq[:] = [-1.0, 1.0, 0.0]

        ctrl = GcController()
        assert ctrl.init(gc_data, dyn)
        assert ctrl.compute_dynamics()
        assert getattr(ctrl, law)()

        f_star = gc_data.force_gc_star
        assert np.all(f_star <= gc_data.force_gc_max)
        assert np.all(f_star >= gc_data.force_gc_min)
        np.testing.assert_allclose(gc_data.des_force_gc, A @ f_star + g)
        # The final torque itself is not clamped
        assert np.max(np.abs(gc_data.des_force_gc)) > 0.5

    def test_gravity_compensation_at_rest(self, gc_data):
        g = np.array([1.0, 2.0, 3.0])
        ctrl = GcController()
        ctrl.init(gc_data, CartesianDynamics(3, g=g))
        gc_data.des_q = np.zeros(3)
        ctrl.compute_dynamics()
        ctrl.compute_control_forces()
        np.testing.assert_allclose(gc_data.des_force_gc, g)

    def test_dynamics_failure_is_reported(self, controller, dynamics):
        dynamics.fail_update = True
        status = controller.compute_dynamics()
        assert not status
        assert status.kind == ErrorKind.COMPUTATION

    def test_uninitialized_controller_fails(self):
        ctrl = GcController()
        assert not ctrl.compute_dynamics()
        assert not ctrl.compute_pd_control_forces()
        assert not ctrl.compute_float_forces()
        assert ctrl.get_control_forces() is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
