"""
Tests for the pinocchio dynamics engine
Run with: pytest tests/ -v
"""

from pathlib import Path

import numpy as np
import pytest

pin = pytest.importorskip("pinocchio")

from opspace_control import TaskController
from opspace_control.core import GcModel, SensorState, TaskControllerData, load_config
from opspace_control.dynamics.pinocchio_dynamics import PinocchioDynamics, topology_from_model

CONFIG_PATH = Path(__file__).parent.parent / "config" / "arm_config.yaml"


@pytest.fixture
def model():
    return pin.buildSampleModelManipulator()


@pytest.fixture
def engine(model):
    return PinocchioDynamics(model)


def random_sensors(model, seed=0):
    rng = np.random.default_rng(seed)
    return SensorState(
        q=rng.uniform(-1.0, 1.0, model.nq),
        dq=rng.uniform(-0.5, 0.5, model.nv),
        ddq=np.zeros(model.nv)
    )


def gc_model_for(model):
    gc_model = GcModel()
    gc_model.init(topology_from_model(model))
    return gc_model


class TestTopology:

    def test_joints_become_links(self, model):
        robot = topology_from_model(model, name="arm")
        assert robot.name == "arm"
        assert robot.dof == model.nv
        assert robot.links[0].is_root
        assert len(robot.non_root_links()) == model.njoints - 1
        assert robot.link(model.names[2]).parent_name == model.names[1]


class TestModelMatrices:

    def test_mass_matrix_and_gravity(self, model, engine):
        sensors = random_sensors(model)
        gc_model = gc_model_for(model)
        assert engine.update_model_matrices(sensors, gc_model)

        A = gc_model.A
        np.testing.assert_allclose(A, A.T, atol=1e-12)
        assert np.all(np.linalg.eigvalsh(A) > 0)
        np.testing.assert_allclose(A @ gc_model.A_inv, np.eye(model.nv), atol=1e-8)

        g = pin.rnea(model, model.createData(), sensors.q, np.zeros(model.nv), np.zeros(model.nv))
        np.testing.assert_allclose(gc_model.g, g, atol=1e-10)

    def test_size_mismatch(self, model, engine):
        gc_model = gc_model_for(model)
        assert not engine.update_model_matrices(SensorState.zeros(model.nv + 1), gc_model)

    def test_unknown_link(self, engine):
        assert engine.get_id_for_link("no_such_link") is None
        assert engine.get_id_for_link("wrist2_joint") is not None


class TestKinematics:

    def test_jacobian_matches_finite_differences(self, model, engine):
        sensors = random_sensors(model, seed=3)
        link_id = model.njoints - 1
        point = np.array([0.0, 0.05, 0.1])

        J = engine.compute_jacobian(link_id, point, sensors)
        assert J.shape == (6, model.nv)

        eps = 1e-6
        J_num = np.zeros((3, model.nv))
        for i in range(model.nv):
            dq = np.zeros(model.nv)
            dq[i] = eps
            plus = SensorState(q=sensors.q + dq, dq=sensors.dq, ddq=sensors.ddq)
            minus = SensorState(q=sensors.q - dq, dq=sensors.dq, ddq=sensors.ddq)
            J_num[:, i] = (engine.compute_position(link_id, point, plus)
                           - engine.compute_position(link_id, point, minus)) / (2 * eps)
        np.testing.assert_allclose(J[:3], J_num, atol=1e-6)


class TestControlTick:
    """Full tick on the sample manipulator"""

    def build(self, model, tasks=None):
        cfg = load_config(str(CONFIG_PATH))['task_controller']
        if tasks is not None:
            cfg['tasks'] = tasks
        for task_cfg in cfg['tasks']:
            if task_cfg.get('type') == 'TaskOpPos':
                task_cfg['parent_link'] = model.names[model.njoints - 1]
        data = TaskControllerData.from_dict(cfg, topology_from_model(model))
        ctrl = TaskController()
        assert ctrl.init(data, PinocchioDynamics(model))
        return ctrl, data

    def test_hand_and_posture(self, model):
        ctrl, data = self.build(model)
        data.io.sensors.q[:] = random_sensors(model, seed=1).q
        assert ctrl.compute_dynamics()
        assert ctrl.compute_control_forces()

        hand = ctrl.get_task('hand')
        posture = ctrl.get_task('posture')
        np.testing.assert_allclose(posture.data.range_space, hand.data.null_space)
        command = ctrl.get_control_forces()
        assert command.shape == (model.nv,)
        assert np.all(np.isfinite(command))

    def test_posture_at_goal_compensates_gravity(self, model):
        ctrl, data = self.build(model, tasks=[
            {'name': 'posture', 'type': 'TaskGc', 'priority': 0, 'kp': 20, 'kv': 5},
        ])
        assert ctrl.compute_dynamics()
        assert ctrl.compute_control_forces()
        np.testing.assert_allclose(ctrl.get_control_forces(), data.gc_model.g, atol=1e-10)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
