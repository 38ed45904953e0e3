"""
Shared fixtures for the control core tests
Run with: pytest tests/ -v
"""

import logging
import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from opspace_control.core import (
    GcControllerData,
    RigidBody,
    RobotTopology,
    TaskControllerData,
    TaskDescriptor,
)
from opspace_control.dynamics import DynamicsBase
from opspace_control.status import ErrorKind, Status, fail
from opspace_control.tasks import Task, default_registry


class CartesianDynamics(DynamicsBase):
    """
    Chain of prismatic joints along x, y, z, x, ...

    Link k sits at sum_{i<=k} q_i e_(i mod 3) with identity rotation.
    A and g are fixed and can be set by the test.
    """

    def __init__(self, dof: int = 3, A: np.ndarray = None, g: np.ndarray = None):
        super().__init__()
        self.dof = dof
        self.A = np.eye(dof) if A is None else np.asarray(A, dtype=float)
        self.g = np.zeros(dof) if g is None else np.asarray(g, dtype=float)
        self.fail_update = False
        self.update_count = 0
        self._has_been_init = True

    def _axis(self, i: int) -> np.ndarray:
        e = np.zeros(3)
        e[i % 3] = 1.0
        return e

    def update_model_matrices(self, sensors, gc_model) -> bool:
        self.update_count += 1
        if self.fail_update:
            return False
        gc_model.A = self.A.copy()
        gc_model.A_inv = np.linalg.inv(self.A)
        gc_model.g = self.g.copy()
        return True

    def get_id_for_link(self, name: str):
        if name.startswith('link') and name[4:].isdigit() and int(name[4:]) < self.dof:
            return int(name[4:])
        return None

    def compute_transformation(self, link_id, sensors) -> np.ndarray:
        T = np.eye(4)
        for i in range(link_id + 1):
            T[:3, 3] += sensors.q[i] * self._axis(i)
        return T

    def compute_jacobian(self, link_id, pos_in_parent, sensors) -> np.ndarray:
        J = np.zeros((6, self.dof))
        for i in range(link_id + 1):
            J[:3, i] = self._axis(i)
        return J


class FixedTask(Task):
    """Task with a prescribed null space and joint force (from options)"""

    def compute_model(self, sensors, gc_model) -> Status:
        if not self.has_been_init():
            return fail_task("compute_model")
        self.gc_model = gc_model
        dof = gc_model.dof
        self.data.null_space = np.asarray(self.data.options.get('null_space', np.eye(dof)), dtype=float)
        return Status.success()

    def compute_servo(self, sensors) -> Status:
        if self.data.options.get('fail_servo', False):
            return fail_task("compute_servo")
        self.data.force_gc = np.asarray(self.data.options['force_gc'], dtype=float)
        return Status.success()


def fail_task(where):
    return fail(logging.getLogger(__name__), f"FixedTask::{where}()",
                ErrorKind.COMPUTATION, "forced failure")


def make_robot(dof: int = 3, masses=None) -> RobotTopology:
    masses = masses if masses is not None else [1.0] * dof
    links = [RigidBody(name='base', is_root=True)]
    for i in range(dof):
        links.append(RigidBody(
            name=f'link{i}',
            parent_name='base' if i == 0 else f'link{i-1}',
            mass=masses[i]
        ))
    return RobotTopology(name='cartesian', links=links)


def make_task_data(robot: RobotTopology, tasks) -> TaskControllerData:
    data = TaskControllerData.from_dict({'name': 'test_ctrl'}, robot)
    data.tasks = list(tasks)
    data.init()
    return data


def random_projector(dof: int, rank: int, seed: int) -> np.ndarray:
    """Orthogonal projector onto the complement of a random subspace"""
    rng = np.random.default_rng(seed)
    J = rng.standard_normal((rank, dof))
    return np.eye(dof) - np.linalg.pinv(J) @ J


@pytest.fixture
def robot():
    return make_robot(3)


@pytest.fixture
def dynamics():
    return CartesianDynamics(3)


@pytest.fixture
def registry():
    reg = default_registry()
    reg.register('TaskFixed', FixedTask)
    return reg


@pytest.fixture
def gc_data(robot):
    return GcControllerData.from_dict({
        'name': 'gc',
        'kp': [10.0, 10.0, 10.0],
        'kv': [3.0, 3.0, 3.0],
        'des_q': [0.1, 0.0, 0.0],
        'force_gc_max': 100.0,
        'force_gc_min': -100.0,
    }, robot)


@pytest.fixture
def posture_descriptor():
    return TaskDescriptor(
        name='posture', type_task='TaskGc', priority=0,
        kp=10.0, kv=3.0, x_goal=[0.1, 0.0, 0.0],
        force_task_max=100.0, force_task_min=-100.0
    )
