#!/usr/bin/env python3
"""
Operational-space position task
Controls the world position of a point fixed in a link
"""

import logging
import numpy as np

from .base import Task
from ..core.robot import GcModel, SensorState
from ..status import ErrorKind, Status, fail
from ..utils.math_utils import pseudo_inverse

logger = logging.getLogger(__name__)


class OpPositionTask(Task):
    """
    Point position task (3 dof)

    Model:
        Lambda = (J A^-1 J')^+
        J_dyn_inv = A^-1 J' Lambda
        N = I - J' J_dyn_inv'   (acts on joint torques)
    Servo:
        F* = ddx_goal + kv (dx_goal - dx) + kp (x_goal - x), clamped
        F = Lambda F* (+ p)
        force_gc = J' F
    """

    TASK_DOF = 3

    def __init__(self):
        super().__init__()
        self.link_id = None

    def _bind(self) -> Status:
        where = "OpPositionTask::init()"
        if self.data.task_dof != self.TASK_DOF:
            return fail(logger, where, ErrorKind.CONFIGURATION,
                        f"Task '{self.data.name}' must have task_dof 3, got {self.data.task_dof}.")
        if not self.data.parent_link:
            return fail(logger, where, ErrorKind.CONFIGURATION,
                        f"Task '{self.data.name}' has no parent link.")
        self.link_id = self.dynamics.get_id_for_link(self.data.parent_link)
        if self.link_id is None:
            return fail(logger, where, ErrorKind.CONFIGURATION,
                        f"Unknown parent link '{self.data.parent_link}' for task '{self.data.name}'.")
        return Status.success()

    def reset(self):
        super().reset()
        self.link_id = None

    def compute_model(self, sensors: SensorState, gc_model: GcModel) -> Status:
        where = "OpPositionTask::compute_model()"
        if not self._has_been_init:
            return fail(logger, where, ErrorKind.COMPUTATION, "Task not initialized.")
        self.gc_model = gc_model
        t = self.data

        J6 = self.dynamics.compute_jacobian(self.link_id, t.pos_in_parent, sensors)
        t.J = np.asarray(J6)[:3, :]
        t.x = self.dynamics.compute_position(self.link_id, t.pos_in_parent, sensors)
        t.dx = t.J @ sensors.dq

        A_inv = gc_model.A_inv
        lambda_inv = t.J @ A_inv @ t.J.T
        t.lambda_ = pseudo_inverse(lambda_inv)
        t.J_dyn_inv = A_inv @ t.J.T @ t.lambda_

        dof = gc_model.dof
        t.null_space = np.eye(dof) - t.J.T @ t.J_dyn_inv.T

        if t.compute_op_gravity:
            t.p = t.J_dyn_inv.T @ gc_model.g
        else:
            t.p = np.zeros(self.TASK_DOF)
        return Status.success()

    def compute_servo(self, sensors: SensorState) -> Status:
        err = self._check_model("OpPositionTask::compute_servo()")
        if err is not None:
            return err
        t = self.data

        f_star = t.ddx_goal + t.kv * (t.dx_goal - t.dx) + t.kp * (t.x_goal - t.x)
        t.force_task_star = self.saturate(f_star)
        t.force_task = t.lambda_ @ t.force_task_star + t.p
        t.force_gc = t.J.T @ t.force_task
        return Status.success()
