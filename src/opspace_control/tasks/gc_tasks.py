#!/usr/bin/env python3
"""
Joint-space tasks
Posture and damping objectives expressed directly in generalized coordinates
"""

import logging
import numpy as np

from .base import Task
from ..core.robot import GcModel, SensorState
from ..status import ErrorKind, Status, fail

logger = logging.getLogger(__name__)


class GcTask(Task):
    """
    Joint posture task over all generalized coordinates

    J is the identity, so the task uses up the whole joint space and
    leaves a zero null space. Goals are joint positions/velocities.
    """

    def _bind(self) -> Status:
        dof = self.data.J.shape[1]
        if self.data.task_dof != dof:
            return fail(logger, f"{type(self).__name__}::init()", ErrorKind.CONFIGURATION,
                        f"Task '{self.data.name}' must have task_dof {dof}, got {self.data.task_dof}.")
        return Status.success()

    def compute_model(self, sensors: SensorState, gc_model: GcModel) -> Status:
        if not self._has_been_init:
            return fail(logger, f"{type(self).__name__}::compute_model()",
                        ErrorKind.COMPUTATION, "Task not initialized.")
        self.gc_model = gc_model
        t = self.data
        dof = gc_model.dof

        t.J = np.eye(dof)
        t.x = sensors.q.copy()
        t.dx = sensors.dq.copy()
        t.lambda_ = gc_model.A
        t.J_dyn_inv = np.eye(dof)
        t.p = gc_model.g
        t.null_space = np.zeros((dof, dof))
        return Status.success()

    def compute_servo(self, sensors: SensorState) -> Status:
        err = self._check_model("GcTask::compute_servo()")
        if err is not None:
            return err
        t = self.data

        f_star = t.ddx_goal + t.kv * (t.dx_goal - sensors.dq) + t.kp * (t.x_goal - sensors.q)
        t.force_task_star = self.saturate(f_star)
        t.force_task = self.gc_model.A @ t.force_task_star + self.gc_model.g
        t.force_gc = t.force_task
        return Status.success()


class GcDampingTask(GcTask):
    """
    Joint damping task: F* = -kv dq

    Keeps the robot backdrivable in whatever space higher levels leave
    free. No gravity term is added.
    """

    def compute_servo(self, sensors: SensorState) -> Status:
        err = self._check_model("GcDampingTask::compute_servo()")
        if err is not None:
            return err
        t = self.data

        t.force_task_star = self.saturate(-t.kv * sensors.dq)
        t.force_task = self.gc_model.A @ t.force_task_star
        t.force_gc = t.force_task
        return Status.success()
