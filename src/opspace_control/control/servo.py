#!/usr/bin/env python3
"""
Servo
Combines every task's joint-space force through its range space
"""

import logging
import numpy as np
from typing import Optional

from ..core.priority_list import PriorityTaskList
from ..core.task_data import ServoData
from ..status import ErrorKind, Status, fail

logger = logging.getLogger(__name__)


class Servo:
    """
    Aggregates per-task forces into one commanded generalized force

        force_gc = sum_i range_space_i * force_gc_i
    """

    def __init__(self):
        self.robot_name = ""
        self.data: Optional[ServoData] = None
        self.tasks: Optional[PriorityTaskList] = None
        self._has_been_init = False

    def init(
        self,
        robot_name: str,
        servo_data: ServoData,
        tasks: PriorityTaskList
    ) -> Status:
        """
        Bind the servo to its output data and the controller's tasks

        Args:
            robot_name: Robot this servo commands
            servo_data: Initialized servo data (output)
            tasks: Task objects owned by the task controller
        """
        where = "Servo::init()"
        self.reset()
        if servo_data is None:
            return fail(logger, where, ErrorKind.CONFIGURATION, "NULL servo data passed.")
        if not servo_data.has_been_init:
            return fail(logger, where, ErrorKind.CONFIGURATION, "Uninitialized servo data passed.")
        if tasks is None:
            return fail(logger, where, ErrorKind.CONFIGURATION, "NULL task list passed.")

        self.robot_name = robot_name
        self.data = servo_data
        self.tasks = tasks
        self._has_been_init = True
        return Status.success()

    def has_been_init(self) -> bool:
        return self._has_been_init

    def compute_control_forces(self) -> Status:
        where = "Servo::compute_control_forces()"
        if not self._has_been_init:
            return fail(logger, where, ErrorKind.COMPUTATION, "Servo not initialized.")

        force_gc = np.zeros_like(self.data.force_gc)
        for task in self.tasks:
            t = task.data
            if t.force_gc.shape != force_gc.shape:
                return fail(logger, where, ErrorKind.COMPUTATION,
                            f"Task '{t.name}' force has shape {t.force_gc.shape}, "
                            f"expected {force_gc.shape}.")
            force_gc += t.range_space @ t.force_gc

        self.data.force_gc = force_gc
        return Status.success()

    def reset(self):
        self.robot_name = ""
        self.data = None
        self.tasks = None
        self._has_been_init = False
