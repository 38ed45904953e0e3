#!/usr/bin/env python3
"""
Task computational objects
Each task computes its model (Jacobian, null space) and servo forces
"""

import logging
import numpy as np
from abc import ABC, abstractmethod
from typing import Optional

from ..core.robot import GcModel, SensorState
from ..core.task_data import TaskDescriptor
from ..dynamics.base import DynamicsBase
from ..status import ErrorKind, Status, fail

logger = logging.getLogger(__name__)


class Task(ABC):
    """
    Abstract base class for control tasks

    Each task computes:
    - Task Jacobian J and null space (compute_model)
    - Task force and its joint-space projection force_gc (compute_servo)

    The task reads its descriptor and writes J, null_space, force_task
    and force_gc into it. range_space is written by the task controller.
    """

    def __init__(self):
        self.data: Optional[TaskDescriptor] = None
        self.dynamics: Optional[DynamicsBase] = None
        self.gc_model: Optional[GcModel] = None
        self._has_been_init = False

    def init(self, descriptor: TaskDescriptor, dynamics: DynamicsBase) -> Status:
        """
        Bind the task to its descriptor and the dynamics engine

        Args:
            descriptor: Initialized task data (referenced, not copied)
            dynamics: Initialized dynamics engine

        Returns:
            Status of the binding
        """
        where = f"{type(self).__name__}::init()"
        self.reset()
        if descriptor is None:
            return fail(logger, where, ErrorKind.CONFIGURATION, "NULL task data passed.")
        if not descriptor.has_been_init:
            return fail(logger, where, ErrorKind.CONFIGURATION,
                        f"Uninitialized task data passed for '{descriptor.name}'.")
        if dynamics is None:
            return fail(logger, where, ErrorKind.CONFIGURATION, "NULL dynamics object passed.")
        if not dynamics.has_been_init():
            return fail(logger, where, ErrorKind.CONFIGURATION, "Uninitialized dynamics object passed.")

        self.data = descriptor
        self.dynamics = dynamics
        status = self._bind()
        if not status:
            self.data = None
            self.dynamics = None
            return status

        self._has_been_init = True
        return Status.success()

    def _bind(self) -> Status:
        """Task specific initialization (override to resolve links etc.)"""
        return Status.success()

    def has_been_init(self) -> bool:
        return self._has_been_init

    @property
    def name(self) -> str:
        return self.data.name if self.data is not None else ""

    @abstractmethod
    def compute_model(self, sensors: SensorState, gc_model: GcModel) -> Status:
        """Compute J, task-space inertia and the dof x dof null space"""
        pass

    @abstractmethod
    def compute_servo(self, sensors: SensorState) -> Status:
        """Compute force_task and the joint-space force force_gc"""
        pass

    def reset(self):
        """Drop all bindings; the task must be re-initialized"""
        self.data = None
        self.dynamics = None
        self.gc_model = None
        self._has_been_init = False

    def _check_model(self, where: str) -> Optional[Status]:
        if not self._has_been_init:
            return fail(logger, where, ErrorKind.COMPUTATION, "Task not initialized.")
        if self.gc_model is None:
            return fail(logger, where, ErrorKind.COMPUTATION,
                        f"No model computed for '{self.name}'.")
        return None

    def saturate(self, force_star: np.ndarray) -> np.ndarray:
        """Clamp a decoupled task force to the task's bounds"""
        return np.clip(force_star, self.data.force_task_min, self.data.force_task_max)

    def __repr__(self):
        if self.data is None:
            return f"{self.__class__.__name__}(<uninitialized>)"
        return (f"{self.__class__.__name__}('{self.data.name}', "
                f"dim={self.data.task_dof}, priority={self.data.priority})")
