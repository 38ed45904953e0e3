#!/usr/bin/env python3
"""
Task Controller
Hierarchical operational-space control with null-space cascades

Tasks are grouped into priority levels. Level 0 acts in the full joint
space; every following level only acts in the space left unused by the
levels above it. See Luis Sentis' thesis for the theory.
"""

import logging
import numpy as np
from typing import Optional

from .servo import Servo
from ..core.config import TaskControllerData
from ..core.priority_list import PriorityTaskList
from ..dynamics.base import DynamicsBase
from ..tasks.base import Task
from ..tasks.registry import TaskRegistry, default_registry
from ..status import ErrorKind, Status, fail

logger = logging.getLogger(__name__)


class TaskController:
    """
    Multi-task controller using prioritized null-space projection

    One control tick:
        compute_dynamics()        # A, g, task models, range spaces
        compute_control_forces()  # task servos, servo sum, command

    With a single task the cascade is skipped and the task acts in the
    whole joint space.
    """

    def __init__(self, registry: Optional[TaskRegistry] = None):
        """
        Args:
            registry: Task type registry (defaults to the built-in tasks)
        """
        self.registry = registry or default_registry()
        self.data: Optional[TaskControllerData] = None
        self.dynamics: Optional[DynamicsBase] = None
        self.servo = Servo()

        self._tasks: PriorityTaskList[Task] = PriorityTaskList()
        self._task_count = 0
        self._active_task: Optional[Task] = None
        self._has_been_init = False

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def init(self, data: TaskControllerData, dynamics: DynamicsBase) -> Status:
        """
        Bind data and dynamics, then create one task object per descriptor

        Descriptors are visited level by level (0 first) and in listed
        order within a level.

        Args:
            data: Initialized task controller data
            dynamics: Initialized dynamics engine

        Returns:
            Status (the controller is uninitialized on failure)
        """
        where = "TaskController::init()"
        self.reset()

        if data is None:
            return fail(logger, where, ErrorKind.CONFIGURATION, "NULL data structure passed.")
        if not isinstance(data, TaskControllerData):
            return fail(logger, where, ErrorKind.CONFIGURATION,
                        f"Expected task controller data, got {type(data).__name__}.")
        if not data.has_been_init:
            return fail(logger, where, ErrorKind.CONFIGURATION, "Uninitialized data structure passed.")
        if dynamics is None:
            return fail(logger, where, ErrorKind.CONFIGURATION, "NULL dynamics object passed.")
        if not dynamics.has_been_init():
            return fail(logger, where, ErrorKind.CONFIGURATION, "Uninitialized dynamics object passed.")

        self.data = data
        self.dynamics = dynamics
        self._has_been_init = True

        status = self.servo.init(data.robot.name, data.servo, self._tasks)
        if not status:
            return self._abort(where, "Couldn't initialize the servo object.")

        for level, descriptors in enumerate(data.tasks_by_level()):
            for desc in descriptors:
                what = f"task {desc.name} of type {desc.type_task} at level {level}"

                factory = self.registry.lookup(desc.type_task)
                if factory is None:
                    return self._abort(where, f"Task type not registered for {what}")

                task = factory()
                if not task.init(desc, dynamics):
                    return self._abort(where, f"Could not initialize {what}")

                if not self.add_task(desc.name, task, level):
                    return self._abort(where, f"Could not add {what}")

        logger.info("TaskController '%s' initialized with %d tasks in %d levels",
                    data.name, self._task_count, self._tasks.num_levels)
        return Status.success()

    def _abort(self, where: str, message: str) -> Status:
        self._has_been_init = False
        return fail(logger, where, ErrorKind.CONFIGURATION, message)

    def reset(self) -> Status:
        """
        Remove all data references and destroy every task object

        Task objects are not kept: their concrete types and descriptors
        would have to be supplied again anyway, so init() rebuilds them.
        """
        self.data = None
        self.dynamics = None
        self.servo.reset()

        for task in self._tasks:
            task.reset()
        self._tasks.clear()
        self._task_count = 0
        self._active_task = None
        self._has_been_init = False
        return Status.success()

    def has_been_init(self) -> bool:
        return self._has_been_init

    # ------------------------------------------------------------------
    # Task management
    # ------------------------------------------------------------------

    def add_task(self, name: str, task: Task, level: int) -> Status:
        """
        Add an initialized task at a priority level (0 = highest)

        Args:
            name: Unique task name
            task: Initialized task object (the controller takes ownership)
            level: Non-negative priority level
        """
        where = "TaskController::add_task()"
        if not self._has_been_init:
            return fail(logger, where, ErrorKind.CONFIGURATION,
                        "TaskController not initialized. Can't add task.")
        if task is None:
            return fail(logger, where, ErrorKind.CONFIGURATION,
                        "Passed an empty task. Can't do anything with it.")
        if isinstance(level, bool) or not isinstance(level, (int, np.integer)) or level < 0:
            return fail(logger, where, ErrorKind.CONFIGURATION,
                        f"Invalid priority level {level!r}; levels are integers >= 0.")
        if not task.has_been_init():
            return fail(logger, where, ErrorKind.CONFIGURATION, "Passed an un-initialized task.")
        if not self._tasks.create(name, task, int(level)):
            return fail(logger, where, ErrorKind.CONFIGURATION,
                        f"A task named '{name}' already exists.")

        # Works best for only one task
        if self._task_count == 0:
            self._active_task = task
        self._task_count += 1

        logger.debug("Added task '%s' at level %d (%d tasks)", name, level, self._task_count)
        return Status.success()

    def remove_task(self, name: str) -> Status:
        """Remove a task by name and destroy its task object"""
        where = "TaskController::remove_task()"
        if not self._has_been_init:
            return fail(logger, where, ErrorKind.CONFIGURATION,
                        "TaskController not initialized. Can't remove task.")
        task = self._tasks.at(name)
        if task is None:
            return fail(logger, where, ErrorKind.LOOKUP, f"Could not find task '{name}' to delete.")

        self._tasks.erase(name)
        task.reset()

        self._task_count -= 1
        if self._task_count == 1 or self._active_task is task:
            self._active_task = self._tasks.first()

        logger.debug("Removed task '%s' (%d tasks)", name, self._task_count)
        return Status.success()

    def get_task(self, name: str) -> Optional[Task]:
        """Return the task by this name (None if there isn't one)"""
        task = self._tasks.at(name)
        if task is None:
            logger.error("TaskController::get_task() : Failed. Task '%s' not found", name)
        return task

    def get_task_level(self, name: str) -> Optional[int]:
        return self._tasks.level_of(name)

    def get_num_tasks(self, type_task: Optional[str] = None) -> int:
        """Number of tasks, optionally only those of one type tag"""
        if type_task is None:
            return self._task_count
        return sum(1 for task in self._tasks if task.data.type_task == type_task)

    @property
    def task_count(self) -> int:
        return self._task_count

    @property
    def active_task(self) -> Optional[Task]:
        return self._active_task

    @property
    def num_levels(self) -> int:
        return self._tasks.num_levels

    # ------------------------------------------------------------------
    # Computation
    # ------------------------------------------------------------------

    def compute_dynamics(self) -> Status:
        """Update A and g, every task's model, and the range spaces"""
        where = "TaskController::compute_dynamics()"
        if not self._has_been_init:
            return fail(logger, where, ErrorKind.COMPUTATION, "TaskController not initialized.")

        sensors = self.data.io.sensors
        gc_model = self.data.gc_model
        if not self.dynamics.update_model_matrices(sensors, gc_model):
            return fail(logger, where, ErrorKind.COMPUTATION, "Dynamics engine update failed.")

        if self._task_count == 0:
            return fail(logger, where, ErrorKind.CONFIGURATION, "No tasks to control.")

        if self._task_count == 1:
            status = self._active_task.compute_model(sensors, gc_model)
            if not status:
                return status
        else:
            for task in self._tasks:
                status = task.compute_model(sensors, gc_model)
                if not status:
                    return status

        return self.compute_range_spaces()

    def compute_range_spaces(self) -> Status:
        """
        Assign each task the joint space left free by higher levels

        N = I
        for each level (0 first):
            range_space of every task in the level = N
            N = N * prod(null_space of every task in the level)
        """
        where = "TaskController::compute_range_spaces()"
        if not self._has_been_init or self._task_count == 0:
            return fail(logger, where, ErrorKind.COMPUTATION, "No tasks to compute range spaces for.")
        dof = self.data.dof

        if self._task_count == 1:
            self._active_task.data.range_space = np.eye(dof)
            return Status.success()

        # Initially no part of the joint space is used up
        null_space = np.eye(dof)
        for level in range(self._tasks.num_levels):
            lvl_null_space = np.eye(dof)
            for task in self._tasks.get_level(level):
                task.data.range_space = null_space.copy()
                lvl_null_space = lvl_null_space @ task.data.null_space
            null_space = null_space @ lvl_null_space

        return Status.success()

    def compute_control_forces(self) -> Status:
        """
        Compute every task's servo force and combine them

        The actuator command is only written when every step succeeded.
        """
        where = "TaskController::compute_control_forces()"
        if not self._has_been_init:
            return fail(logger, where, ErrorKind.COMPUTATION, "TaskController not initialized.")
        if self._task_count == 0:
            return fail(logger, where, ErrorKind.CONFIGURATION, "No tasks to control.")

        sensors = self.data.io.sensors
        if self._task_count == 1:
            status = self._active_task.compute_servo(sensors)
            if not status:
                return status
            status = self.servo.compute_control_forces()
            if not status:
                return status
            command = self._active_task.data.force_gc
        else:
            for task in self._tasks:
                status = task.compute_servo(sensors)
                if not status:
                    return status
            # Filter the tasks through their range spaces
            status = self.servo.compute_control_forces()
            if not status:
                return status
            command = self.data.servo.force_gc

        # Written in place: the actuation layer holds this buffer
        self.data.io.actuators.force_gc_commanded[:] = command
        return Status.success()

    def get_control_forces(self) -> Optional[np.ndarray]:
        if self.data is None:
            return None
        return self.data.io.actuators.force_gc_commanded
