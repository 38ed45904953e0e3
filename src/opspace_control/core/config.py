#!/usr/bin/env python3
"""
Controller configuration data
Per-controller gains, goals and bindings to the robot's model and I/O
"""

import numpy as np
import yaml
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .robot import GcModel, RobotIO, RobotTopology
from .task_data import ServoData, TaskDescriptor
from ..utils.math_utils import as_vector


def load_config(config_path: str) -> dict:
    """Load configuration from YAML file"""
    with open(config_path, 'r') as f:
        return yaml.safe_load(f) or {}


@dataclass
class ControllerData:
    """
    Data shared by every controller type

    The controller borrows robot, io and gc_model; it never owns them.
    """
    name: str = "controller"
    robot: Optional[RobotTopology] = None
    io: Optional[RobotIO] = None
    gc_model: Optional[GcModel] = None
    has_been_init: bool = False

    @property
    def dof(self) -> int:
        return 0 if self.io is None else self.io.dof

    def _init_base(self):
        if self.robot is None:
            raise ValueError(f"Controller '{self.name}' has no robot")
        if self.io is None or not self.io.has_been_init:
            raise ValueError(f"Controller '{self.name}' has uninitialized robot I/O")
        if self.gc_model is None or not self.gc_model.has_been_init:
            raise ValueError(f"Controller '{self.name}' has an uninitialized gc model")
        if self.io.dof != self.gc_model.dof:
            raise ValueError(
                f"Controller '{self.name}': I/O has {self.io.dof} dof, "
                f"gc model has {self.gc_model.dof}"
            )

    @staticmethod
    def _bind_robot(robot: RobotTopology):
        io = RobotIO()
        io.init(robot)
        gc_model = GcModel()
        gc_model.init(robot)
        return io, gc_model


@dataclass
class GcControllerData(ControllerData):
    """Joint-space controller data (gains, bounds and desired state)"""
    des_q: Any = 0.0
    des_dq: Any = 0.0
    des_ddq: Any = 0.0

    kp: Any = 0.0
    kv: Any = 0.0
    ka: Any = 0.0
    ki: Any = 0.0

    force_gc_max: Any = np.inf
    force_gc_min: Any = -np.inf

    des_force_gc: np.ndarray = None
    force_gc_star: np.ndarray = None

    def init(self):
        """
        Validate and broadcast all vectors to dof

        Raises:
            ValueError: on missing bindings, wrong sizes or inverted bounds
        """
        self.has_been_init = False
        self._init_base()
        dof = self.dof

        self.des_q = as_vector(self.des_q, dof, 'des_q')
        self.des_dq = as_vector(self.des_dq, dof, 'des_dq')
        self.des_ddq = as_vector(self.des_ddq, dof, 'des_ddq')
        self.kp = as_vector(self.kp, dof, 'kp')
        self.kv = as_vector(self.kv, dof, 'kv')
        self.ka = as_vector(self.ka, dof, 'ka')
        self.ki = as_vector(self.ki, dof, 'ki')
        self.force_gc_max = as_vector(self.force_gc_max, dof, 'force_gc_max')
        self.force_gc_min = as_vector(self.force_gc_min, dof, 'force_gc_min')
        if np.any(self.force_gc_min > self.force_gc_max):
            raise ValueError(f"Controller '{self.name}' has force_gc_min > force_gc_max")

        self.des_force_gc = np.zeros(dof)
        self.force_gc_star = np.zeros(dof)
        self.has_been_init = True

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any], robot: RobotTopology) -> 'GcControllerData':
        """
        Build and initialize from a config mapping, e.g.

            name: gc_ctrl
            kp: 100
            kv: [20, 20, 20]
            force_gc_max: 50
        """
        io, gc_model = cls._bind_robot(robot)
        data = cls(
            name=cfg.get('name', 'gc_controller'),
            robot=robot, io=io, gc_model=gc_model,
            des_q=cfg.get('des_q', 0.0),
            des_dq=cfg.get('des_dq', 0.0),
            des_ddq=cfg.get('des_ddq', 0.0),
            kp=cfg.get('kp', 0.0),
            kv=cfg.get('kv', 0.0),
            ka=cfg.get('ka', 0.0),
            ki=cfg.get('ki', 0.0),
            force_gc_max=cfg.get('force_gc_max', np.inf),
            force_gc_min=cfg.get('force_gc_min', -np.inf)
        )
        data.init()
        return data

    @classmethod
    def from_yaml(cls, filepath: str, robot: RobotTopology) -> 'GcControllerData':
        """Load from the `gc_controller` section of a YAML file"""
        return cls.from_dict(load_config(filepath).get('gc_controller', {}), robot)


@dataclass
class TaskControllerData(ControllerData):
    """Task controller data: the task descriptors and the servo output"""
    tasks: List[TaskDescriptor] = field(default_factory=list)
    servo: ServoData = field(default_factory=ServoData)

    def init(self):
        """
        Validate the bindings and initialize every task descriptor

        Raises:
            ValueError: on missing bindings, duplicate names or bad tasks
        """
        self.has_been_init = False
        self._init_base()
        names = [t.name for t in self.tasks]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"Controller '{self.name}' has duplicate task names {dupes}")
        for task in self.tasks:
            task.init(self.dof)
        self.servo.init(self.dof)
        self.has_been_init = True

    def tasks_by_level(self) -> List[List[TaskDescriptor]]:
        """Descriptors grouped by priority level, in listed order within a level"""
        if not self.tasks:
            return []
        levels = [[] for _ in range(max(t.priority for t in self.tasks) + 1)]
        for task in self.tasks:
            levels[task.priority].append(task)
        return levels

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any], robot: RobotTopology) -> 'TaskControllerData':
        """
        Build and initialize from a config mapping, e.g.

            name: opc
            tasks:
              - {name: hand, type: TaskOpPos, priority: 0, parent_link: link3, kp: 100}
              - {name: posture, type: TaskGc, priority: 1, kp: 10, kv: 3}
        """
        io, gc_model = cls._bind_robot(robot)
        data = cls(
            name=cfg.get('name', 'task_controller'),
            robot=robot, io=io, gc_model=gc_model,
            tasks=[TaskDescriptor.from_params(p) for p in cfg.get('tasks', [])]
        )
        data.init()
        return data

    @classmethod
    def from_yaml(cls, filepath: str, robot: RobotTopology) -> 'TaskControllerData':
        """Load from the `task_controller` section of a YAML file"""
        return cls.from_dict(load_config(filepath).get('task_controller', {}), robot)
