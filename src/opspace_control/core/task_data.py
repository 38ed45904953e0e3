#!/usr/bin/env python3
"""
Task and servo data structures
Descriptors are owned by the caller and referenced by task objects
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from ..utils.math_utils import as_vector, parse_vector


def _param_array(value: Any):
    arr = parse_vector(value) if isinstance(value, str) else np.asarray(value, dtype=float)
    # A single value is a scalar and gets broadcast by init()
    if arr.size == 1:
        return float(arr.reshape(-1)[0])
    return arr


def _param_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'on')
    return bool(value)


# Parameter keys understood by TaskDescriptor.from_params
_KNOWN_PARAMS = {
    'name', 'type', 'priority', 'task_dof', 'kp', 'kv', 'ka', 'ki',
    'ftask_max', 'ftask_min', 'parent_link', 'pos_in_parent',
    'flag_compute_op_gravity', 'x_goal', 'dx_goal', 'ddx_goal',
}


@dataclass
class TaskDescriptor:
    """
    Data for one control objective

    Written by its task object (J, null_space, forces) and by the task
    controller (range_space). Vectors given as scalars are broadcast to
    task_dof by init().
    """
    name: str
    type_task: str
    priority: int = 0
    task_dof: Optional[int] = None

    # Gains
    kp: Any = 0.0
    kv: Any = 0.0
    ka: Any = 0.0
    ki: Any = 0.0

    # Force limits on the decoupled task force
    force_task_max: Any = np.inf
    force_task_min: Any = -np.inf

    # Operational point
    parent_link: Optional[str] = None
    pos_in_parent: Any = None
    compute_op_gravity: bool = True

    # Goals
    x_goal: Any = None
    dx_goal: Any = None
    ddx_goal: Any = None

    # Task specific extras
    options: Dict[str, Any] = field(default_factory=dict)

    # Computed every tick
    x: np.ndarray = None
    dx: np.ndarray = None
    J: np.ndarray = None
    J_dyn_inv: np.ndarray = None
    lambda_: np.ndarray = None
    p: np.ndarray = None
    force_task_star: np.ndarray = None
    force_task: np.ndarray = None
    force_gc: np.ndarray = None
    range_space: np.ndarray = None
    null_space: np.ndarray = None

    has_been_init: bool = False

    def init(self, dof: int):
        """
        Validate the parameters and allocate computed state

        Raises:
            ValueError: on invalid names, levels, sizes or limits
        """
        if not self.name:
            raise ValueError("Task has no name")
        if not self.type_task:
            raise ValueError(f"Task '{self.name}' has no type")
        if isinstance(self.priority, bool) or not isinstance(self.priority, (int, np.integer)):
            raise ValueError(f"Task '{self.name}' priority must be an integer, got {self.priority!r}")
        if self.priority < 0:
            raise ValueError(f"Task '{self.name}' priority must be >= 0, got {self.priority}")
        self.priority = int(self.priority)

        if self.task_dof is None:
            self.task_dof = dof
        if int(self.task_dof) <= 0:
            raise ValueError(f"Task '{self.name}' has task_dof {self.task_dof}")
        n = self.task_dof = int(self.task_dof)

        self.kp = as_vector(self.kp, n, 'kp')
        self.kv = as_vector(self.kv, n, 'kv')
        self.ka = as_vector(self.ka, n, 'ka')
        self.ki = as_vector(self.ki, n, 'ki')
        self.force_task_max = as_vector(self.force_task_max, n, 'ftask_max')
        self.force_task_min = as_vector(self.force_task_min, n, 'ftask_min')
        if np.any(self.force_task_min > self.force_task_max):
            raise ValueError(f"Task '{self.name}' has ftask_min > ftask_max")

        self.pos_in_parent = as_vector(
            np.zeros(3) if self.pos_in_parent is None else self.pos_in_parent,
            3, 'pos_in_parent'
        )
        self.x_goal = as_vector(0.0 if self.x_goal is None else self.x_goal, n, 'x_goal')
        self.dx_goal = as_vector(0.0 if self.dx_goal is None else self.dx_goal, n, 'dx_goal')
        self.ddx_goal = as_vector(0.0 if self.ddx_goal is None else self.ddx_goal, n, 'ddx_goal')

        self.x = np.zeros(n)
        self.dx = np.zeros(n)
        self.J = np.zeros((n, dof))
        self.J_dyn_inv = np.zeros((dof, n))
        self.lambda_ = np.eye(n)
        self.p = np.zeros(n)
        self.force_task_star = np.zeros(n)
        self.force_task = np.zeros(n)
        self.force_gc = np.zeros(dof)
        self.range_space = np.eye(dof)
        self.null_space = np.eye(dof)

        self.has_been_init = True

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> 'TaskDescriptor':
        """
        Build from key-value parameters, e.g.

            name: hand, type: TaskOpPos, priority: "0", task_dof: "3",
            kp: "10", kv: "3", ftask_max: "10", ftask_min: "-10",
            parent_link: end-effector, pos_in_parent: "0.01 0.00 0.00"
        """
        def opt(key, conv=_param_array):
            return conv(params[key]) if key in params else None

        kwargs = dict(
            name=str(params.get('name', '')),
            type_task=str(params.get('type', '')),
            priority=int(params.get('priority', 0)),
            task_dof=int(params['task_dof']) if 'task_dof' in params else None,
            parent_link=params.get('parent_link'),
            pos_in_parent=opt('pos_in_parent'),
            x_goal=opt('x_goal'),
            dx_goal=opt('dx_goal'),
            ddx_goal=opt('ddx_goal'),
            options={k: v for k, v in params.items() if k not in _KNOWN_PARAMS},
        )
        for key, attr in (('kp', 'kp'), ('kv', 'kv'), ('ka', 'ka'), ('ki', 'ki'),
                          ('ftask_max', 'force_task_max'),
                          ('ftask_min', 'force_task_min')):
            if key in params:
                kwargs[attr] = _param_array(params[key])
        if 'flag_compute_op_gravity' in params:
            kwargs['compute_op_gravity'] = _param_bool(params['flag_compute_op_gravity'])
        return cls(**kwargs)


@dataclass
class ServoData:
    """Combined output of all tasks"""
    force_gc: np.ndarray = None
    has_been_init: bool = False

    def init(self, dof: int):
        self.force_gc = np.zeros(dof)
        self.has_been_init = True
