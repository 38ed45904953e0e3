#!/usr/bin/env python3
"""
Robot data model
Link topology, I/O buffers and the generalized-coordinate dynamic model
"""

import numpy as np
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..utils.math_utils import as_vector


@dataclass
class SensorState:
    """Generalized position, velocity and acceleration"""
    q: np.ndarray
    dq: np.ndarray
    ddq: np.ndarray

    def __post_init__(self):
        self.q = np.asarray(self.q, dtype=float)
        self.dq = np.asarray(self.dq, dtype=float)
        self.ddq = np.asarray(self.ddq, dtype=float)
        if not (self.q.shape == self.dq.shape == self.ddq.shape):
            raise ValueError(
                f"Sensor vectors differ in size: q{self.q.shape}, "
                f"dq{self.dq.shape}, ddq{self.ddq.shape}"
            )

    @classmethod
    def zeros(cls, dof: int) -> 'SensorState':
        return cls(q=np.zeros(dof), dq=np.zeros(dof), ddq=np.zeros(dof))

    @property
    def dof(self) -> int:
        return self.q.shape[0]


@dataclass
class ActuatorState:
    """Commanded generalized forces for the actuation layer"""
    force_gc_commanded: np.ndarray

    @classmethod
    def zeros(cls, dof: int) -> 'ActuatorState':
        return cls(force_gc_commanded=np.zeros(dof))


@dataclass
class RigidBody:
    """A link in the robot's branching representation"""
    name: str
    parent_name: Optional[str] = None
    mass: float = 0.0
    pos_com: np.ndarray = None
    is_root: bool = False

    def __post_init__(self):
        if self.pos_com is None:
            self.pos_com = np.zeros(3)
        self.pos_com = as_vector(self.pos_com, 3, f"{self.name}.pos_com")


@dataclass
class RobotTopology:
    """
    Ordered, already parsed link tree

    The root link is fixed and carries no dof. By default every
    other link contributes one generalized coordinate.
    """
    name: str
    links: List[RigidBody] = field(default_factory=list)
    dof: Optional[int] = None

    def __post_init__(self):
        if self.dof is None:
            self.dof = len(self.non_root_links())

    def non_root_links(self) -> List[RigidBody]:
        return [link for link in self.links if not link.is_root]

    def link(self, name: str) -> Optional[RigidBody]:
        for lnk in self.links:
            if lnk.name == name:
                return lnk
        return None

    @property
    def total_mass(self) -> float:
        return float(sum(link.mass for link in self.non_root_links()))

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> 'RobotTopology':
        """
        Build from a parsed mapping:

            name: arm
            links:
              - {name: base, is_root: true}
              - {name: link1, parent: base, mass: 1.0, com: [0, 0, 0.1]}
        """
        links = [
            RigidBody(
                name=lnk['name'],
                parent_name=lnk.get('parent'),
                mass=float(lnk.get('mass', 0.0)),
                pos_com=lnk.get('com', np.zeros(3)),
                is_root=bool(lnk.get('is_root', False))
            )
            for lnk in cfg.get('links', [])
        ]
        return cls(name=cfg.get('name', 'robot'), links=links, dof=cfg.get('dof'))


@dataclass
class RobotIO:
    """Sensor and actuator buffers shared with the actuation layer"""
    name: str = ""
    dof: int = 0
    sensors: SensorState = None
    actuators: ActuatorState = None
    has_been_init: bool = False

    def init(self, robot: RobotTopology) -> bool:
        self.name = robot.name
        self.dof = robot.dof
        self.sensors = SensorState.zeros(self.dof)
        self.actuators = ActuatorState.zeros(self.dof)
        self.has_been_init = True
        return True


@dataclass
class ComInfo:
    """Center of mass record for a single link"""
    name: str = ""
    link_dynamic_id: Any = None
    link_ds: Optional[RigidBody] = None

    def contributes_to(self, mass: float) -> float:
        """Accumulate this link's mass onto a running total"""
        if self.link_ds is None:
            return mass
        return mass + self.link_ds.mass


@dataclass
class GcModel:
    """
    Generalized coordinate dynamic model

    A is the dof x dof mass matrix and g the generalized gravity force.
    The COM records are allocated here and bound to links by the
    controller that owns the model.
    """
    A: np.ndarray = None
    A_inv: np.ndarray = None
    g: np.ndarray = None
    mass: float = 0.0
    coms: List[ComInfo] = field(default_factory=list)
    has_been_init: bool = False

    @property
    def dof(self) -> int:
        return 0 if self.g is None else self.g.shape[0]

    def init(self, robot: RobotTopology) -> bool:
        dof = robot.dof
        self.A = np.eye(dof)
        self.A_inv = np.eye(dof)
        self.g = np.zeros(dof)
        self.mass = 0.0
        self.coms = [ComInfo() for _ in robot.non_root_links()]
        self.has_been_init = True
        return True
