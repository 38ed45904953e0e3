"""Robot, controller and task data structures"""

from .robot import (
    SensorState,
    ActuatorState,
    RigidBody,
    RobotTopology,
    RobotIO,
    ComInfo,
    GcModel
)
from .task_data import TaskDescriptor, ServoData
from .config import ControllerData, GcControllerData, TaskControllerData, load_config
from .priority_list import PriorityTaskList

__all__ = [
    'SensorState', 'ActuatorState', 'RigidBody', 'RobotTopology',
    'RobotIO', 'ComInfo', 'GcModel',
    'TaskDescriptor', 'ServoData',
    'ControllerData', 'GcControllerData', 'TaskControllerData', 'load_config',
    'PriorityTaskList'
]
