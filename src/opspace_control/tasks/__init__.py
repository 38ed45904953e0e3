"""
Control tasks
Task objects ranked by priority in the task controller
"""

from .base import Task
from .gc_tasks import GcTask, GcDampingTask
from .op_position import OpPositionTask
from .registry import TaskRegistry, TaskFactory, default_registry

__all__ = [
    'Task',
    'GcTask',
    'GcDampingTask',
    'OpPositionTask',
    'TaskRegistry',
    'TaskFactory',
    'default_registry'
]
