"""
Controllers
Joint-space control and prioritized task control
"""

from .gc_controller import GcController
from .servo import Servo
from .task_controller import TaskController

__all__ = [
    'GcController',
    'Servo',
    'TaskController'
]
