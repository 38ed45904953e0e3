"""
Operational-Space Control
=========================

Hierarchical operational-space control for robots: prioritized tasks
combined through null-space projection cascades, plus a joint-space
PD/gravity-compensation controller.
"""

from .status import Status, ErrorKind, ControlError, ConfigurationError, ComputationError, TaskLookupError
from .control import GcController, TaskController, Servo

__version__ = "0.1.0"

__all__ = [
    'Status',
    'ErrorKind',
    'ControlError',
    'ConfigurationError',
    'ComputationError',
    'TaskLookupError',
    'GcController',
    'TaskController',
    'Servo'
]
