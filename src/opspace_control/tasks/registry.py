#!/usr/bin/env python3
"""
Task type registry
Maps type tags (e.g. "TaskOpPos") to task factories
"""

import logging
from typing import Callable, Dict, List, Optional

from .base import Task
from .gc_tasks import GcDampingTask, GcTask
from .op_position import OpPositionTask

logger = logging.getLogger(__name__)

TaskFactory = Callable[[], Task]


class TaskRegistry:
    """Explicit name -> factory lookup for task computational objects"""

    def __init__(self, factories: Optional[Dict[str, TaskFactory]] = None):
        self._factories: Dict[str, TaskFactory] = dict(factories or {})

    def register(self, type_task: str, factory: TaskFactory, replace: bool = False) -> bool:
        """Register a factory; fails if the tag is taken (unless replace)"""
        if type_task in self._factories and not replace:
            logger.error("TaskRegistry::register() : Type '%s' is already registered", type_task)
            return False
        self._factories[type_task] = factory
        logger.debug("Registered task type '%s'", type_task)
        return True

    def unregister(self, type_task: str) -> bool:
        return self._factories.pop(type_task, None) is not None

    def lookup(self, type_task: str) -> Optional[TaskFactory]:
        return self._factories.get(type_task)

    def create(self, type_task: str) -> Optional[Task]:
        """Instantiate a task of the given type, or None if unregistered"""
        factory = self.lookup(type_task)
        return None if factory is None else factory()

    def registered_types(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, type_task: str) -> bool:
        return type_task in self._factories


def default_registry() -> TaskRegistry:
    """Registry holding the built-in task types"""
    return TaskRegistry({
        'TaskOpPos': OpPositionTask,
        'TaskGc': GcTask,
        'TaskGcDamping': GcDampingTask,
    })
