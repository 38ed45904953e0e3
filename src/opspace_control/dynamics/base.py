#!/usr/bin/env python3
"""
Dynamics engine interface
Rigid body algorithms are provided by an external implementation
"""

import numpy as np
from abc import ABC, abstractmethod
from typing import Any

from ..core.robot import GcModel, SensorState


class DynamicsBase(ABC):
    """
    Capabilities the control core consumes from a dynamics engine

    Link ids are opaque handles returned by get_id_for_link().
    """

    def __init__(self):
        self._has_been_init = False

    def has_been_init(self) -> bool:
        return self._has_been_init

    @abstractmethod
    def update_model_matrices(
        self,
        sensors: SensorState,
        gc_model: GcModel
    ) -> bool:
        """
        Refresh the mass matrix A (and A_inv) and gravity vector g

        Args:
            sensors: Current generalized coordinates
            gc_model: Model to write into

        Returns:
            True on success
        """
        pass

    @abstractmethod
    def get_id_for_link(self, name: str) -> Any:
        """Return the engine's id for a link, or None if unknown"""
        pass

    @abstractmethod
    def compute_transformation(
        self,
        link_id: Any,
        sensors: SensorState
    ) -> np.ndarray:
        """4x4 homogeneous transform of the link frame in world coordinates"""
        pass

    @abstractmethod
    def compute_jacobian(
        self,
        link_id: Any,
        pos_in_parent: np.ndarray,
        sensors: SensorState
    ) -> np.ndarray:
        """
        Jacobian of a point fixed in a link

        Args:
            link_id: Engine id of the link
            pos_in_parent: Point in link coordinates
            sensors: Current generalized coordinates

        Returns:
            6 x dof matrix, linear rows first, world aligned
        """
        pass

    def compute_position(
        self,
        link_id: Any,
        pos_in_parent: np.ndarray,
        sensors: SensorState
    ) -> np.ndarray:
        """World position of a point fixed in a link"""
        T = self.compute_transformation(link_id, sensors)
        return T[:3, :3] @ pos_in_parent + T[:3, 3]
