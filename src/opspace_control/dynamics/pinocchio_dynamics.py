#!/usr/bin/env python3
"""
Pinocchio-based dynamics engine
Mass matrix, gravity, kinematics and Jacobians for the control core
"""

import logging
import numpy as np
import pinocchio as pin
from typing import Optional

from .base import DynamicsBase
from ..core.robot import GcModel, RigidBody, RobotTopology, SensorState
from ..utils.math_utils import skew_symmetric, spd_inverse, symmetrize

logger = logging.getLogger(__name__)


def topology_from_model(model: 'pin.Model', name: Optional[str] = None) -> RobotTopology:
    """
    Describe a pinocchio model as a link tree

    The universe joint becomes the root link, every other joint
    the link it moves.
    """
    links = [RigidBody(name=model.names[0], is_root=True)]
    for i in range(1, model.njoints):
        inertia = model.inertias[i]
        links.append(RigidBody(
            name=model.names[i],
            parent_name=model.names[model.parents[i]],
            mass=float(inertia.mass),
            pos_com=np.array(inertia.lever)
        ))
    return RobotTopology(name=name or model.name or 'robot', links=links, dof=model.nv)


class PinocchioDynamics(DynamicsBase):
    """
    Dynamics engine backed by a pinocchio model

    Link ids are pinocchio joint ids. Kinematics are cached for the
    sensor state seen by the last update_model_matrices() call.
    """

    def __init__(self, model: Optional['pin.Model'] = None):
        super().__init__()
        self.model = None
        self.data = None
        self._q = None
        if model is not None:
            self.init(model)

    def init(self, model: 'pin.Model') -> bool:
        if model.nq != model.nv:
            logger.error(
                "PinocchioDynamics::init() : Only nq == nv models are supported "
                "(got nq=%d, nv=%d)", model.nq, model.nv
            )
            self._has_been_init = False
            return False
        self.model = model
        self.data = model.createData()
        self._q = None
        self._has_been_init = True
        return True

    @classmethod
    def from_urdf(cls, urdf_path: str) -> 'PinocchioDynamics':
        """Load a fixed-base model from URDF"""
        return cls(pin.buildModelFromUrdf(urdf_path))

    def _update_kinematics(self, sensors: SensorState):
        q = sensors.q
        if self._q is not None and np.array_equal(q, self._q):
            return
        pin.forwardKinematics(self.model, self.data, q, sensors.dq)
        pin.computeJointJacobians(self.model, self.data, q)
        self._q = q.copy()

    def update_model_matrices(self, sensors: SensorState, gc_model: GcModel) -> bool:
        if not self._has_been_init:
            return False
        if sensors.dof != self.model.nq or gc_model.dof != self.model.nv:
            logger.error(
                "PinocchioDynamics::update_model_matrices() : Size mismatch "
                "(sensors %d, gc model %d, model %d)",
                sensors.dof, gc_model.dof, self.model.nv
            )
            return False

        self._q = None
        self._update_kinematics(sensors)

        # crba only fills the upper triangle
        A = symmetrize(pin.crba(self.model, self.data, sensors.q))
        try:
            A_inv = spd_inverse(A)
        except np.linalg.LinAlgError:
            logger.error("PinocchioDynamics::update_model_matrices() : Mass matrix is not positive definite")
            return False

        gc_model.A = A
        gc_model.A_inv = A_inv
        gc_model.g = np.array(pin.computeGeneralizedGravity(self.model, self.data, sensors.q))
        return True

    def get_id_for_link(self, name: str):
        if self.model is None or not self.model.existJointName(name):
            return None
        return self.model.getJointId(name)

    def compute_transformation(self, link_id, sensors: SensorState) -> np.ndarray:
        self._update_kinematics(sensors)
        oMi = self.data.oMi[link_id]
        T = np.eye(4)
        T[:3, :3] = oMi.rotation
        T[:3, 3] = oMi.translation
        return T

    def compute_jacobian(
        self,
        link_id,
        pos_in_parent: np.ndarray,
        sensors: SensorState
    ) -> np.ndarray:
        self._update_kinematics(sensors)
        J = np.array(pin.getJointJacobian(
            self.model, self.data, link_id,
            pin.ReferenceFrame.LOCAL_WORLD_ALIGNED
        ))
        # Shift from the joint origin to the point: v_p = v_o + w x r
        r = self.data.oMi[link_id].rotation @ pos_in_parent
        J[:3, :] -= skew_symmetric(r) @ J[3:, :]
        return J
