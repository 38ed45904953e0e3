#!/usr/bin/env python3
"""
Joint-space (generalized coordinate) controller
PD control with gravity compensation over all dofs
"""

import logging
import numpy as np
from typing import Optional

from ..core.config import GcControllerData
from ..dynamics.base import DynamicsBase
from ..status import ErrorKind, Status, fail

logger = logging.getLogger(__name__)


class GcController:
    """
    Single objective joint-space controller

    All control laws compute a force for a dynamically decoupled unit
    mass, clamp it to [force_gc_min, force_gc_max], and map it through
    the mass matrix:

        F = A * clamp(F*) + g

    Centrifugal/Coriolis forces are not used; they destabilize the loop.
    """

    def __init__(self):
        self.data: Optional[GcControllerData] = None
        self.dynamics: Optional[DynamicsBase] = None
        self._has_been_init = False

    def init(self, data: GcControllerData, dynamics: DynamicsBase) -> Status:
        """
        Bind controller data and dynamics engine, then set up the COM records

        Args:
            data: Initialized controller data
            dynamics: Initialized dynamics engine

        Returns:
            Status (the controller is uninitialized on failure)
        """
        where = "GcController::init()"
        self.reset()

        if data is None:
            return fail(logger, where, ErrorKind.CONFIGURATION, "NULL data structure passed.")
        if not data.has_been_init:
            return fail(logger, where, ErrorKind.CONFIGURATION, "Uninitialized data structure passed.")
        if dynamics is None:
            return fail(logger, where, ErrorKind.CONFIGURATION, "NULL dynamics object passed.")
        if not dynamics.has_been_init():
            return fail(logger, where, ErrorKind.CONFIGURATION, "Uninitialized dynamics object passed.")

        self.data = data
        self.dynamics = dynamics

        status = self._bind_com_records()
        if not status:
            self.reset()
            return status

        self._has_been_init = True
        logger.info("GcController '%s' initialized (dof=%d, mass=%.3f)",
                    data.name, data.dof, data.gc_model.mass)
        return Status.success()

    def _bind_com_records(self) -> Status:
        """
        Walk the link tree and the COM records in lockstep

        The root link does not move and has no COM contribution, so it
        is skipped wherever it appears.
        """
        where = "GcController::init()"
        gc_model = self.data.gc_model
        links = self.data.robot.links
        n_links = len(links)

        gc_model.mass = 0.0
        idx = 0
        for com in gc_model.coms:
            while idx < n_links and links[idx].is_root:
                idx += 1
            if idx == n_links:
                return fail(logger, where, ErrorKind.CONFIGURATION,
                            f"Inconsistent model. Gc model has more entries [{len(gc_model.coms)}] "
                            f"than the robot's link tree [{n_links}]")

            link = links[idx]
            com.name = link.name
            com.link_dynamic_id = self.dynamics.get_id_for_link(link.name)
            com.link_ds = link
            gc_model.mass = com.contributes_to(gc_model.mass)
            idx += 1

        while idx < n_links and links[idx].is_root:
            idx += 1
        if idx != n_links:
            n_non_root = len(self.data.robot.non_root_links())
            return fail(logger, where, ErrorKind.CONFIGURATION,
                        f"Inconsistent model. Gc model has less entries [{len(gc_model.coms)}] "
                        f"than the robot's link tree [{n_non_root}]")
        return Status.success()

    def has_been_init(self) -> bool:
        return self._has_been_init

    def reset(self) -> Status:
        self.data = None
        self.dynamics = None
        self._has_been_init = False
        return Status.success()

    def compute_dynamics(self) -> Status:
        """Refresh A and g from the current sensor state"""
        where = "GcController::compute_dynamics()"
        if not self._has_been_init:
            return fail(logger, where, ErrorKind.COMPUTATION, "Controller not initialized.")
        if not self.dynamics.update_model_matrices(self.data.io.sensors, self.data.gc_model):
            return fail(logger, where, ErrorKind.COMPUTATION, "Dynamics engine update failed.")
        return Status.success()

    def compute_control_forces(self) -> Status:
        """Feedforward + PD: F* = ddq_des + kv (dq_des - dq) + kp (q_des - q)"""
        where = "GcController::compute_control_forces()"
        if not self._has_been_init:
            return fail(logger, where, ErrorKind.COMPUTATION, "Controller not initialized.")
        d = self.data
        s = d.io.sensors

        f_star = d.des_ddq + d.kv * (d.des_dq - s.dq) + d.kp * (d.des_q - s.q)
        self._apply(f_star)
        return Status.success()

    def compute_pd_control_forces(self) -> Status:
        """PD only: F* = -kv dq - kp (q - q_des)"""
        where = "GcController::compute_pd_control_forces()"
        if not self._has_been_init:
            return fail(logger, where, ErrorKind.COMPUTATION, "Controller not initialized.")
        d = self.data
        s = d.io.sensors

        f_star = -d.kv * s.dq - d.kp * (s.q - d.des_q)
        self._apply(f_star)
        return Status.success()

    def compute_float_forces(self) -> Status:
        """Gravity compensation + damping: F* = -kv dq"""
        where = "GcController::compute_float_forces()"
        if not self._has_been_init:
            return fail(logger, where, ErrorKind.COMPUTATION, "Controller not initialized.")
        d = self.data

        f_star = -d.kv * d.io.sensors.dq
        self._apply(f_star)
        return Status.success()

    def _apply(self, f_star: np.ndarray):
        d = self.data
        # Limits bound the decoupled force, not the final torque
        d.force_gc_star = np.clip(f_star, d.force_gc_min, d.force_gc_max)
        d.des_force_gc = d.gc_model.A @ d.force_gc_star + d.gc_model.g

    def get_control_forces(self) -> Optional[np.ndarray]:
        if self.data is None:
            return None
        return self.data.des_force_gc
