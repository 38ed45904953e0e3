"""
Dynamics engines
The pinocchio engine lives in .pinocchio_dynamics (needs the `pin` extra)
"""

from .base import DynamicsBase

__all__ = ['DynamicsBase']
