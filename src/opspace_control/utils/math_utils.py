#!/usr/bin/env python3
"""
Mathematical utilities for operational-space control
Vector broadcasting, skew matrices, and (pseudo) inverses
"""

import numpy as np
from scipy import linalg
from typing import Optional, Sequence, Union


def as_vector(
    value: Union[float, Sequence[float], np.ndarray],
    size: int,
    name: str = "vector"
) -> np.ndarray:
    """
    Convert a scalar or sequence into a float vector of a given size

    Args:
        value: Scalar (broadcast) or sequence
        size: Required length
        name: Used in the error message

    Returns:
        Float vector of shape (size,)

    Raises:
        ValueError: if a sequence of the wrong length was given
    """
    arr = np.asarray(value, dtype=float)
    if arr.ndim == 0:
        return np.full(size, float(arr))
    arr = arr.reshape(-1)
    if arr.shape[0] != size:
        raise ValueError(f"{name} has {arr.shape[0]} entries, expected {size}")
    return arr.copy()


def parse_vector(text: str) -> np.ndarray:
    """Parse a whitespace separated list of numbers ("0.01 0 0")"""
    return np.array([float(tok) for tok in str(text).split()])


def skew_symmetric(v: np.ndarray) -> np.ndarray:
    """
    Create skew-symmetric matrix from vector

    Args:
        v: 3D vector

    Returns:
        3x3 skew-symmetric matrix such that skew(v) @ u = v x u
    """
    return np.array([
        [0, -v[2], v[1]],
        [v[2], 0, -v[0]],
        [-v[1], v[0], 0]
    ])


def pseudo_inverse(M: np.ndarray, rtol: Optional[float] = 1e-6) -> np.ndarray:
    """
    Moore-Penrose pseudo-inverse with a relative singular value cutoff

    Singular directions (e.g. a task at a kinematic singularity)
    are dropped instead of blowing up.
    """
    return linalg.pinv(M, atol=0.0, rtol=rtol)


def spd_inverse(A: np.ndarray) -> np.ndarray:
    """
    Inverse of a symmetric positive-definite matrix (mass matrix)

    Raises:
        numpy.linalg.LinAlgError: if A is not positive definite
    """
    c, lower = linalg.cho_factor(A)
    return linalg.cho_solve((c, lower), np.eye(A.shape[0]))


def matrix_rank(M: np.ndarray, tol: float = 1e-8) -> int:
    """Numerical rank from singular values"""
    if M.size == 0:
        return 0
    s = linalg.svdvals(M)
    return int(np.sum(s > tol * max(1.0, s[0])))


def symmetrize(M: np.ndarray) -> np.ndarray:
    """Fill the lower triangle from the upper one"""
    return np.triu(M) + np.triu(M, 1).T
