"""Utility modules for operational-space control"""

from .math_utils import (
    as_vector,
    parse_vector,
    skew_symmetric,
    pseudo_inverse,
    spd_inverse,
    matrix_rank,
    symmetrize
)

__all__ = [
    'as_vector', 'parse_vector', 'skew_symmetric', 'pseudo_inverse',
    'spd_inverse', 'matrix_rank', 'symmetrize'
]
