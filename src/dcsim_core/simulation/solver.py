# src/dcsim_core/simulation/solver.py
import logging
from typing import Union

import numpy as np

from ..constants import PIVOT_TOLERANCE
from .exceptions import SingularSystemError

logger = logging.getLogger(__name__)


def solve_linear_system(matrix: np.ndarray, rhs: np.ndarray) -> Union[np.ndarray, SingularSystemError]:
    """
    Solves A·x = b by Gaussian elimination with partial pivoting.

    The inputs are never modified; elimination runs on a private augmented copy.
    Among rows with equal pivot magnitude the lowest-indexed one is chosen, so the
    same system always takes the same elimination path.

    Args:
        matrix: The n×n coefficient matrix A.
        rhs: The right-hand-side vector b of length n.

    Returns:
        The solution vector x, or a `SingularSystemError` (returned, not raised) if a
        pivot's magnitude falls below PIVOT_TOLERANCE. No partial solution is produced.

    Raises:
        ValueError: If the shapes of A and b are inconsistent.
    """
    A = np.asarray(matrix, dtype=float)
    b = np.asarray(rhs, dtype=float)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"Coefficient matrix must be square, got shape {A.shape}.")
    if b.shape != (A.shape[0],):
        raise ValueError(f"Right-hand side of shape {b.shape} does not match matrix of shape {A.shape}.")

    n = A.shape[0]
    augmented = np.hstack([A, b.reshape(-1, 1)])
    logger.debug(f"Gaussian elimination on a {n}x{n} system...")

    for i in range(n):
        # np.argmax returns the first maximum, which keeps the lower row on ties.
        pivot_row = i + int(np.argmax(np.abs(augmented[i:, i])))
        if pivot_row != i:
            augmented[[i, pivot_row]] = augmented[[pivot_row, i]]
            logger.debug(f"Pivot {i}: swapped rows {i} and {pivot_row}.")

        pivot = augmented[i, i]
        if abs(pivot) < PIVOT_TOLERANCE:
            logger.debug(f"Pivot {i} has magnitude {abs(pivot):.3e}; system is singular.")
            return SingularSystemError(pivot_index=i, pivot_magnitude=float(abs(pivot)), system_size=n)

        augmented[i] /= pivot
        for r in range(i + 1, n):
            factor = augmented[r, i]
            if factor != 0.0:
                augmented[r] -= factor * augmented[i]

    x = np.zeros(n, dtype=float)
    for i in range(n - 1, -1, -1):
        x[i] = augmented[i, n] - np.dot(augmented[i, i + 1:n], x[i + 1:n])

    logger.debug("Back-substitution complete.")
    return x
