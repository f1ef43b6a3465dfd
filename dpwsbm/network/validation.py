"""Precondition checks for weight matrices handed to the sampler."""

import logging

import numpy as np

log = logging.getLogger(__name__)

SYMMETRY_ATOL = 1e-10


class InvalidInputError(ValueError):
    """Raised when a weight matrix violates the sampler's preconditions."""


def validate_weight_matrix(weights: np.ndarray) -> list[str]:
    """Validate a weight matrix against the sampler's input contract.

    Checks (cheapest first):
    1. Two-dimensional and square
    2. All entries finite
    3. Zero diagonal
    4. Symmetric (within SYMMETRY_ATOL)
    5. Off-diagonal entries strictly inside (-1, 1)

    Args:
        weights: Candidate weight matrix.

    Returns:
        List of error strings (empty = valid matrix).
    """
    errors: list[str] = []
    W = np.asarray(weights)

    # 1. Shape
    if W.ndim != 2 or W.shape[0] != W.shape[1]:
        errors.append(f"Weight matrix must be square, got shape {W.shape}")
        return errors
    if W.shape[0] == 0:
        errors.append("Weight matrix is empty")
        return errors
    if not np.issubdtype(W.dtype, np.number) or np.iscomplexobj(W):
        errors.append(f"Weight matrix must be real-valued, got {W.dtype}")
        return errors

    # 2. Finite
    n_bad = int((~np.isfinite(W)).sum())
    if n_bad:
        errors.append(f"Weight matrix has {n_bad} non-finite entries")
        return errors

    # 3. Zero diagonal
    diag = np.diag(W)
    if np.any(diag != 0):
        errors.append(
            f"Diagonal must be zero: max |diag| = {np.abs(diag).max():.3g}"
        )

    # 4. Symmetry
    asym = np.abs(W - W.T).max()
    if asym > SYMMETRY_ATOL:
        errors.append(f"Weight matrix is not symmetric: max |W - W^T| = {asym:.3g}")

    # 5. Open interval
    off_diag = W[~np.eye(W.shape[0], dtype=bool)]
    n_out = int((np.abs(off_diag) >= 1.0).sum())
    if n_out:
        errors.append(
            f"{n_out} off-diagonal entries outside the open interval (-1, 1)"
        )

    return errors


def check_weight_matrix(weights: np.ndarray) -> np.ndarray:
    """Validate and return the weight matrix as a float64 array.

    Raises:
        InvalidInputError: Listing every violated precondition.
    """
    errors = validate_weight_matrix(weights)
    if errors:
        raise InvalidInputError("Invalid weight matrix: " + "; ".join(errors))
    W = np.asarray(weights, dtype=np.float64)
    if W.shape[0] < 2:
        log.warning("Weight matrix has a single node; there are no edges to fit")
    return W
