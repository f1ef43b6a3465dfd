"""Fisher z-transform between bounded edge weights and the real line."""

import numpy as np


def fisher_transform(weights: np.ndarray) -> np.ndarray:
    """Map weights in (-1, 1) to the real line: 0.5 * ln((1 + w) / (1 - w)).

    Entries with |w| >= 1 come out as +/-inf or nan; callers reject those
    before transforming (see validate_weight_matrix).
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.arctanh(np.asarray(weights, dtype=np.float64))


def inverse_fisher_transform(transformed: np.ndarray) -> np.ndarray:
    """Map real values back to (-1, 1): (e^{2x} - 1) / (e^{2x} + 1).

    Used to read recovered block means on the correlation scale; the
    sampler itself never calls it.
    """
    return np.tanh(np.asarray(transformed, dtype=np.float64))
