import numpy as np

from dataclasses import dataclass
from numpy.typing import NDArray


@dataclass(frozen=True)
class GDResult:
    """Output from gradient descent optimization"""

    beta: NDArray[np.float64]  # (n_features,) fitted coefficients
    loglik: float  # log-likelihood held at loop exit, one step behind beta
    n_iter: int  # iteration index at convergence, max_iter + 1 if exhausted
    converged: bool  # whether the tolerance test fired
