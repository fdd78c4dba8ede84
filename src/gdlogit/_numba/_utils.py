import numpy as np
from numba import njit

EPSILON = 1e-15


@njit(cache=True)
def _expit(x: float) -> float:
    if x >= 0.0:
        z = np.exp(-x)
        return 1.0 / (1.0 + z)
    z = np.exp(x)
    return z / (1.0 + z)


@njit(cache=True)
def _bernoulli_loglik(y: float, p: float) -> float:
    p = max(min(p, 1.0 - EPSILON), EPSILON)
    return y * np.log(p) + (1.0 - y) * np.log(1.0 - p)
