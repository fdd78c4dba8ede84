try:
    import numba  # noqa: F401

    NUMBA_AVAILABLE = True
except ImportError:
    NUMBA_AVAILABLE = False

from gdlogit._solvers import FixedStep, gradient_descent
from gdlogit._utils import GDResult
from gdlogit.logistic import (
    GDLogisticRegression,
    log_likelihood,
    logistic_gradient_descent,
    sigmoid,
)

__all__ = [
    "NUMBA_AVAILABLE",
    "FixedStep",
    "GDLogisticRegression",
    "GDResult",
    "gradient_descent",
    "log_likelihood",
    "logistic_gradient_descent",
    "sigmoid",
]
