import numpy as np

from dataclasses import dataclass
from numpy.typing import NDArray
from typing import Callable, Protocol

from gdlogit._utils import GDResult

StepFunction = Callable[[NDArray[np.float64], NDArray[np.float64]], NDArray[np.float64]]


class Quantities(Protocol):
    loglik: float
    gradient: NDArray[np.float64]


@dataclass(frozen=True)
class FixedStep:
    """
    Fixed-size gradient descent step: `beta <- beta - learning_rate * gradient`.

    `beta` is updated in place and returned.
    """

    learning_rate: float

    def __call__(
        self, beta: NDArray[np.float64], gradient: NDArray[np.float64]
    ) -> NDArray[np.float64]:
        beta -= self.learning_rate * gradient
        return beta


def gradient_descent(
    compute_quantities: Callable[[NDArray[np.float64]], Quantities],
    n_features: int,
    learning_rate: float = 0.1,
    max_iter: int = 1000,
    tol: float = 1e-6,
    step: StepFunction | None = None,
) -> GDResult:
    """
    Batch gradient descent solver

    Parameters
    ----------
    compute_quantities : Callable[[NDArray], Quantities]
        Function `callable(beta)` that returns the log-likelihood and the mean
        gradient of the loss at `beta`
    n_features : int
        Number of features
    learning_rate : float, default=0.1
        Step size used when `step` is None
    max_iter : int, default=1000
        Maximum number of iterations
    tol : float, default=1e-6
        Stop when successive log-likelihoods differ by less than `tol`
    step : callable, default=None
        Update rule `step(beta, gradient) -> beta`. Defaults to
        `FixedStep(learning_rate)`.

    Returns
    -------
    GDResult
        Result of gradient descent optimization

    Notes
    -----
    The log-likelihood of iteration `k` is evaluated at the coefficients from
    before that iteration's update, and the value reported in the result is the
    one stored at the end of the last non-converging iteration. When the
    tolerance test fires, `n_iter` is the current iteration index; when the
    budget is exhausted it is `max_iter + 1`. With `max_iter=0` no iteration
    runs and the result carries zero coefficients and `loglik=-inf`.
    """
    if step is None:
        step = FixedStep(learning_rate)

    beta = np.zeros(n_features, dtype=np.float64)
    prev_loglik = -np.inf
    converged = False

    for iteration in range(1, max_iter + 1):
        q = compute_quantities(beta)
        beta = step(beta, q.gradient)

        # check convergence: |l(k) - l(k-1)| < tol
        if abs(q.loglik - prev_loglik) < tol:
            converged = True
            break
        prev_loglik = q.loglik
    else:
        iteration = max_iter + 1

    return GDResult(
        beta=beta,
        loglik=prev_loglik,
        n_iter=iteration,
        converged=converged,
    )
