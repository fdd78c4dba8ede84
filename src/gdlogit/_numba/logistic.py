import numpy as np
from numba import njit
from numpy.typing import NDArray

from gdlogit._numba._utils import _bernoulli_loglik, _expit


@njit(cache=True)
def log_likelihood(y: NDArray[np.float64], p: NDArray[np.float64]) -> float:
    loglik = 0.0
    for i in range(y.shape[0]):
        loglik += _bernoulli_loglik(y[i], p[i])
    return loglik


@njit(cache=True)
def compute_logistic_quantities(
    X: NDArray[np.float64],
    y: NDArray[np.float64],
    beta: NDArray[np.float64],
    p: NDArray[np.float64],
    gradient: NDArray[np.float64],
) -> float:
    """Fill `p` and `gradient` for the current beta and return the log-likelihood."""
    n = X.shape[0]
    k = X.shape[1]

    # p = expit(X @ beta)
    for i in range(n):
        total = 0.0
        for j in range(k):
            total += X[i, j] * beta[j]
        p[i] = _expit(total)

    # gradient = X.T @ (p - y) / n
    for j in range(k):
        total = 0.0
        for i in range(n):
            total += X[i, j] * (p[i] - y[i])
        gradient[j] = total / n

    return log_likelihood(y, p)


@njit(cache=True)
def gradient_descent_logistic(
    X: NDArray[np.float64],
    y: NDArray[np.float64],
    learning_rate: float,
    max_iter: int,
    tol: float,
) -> tuple[NDArray[np.float64], float, int, bool]:  # beta, loglik, n_iter, converged
    n = X.shape[0]
    k = X.shape[1]
    beta = np.zeros(k, dtype=np.float64)
    p = np.empty(n, dtype=np.float64)
    gradient = np.empty(k, dtype=np.float64)

    prev_loglik = -np.inf
    for iteration in range(1, max_iter + 1):
        loglik = compute_logistic_quantities(X, y, beta, p, gradient)

        for j in range(k):
            beta[j] -= learning_rate * gradient[j]

        if abs(loglik - prev_loglik) < tol:
            return beta, prev_loglik, iteration, True
        prev_loglik = loglik

    return beta, prev_loglik, max_iter + 1, False
