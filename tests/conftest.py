import math

import numpy as np
import pytest


@pytest.fixture
def toy_data():
    """Intercept column plus one feature; y switches from 0 to 1 at x=2."""
    X = np.array([[1.0, 0.0], [1.0, 1.0], [1.0, 2.0], [1.0, 3.0]])
    y = np.array([0.0, 0.0, 1.0, 1.0])
    return X, y


@pytest.fixture
def separated_data():
    """Two features, four points, separated along (1, 1) with a wide margin."""
    X = 100.0 * np.array([[-2.0, -1.0], [-1.0, -2.0], [1.0, 2.0], [2.0, 1.0]])
    y = np.array([0.0, 0.0, 1.0, 1.0])
    return X, y


@pytest.fixture
def random_data():
    """Non-separable data drawn from a known logistic model (no intercept column)."""
    rng = np.random.default_rng(0)
    X = rng.standard_normal((200, 3))
    eta = X @ np.array([1.0, -0.5, 0.25]) + 0.3
    y = (rng.random(200) < 1.0 / (1.0 + np.exp(-eta))).astype(np.float64)
    return X, y


def _reference_fit(X, y, learning_rate, max_iter, tol):
    """Plain-Python gradient descent loop used to cross-check the solvers."""
    n, k = len(X), len(X[0])
    beta = [0.0] * k
    prev = -math.inf
    for iteration in range(1, max_iter + 1):
        probs = []
        for row in X:
            z = sum(x * b for x, b in zip(row, beta))
            if z >= 0:
                probs.append(1.0 / (1.0 + math.exp(-z)))
            else:
                probs.append(math.exp(z) / (1.0 + math.exp(z)))
        grad = [
            sum(X[i][j] * (probs[i] - y[i]) for i in range(n)) / n for j in range(k)
        ]
        beta = [b - learning_rate * g for b, g in zip(beta, grad)]
        ll = 0.0
        for yi, p in zip(y, probs):
            p = min(max(p, 1e-15), 1 - 1e-15)
            ll += yi * math.log(p) + (1 - yi) * math.log(1 - p)
        if abs(ll - prev) < tol:
            return beta, prev, iteration, True
        prev = ll
    return beta, prev, max_iter + 1, False


@pytest.fixture
def reference_fit():
    return _reference_fit
