import numpy as np
import warnings

from dataclasses import dataclass
from numpy.typing import ArrayLike, NDArray
from scipy.special import log_expit
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.exceptions import ConvergenceWarning
from sklearn.utils._tags import Tags, ClassifierTags
from sklearn.utils.multiclass import type_of_target
from sklearn.utils.validation import check_is_fitted, validate_data
from typing import Literal, Self, cast

from gdlogit._solvers import gradient_descent
from gdlogit._utils import GDResult

# probabilities are clamped to [EPSILON, 1 - EPSILON] before taking logs
EPSILON = 1e-15


def sigmoid(z: ArrayLike) -> NDArray[np.float64]:
    """
    Numerically stable logistic function, applied elementwise.

    Uses `1 / (1 + exp(-z))` for `z >= 0` and `exp(z) / (1 + exp(z))` for
    `z < 0`, so `exp` is only ever evaluated at non-positive arguments.
    """
    z = np.asarray(z, dtype=np.float64)
    exp_neg_abs = np.exp(-np.abs(z))
    return np.where(
        z >= 0, 1.0 / (1.0 + exp_neg_abs), exp_neg_abs / (1.0 + exp_neg_abs)
    )


def log_likelihood(y: ArrayLike, p: ArrayLike) -> float:
    """
    Bernoulli log-likelihood of labels `y` under probabilities `p`.

    Probabilities are clamped to `[EPSILON, 1 - EPSILON]` so that saturated
    values of exactly 0 or 1 still give a finite result.
    """
    y = np.asarray(y, dtype=np.float64)
    p = np.clip(np.asarray(p, dtype=np.float64), EPSILON, 1.0 - EPSILON)
    return float(np.sum(y * np.log(p) + (1.0 - y) * np.log(1.0 - p)))


@dataclass
class LogisticQuantities:
    """Quantities needed for one gradient descent iteration"""

    loglik: float  # log-likelihood at the current beta
    gradient: NDArray[np.float64]  # (n_features,) X'(p - y) / n


def compute_logistic_quantities(
    X: NDArray[np.float64],
    y: NDArray[np.float64],
    beta: NDArray[np.float64],
) -> LogisticQuantities:
    """Compute all quantities needed for one gradient descent iteration."""
    eta = X @ beta
    p = sigmoid(eta)

    # mean gradient of the negative log-likelihood
    gradient = X.T @ (p - y) / X.shape[0]

    return LogisticQuantities(loglik=log_likelihood(y, p), gradient=gradient)


def logistic_gradient_descent(
    X: ArrayLike,
    y: ArrayLike,
    learning_rate: float = 0.1,
    max_iter: int = 1000,
    tol: float = 1e-6,
    backend: Literal["numpy", "numba"] = "numpy",
) -> GDResult:
    """
    Fit logistic regression coefficients by fixed-step batch gradient descent.

    No intercept column is added and no input validation is done: `X` must be a
    dense (n_samples, n_features) matrix and `y` must hold 0/1 labels.

    Parameters
    ----------
    X : array-like of shape (n_samples, n_features)
        Design matrix.
    y : array-like of shape (n_samples,)
        Binary response encoded as 0.0/1.0.
    learning_rate : float, default=0.1
        Gradient descent step size.
    max_iter : int, default=1000
        Maximum number of iterations.
    tol : float, default=1e-6
        Convergence tolerance on the change in log-likelihood.
    backend : {'numpy', 'numba'}, default='numpy'
        Implementation to run.

    Returns
    -------
    GDResult
        Fitted coefficients and diagnostics. See `gradient_descent` for the
        iteration count and log-likelihood conventions.
    """
    X = np.ascontiguousarray(X, dtype=np.float64)
    y = np.ascontiguousarray(y, dtype=np.float64)

    if backend == "numba":
        from gdlogit._numba.logistic import gradient_descent_logistic

        beta, loglik, n_iter, converged = gradient_descent_logistic(
            X, y, learning_rate, max_iter, tol
        )
        return GDResult(
            beta=beta,
            loglik=float(loglik),
            n_iter=int(n_iter),
            converged=bool(converged),
        )

    def compute_quantities(beta):
        return compute_logistic_quantities(X, y, beta)

    return gradient_descent(
        compute_quantities=compute_quantities,
        n_features=X.shape[1],
        learning_rate=learning_rate,
        max_iter=max_iter,
        tol=tol,
    )


class GDLogisticRegression(ClassifierMixin, BaseEstimator):
    """
    Logistic regression fit by batch gradient descent.

    The coefficients start at zero and take fixed-size steps against the mean
    gradient of the logistic loss until the log-likelihood changes by less than
    `tol` between iterations or `max_iter` iterations have run. No penalty is
    applied.

    Parameters
    ----------
    learning_rate : float, default=0.1
        Gradient descent step size. Too large a value makes the fit diverge.
    max_iter : int, default=1000
        Maximum number of iterations
    tol : float, default=1e-6
        Tolerance on the change in log-likelihood between iterations
    fit_intercept : bool, default=True
        Whether to fit intercept
    backend : {'auto', 'numpy', 'numba'}, default='auto'
        Solver implementation. 'auto' uses numba when it is installed.

    Attributes
    ----------
    classes_ : ndarray of shape (2,)
        A list of the class labels.
    coef_ : ndarray of shape (n_features,)
        The coefficients of the features.
    intercept_ : float
        Fitted intercept. Set to 0.0 if `fit_intercept=False`.
    loglik_ : float
        Log-likelihood reported by the solver. It trails `coef_` by one step.
    n_iter_ : int
        Iteration at which the solver converged, or `max_iter + 1` if it did not.
    converged_ : bool
        Whether the solver converged within `max_iter`.
    n_features_in_ : int
        Number of features seen during `fit`.
    feature_names_in_ : ndarray of shape (n_features_in_,)
        Names of features seen during `fit`. Defined only when X has feature names that are all strings.

    Examples
    --------
    >>> import numpy as np
    >>> from gdlogit import GDLogisticRegression
    >>> X = np.array([[0.0], [1.0], [2.0], [3.0], [1.5], [1.2]])
    >>> y = np.array([0, 0, 1, 1, 0, 1])
    >>> model = GDLogisticRegression(learning_rate=0.5, max_iter=5000).fit(X, y)
    >>> model.predict(X).shape
    (6,)
    """

    def __init__(
        self,
        learning_rate: float = 0.1,
        max_iter: int = 1000,
        tol: float = 1e-6,
        fit_intercept: bool = True,
        backend: Literal["auto", "numpy", "numba"] = "auto",
    ) -> None:
        self.learning_rate = learning_rate
        self.max_iter = max_iter
        self.tol = tol
        self.fit_intercept = fit_intercept
        self.backend = backend

    def __sklearn_tags__(self) -> Tags:
        tags = super().__sklearn_tags__()
        tags.classifier_tags = ClassifierTags()
        tags.classifier_tags.multi_class = False
        return tags

    def fit(self, X: ArrayLike, y: ArrayLike) -> Self:
        """
        Fit the logistic regression model.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Feature matrix.
        y : array-like of shape (n_samples,)
            Target labels.

        Returns
        -------
        self : GDLogisticRegression
            Fitted estimator.
        """
        # === Validate and prep inputs ===
        X, y = self._validate_input(X, y)
        backend = _resolve_backend(self.backend)

        if self.fit_intercept:
            X = np.column_stack([X, np.ones(X.shape[0])])

        # === run solver ===
        result = logistic_gradient_descent(
            X,
            y,
            learning_rate=self.learning_rate,
            max_iter=self.max_iter,
            tol=self.tol,
            backend=backend,
        )

        # === Extract coefficients ===
        if self.fit_intercept:
            self.coef_ = result.beta[:-1]
            self.intercept_ = float(result.beta[-1])
        else:
            self.coef_ = result.beta
            self.intercept_ = 0.0

        self.loglik_ = result.loglik
        self.n_iter_ = result.n_iter
        self.converged_ = result.converged

        if not result.converged:
            warnings.warn(
                f"Gradient descent did not converge after {self.max_iter} iterations "
                f"(log-likelihood {result.loglik:.6g}). Increase max_iter or adjust "
                "learning_rate.",
                ConvergenceWarning,
                stacklevel=2,
            )
        return self

    def decision_function(
        self,
        X: ArrayLike,
    ) -> NDArray[np.float64]:
        """Return linear predictor."""
        check_is_fitted(self)
        X = validate_data(self, X, dtype=np.float64, reset=False)
        X = cast(NDArray[np.float64], X)  # for mypy
        return X @ self.coef_ + self.intercept_

    def predict_proba(
        self,
        X: ArrayLike,
    ) -> NDArray[np.float64]:
        """Return class probabilities."""
        p1 = sigmoid(self.decision_function(X))
        return np.column_stack([1 - p1, p1])

    def predict(
        self,
        X: ArrayLike,
    ) -> NDArray[np.int_]:
        """Return predicted class labels."""
        proba = self.predict_proba(X)
        return self.classes_[np.argmax(proba, axis=1)]

    def predict_log_proba(
        self,
        X: ArrayLike,
    ) -> NDArray[np.float64]:
        """Return log class probabilities"""
        scores = self.decision_function(X)
        return np.column_stack([log_expit(-scores), log_expit(scores)])

    def _validate_input(
        self, X: ArrayLike, y: ArrayLike
    ) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Validate parameters and inputs, encode y to 0/1"""
        if not self.learning_rate > 0:
            raise ValueError(
                f"learning_rate must be positive, got {self.learning_rate}"
            )
        if self.max_iter <= 0:
            raise ValueError(f"max_iter must be positive, got {self.max_iter}")
        if not self.tol >= 0:
            raise ValueError(f"tol must be non-negative, got {self.tol}")
        X, y = validate_data(
            self, X, y, dtype=np.float64, y_numeric=False, ensure_min_samples=2
        )

        y_type = type_of_target(y)
        if y_type == "continuous":
            raise ValueError(
                "Unknown label type: continuous. Only binary classification is supported."
            )

        self.classes_ = np.unique(y)
        if len(self.classes_) != 2:
            raise ValueError(
                f"Got {len(self.classes_)} classes. Only binary classification is supported."
            )

        # encode y to 0/1
        y = (y == self.classes_[1]).astype(np.float64)

        X = cast(NDArray[np.float64], X)  # for mypy
        y = cast(NDArray[np.float64], y)
        return X, y


def _resolve_backend(backend: str) -> Literal["numpy", "numba"]:
    """Map the `backend` parameter to the implementation that will run."""
    from gdlogit import NUMBA_AVAILABLE

    if backend == "auto":
        return "numba" if NUMBA_AVAILABLE else "numpy"
    if backend == "numba":
        if not NUMBA_AVAILABLE:
            raise ImportError(
                "backend='numba' requires numba. Install it with `pip install gdlogit[numba]`."
            )
        return "numba"
    if backend == "numpy":
        return "numpy"
    raise ValueError(
        f"backend must be 'auto', 'numpy' or 'numba', got '{backend}'"
    )
