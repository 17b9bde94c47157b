"""
Generic bracketing root finder (Brent) over pure scalar functions.

Callers build a closure `f(x) -> float` and hand it here; no solver keeps
state between calls. Exceptions raised by `f` propagate unchanged so that
callers can report domain failures (e.g. an adverse stage) with context.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Dict

from scipy import optimize

from solvers.root_types import (
    NoBracketingError,
    RootDiagnostics,
    RootSolveResult,
    TooManyEvaluationsError,
)

logger = logging.getLogger(__name__)


def solve_bracketed(
    f: Callable[[float], float],
    lower: float,
    upper: float,
    *,
    xtol: float,
    max_iterations: int,
    name: str = "root",
) -> RootSolveResult:
    """
    Solve f(x) = 0 on [lower, upper] with scipy.optimize.brentq.

    Evaluations are memoized: `f` is assumed pure, and endpoint values are
    reused by brentq instead of being recomputed.

    Raises:
        NoBracketingError: f(lower) and f(upper) have the same sign
        TooManyEvaluationsError: brentq did not converge in `max_iterations`
        ValueError: f returned a non-finite value
    """
    if not lower < upper:
        raise ValueError(f"Invalid bracket for {name}: [{lower}, {upper}]")

    cache: Dict[float, float] = {}

    def _f(x: float) -> float:
        x = float(x)
        value = cache.get(x)
        if value is None:
            value = float(f(x))
            if not math.isfinite(value):
                raise ValueError(f"{name}: function returned non-finite value {value} at x={x}")
            cache[x] = value
        return value

    f_lower = _f(lower)
    f_upper = _f(upper)
    if f_lower * f_upper > 0.0:
        raise NoBracketingError(
            f"{name}: no sign change on [{lower}, {upper}] "
            f"(f(lower)={f_lower:.6g}, f(upper)={f_upper:.6g})",
            (lower, upper),
            (f_lower, f_upper),
        )

    x, info = optimize.brentq(
        _f,
        lower,
        upper,
        xtol=xtol,
        maxiter=max_iterations,
        full_output=True,
        disp=False,
    )
    if not info.converged:
        raise TooManyEvaluationsError(
            f"{name}: Brent solver did not converge in {max_iterations} iterations ({info.flag})",
            max_iterations,
        )

    residual = _f(x)
    diag = RootDiagnostics(
        converged=True,
        method="brentq",
        n_iter=int(info.iterations),
        n_calls=len(cache),
        residual=residual,
        bracket=(lower, upper),
        message=str(info.flag),
    )
    logger.debug(
        "%s: x=%.8g residual=%.3e iter=%d calls=%d", name, x, residual, diag.n_iter, diag.n_calls
    )
    return RootSolveResult(x=float(x), diag=diag)
