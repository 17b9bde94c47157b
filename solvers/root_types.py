"""
Shared scalar root-finding result types.

Goal:
- One structure for every bracketing solve (yeast fraction, baking duration).
- Keep solver modules and tests independent from scipy's RootResults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


class NoBracketingError(RuntimeError):
    """The function has the same sign at both ends of the bracket."""

    def __init__(self, message: str, bracket: Tuple[float, float], values: Tuple[float, float]):
        super().__init__(message)
        self.bracket = bracket
        self.values = values


class TooManyEvaluationsError(RuntimeError):
    """The root finder did not converge within its iteration budget."""

    def __init__(self, message: str, max_iterations: int):
        super().__init__(message)
        self.max_iterations = max_iterations


@dataclass(slots=True)
class RootDiagnostics:
    converged: bool
    method: str
    n_iter: int
    n_calls: int
    residual: float
    bracket: Tuple[float, float]
    message: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class RootSolveResult:
    x: float
    diag: RootDiagnostics
