"""
Bounded-step integration of the pizza stack ODE.

This module:
- Packs/unpacks ThermalState via core.layout helpers (no hand indexing).
- Drives a scipy.integrate OdeSolver step by step up to the requested time,
  enforcing a hard cap on the number of steps.
- Returns the final state with per-run diagnostics; inputs are not mutated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np
from scipy import integrate

from core.layout import pack_state, unpack_state
from core.types import ThermalConfig, ThermalState
from physics.thermal_rhs import ThermalModel

logger = logging.getLogger(__name__)

_METHODS = {
    "rk45": integrate.RK45,
    "rk23": integrate.RK23,
    "dop853": integrate.DOP853,
    "radau": integrate.Radau,
    "bdf": integrate.BDF,
    "lsoda": integrate.LSODA,
}


class ThermalIntegrationError(RuntimeError):
    """Raised when the ODE integrator fails or exceeds its step budget."""


@dataclass(slots=True)
class IntegrationDiagnostics:
    method: str
    t_end: float
    n_steps: int
    n_fev: int
    T_min: float
    T_max: float
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class IntegrationResult:
    state: ThermalState
    diag: IntegrationDiagnostics


def _resolve_method(name: str):
    key = str(name).strip().lower()
    if key not in _METHODS:
        raise ValueError(f"Unknown ODE method {name!r}, available: {sorted(_METHODS)}")
    return _METHODS[key]


def integrate_stack(
    model: ThermalModel,
    state0: ThermalState,
    duration: float,
    config: Optional[ThermalConfig] = None,
) -> IntegrationResult:
    """
    Integrate the stack from `state0.time` for `duration` seconds.

    Raises:
        ThermalIntegrationError: solver failure, non-finite state, or step cap exceeded
    """
    cfg = config or ThermalConfig()
    if duration < 0.0:
        raise ValueError(f"Integration duration must be non-negative, got {duration}")

    t0 = float(state0.time)
    if duration == 0.0:
        state = state0.copy()
        return IntegrationResult(
            state=state,
            diag=IntegrationDiagnostics(
                method=cfg.method,
                t_end=t0,
                n_steps=0,
                n_fev=0,
                T_min=float(np.min(state.temperature)),
                T_max=float(np.max(state.temperature)),
            ),
        )

    solver_cls = _resolve_method(cfg.method)
    options: Dict[str, Any] = {"rtol": cfg.rtol, "atol": cfg.atol}
    if cfg.first_step is not None:
        options["first_step"] = cfg.first_step
    solver = solver_cls(
        model.compute_derivatives,
        t0,
        pack_state(model.layout, state0),
        t0 + duration,
        **options,
    )

    n_steps = 0
    while solver.status == "running":
        if n_steps >= cfg.max_steps:
            raise ThermalIntegrationError(
                f"ODE integration exceeded {cfg.max_steps} steps at t={solver.t:.6g} s "
                f"(target {t0 + duration:.6g} s)"
            )
        message = solver.step()
        n_steps += 1
        if solver.status == "failed":
            raise ThermalIntegrationError(f"ODE integration failed at t={solver.t:.6g} s: {message}")

    y_end = np.asarray(solver.y, dtype=np.float64)
    if not np.all(np.isfinite(y_end)):
        raise ThermalIntegrationError(f"Non-finite thermal state at t={solver.t:.6g} s")

    state = unpack_state(model.layout, y_end, float(solver.t))
    diag = IntegrationDiagnostics(
        method=cfg.method,
        t_end=float(solver.t),
        n_steps=n_steps,
        n_fev=int(solver.nfev),
        T_min=float(np.min(state.temperature)),
        T_max=float(np.max(state.temperature)),
    )
    logger.debug(
        "Integrated %.3f s with %s: steps=%d nfev=%d T=[%.2f, %.2f] °C",
        duration,
        cfg.method,
        diag.n_steps,
        diag.n_fev,
        diag.T_min,
        diag.T_max,
    )
    return IntegrationResult(state=state, diag=diag)
