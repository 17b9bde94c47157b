"""
Thermal unknown layout and state pack/unpack utilities.

Principles:
- Node order is fixed bottom → top: pan, dough (5 nodes), sauce mid,
  sauce/cheese interface, cheese top surface.
- The integrator vector holds two blocks in layout order: (1) temperature of
  every node, (2) moisture of every node.
- Indices come from ThermalLayout helpers only (no hand-rolled offsets).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

import numpy as np

from core.types import FloatArray, ThermalState

DOUGH_SUBLAYERS = 4

NODE_NAMES: Tuple[str, ...] = (
    "pan",
    "dough_bottom",
    *(f"dough_{i}" for i in range(1, DOUGH_SUBLAYERS)),
    "dough_sauce",
    "sauce",
    "sauce_cheese",
    "cheese_top",
)


@dataclass(frozen=True, slots=True)
class ThermalLayout:
    """Layout of the integrator vector for the pizza stack."""

    node_names: Tuple[str, ...] = NODE_NAMES
    blocks: Dict[str, slice] = field(init=False)

    def __post_init__(self) -> None:
        n = len(self.node_names)
        object.__setattr__(self, "blocks", {"T": slice(0, n), "X": slice(n, 2 * n)})

    @property
    def n_nodes(self) -> int:
        return len(self.node_names)

    @property
    def size(self) -> int:
        return 2 * self.n_nodes

    def index(self, name: str) -> int:
        try:
            return self.node_names.index(name)
        except ValueError:
            raise KeyError(f"Unknown node '{name}', available: {self.node_names}") from None

    @property
    def pan(self) -> int:
        return 0

    @property
    def top(self) -> int:
        return self.n_nodes - 1

    @property
    def food(self) -> slice:
        """Every node except the pan."""
        return slice(1, self.n_nodes)

    def split(self, y: FloatArray) -> Tuple[FloatArray, FloatArray]:
        """Views of the temperature and moisture blocks of `y`."""
        if y.shape != (self.size,):
            raise ValueError(f"Expected vector of shape ({self.size},), got {y.shape}")
        return y[self.blocks["T"]], y[self.blocks["X"]]


def pack_state(layout: ThermalLayout, state: ThermalState) -> FloatArray:
    if state.n_nodes != layout.n_nodes:
        raise ValueError(f"State has {state.n_nodes} nodes, layout expects {layout.n_nodes}")
    y = np.empty(layout.size, dtype=np.float64)
    y[layout.blocks["T"]] = state.temperature
    y[layout.blocks["X"]] = state.moisture
    return y


def unpack_state(layout: ThermalLayout, y: FloatArray, time: float = 0.0) -> ThermalState:
    temperature, moisture = layout.split(np.asarray(y, dtype=np.float64))
    return ThermalState(temperature.copy(), moisture.copy(), time)
