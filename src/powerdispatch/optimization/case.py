"""
Dispatch Case
=============

Immutable problem definition for a single dispatch period: the fleet,
the variable resources, the demand forecast and the reserve requirement.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..resources import Generator, VariableResource


class Formulation(Enum):
    """Optimization template selected from a case."""
    ECONOMIC_DISPATCH = "economic_dispatch"
    ECONOMIC_DISPATCH_RESERVES = "economic_dispatch_reserves"
    UNIT_COMMITMENT = "unit_commitment"
    UNIT_COMMITMENT_RESERVES = "unit_commitment_reserves"

    @property
    def has_reserves(self) -> bool:
        return self in (Formulation.ECONOMIC_DISPATCH_RESERVES, Formulation.UNIT_COMMITMENT_RESERVES)

    @property
    def is_mixed_integer(self) -> bool:
        return self in (Formulation.UNIT_COMMITMENT, Formulation.UNIT_COMMITMENT_RESERVES)


@dataclass(frozen=True)
class DispatchCase:
    """
    Complete input data for one dispatch solve.

    Attributes:
        generators: Dispatchable units
        demand_mw: Demand forecast (MW)
        variable_resources: Wind/solar resources
        reserve_requirement_mw: Reserve to hold (MW). None if no reserve product is modelled
        unit_commitment: If True, add a binary on/off decision per generator
        name: Case label used in reports
    """
    generators: Tuple[Generator, ...]
    demand_mw: float
    variable_resources: Tuple[VariableResource, ...] = field(default_factory=tuple)
    reserve_requirement_mw: Optional[float] = None
    unit_commitment: bool = False
    name: str = "dispatch"

    def __post_init__(self):
        """Validate case data."""
        # Accept lists from callers but store tuples so the case stays hashable.
        object.__setattr__(self, "generators", tuple(self.generators))
        object.__setattr__(self, "variable_resources", tuple(self.variable_resources))

        if not self.generators:
            raise ValueError("case needs at least one generator")
        if self.demand_mw < 0:
            raise ValueError("demand_mw must be non-negative")
        if self.reserve_requirement_mw is not None and self.reserve_requirement_mw < 0:
            raise ValueError("reserve_requirement_mw must be non-negative")

        names = [g.name for g in self.generators] + [r.name for r in self.variable_resources]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate resource names: {duplicates}")

    @property
    def formulation(self) -> Formulation:
        if self.unit_commitment:
            if self.reserve_requirement_mw is not None:
                return Formulation.UNIT_COMMITMENT_RESERVES
            return Formulation.UNIT_COMMITMENT
        if self.reserve_requirement_mw is not None:
            return Formulation.ECONOMIC_DISPATCH_RESERVES
        return Formulation.ECONOMIC_DISPATCH

    @property
    def generator_names(self) -> List[str]:
        return [g.name for g in self.generators]

    @property
    def resource_names(self) -> List[str]:
        return [r.name for r in self.variable_resources]

    @property
    def total_capacity_mw(self) -> float:
        """Installed dispatchable capacity plus forecast variable output."""
        return sum(g.p_max_mw for g in self.generators) + sum(r.forecast_mw for r in self.variable_resources)

    @property
    def total_min_output_mw(self) -> float:
        return sum(g.p_min_mw for g in self.generators)

    def generator(self, name: str) -> Generator:
        for g in self.generators:
            if g.name == name:
                return g
        raise KeyError(f"unknown generator: {name}")

    def resource(self, name: str) -> VariableResource:
        for r in self.variable_resources:
            if r.name == name:
                return r
        raise KeyError(f"unknown variable resource: {name}")

    def with_demand(self, demand_mw: float) -> "DispatchCase":
        return replace(self, demand_mw=demand_mw)

    def with_reserve_requirement(self, reserve_mw: Optional[float]) -> "DispatchCase":
        return replace(self, reserve_requirement_mw=reserve_mw)

    def with_unit_commitment(self, enabled: bool = True) -> "DispatchCase":
        return replace(self, unit_commitment=enabled)

    def with_forecast(self, name: str, forecast_mw: float) -> "DispatchCase":
        if name not in self.resource_names:
            raise KeyError(f"unknown variable resource: {name}")
        resources = tuple(
            replace(r, forecast_mw=forecast_mw) if r.name == name else r
            for r in self.variable_resources
        )
        return replace(self, variable_resources=resources)

    def with_energy_cost(self, name: str, cost: float) -> "DispatchCase":
        if name not in self.generator_names:
            raise KeyError(f"unknown generator: {name}")
        generators = tuple(
            replace(g, energy_cost=cost) if g.name == name else g
            for g in self.generators
        )
        return replace(self, generators=generators)

    def summary(self) -> Dict[str, object]:
        """Get case parameters for display."""
        return {
            "name": self.name,
            "formulation": self.formulation.value,
            "demand_mw": self.demand_mw,
            "reserve_requirement_mw": self.reserve_requirement_mw,
            "n_generators": len(self.generators),
            "n_variable_resources": len(self.variable_resources),
            "total_capacity_mw": self.total_capacity_mw,
            "total_min_output_mw": self.total_min_output_mw,
        }
