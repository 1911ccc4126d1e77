"""
Dispatch Results
================

Structured container for a dispatch solve: primal values, shadow prices
and termination status, with reporting helpers and plain-language
explanations of the marginal decisions.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pandas as pd

from ..exceptions import (
    InfeasibleError,
    NotOptimalError,
    ShadowPriceUnavailableError,
    UnboundedError,
)
from .solver import SolveStatus

_TOL = 1e-6


@dataclass(frozen=True)
class DispatchSolution:
    """
    Result of one dispatch solve.

    Primal values are populated when the solver returned a solution
    (optimal, or an incumbent on a time limit). Prices are populated only
    for optimal solutions of purely continuous formulations; reading them
    otherwise raises ShadowPriceUnavailableError with the reason.
    """
    # Solution status
    case_name: str
    formulation: str
    status: SolveStatus
    solver_name: str
    termination_condition: str
    solve_time_sec: float

    # Primal values
    total_cost: Optional[float] = None
    generation_mw: Dict[str, float] = field(default_factory=dict)
    reserve_mw: Dict[str, float] = field(default_factory=dict)
    commitment: Dict[str, int] = field(default_factory=dict)
    injection_mw: Dict[str, float] = field(default_factory=dict)
    spillage_mw: Dict[str, float] = field(default_factory=dict)

    # Duals
    energy_price_value: Optional[float] = None
    reserve_price_value: Optional[float] = None
    price_note: str = ""

    @property
    def is_optimal(self) -> bool:
        return self.status.is_optimal

    @property
    def has_solution(self) -> bool:
        return self.total_cost is not None

    @property
    def has_prices(self) -> bool:
        return self.energy_price_value is not None

    @property
    def energy_price(self) -> float:
        """Marginal cost of serving one more MW of demand ($/MWh)."""
        if self.energy_price_value is None:
            raise ShadowPriceUnavailableError(f"energy price unavailable: {self.price_note}")
        return self.energy_price_value

    @property
    def reserve_price(self) -> float:
        """Marginal cost of holding one more MW of reserve ($/MW)."""
        if self.reserve_price_value is None:
            note = self.price_note or "no reserve requirement modelled"
            raise ShadowPriceUnavailableError(f"reserve price unavailable: {note}")
        return self.reserve_price_value

    @property
    def total_generation_mw(self) -> float:
        return sum(self.generation_mw.values())

    @property
    def total_reserve_mw(self) -> float:
        return sum(self.reserve_mw.values())

    @property
    def total_injection_mw(self) -> float:
        return sum(self.injection_mw.values())

    @property
    def total_spillage_mw(self) -> float:
        return sum(self.spillage_mw.values())

    def raise_for_status(self) -> "DispatchSolution":
        """Raise the matching DispatchError unless the solve was optimal."""
        msg = f"{self.case_name}: solve ended with {self.status.value} ({self.termination_condition})"
        if self.status is SolveStatus.INFEASIBLE:
            raise InfeasibleError(msg)
        if self.status is SolveStatus.UNBOUNDED:
            raise UnboundedError(msg)
        if not self.is_optimal:
            raise NotOptimalError(msg)
        return self

    def to_frame(self) -> pd.DataFrame:
        """
        Per-resource table of the solution.

        Columns: kind, output_mw, reserve_mw, committed, spillage_mw.
        """
        rows = []
        for name, p in self.generation_mw.items():
            rows.append({
                "name": name,
                "kind": "generator",
                "output_mw": p,
                "reserve_mw": self.reserve_mw.get(name, 0.0),
                "committed": self.commitment.get(name),
                "spillage_mw": 0.0,
            })
        for name, w in self.injection_mw.items():
            rows.append({
                "name": name,
                "kind": "variable",
                "output_mw": w,
                "reserve_mw": 0.0,
                "committed": None,
                "spillage_mw": self.spillage_mw.get(name, 0.0),
            })
        columns = ["name", "kind", "output_mw", "reserve_mw", "committed", "spillage_mw"]
        return pd.DataFrame(rows, columns=columns).set_index("name")

    def explain(self) -> List[str]:
        """
        Generate explanations for the dispatch decisions.

        Returns human-readable lines based on the solution values.
        """
        if not self.has_solution:
            return [f"No dispatch: solver reported {self.status.value}"]

        explanations = []
        if not self.is_optimal:
            explanations.append(
                f"WARNING: solution is not proven optimal ({self.status.value})"
            )

        if self.has_prices:
            explanations.append(f"Energy price ${self.energy_price_value:.2f}/MWh")
            if self.reserve_price_value is not None:
                explanations.append(f"Reserve price ${self.reserve_price_value:.2f}/MW")
        else:
            explanations.append(f"Shadow prices unavailable: {self.price_note}")

        for name, on in self.commitment.items():
            if not on:
                explanations.append(f"{name} decommitted: cheaper to leave offline")

        for name, spill in self.spillage_mw.items():
            if spill > _TOL:
                explanations.append(
                    f"Spilling {spill:.1f} MW of {name}: "
                    "minimum output of committed units or balance constraint binding"
                )

        for name, r in self.reserve_mw.items():
            if r > _TOL:
                explanations.append(f"{name} holding {r:.1f} MW reserve")

        return explanations

    def to_dict(self) -> Dict[str, Any]:
        """Convert complete results to dictionary."""
        return {
            "case_name": self.case_name,
            "formulation": self.formulation,
            "status": self.status.value,
            "solver": self.solver_name,
            "termination_condition": self.termination_condition,
            "solve_time_sec": self.solve_time_sec,
            "total_cost": self.total_cost,
            "generation_mw": dict(self.generation_mw),
            "reserve_mw": dict(self.reserve_mw),
            "commitment": dict(self.commitment),
            "injection_mw": dict(self.injection_mw),
            "spillage_mw": dict(self.spillage_mw),
            "prices": {
                "available": self.has_prices,
                "energy_price": self.energy_price_value,
                "reserve_price": self.reserve_price_value,
                "note": self.price_note,
            },
            "explanations": self.explain(),
        }
