from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, NonNegativeFloat, PositiveFloat, model_validator

from .optimization import DispatchCase, SolverSettings
from .optimization.solver import DEFAULT_SOLVERS
from .resources import Generator, VariableResource


class GeneratorSpec(BaseModel):
    name: str = Field(..., min_length=1, description="Unit identifier.")
    p_min_mw: NonNegativeFloat = Field(0.0, description="Minimum stable output (MW).")
    p_max_mw: NonNegativeFloat = Field(..., description="Maximum output (MW).")
    energy_cost: float = Field(..., description="Marginal energy cost ($/MWh).")
    reserve_cost: Optional[float] = Field(
        None, description="Reserve offer ($/MW). Omit if the unit cannot provide reserve."
    )
    reserve_max_mw: Optional[NonNegativeFloat] = Field(
        None, description="Reserve capability (MW). Defaults to p_max_mw - p_min_mw."
    )
    commitment_cost: NonNegativeFloat = Field(0.0, description="Fixed cost when committed ($).")
    technology: str = Field("", description="Free-form technology label.")

    @model_validator(mode="after")
    def _limits_ordered(self) -> "GeneratorSpec":
        if self.p_min_mw > self.p_max_mw:
            raise ValueError(f"{self.name}: p_min_mw cannot exceed p_max_mw")
        return self

    def to_generator(self) -> Generator:
        return Generator(**self.model_dump())


class VariableResourceSpec(BaseModel):
    name: str = Field(..., min_length=1, description="Resource identifier.")
    forecast_mw: NonNegativeFloat = Field(..., description="Forecast available output (MW).")
    cost: float = Field(0.0, description="Marginal cost of injection ($/MWh).")
    technology: str = Field("wind", description="Free-form technology label.")

    def to_resource(self) -> VariableResource:
        return VariableResource(**self.model_dump())


class SolverSpec(BaseModel):
    preference: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SOLVERS), min_length=1,
        description="Pyomo solver names, tried in order.",
    )
    tee: bool = Field(False, description="Stream solver output.")
    time_limit_s: Optional[PositiveFloat] = Field(None, description="Maximum solve time (s).")
    mip_gap: Optional[NonNegativeFloat] = Field(None, description="Relative MIP gap.")
    options: Dict[str, Any] = Field(default_factory=dict, description="Native solver options.")

    def to_settings(self) -> SolverSettings:
        return SolverSettings(**self.model_dump())


class CaseSpec(BaseModel):
    name: str = Field("dispatch", description="Case name.")
    demand_mw: NonNegativeFloat = Field(..., description="Demand forecast (MW).")
    reserve_requirement_mw: Optional[NonNegativeFloat] = Field(
        None, description="Reserve requirement (MW). Omit for energy-only dispatch."
    )
    unit_commitment: bool = Field(False, description="Add on/off decisions per generator.")
    generators: List[GeneratorSpec] = Field(..., min_length=1)
    variable_resources: List[VariableResourceSpec] = Field(default_factory=list)
    solver: SolverSpec = Field(default_factory=SolverSpec)

    @model_validator(mode="after")
    def _unique_names(self) -> "CaseSpec":
        names = [g.name for g in self.generators] + [r.name for r in self.variable_resources]
        if len(names) != len(set(names)):
            raise ValueError("generator and variable resource names must be unique")
        return self

    def to_case(self) -> DispatchCase:
        return DispatchCase(
            name=self.name,
            generators=[g.to_generator() for g in self.generators],
            variable_resources=[r.to_resource() for r in self.variable_resources],
            demand_mw=self.demand_mw,
            reserve_requirement_mw=self.reserve_requirement_mw,
            unit_commitment=self.unit_commitment,
        )

    @classmethod
    def from_case(cls, case: DispatchCase, solver: Optional[SolverSpec] = None) -> "CaseSpec":
        return cls(
            name=case.name,
            demand_mw=case.demand_mw,
            reserve_requirement_mw=case.reserve_requirement_mw,
            unit_commitment=case.unit_commitment,
            generators=[GeneratorSpec(**g.to_dict()) for g in case.generators],
            variable_resources=[VariableResourceSpec(**r.to_dict()) for r in case.variable_resources],
            solver=solver or SolverSpec(),
        )


def load_case_file(path: str) -> CaseSpec:
    """
    Load and validate a JSON case file.

    Raises:
        FileNotFoundError: if the file does not exist
        json.JSONDecodeError: if it is not valid JSON
        pydantic.ValidationError: if it does not describe a case
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Case file not found: {path}")
    data = json.loads(p.read_text())
    return CaseSpec.model_validate(data)
