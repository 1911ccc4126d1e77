"""
Power Dispatch
==============

Single-period power system dispatch models handed to external LP/MILP
solvers through Pyomo:
- Economic dispatch with energy prices
- Energy and reserve co-optimization with reserve prices
- Unit commitment with binary on/off decisions

Architecture:
- resources/: Generator and variable resource models
- optimization/: Case definition, model builder, solver interface, results
- analysis: Demand sweeps, sequential dispatch, commitment savings
- cases: Example systems
- config / cli: JSON case files and command-line interface
"""

from .exceptions import (
    DispatchError,
    InfeasibleError,
    NotOptimalError,
    ShadowPriceUnavailableError,
    SolverUnavailableError,
    UnboundedError,
)
from .optimization import (
    DispatchCase,
    DispatchModel,
    DispatchSolution,
    Formulation,
    SolverSettings,
    SolveStatus,
    build_dispatch_model,
    solve_dispatch,
)
from .resources import Generator, VariableResource

__version__ = "0.1.0"

__all__ = [
    "DispatchCase",
    "DispatchError",
    "DispatchModel",
    "DispatchSolution",
    "Formulation",
    "Generator",
    "InfeasibleError",
    "NotOptimalError",
    "ShadowPriceUnavailableError",
    "SolveStatus",
    "SolverSettings",
    "SolverUnavailableError",
    "UnboundedError",
    "VariableResource",
    "build_dispatch_model",
    "solve_dispatch",
]
