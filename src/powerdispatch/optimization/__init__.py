"""
Optimization Module
===================

Single-period dispatch optimization using Pyomo:
- Economic dispatch (LP) with energy prices from duals
- Reserve co-optimization with reserve prices
- Unit commitment (MILP), no duals
- Update-and-re-solve handle
"""

from .case import DispatchCase, Formulation
from .dispatch_model import DispatchModel, build_dispatch_model, solve_dispatch
from .results import DispatchSolution
from .solver import SolverSettings, SolveStatus, select_solver

__all__ = [
    "DispatchCase",
    "DispatchModel",
    "DispatchSolution",
    "Formulation",
    "SolveStatus",
    "SolverSettings",
    "build_dispatch_model",
    "select_solver",
    "solve_dispatch",
]
