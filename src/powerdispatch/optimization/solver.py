"""
Solver Interface
================

Thin layer over Pyomo's SolverFactory:
- Pick the first available solver from a preference list
- Pass options through verbatim
- Map Pyomo termination conditions onto SolveStatus
"""

import logging
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import pyomo.environ as pyo
from pyomo.opt import SolverResults, TerminationCondition

from ..exceptions import SolverUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_SOLVERS = ["appsi_highs", "highs", "cbc", "glpk"]


class SolveStatus(Enum):
    """Outcome of a solve, as reported to callers."""
    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    TIME_LIMIT = "time_limit"
    SUBOPTIMAL = "suboptimal"
    ERROR = "error"

    @property
    def is_optimal(self) -> bool:
        return self is SolveStatus.OPTIMAL


_TERMINATION_MAP = {
    TerminationCondition.optimal: SolveStatus.OPTIMAL,
    TerminationCondition.globallyOptimal: SolveStatus.OPTIMAL,
    TerminationCondition.locallyOptimal: SolveStatus.OPTIMAL,
    TerminationCondition.infeasible: SolveStatus.INFEASIBLE,
    # Every dispatch variable has finite bounds, so this can only be infeasible.
    TerminationCondition.infeasibleOrUnbounded: SolveStatus.INFEASIBLE,
    TerminationCondition.unbounded: SolveStatus.UNBOUNDED,
    TerminationCondition.maxTimeLimit: SolveStatus.TIME_LIMIT,
    TerminationCondition.feasible: SolveStatus.SUBOPTIMAL,
    TerminationCondition.maxIterations: SolveStatus.SUBOPTIMAL,
    TerminationCondition.maxEvaluations: SolveStatus.SUBOPTIMAL,
    TerminationCondition.userInterrupt: SolveStatus.SUBOPTIMAL,
    TerminationCondition.intermediateNonInteger: SolveStatus.SUBOPTIMAL,
}


def map_termination(condition: TerminationCondition) -> SolveStatus:
    """Translate a Pyomo termination condition."""
    return _TERMINATION_MAP.get(condition, SolveStatus.ERROR)


@dataclass
class SolverSettings:
    """
    Solver configuration.

    Attributes:
        preference: Pyomo solver names, tried in order
        tee: Stream solver output
        time_limit_s: Maximum solve time, None for the solver default
        mip_gap: Relative MIP gap, None for the solver default
        options: Extra solver options, passed verbatim (native option names)
    """
    preference: List[str] = field(default_factory=lambda: list(DEFAULT_SOLVERS))
    tee: bool = False
    time_limit_s: Optional[float] = None
    mip_gap: Optional[float] = None
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.preference:
            raise ValueError("preference must name at least one solver")
        if self.time_limit_s is not None and self.time_limit_s <= 0:
            raise ValueError("time_limit_s must be positive")
        if self.mip_gap is not None and self.mip_gap < 0:
            raise ValueError("mip_gap must be non-negative")


# Native option names for time limit and relative MIP gap.
_OPTION_NAMES = {
    "appsi_highs": ("time_limit", "mip_rel_gap"),
    "highs": ("time_limit", "mip_rel_gap"),
    "cbc": ("sec", "ratio"),
    "glpk": ("tmlim", "mipgap"),
}


def select_solver(preference: Optional[List[str]] = None) -> Tuple[str, Any]:
    """
    Return the first available solver.

    Args:
        preference: Pyomo solver names, tried in order

    Returns:
        (name, solver) tuple

    Raises:
        SolverUnavailableError: if none of the solvers can be used
    """
    if preference is None:
        preference = DEFAULT_SOLVERS

    for name in preference:
        opt = pyo.SolverFactory(name)
        if opt is None or not opt.available(exception_flag=False):
            logger.warning("Solver %s not available, skipping", name)
            continue
        logger.info("Using solver: %s", name)
        return name, opt

    raise SolverUnavailableError(
        f"No LP/MILP solver available via Pyomo (tried {', '.join(preference)}). "
        "Install one of:\n"
        "  - pip install highspy\n"
        "  - conda install -c conda-forge coincbc\n"
        "  - conda install -c conda-forge glpk"
    )


def _apply_options(name: str, opt: Any, settings: SolverSettings) -> None:
    time_key, gap_key = _OPTION_NAMES.get(name, ("time_limit", "mip_rel_gap"))
    if settings.time_limit_s is not None:
        # glpsol takes whole seconds
        limit = int(math.ceil(settings.time_limit_s)) if name == "glpk" else settings.time_limit_s
        opt.options[time_key] = limit
    if settings.mip_gap is not None:
        opt.options[gap_key] = settings.mip_gap
    for key, value in settings.options.items():
        opt.options[key] = value


@dataclass
class SolveOutcome:
    """What came back from the solver for one call."""
    status: SolveStatus
    solver_name: str
    termination_condition: str
    solve_time_sec: float
    has_solution: bool


def solve_model(model: pyo.ConcreteModel, settings: Optional[SolverSettings] = None) -> SolveOutcome:
    """
    Solve a Pyomo model and load the solution, if one exists.

    Solutions are loaded explicitly so that infeasible or interrupted solves
    are reported through the status instead of a loader error. Exceptions
    raised by the solver itself propagate unchanged.

    Args:
        model: Built Pyomo model
        settings: Solver configuration

    Returns:
        SolveOutcome
    """
    settings = settings or SolverSettings()
    name, opt = select_solver(settings.preference)
    _apply_options(name, opt, settings)

    start_time = time.perf_counter()
    results: SolverResults = opt.solve(model, tee=settings.tee, load_solutions=False)
    solve_time = time.perf_counter() - start_time

    condition = results.solver.termination_condition
    status = map_termination(condition)

    has_solution = status in (SolveStatus.OPTIMAL, SolveStatus.TIME_LIMIT, SolveStatus.SUBOPTIMAL) and len(
        results.solution
    ) > 0
    if has_solution:
        model.solutions.load_from(results)
    elif status.is_optimal:
        logger.warning("Solver %s reported %s without returning a solution", name, condition)
        status = SolveStatus.ERROR

    if status.is_optimal:
        logger.info("Solved %s with %s in %.3fs", model.name, name, solve_time)
    else:
        logger.warning("Solve of %s ended with %s (%s)", model.name, status.value, condition)

    return SolveOutcome(
        status=status,
        solver_name=name,
        termination_condition=str(condition),
        solve_time_sec=solve_time,
        has_solution=has_solution,
    )
