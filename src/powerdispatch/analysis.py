"""
Dispatch Analysis
=================

Studies built on repeated solves of one model handle:
- dispatch_sequence: step a demand (and forecast) series through update-and-re-solve
- price_curve: energy and reserve prices over a demand sweep
- commitment_savings: unit commitment versus plain economic dispatch
- reserve_price_breakdown: opportunity-cost decomposition of the reserve price
"""

import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .exceptions import ShadowPriceUnavailableError
from .optimization import DispatchCase, DispatchSolution, SolverSettings, build_dispatch_model

logger = logging.getLogger(__name__)


def _row(solution: DispatchSolution) -> dict:
    """Flatten a solution into one table row."""
    row = {
        "status": solution.status.value,
        "total_cost": solution.total_cost if solution.has_solution else np.nan,
        "energy_price": solution.energy_price_value if solution.has_prices else np.nan,
        "reserve_price": (
            solution.reserve_price_value
            if solution.has_prices and solution.reserve_price_value is not None
            else np.nan
        ),
        "spillage_mw": solution.total_spillage_mw if solution.has_solution else np.nan,
    }
    for name, p in solution.generation_mw.items():
        row[f"p_{name}"] = p
    for name, r in solution.reserve_mw.items():
        row[f"r_{name}"] = r
    for name, w in solution.injection_mw.items():
        row[f"w_{name}"] = w
    return row


def dispatch_sequence(
    case: DispatchCase,
    demand: pd.Series,
    forecasts: Optional[pd.DataFrame] = None,
    settings: Optional[SolverSettings] = None,
) -> pd.DataFrame:
    """
    Solve one dispatch per step of a demand series.

    The model is built once; each step updates the demand (and the
    forecasts, if given) and re-solves. Steps that do not solve to
    optimality keep their status and NaN values.

    Args:
        case: Base case (generators, reserve requirement, formulation)
        demand: Demand per step (MW)
        forecasts: Forecast per step, one column per variable resource
        settings: Solver configuration

    Returns:
        DataFrame indexed like ``demand``
    """
    if forecasts is not None:
        unknown = set(forecasts.columns) - set(case.resource_names)
        if unknown:
            raise KeyError(f"forecast columns without a variable resource: {sorted(unknown)}")
        if not forecasts.index.equals(demand.index):
            raise ValueError("forecasts must share the demand index")

    handle = build_dispatch_model(case)
    rows = []
    for step, demand_mw in demand.items():
        step_forecasts = None
        if forecasts is not None:
            step_forecasts = {name: float(forecasts.at[step, name]) for name in forecasts.columns}
        solution = handle.resolve(demand_mw=float(demand_mw), forecasts=step_forecasts, settings=settings)
        rows.append(_row(solution))

    result = pd.DataFrame(rows, index=demand.index)
    result.insert(0, "demand_mw", demand.astype(float).values)

    n_bad = int((result["status"] != "optimal").sum())
    if n_bad:
        logger.warning("%d of %d steps did not solve to optimality", n_bad, len(result))
    return result


def price_curve(
    case: DispatchCase,
    demands: Iterable[float],
    settings: Optional[SolverSettings] = None,
) -> pd.DataFrame:
    """
    Energy (and reserve) prices over a sweep of demand levels.

    Returns:
        DataFrame indexed by demand_mw
    """
    demand = pd.Series(list(demands), dtype=float)
    demand.index = pd.Index(demand.values, name="demand_mw")
    return dispatch_sequence(case, demand, settings=settings).drop(columns="demand_mw")


def commitment_savings(case: DispatchCase, settings: Optional[SolverSettings] = None) -> pd.Series:
    """
    Compare unit commitment against economic dispatch of the same case.

    Economic dispatch keeps every unit at or above its minimum output,
    which can force cheaper variable output to spill. Commitment may
    switch such units off instead.

    Returns:
        Series with dispatch_cost, commitment_cost, savings and both statuses
    """
    ed = build_dispatch_model(case.with_unit_commitment(False)).solve(settings)
    uc = build_dispatch_model(case.with_unit_commitment(True)).solve(settings)

    ed_cost = ed.total_cost if ed.is_optimal else np.nan
    uc_cost = uc.total_cost if uc.is_optimal else np.nan
    return pd.Series({
        "dispatch_cost": ed_cost,
        "commitment_cost": uc_cost,
        "savings": ed_cost - uc_cost,
        "dispatch_status": ed.status.value,
        "commitment_status": uc.status.value,
        "dispatch_spillage_mw": ed.total_spillage_mw if ed.has_solution else np.nan,
        "commitment_spillage_mw": uc.total_spillage_mw if uc.has_solution else np.nan,
    }, name=case.name)


def reserve_price_breakdown(solution: DispatchSolution, case: DispatchCase, tol: float = 1e-6) -> pd.DataFrame:
    """
    Decompose the reserve price into offer and energy opportunity cost.

    A unit backed off energy to hold reserve gives up its energy margin
    (energy price - energy cost). Its implied reserve price is therefore
    its reserve offer plus that margin, when positive. The unit that holds
    reserve with an implied price equal to the cleared price sets it.

    Args:
        solution: Optimal solution of a reserve co-optimization
        case: The case that produced it

    Returns:
        DataFrame indexed by reserve-capable generator
    """
    if not solution.is_optimal:
        raise ShadowPriceUnavailableError(f"reserve breakdown needs an optimal solve, got {solution.status.value}")
    energy_price = solution.energy_price
    reserve_price = solution.reserve_price

    rows = []
    for g in case.generators:
        if not g.provides_reserve:
            continue
        margin = energy_price - g.energy_cost
        implied = g.reserve_cost + max(margin, 0.0)
        reserve = solution.reserve_mw.get(g.name, 0.0)
        rows.append({
            "name": g.name,
            "reserve_mw": reserve,
            "reserve_offer": g.reserve_cost,
            "energy_margin": margin,
            "implied_reserve_price": implied,
            "sets_price": bool(reserve > tol and abs(implied - reserve_price) <= max(tol, 1e-6 * abs(reserve_price))),
        })
    return pd.DataFrame(rows).set_index("name")
