"""
Dispatch Model Builder
======================

Builds the single-period dispatch problem as a Pyomo model and solves it:

    min   sum_i c_i g_i + sum_j c_j w_j [+ sum_i c^r_i r_i] [+ sum_i f_i u_i]
    s.t.  sum_i g_i + sum_j w_j = d                      (energy balance)
          0 <= w_j <= forecast_j
          min_i <= g_i <= max_i                          (economic dispatch)
          min_i u_i <= g_i,  g_i + r_i <= max_i u_i      (unit commitment)
          sum_i r_i = R                                  (reserve requirement)

Economic dispatch variants are linear programs and report the duals of the
energy balance and reserve requirement as prices. Unit commitment adds a
binary u_i per generator; no duals are requested for it.
"""

import logging
from typing import Dict, Optional

import pyomo.environ as pyo

from .case import DispatchCase, Formulation
from .results import DispatchSolution
from .solver import SolverSettings, SolveOutcome, SolveStatus, solve_model

logger = logging.getLogger(__name__)

MIP_PRICE_NOTE = "mixed-integer formulation: dual values are not defined"


def _build(case: DispatchCase) -> pyo.ConcreteModel:
    """Build the Pyomo model for a case."""
    formulation = case.formulation
    gens = {g.name: g for g in case.generators}
    resources = {r.name: r for r in case.variable_resources}

    m = pyo.ConcreteModel(case.name)

    # =====================
    # SETS
    # =====================
    m.G = pyo.Set(initialize=case.generator_names, ordered=True)  # Dispatchable units
    m.W = pyo.Set(initialize=case.resource_names, ordered=True)   # Variable resources

    # =====================
    # PARAMETERS
    # =====================
    # Mutable so that the handle can update them and re-solve
    m.demand = pyo.Param(initialize=case.demand_mw, mutable=True)
    m.energy_cost = pyo.Param(m.G, initialize={i: gens[i].energy_cost for i in gens}, mutable=True)
    m.resource_cost = pyo.Param(m.W, initialize={j: resources[j].cost for j in resources}, mutable=True)

    # =====================
    # VARIABLES
    # =====================
    if formulation.is_mixed_integer:
        m.p = pyo.Var(m.G, domain=pyo.NonNegativeReals, bounds=lambda m, i: (0, gens[i].p_max_mw))
        m.u = pyo.Var(m.G, domain=pyo.Binary)
    else:
        m.p = pyo.Var(
            m.G, domain=pyo.NonNegativeReals, bounds=lambda m, i: (gens[i].p_min_mw, gens[i].p_max_mw)
        )

    m.w = pyo.Var(m.W, domain=pyo.NonNegativeReals, bounds=lambda m, j: (0, resources[j].forecast_mw))

    if formulation.has_reserves:
        providers = [g.name for g in case.generators if g.provides_reserve]
        if not providers:
            raise ValueError("reserve requirement modelled but no generator carries a reserve offer")
        m.R = pyo.Set(initialize=providers, ordered=True)  # Reserve-capable units
        m.reserve_requirement = pyo.Param(initialize=case.reserve_requirement_mw, mutable=True)
        m.reserve_cost = pyo.Param(m.R, initialize={i: gens[i].reserve_cost for i in providers}, mutable=True)
        m.r = pyo.Var(m.R, domain=pyo.NonNegativeReals, bounds=lambda m, i: (0, gens[i].reserve_capability_mw))

    # =====================
    # CONSTRAINTS
    # =====================

    def headroom(m, i):
        return m.r[i] if formulation.has_reserves and i in m.R else 0

    # 1. CAPACITY (energy plus reserve)
    if formulation.is_mixed_integer:
        def max_output_rule(m, i):
            return m.p[i] + headroom(m, i) <= gens[i].p_max_mw * m.u[i]

        def min_output_rule(m, i):
            return m.p[i] >= gens[i].p_min_mw * m.u[i]

        m.max_output = pyo.Constraint(m.G, rule=max_output_rule)
        m.min_output = pyo.Constraint(m.G, rule=min_output_rule)

        if formulation.has_reserves:
            # No reserve from an offline unit
            def reserve_online_rule(m, i):
                return m.r[i] <= gens[i].reserve_capability_mw * m.u[i]

            m.reserve_online = pyo.Constraint(m.R, rule=reserve_online_rule)

    elif formulation.has_reserves:
        def max_output_rule(m, i):
            return m.p[i] + m.r[i] <= gens[i].p_max_mw

        m.max_output = pyo.Constraint(m.R, rule=max_output_rule)

    # 2. ENERGY BALANCE
    m.energy_balance = pyo.Constraint(
        expr=sum(m.p[i] for i in m.G) + sum(m.w[j] for j in m.W) == m.demand
    )

    # 3. RESERVE REQUIREMENT
    if formulation.has_reserves:
        m.reserve_balance = pyo.Constraint(expr=sum(m.r[i] for i in m.R) == m.reserve_requirement)

    # =====================
    # OBJECTIVE FUNCTION
    # =====================
    def objective_rule(m):
        cost = sum(m.energy_cost[i] * m.p[i] for i in m.G)
        cost += sum(m.resource_cost[j] * m.w[j] for j in m.W)
        if formulation.has_reserves:
            cost += sum(m.reserve_cost[i] * m.r[i] for i in m.R)
        if formulation.is_mixed_integer:
            cost += sum(gens[i].commitment_cost * m.u[i] for i in m.G)
        return cost

    m.total_cost = pyo.Objective(rule=objective_rule, sense=pyo.minimize)

    if not formulation.is_mixed_integer:
        m.dual = pyo.Suffix(direction=pyo.Suffix.IMPORT)

    return m


class DispatchModel:
    """
    Handle on a built dispatch model.

    The handle owns the Pyomo model. Update methods change one
    coefficient or bound in place, so a re-solve does not rebuild it;
    ``case`` always reflects the current data.
    """

    def __init__(self, case: DispatchCase):
        self._case = case
        self.model = _build(case)
        self.last_solution: Optional[DispatchSolution] = None
        logger.debug(
            "Built %s model %s: %d generators, %d variable resources",
            case.formulation.value, case.name, len(case.generators), len(case.variable_resources),
        )

    @property
    def case(self) -> DispatchCase:
        return self._case

    @property
    def formulation(self) -> Formulation:
        return self._case.formulation

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def set_demand(self, demand_mw: float) -> None:
        """Change the demand forecast (right-hand side of the energy balance)."""
        if demand_mw < 0:
            raise ValueError("demand_mw must be non-negative")
        self.model.demand.set_value(demand_mw)
        self._case = self._case.with_demand(demand_mw)

    def set_reserve_requirement(self, reserve_mw: float) -> None:
        """Change the reserve requirement (right-hand side of the reserve balance)."""
        if not self.formulation.has_reserves:
            raise ValueError(f"model {self._case.name} has no reserve requirement to update")
        if reserve_mw < 0:
            raise ValueError("reserve_requirement_mw must be non-negative")
        self.model.reserve_requirement.set_value(reserve_mw)
        self._case = self._case.with_reserve_requirement(reserve_mw)

    def set_forecast(self, name: str, forecast_mw: float) -> None:
        """Change the forecast (upper bound) of a variable resource."""
        if forecast_mw < 0:
            raise ValueError("forecast_mw must be non-negative")
        self._case = self._case.with_forecast(name, forecast_mw)
        self.model.w[name].setub(forecast_mw)

    def set_energy_cost(self, name: str, cost: float) -> None:
        """Change the energy offer of a generator."""
        self._case = self._case.with_energy_cost(name, cost)
        self.model.energy_cost[name] = cost

    # ------------------------------------------------------------------
    # Solve
    # ------------------------------------------------------------------

    def solve(self, settings: Optional[SolverSettings] = None) -> DispatchSolution:
        """
        Solve the model as it currently stands.

        Args:
            settings: Solver configuration

        Returns:
            DispatchSolution. Check ``status`` (or call ``raise_for_status``)
            before reading prices.
        """
        outcome = solve_model(self.model, settings)
        solution = self._extract(outcome)
        self.last_solution = solution
        return solution

    def resolve(
        self,
        demand_mw: Optional[float] = None,
        reserve_requirement_mw: Optional[float] = None,
        forecasts: Optional[Dict[str, float]] = None,
        energy_costs: Optional[Dict[str, float]] = None,
        settings: Optional[SolverSettings] = None,
    ) -> DispatchSolution:
        """Apply the given updates, then solve."""
        if demand_mw is not None:
            self.set_demand(demand_mw)
        if reserve_requirement_mw is not None:
            self.set_reserve_requirement(reserve_requirement_mw)
        for name, forecast in (forecasts or {}).items():
            self.set_forecast(name, forecast)
        for name, cost in (energy_costs or {}).items():
            self.set_energy_cost(name, cost)
        return self.solve(settings)

    def _extract(self, outcome: SolveOutcome) -> DispatchSolution:
        """Extract solution values from the solved model."""
        m = self.model
        case = self._case
        formulation = case.formulation

        base = dict(
            case_name=case.name,
            formulation=formulation.value,
            status=outcome.status,
            solver_name=outcome.solver_name,
            termination_condition=outcome.termination_condition,
            solve_time_sec=outcome.solve_time_sec,
        )
        if not outcome.has_solution:
            return DispatchSolution(**base, price_note=f"no solution ({outcome.status.value})")

        def v(x) -> float:
            return float(pyo.value(x))

        generation = {i: v(m.p[i]) for i in m.G}
        injection = {j: v(m.w[j]) for j in m.W}
        spillage = {j: case.resource(j).spillage(injection[j]) for j in m.W}
        reserve = {}
        if formulation.has_reserves:
            reserve = {g.name: (v(m.r[g.name]) if g.name in m.R else 0.0) for g in case.generators}
        commitment = {}
        if formulation.is_mixed_integer:
            commitment = {i: int(round(v(m.u[i]))) for i in m.G}

        energy_price = None
        reserve_price = None
        if formulation.is_mixed_integer:
            note = MIP_PRICE_NOTE
        elif outcome.status is not SolveStatus.OPTIMAL:
            note = f"solution not optimal ({outcome.status.value})"
        else:
            # Pyomo reports d(objective)/d(rhs): the marginal cost itself.
            energy_price = m.dual.get(m.energy_balance)
            if formulation.has_reserves:
                reserve_price = m.dual.get(m.reserve_balance)
            note = "" if energy_price is not None else "solver returned no dual values"
            energy_price = None if energy_price is None else float(energy_price)
            reserve_price = None if reserve_price is None else float(reserve_price)

        return DispatchSolution(
            **base,
            total_cost=v(m.total_cost),
            generation_mw=generation,
            reserve_mw=reserve,
            commitment=commitment,
            injection_mw=injection,
            spillage_mw=spillage,
            energy_price_value=energy_price,
            reserve_price_value=reserve_price,
            price_note=note,
        )


def build_dispatch_model(case: DispatchCase) -> DispatchModel:
    """Build the dispatch model for a case and return its handle."""
    return DispatchModel(case)


def solve_dispatch(case: DispatchCase, settings: Optional[SolverSettings] = None) -> DispatchSolution:
    """Build and solve a case in one call."""
    return build_dispatch_model(case).solve(settings)
