"""
Example Cases
=============

Small systems used by the examples, the CLI and the tests:

- texas: two dispatchable units and a wind farm, after the JuMP power
  systems tutorial (West/East Texas)
- reserves: the texas system plus an OCGT, with a 701 MW reserve
  requirement co-optimized against energy
- nsw: a single-region New South Wales system (Bayswater, Tallawarra,
  a solar farm and a 5-minute operating reserve)
"""

from typing import Callable, Dict, List

from .optimization import DispatchCase
from .resources import Generator, VariableResource


def texas_case(demand_mw: float = 1500.0) -> DispatchCase:
    """Coal and CCGT units with 200 MW of wind at $20/MWh."""
    return DispatchCase(
        name="texas",
        generators=[
            Generator("coal", p_min_mw=300.0, p_max_mw=1000.0, energy_cost=50.0, technology="coal"),
            Generator("ccgt", p_min_mw=150.0, p_max_mw=1000.0, energy_cost=100.0, technology="CCGT"),
        ],
        variable_resources=[VariableResource("wind", forecast_mw=200.0, cost=20.0, technology="wind")],
        demand_mw=demand_mw,
    )


def reserves_case(demand_mw: float = 1500.0, reserve_requirement_mw: float = 701.0) -> DispatchCase:
    """
    Energy and reserve co-optimization.

    At the defaults the OCGT sets the energy price (300) and the CCGT,
    backed off energy to hold reserve, sets the reserve price
    (80 + 300 - 100 = 280).
    """
    return DispatchCase(
        name="reserves",
        generators=[
            Generator("coal", p_min_mw=300.0, p_max_mw=1000.0, energy_cost=50.0,
                      reserve_cost=40.0, technology="coal"),
            Generator("ccgt", p_min_mw=150.0, p_max_mw=1000.0, energy_cost=100.0,
                      reserve_cost=80.0, technology="CCGT"),
            Generator("ocgt", p_min_mw=0.0, p_max_mw=500.0, energy_cost=300.0,
                      reserve_cost=500.0, technology="OCGT"),
        ],
        variable_resources=[VariableResource("wind", forecast_mw=200.0, cost=20.0, technology="wind")],
        demand_mw=demand_mw,
        reserve_requirement_mw=reserve_requirement_mw,
    )


# Reserve must be deliverable within 5 minutes, so capability = ramp rate x 5 min.
_NSW_RESERVE_MINUTES = 5.0


def nsw_case(demand_mw: float = 2500.0, reserve_requirement_mw: float = 50.0) -> DispatchCase:
    """
    Single-region NSW system.

    Demand is one representative interval; the full study steps it
    through a 5-minute demand series (see analysis.dispatch_sequence).
    """
    return DispatchCase(
        name="nsw",
        generators=[
            Generator("Bayswater", p_min_mw=1000.0, p_max_mw=2545.0, energy_cost=2.868,
                      reserve_cost=0.0, reserve_max_mw=20.67 * _NSW_RESERVE_MINUTES, technology="coal"),
            Generator("Tallawarra", p_min_mw=199.0, p_max_mw=395.0, energy_cost=9.338,
                      reserve_cost=0.0, reserve_max_mw=6.0 * _NSW_RESERVE_MINUTES, technology="gas"),
        ],
        variable_resources=[VariableResource("NSWSolar", forecast_mw=50.0, cost=0.0, technology="solar")],
        demand_mw=demand_mw,
        reserve_requirement_mw=reserve_requirement_mw,
    )


EXAMPLE_CASES: Dict[str, Callable[..., DispatchCase]] = {
    "texas": texas_case,
    "reserves": reserves_case,
    "nsw": nsw_case,
}


def example_case(name: str, **kwargs) -> DispatchCase:
    """Look up an example case by name."""
    try:
        factory = EXAMPLE_CASES[name]
    except KeyError:
        raise KeyError(f"unknown example case {name!r}; choose from {sorted(EXAMPLE_CASES)}") from None
    return factory(**kwargs)


def list_examples() -> List[str]:
    return sorted(EXAMPLE_CASES)
