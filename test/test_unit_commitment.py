from dataclasses import replace

import pytest

from powerdispatch import ShadowPriceUnavailableError, SolveStatus, solve_dispatch
from powerdispatch.analysis import commitment_savings
from powerdispatch.optimization.dispatch_model import MIP_PRICE_NOTE


@pytest.fixture
def low_demand(texas):
    return texas.with_demand(600.0)


def test_commitment_switches_off_ccgt(low_demand, settings):
    solution = solve_dispatch(low_demand.with_unit_commitment(), settings)

    assert solution.status is SolveStatus.OPTIMAL
    assert solution.commitment == {"coal": 1, "ccgt": 0}
    assert solution.generation_mw["coal"] == pytest.approx(400.0)
    assert solution.generation_mw["ccgt"] == pytest.approx(0.0, abs=1e-6)
    assert solution.injection_mw["wind"] == pytest.approx(200.0)
    assert solution.total_spillage_mw == pytest.approx(0.0, abs=1e-6)
    assert solution.total_cost == pytest.approx(24000.0)


def test_commitment_has_no_prices(low_demand, settings):
    solution = solve_dispatch(low_demand.with_unit_commitment(), settings)

    assert not solution.has_prices
    assert solution.price_note == MIP_PRICE_NOTE
    with pytest.raises(ShadowPriceUnavailableError, match="mixed-integer"):
        solution.energy_price
    assert solution.to_dict()["prices"]["available"] is False


def test_commitment_savings(low_demand, settings):
    result = commitment_savings(low_demand, settings)

    assert result["dispatch_cost"] == pytest.approx(33000.0)
    assert result["commitment_cost"] == pytest.approx(24000.0)
    assert result["savings"] == pytest.approx(9000.0)
    assert result["dispatch_spillage_mw"] == pytest.approx(50.0)
    assert result["dispatch_status"] == "optimal"
    assert result["commitment_status"] == "optimal"


def test_commitment_never_costs_more(texas, settings):
    for demand in (600.0, 1000.0, 1500.0, 2000.0):
        result = commitment_savings(texas.with_demand(demand), settings)
        assert result["savings"] >= -1e-4 * result["dispatch_cost"]


def test_commitment_cost_enters_objective(low_demand, settings):
    case = low_demand.with_unit_commitment()
    coal = replace(case.generator("coal"), commitment_cost=1000.0)
    case = replace(case, generators=[coal if g.name == "coal" else g for g in case.generators])
    solution = solve_dispatch(case, settings)

    assert solution.commitment["coal"] == 1
    assert solution.total_cost == pytest.approx(25000.0)


def test_commitment_below_all_minimums(texas, settings):
    # Everything can be switched off, so low demand is served by wind alone.
    solution = solve_dispatch(texas.with_demand(150.0).with_unit_commitment(), settings)

    assert solution.commitment == {"coal": 0, "ccgt": 0}
    assert solution.injection_mw["wind"] == pytest.approx(150.0)
    assert solution.total_cost == pytest.approx(3000.0)


def test_commitment_infeasible(texas, settings):
    solution = solve_dispatch(texas.with_demand(2300.0).with_unit_commitment(), settings)
    assert solution.status is SolveStatus.INFEASIBLE


def test_commitment_with_reserves(reserves, settings):
    solution = solve_dispatch(reserves.with_unit_commitment(), settings)

    assert solution.is_optimal
    # The OCGT must stay online to cover the reserve requirement.
    assert solution.commitment == {"coal": 1, "ccgt": 1, "ocgt": 1}
    assert solution.total_reserve_mw == pytest.approx(701.0)
    assert solution.total_cost == pytest.approx(140280.0)
    with pytest.raises(ShadowPriceUnavailableError):
        solution.reserve_price


def test_offline_unit_holds_no_reserve(reserves, settings):
    solution = solve_dispatch(reserves.with_demand(1200.0).with_reserve_requirement(100.0).with_unit_commitment(),
                              settings)

    for name, on in solution.commitment.items():
        if not on:
            assert solution.reserve_mw[name] == pytest.approx(0.0, abs=1e-6)
            assert solution.generation_mw[name] == pytest.approx(0.0, abs=1e-6)
