import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from powerdispatch import solve_dispatch
from powerdispatch.config import CaseSpec, SolverSpec, load_case_file
from powerdispatch.optimization import Formulation

CASE_DATA = {
    "name": "two-unit",
    "demand_mw": 600.0,
    "reserve_requirement_mw": 100.0,
    "generators": [
        {"name": "coal", "p_min_mw": 300, "p_max_mw": 1000, "energy_cost": 50, "reserve_cost": 40},
        {"name": "ccgt", "p_min_mw": 150, "p_max_mw": 1000, "energy_cost": 100, "reserve_cost": 80},
    ],
    "variable_resources": [{"name": "wind", "forecast_mw": 200, "cost": 20}],
    "solver": {"preference": ["appsi_highs"], "time_limit_s": 30},
}


def test_case_spec_to_case():
    spec = CaseSpec.model_validate(CASE_DATA)
    case = spec.to_case()

    assert case.name == "two-unit"
    assert case.formulation is Formulation.ECONOMIC_DISPATCH_RESERVES
    assert case.generator("ccgt").reserve_cost == 80.0
    assert case.resource("wind").technology == "wind"

    settings = spec.solver.to_settings()
    assert settings.preference == ["appsi_highs"]
    assert settings.time_limit_s == 30.0


def test_case_spec_defaults():
    spec = CaseSpec.model_validate({
        "demand_mw": 100.0,
        "generators": [{"name": "g", "p_max_mw": 200.0, "energy_cost": 10.0}],
    })
    case = spec.to_case()

    assert case.name == "dispatch"
    assert case.formulation is Formulation.ECONOMIC_DISPATCH
    assert case.generator("g").p_min_mw == 0.0
    assert spec.solver.preference == ["appsi_highs", "highs", "cbc", "glpk"]


@pytest.mark.parametrize("patch", [
    {"demand_mw": -1.0},
    {"generators": []},
    {"generators": [{"name": "g", "p_min_mw": 500, "p_max_mw": 100, "energy_cost": 10}]},
    {"variable_resources": [{"name": "coal", "forecast_mw": 10}]},
    {"solver": {"preference": []}},
    {"solver": {"time_limit_s": 0}},
])
def test_case_spec_rejects_bad_input(patch):
    with pytest.raises(ValidationError):
        CaseSpec.model_validate({**CASE_DATA, **patch})


def test_from_case_round_trip(reserves):
    spec = CaseSpec.from_case(reserves, SolverSpec(preference=["highs"]))
    data = json.loads(spec.model_dump_json())

    assert CaseSpec.model_validate(data).to_case() == reserves
    assert data["solver"]["preference"] == ["highs"]


def test_load_case_file(tmp_path):
    path = tmp_path / "case.json"
    path.write_text(json.dumps(CASE_DATA))

    spec = load_case_file(str(path))
    assert spec.to_case().demand_mw == 600.0


def test_load_case_file_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_case_file(str(tmp_path / "missing.json"))

    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(json.JSONDecodeError):
        load_case_file(str(path))


EXAMPLES = Path(__file__).resolve().parents[1] / "examples"


@pytest.mark.parametrize("name", ["texas_reserves.json", "nsw_commitment.json"])
def test_shipped_case_files(name):
    spec = load_case_file(str(EXAMPLES / name))
    assert spec.to_case().generators


def test_nsw_commitment_file(settings):
    case = load_case_file(str(EXAMPLES / "nsw_commitment.json")).to_case()
    solution = solve_dispatch(case, settings)

    # Bayswater alone covers energy and reserve
    assert solution.commitment == {"Bayswater": 1, "Tallawarra": 0}
    assert solution.generation_mw["Bayswater"] == pytest.approx(2450.0)
    assert solution.total_reserve_mw == pytest.approx(50.0)
