import json

import pandas as pd
import pytest

from powerdispatch.cli import main

SOLVERS = ["--solver", "appsi_highs", "highs"]


def test_solve_example(capsys):
    assert main(["solve", "--example", "texas", *SOLVERS]) == 0

    out = capsys.readouterr().out
    assert "Status: optimal" in out
    assert "Energy price $100.00/MWh" in out


def test_solve_writes_json(tmp_path):
    output = tmp_path / "solution.json"
    assert main(["solve", "--example", "reserves", *SOLVERS, "-o", str(output)]) == 0

    data = json.loads(output.read_text())
    assert data["prices"]["energy_price"] == pytest.approx(300.0)
    assert data["prices"]["reserve_price"] == pytest.approx(280.0)
    assert data["reserve_mw"]["ccgt"] == pytest.approx(701.0)


def test_solve_case_file(tmp_path, capsys):
    case_file = tmp_path / "case.json"
    case_file.write_text(json.dumps({
        "name": "file-case",
        "demand_mw": 600.0,
        "generators": [
            {"name": "coal", "p_min_mw": 300, "p_max_mw": 1000, "energy_cost": 50},
            {"name": "ccgt", "p_min_mw": 150, "p_max_mw": 1000, "energy_cost": 100},
        ],
        "variable_resources": [{"name": "wind", "forecast_mw": 200, "cost": 20}],
    }))

    assert main(["solve", str(case_file), *SOLVERS, "--unit-commitment"]) == 0
    out = capsys.readouterr().out
    assert "file-case (unit_commitment)" in out
    assert "Shadow prices unavailable" in out


def test_infeasible_exit_code(capsys):
    assert main(["solve", "--example", "texas", "--demand", "5000", *SOLVERS]) == 1
    assert "infeasible" in capsys.readouterr().out


@pytest.mark.parametrize("argv", [
    ["solve"],
    ["solve", "missing.json"],
    ["solve", "--example", "texas", "--demand", "-10"],
    ["solve", "--example", "texas", "--reserve", "100"],
])
def test_input_errors(argv, capsys):
    assert main(argv) == 2
    assert "error" in capsys.readouterr().err.lower()


def test_invalid_case_file(tmp_path, capsys):
    case_file = tmp_path / "bad.json"
    case_file.write_text(json.dumps({"demand_mw": 100.0, "generators": []}))

    assert main(["solve", str(case_file)]) == 2
    assert "validation" in capsys.readouterr().err


def test_missing_solver(capsys):
    assert main(["solve", "--example", "texas", "--solver", "no_such_solver"]) == 3
    assert "no_such_solver" in capsys.readouterr().err


def test_sweep_writes_csv(tmp_path):
    output = tmp_path / "curve.csv"
    argv = ["sweep", "--example", "texas", "--start", "600", "--stop", "1000", "--step", "200", *SOLVERS,
            "-o", str(output)]
    assert main(argv) == 0

    curve = pd.read_csv(output, index_col="demand_mw")
    assert list(curve.index) == [600.0, 800.0, 1000.0]
    assert curve.loc[600.0, "energy_price"] == pytest.approx(20.0)


def test_sweep_rejects_bad_range():
    assert main(["sweep", "--example", "texas", "--start", "1000", "--stop", "600", *SOLVERS]) == 2


def test_compare(capsys):
    assert main(["compare", "--example", "texas", "--demand", "600", *SOLVERS]) == 0
    out = capsys.readouterr().out
    assert "savings" in out
    assert "9000" in out
