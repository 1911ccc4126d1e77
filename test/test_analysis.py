import numpy as np
import pandas as pd
import pytest

from powerdispatch.analysis import dispatch_sequence, price_curve
from powerdispatch.cases import example_case, list_examples


def test_price_curve_is_non_decreasing(texas, settings):
    curve = price_curve(texas, np.arange(600.0, 2101.0, 100.0), settings)

    assert (curve["status"] == "optimal").all()
    prices = curve["energy_price"].to_numpy()
    assert np.all(np.diff(prices) >= -1e-6)
    assert curve.loc[600.0, "energy_price"] == pytest.approx(20.0)
    assert curve.loc[1000.0, "energy_price"] == pytest.approx(50.0)
    assert curve.loc[1500.0, "energy_price"] == pytest.approx(100.0)


def test_price_curve_marks_infeasible_levels(texas, settings):
    curve = price_curve(texas, [1500.0, 2500.0], settings)

    assert curve.index.name == "demand_mw"
    assert curve.loc[2500.0, "status"] == "infeasible"
    assert np.isnan(curve.loc[2500.0, "energy_price"])
    assert np.isnan(curve.loc[2500.0, "total_cost"])


def test_reserve_price_curve(reserves, settings):
    curve = price_curve(reserves, [1500.0], settings)

    assert curve.loc[1500.0, "energy_price"] == pytest.approx(300.0)
    assert curve.loc[1500.0, "reserve_price"] == pytest.approx(280.0)
    assert curve.loc[1500.0, "r_ccgt"] == pytest.approx(701.0)


def test_dispatch_sequence_with_forecasts(texas, settings):
    index = pd.date_range("2024-01-01", periods=3, freq="5min")
    demand = pd.Series([600.0, 1200.0, 1500.0], index=index)
    forecasts = pd.DataFrame({"wind": [200.0, 50.0, 0.0]}, index=index)

    result = dispatch_sequence(texas, demand, forecasts, settings)

    assert result.index.equals(index)
    assert list(result["demand_mw"]) == [600.0, 1200.0, 1500.0]
    assert result["spillage_mw"].iloc[0] == pytest.approx(50.0)
    assert result["w_wind"].iloc[1] == pytest.approx(50.0)
    assert result["w_wind"].iloc[2] == pytest.approx(0.0, abs=1e-6)
    assert result["p_ccgt"].iloc[2] == pytest.approx(500.0)
    assert (result["p_coal"] + result["p_ccgt"] + result["w_wind"]).to_numpy() == pytest.approx(demand.to_numpy())


def test_dispatch_sequence_rejects_unknown_forecast(texas, settings):
    demand = pd.Series([600.0])
    with pytest.raises(KeyError):
        dispatch_sequence(texas, demand, pd.DataFrame({"solar": [10.0]}), settings)
    with pytest.raises(ValueError):
        dispatch_sequence(texas, demand, pd.DataFrame({"wind": [10.0]}, index=[5]), settings)


def test_nsw_sequence(nsw, settings):
    demand = pd.Series([2400.0, 2500.0, 2600.0])
    result = dispatch_sequence(nsw, demand, settings=settings)

    assert (result["status"] == "optimal").all()
    np.testing.assert_allclose(result["energy_price"], 2.868, rtol=1e-6)
    np.testing.assert_allclose(result["p_Tallawarra"], 199.0, rtol=1e-6)


def test_example_cases():
    assert list_examples() == ["nsw", "reserves", "texas"]
    assert example_case("texas", demand_mw=600.0).demand_mw == 600.0
    with pytest.raises(KeyError, match="unknown example case"):
        example_case("ercot")
