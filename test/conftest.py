import pytest

from powerdispatch.cases import nsw_case, reserves_case, texas_case
from powerdispatch.optimization import SolverSettings


@pytest.fixture
def settings():
    return SolverSettings(preference=["appsi_highs", "highs"])


@pytest.fixture
def texas():
    return texas_case()


@pytest.fixture
def reserves():
    return reserves_case()


@pytest.fixture
def nsw():
    return nsw_case()
