"""
Variable Renewable Resource
===========================

Wind or solar plant whose injection is bounded by a forecast.
Any forecast not dispatched is spilled.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class VariableResource:
    """
    Variable (non-dispatchable upward) resource.

    Attributes:
        name: Resource identifier
        forecast_mw: Forecast available output (MW)
        cost: Marginal cost of injection ($/MWh)
        technology: Free-form label (wind, solar)
    """
    name: str
    forecast_mw: float
    cost: float = 0.0
    technology: str = "wind"

    def __post_init__(self):
        """Validate parameters."""
        if not self.name:
            raise ValueError("name must be a non-empty string")
        if self.forecast_mw < 0:
            raise ValueError("forecast_mw must be non-negative")

    def spillage(self, injection_mw: float) -> float:
        """Forecast output left unused for a given injection."""
        return self.forecast_mw - injection_mw

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "forecast_mw": self.forecast_mw,
            "cost": self.cost,
            "technology": self.technology,
        }
