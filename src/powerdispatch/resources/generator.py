"""
Dispatchable Generator Model
============================

Models a dispatchable thermal unit for single-period dispatch:
- Minimum stable output and maximum capacity
- Constant marginal energy cost
- Optional reserve offer (cost and capability)
- Fixed cost incurred when the unit is committed
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pandas as pd


@dataclass(frozen=True)
class Generator:
    """
    Single dispatchable generating unit.

    Attributes:
        name: Unit identifier
        p_min_mw: Minimum stable output when online (MW)
        p_max_mw: Maximum output (MW)
        energy_cost: Short-run marginal cost of energy ($/MWh)
        reserve_cost: Reserve offer ($/MW). None if the unit cannot provide reserve
        reserve_max_mw: Reserve capability (MW). Defaults to p_max_mw - p_min_mw
        commitment_cost: Fixed cost of being online ($), unit commitment only
        technology: Free-form label (coal, CCGT, OCGT, ...)
    """
    name: str
    p_min_mw: float
    p_max_mw: float
    energy_cost: float
    reserve_cost: Optional[float] = None
    reserve_max_mw: Optional[float] = None
    commitment_cost: float = 0.0
    technology: str = ""

    def __post_init__(self):
        """Validate parameters."""
        if not self.name:
            raise ValueError("name must be a non-empty string")
        if self.p_min_mw < 0:
            raise ValueError("p_min_mw must be non-negative")
        if self.p_min_mw > self.p_max_mw:
            raise ValueError("p_min_mw cannot exceed p_max_mw")
        if self.reserve_max_mw is not None and self.reserve_max_mw < 0:
            raise ValueError("reserve_max_mw must be non-negative")
        if self.commitment_cost < 0:
            raise ValueError("commitment_cost must be non-negative")

    @property
    def provides_reserve(self) -> bool:
        """True if the unit carries a reserve offer."""
        return self.reserve_cost is not None

    @property
    def reserve_capability_mw(self) -> float:
        """Largest reserve the unit can hold (MW), 0 if it has no offer."""
        if not self.provides_reserve:
            return 0.0
        headroom = self.p_max_mw - self.p_min_mw
        if self.reserve_max_mw is None:
            return headroom
        return min(self.reserve_max_mw, headroom)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "p_min_mw": self.p_min_mw,
            "p_max_mw": self.p_max_mw,
            "energy_cost": self.energy_cost,
            "reserve_cost": self.reserve_cost,
            "reserve_max_mw": self.reserve_max_mw,
            "commitment_cost": self.commitment_cost,
            "technology": self.technology,
        }


# Column names accepted by generators_from_frame, beyond the dataclass fields.
_FRAME_ALIASES = {
    "g_min": "p_min_mw",
    "g_max": "p_max_mw",
    "c_g": "energy_cost",
    "c_r": "reserve_cost",
    "c_fixed": "commitment_cost",
    "tech": "technology",
}


def generators_from_frame(frame: pd.DataFrame) -> List[Generator]:
    """
    Build generators from a table with one row per unit.

    Columns may use the dataclass field names or the short notation
    (g_min, g_max, c_g, c_r, c_fixed, tech). If there is no ``name``
    column the index is used. Missing values fall back to the defaults.

    Args:
        frame: Generator table

    Returns:
        List of Generator, in row order
    """
    df = frame.rename(columns=_FRAME_ALIASES)
    if "name" not in df.columns:
        df = df.assign(name=[str(i) for i in df.index])

    missing = {"p_min_mw", "p_max_mw", "energy_cost"} - set(df.columns)
    if missing:
        raise ValueError(f"generator table missing columns: {sorted(missing)}")

    generators = []
    for row in df.to_dict(orient="records"):
        kwargs = {k: v for k, v in row.items() if k in Generator.__dataclass_fields__ and not pd.isna(v)}
        kwargs["name"] = str(kwargs["name"])
        for key in ("p_min_mw", "p_max_mw", "energy_cost", "reserve_cost", "reserve_max_mw", "commitment_cost"):
            if key in kwargs:
                kwargs[key] = float(kwargs[key])
        generators.append(Generator(**kwargs))
    return generators


def generators_to_frame(generators: List[Generator]) -> pd.DataFrame:
    """Tabulate generators, indexed by name."""
    return pd.DataFrame([g.to_dict() for g in generators]).set_index("name")
