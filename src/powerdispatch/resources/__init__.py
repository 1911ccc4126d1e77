"""
Resource Models
===============

Asset definitions for single-period dispatch:
- Generator: Dispatchable unit with energy and reserve offers
- VariableResource: Wind/solar injection bounded by a forecast
"""

from .generator import Generator, generators_from_frame, generators_to_frame
from .variable import VariableResource

__all__ = ["Generator", "VariableResource", "generators_from_frame", "generators_to_frame"]
