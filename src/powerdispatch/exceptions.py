"""
Dispatch Errors
===============

Exceptions raised when a dispatch solve cannot be reported as optimal,
or when a quantity is requested that the formulation does not define.
"""


class DispatchError(Exception):
    """Base class for dispatch errors."""


class InfeasibleError(DispatchError):
    """No dispatch satisfies the balance, reserve and capacity constraints."""


class UnboundedError(DispatchError):
    """The objective has no finite minimum."""


class NotOptimalError(DispatchError):
    """The solver stopped without proving optimality (time limit, error, ...)."""


class ShadowPriceUnavailableError(DispatchError):
    """Dual values are not defined for this solution."""


class SolverUnavailableError(DispatchError, RuntimeError):
    """None of the requested solvers is installed."""
