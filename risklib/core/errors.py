"""
Exception hierarchy for RiskLib

Every failure raised by the optimizers, the frontier driver and the
scenario evaluator derives from RiskLibError. Caller mistakes also derive
from ValueError so they read naturally next to numpy/scipy errors, while
solver failures derive from RuntimeError and are never confused with them.
"""


class RiskLibError(Exception):
    """Base exception for RiskLib errors"""
    pass


class InvalidObjectiveError(RiskLibError, ValueError):
    """Objective kind (or optimization mode) is not recognised"""
    pass


class MissingParameterError(RiskLibError, ValueError):
    """A parameter required by the requested objective was not supplied"""

    def __init__(self, parameter: str, message: str = None):
        self.parameter = parameter
        super().__init__(message or f"Missing required parameter: {parameter}")


class ConflictingParametersError(RiskLibError, ValueError):
    """Both alpha and target were supplied to the same call"""
    pass


class DegenerateRatioError(RiskLibError, ZeroDivisionError):
    """Ratio objective evaluated with a zero risk denominator"""
    pass


class DegenerateInputError(RiskLibError, ValueError):
    """Input data or sizes make the computation undefined"""
    pass


class RiskMeasureError(RiskLibError, ValueError):
    """Risk measure returned a value that cannot be optimized (NaN, inf)"""
    pass


class ConfigurationError(RiskLibError, ValueError):
    """Configuration file or values are invalid"""
    pass


class UnknownRiskMeasureError(RiskLibError, KeyError):
    """Requested risk measure is not registered"""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Unknown risk measure"


class SolverConvergenceError(RiskLibError, RuntimeError):
    """
    Numerical solver failed to reach a feasible or optimal point.

    Attributes:
        solver_message: Message reported by the solver
        iterations: Number of iterations performed
        status: Solver status code
    """

    def __init__(self, message: str, solver_message: str = "", iterations: int = 0, status: int = None):
        self.solver_message = solver_message
        self.iterations = iterations
        self.status = status
        super().__init__(message)
