"""
# Errors

Exceptions raised by forest_tools. Every error names the stage that failed
so a batch failure can be reported without guessing where it came from.

## Classes

- `ForestToolsError`: Base class for all package errors
- `InvalidParameterError`: A growth parameter tuple cannot be evaluated
- `IntegrationError`: The ODE solver failed or produced non-finite values
- `DegenerateVarianceError`: Sobol indices would divide by a zero variance
"""


class ForestToolsError(Exception):
    """
    Base class for forest_tools errors.

    Attributes:
        stage (str): Pipeline stage that failed.
    """
    stage = "forest_tools"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return f"[{self.stage}] {self.message}"


class InvalidParameterError(ForestToolsError):
    """
    Raised when a parameter tuple cannot be used by the growth model.

    Attributes:
        parameters (dict[str, float]): The offending parameter values.
    """
    stage = "model evaluation"

    def __init__(self, message: str, parameters: dict = None):
        super().__init__(message)
        self.parameters = parameters

    def __str__(self):
        if self.parameters is None:
            return super().__str__()
        return f"{super().__str__()} (parameters: {self.parameters})"


class IntegrationError(ForestToolsError):
    """
    Raised when the solver cannot advance the state over the requested times.

    Attributes:
        time (float | None): Last output time reached before a solver
            failure, or the first output time with a non-finite state.
        parameters (dict[str, float] | None): Parameter tuple of the failed
            run. Filled in by the model layer, the integrator itself does not
            know what its arguments mean.
    """
    stage = "integration"

    def __init__(self, message: str, time: float = None, parameters: dict = None):
        super().__init__(message)
        self.time = time
        self.parameters = parameters

    def __str__(self):
        out = super().__str__()
        if self.time is not None:
            out += f" (t={self.time:g})"
        if self.parameters is not None:
            out += f" (parameters: {self.parameters})"
        return out


class DegenerateVarianceError(ForestToolsError):
    """Raised when the model output has no variance to decompose."""
    stage = "index computation"
