"""ODE integration on a caller-specified time grid.

Thin layer over `scipy.integrate.solve_ivp` that reports the state exactly at
the requested output times and turns solver failures and non-finite states
into `IntegrationError` instead of handing NaN back to the caller. The solver
is free to take any internal steps between output times.

Typical usage example:

    import numpy as np
    from forest_tools.growth import GrowthParameters, forest_ode
    from forest_tools.integrate import integrate

    times = np.arange(1, 301, dtype=float)
    t, C = integrate(forest_ode, [10.0], times, args=(GrowthParameters(),))
"""

from typing import Callable

import numpy as np
from numpy.typing import ArrayLike
from scipy.integrate import solve_ivp

from forest_tools.errors import IntegrationError


def check_times(times: ArrayLike) -> np.ndarray:
    """Validate an output grid and return it as a float array.

    Raises:
        ValueError: If the grid has fewer than two points, is not
            one-dimensional, or is not strictly increasing.
    """
    times = np.asarray(times, dtype=float)
    if times.ndim != 1 or times.size < 2:
        raise ValueError("times must be a one-dimensional grid of at least two points")
    if not np.all(np.isfinite(times)):
        raise ValueError("times must be finite")
    if np.any(np.diff(times) <= 0):
        raise ValueError("times must be strictly increasing")
    return times


def integrate(
    fun: Callable,
    y0: ArrayLike,
    times: ArrayLike,
    args: tuple = (),
    method: str = "LSODA",
    rtol: float = 1e-6,
    atol: float = 1e-9,
    max_step: float = np.inf,
) -> tuple[np.ndarray, np.ndarray]:
    """Integrate `dy/dt = fun(t, y, *args)` and sample it at `times`.

    The initial state is taken to hold at `times[0]`.

    Args:
        fun (Callable): Right-hand side with signature `fun(t, y, *args)`.
        y0 (ArrayLike): Initial state, scalar or 1-D.
        times (ArrayLike): Strictly increasing output times.
        args (tuple, optional): Extra arguments forwarded to `fun`.
        method (str, optional): Any `solve_ivp` method. Defaults to "LSODA",
            which switches between stiff and non-stiff steppers.
        rtol (float, optional): Relative tolerance. Defaults to 1e-6.
        atol (float, optional): Absolute tolerance. Defaults to 1e-9.
        max_step (float, optional): Largest internal step. Defaults to no
            limit.

    Returns:
        tuple[np.ndarray, np.ndarray]: The output times (n,) and the state
            at each of them (n, n_states).

    Raises:
        ValueError: If `times` is not a valid output grid.
        IntegrationError: If the solver stops early or the state becomes
            non-finite. For an early stop, `time` is the last output time
            the solver reached; the failure lies between it and the next
            output time.
    """
    times = check_times(times)
    y0 = np.atleast_1d(np.asarray(y0, dtype=float))

    sol = solve_ivp(
        fun,
        t_span=(times[0], times[-1]),
        y0=y0,
        method=method,
        t_eval=times,
        args=args,
        rtol=rtol,
        atol=atol,
        max_step=max_step,
    )

    if not sol.success:
        failed_at = sol.t[-1] if sol.t.size else times[0]
        raise IntegrationError(
            f"solver {method} failed after the last reported time: {sol.message}",
            time=float(failed_at)
        )

    values = sol.y.T  # (n, n_states)

    # With t_eval, a successful solve reports every requested time
    if values.shape[0] != times.size:
        raise IntegrationError(
            f"solver {method} returned {values.shape[0]} of {times.size} output times",
            time=float(sol.t[-1]) if sol.t.size else float(times[0]),
        )

    finite = np.all(np.isfinite(values), axis=1)
    if not finite.all():
        first_bad = int(np.argmin(finite))
        raise IntegrationError("state became non-finite", time=float(times[first_bad]))

    return times, values
