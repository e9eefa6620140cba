"""
rootfinding.py - One-dimensional root bracketing and bisection

Provides:
- bracket_root: grow an initial interval outward until the function changes sign,
  without leaving [min_x, max_x]
- bisection_root: bisection on a bracketed interval (scipy.optimize.bisect)

Both are used by the implied volatility solver but are independent of any
pricing model.
"""

import logging
import math
from typing import Callable, Tuple

from scipy.optimize import bisect

from .core import BracketingError, InvalidArgumentError


logger = logging.getLogger(__name__)

# Growth factor applied to the interval on each expansion step
BRACKET_RATIO = 1.6
MAX_BRACKET_STEPS = 50
MAX_BISECTION_ITERATIONS = 100


def _evaluate(func: Callable[[float], float], x: float) -> float:
    value = func(x)
    if math.isnan(value):
        raise BracketingError(f"Failed to bracket root: function invalid at x = {x}, f(x) = {value}")
    return value


def bracket_root(
    func: Callable[[float], float],
    x_lower: float,
    x_upper: float,
    min_x: float = -math.inf,
    max_x: float = math.inf,
) -> Tuple[float, float]:
    """
    Expand [x_lower, x_upper] until func has opposite signs (or a zero) at its ends.

    Each step moves the end whose |f| is smaller away from the other end by
    BRACKET_RATIO times the current width, clamping it to min_x / max_x.

    Args:
        func: Function whose root is sought
        x_lower: Initial lower end (>= min_x)
        x_upper: Initial upper end (<= max_x)
        min_x: Hard lower limit for the bracket
        max_x: Hard upper limit for the bracket

    Returns:
        (x1, x2) with func(x1) * func(x2) <= 0

    Raises:
        InvalidArgumentError: If the initial interval is outside the limits
        BracketingError: If no sign change is found within the limits or MAX_BRACKET_STEPS
    """
    if not x_lower >= min_x:
        raise InvalidArgumentError(f"x_lower {x_lower} is below min_x {min_x}")
    if not x_upper <= max_x:
        raise InvalidArgumentError(f"x_upper {x_upper} is above max_x {max_x}")

    x1, x2 = x_lower, x_upper
    f1 = _evaluate(func, x1)
    f2 = _evaluate(func, x2)
    lower_limit_reached = False
    upper_limit_reached = False

    for _ in range(MAX_BRACKET_STEPS):
        if f1 * f2 <= 0.0:
            return x1, x2
        if lower_limit_reached and upper_limit_reached:
            raise BracketingError(f"Failed to bracket root: no root found between {min_x} and {max_x}")

        if abs(f1) < abs(f2) and not lower_limit_reached:
            x1 += BRACKET_RATIO * (x1 - x2)
            if x1 < min_x:
                x1 = min_x
                lower_limit_reached = True
            f1 = _evaluate(func, x1)
        else:
            x2 += BRACKET_RATIO * (x2 - x1)
            if x2 > max_x:
                x2 = max_x
                upper_limit_reached = True
            f2 = _evaluate(func, x2)

    raise BracketingError(f"Failed to bracket root: no sign change after {MAX_BRACKET_STEPS} steps "
                          f"(last interval [{x1}, {x2}])")


def bisection_root(
    func: Callable[[float], float],
    lower: float,
    upper: float,
    tolerance: float,
) -> float:
    """
    Root of func on [lower, upper] by bisection.

    Raises:
        BracketingError: If func does not change sign over the interval
        RuntimeError: If scipy fails to converge within MAX_BISECTION_ITERATIONS
    """
    f_lower = func(lower)
    if f_lower == 0.0:
        return lower
    f_upper = func(upper)
    if f_upper == 0.0:
        return upper
    if f_lower * f_upper > 0.0:
        raise BracketingError(f"Root is not bracketed by [{lower}, {upper}]: f = ({f_lower}, {f_upper})")

    root = bisect(func, lower, upper, xtol=tolerance, maxiter=MAX_BISECTION_ITERATIONS)
    logger.debug("bisection converged to %s on [%s, %s]", root, lower, upper)
    return root
