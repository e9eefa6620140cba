"""
implied_vol_solver.py - Model-independent implied volatility

Finds the volatility that, put into a pricing model, reproduces a market price.
Works for any model whose price is increasing in a single volatility parameter:
the Black formula, a strip of Black caplets, or early-exercise approximations
whose vega vanishes inside the exercise region.

Algorithm (safeguarded Newton-Raphson):
1. Bracket the root of price(sigma) / target - 1 around the guess.
2. Newton steps from the bracket midpoint, each step clamped to MAX_CHANGE and
   to the side of the bracket that the sign of the residual selects.
3. The bracket is narrowed after every step, so it always contains the root.
4. Zero/NaN vega or more than MAX_ITERATIONS steps switches to bisection.
"""

import logging
import math
from typing import Callable, Optional, Tuple

from .core import (
    BracketingError,
    InvalidArgumentError,
    NoImpliedVolatilityError,
    check_finite,
    check_non_negative,
    check_positive,
)
from .rootfinding import bisection_root, bracket_root


logger = logging.getLogger(__name__)

MAX_ITERATIONS = 20  # Newton taking longer than this means the function is badly behaved
VOL_TOL = 1e-9
VOL_GUESS = 0.3
BRACKET_STEP = 0.1
MAX_CHANGE = 0.5

PriceFunction = Callable[[float], float]
PriceAndVegaFunction = Callable[[float], Tuple[float, float]]


class GenericImpliedVolatilitySolver:
    """
    Implied volatility for any option pricing model with a volatility parameter.

    A solver is built from caller-supplied callables and holds no state between
    calls; one instance can be shared across threads.

    Args:
        price_func: sigma -> price
        vega_func: sigma -> d price / d sigma
        max_iterations: Newton steps before falling back to bisection
        vol_tol: Convergence tolerance on the volatility step
        bracket_step: Half-width of the initial bracket around the guess
        max_change: Largest Newton step allowed in one iteration

    Examples:
        solver = GenericImpliedVolatilitySolver(
            lambda s: price(f, k, t, s, True),
            lambda s: vega(f, k, t, s),
        )
        sigma = solver.implied_volatility(market_price)
    """

    def __init__(
        self,
        price_func: PriceFunction,
        vega_func: PriceFunction,
        *,
        max_iterations: int = MAX_ITERATIONS,
        vol_tol: float = VOL_TOL,
        bracket_step: float = BRACKET_STEP,
        max_change: float = MAX_CHANGE,
    ):
        if price_func is None:
            raise InvalidArgumentError("price_func must not be None")
        if vega_func is None:
            raise InvalidArgumentError("vega_func must not be None")
        if max_iterations < 0:
            raise InvalidArgumentError(f"max_iterations must be non-negative; have {max_iterations}")
        check_positive("vol_tol", vol_tol)
        check_positive("bracket_step", bracket_step)
        check_positive("max_change", max_change)

        self._price_func = price_func
        self._price_and_vega_func = lambda sigma: (price_func(sigma), vega_func(sigma))
        self.max_iterations = max_iterations
        self.vol_tol = vol_tol
        self.bracket_step = bracket_step
        self.max_change = max_change

    @classmethod
    def from_price_and_vega(
        cls,
        price_and_vega_func: PriceAndVegaFunction,
        **settings,
    ) -> "GenericImpliedVolatilitySolver":
        """Build a solver from one callable returning (price, vega)."""
        if price_and_vega_func is None:
            raise InvalidArgumentError("price_and_vega_func must not be None")
        solver = cls(
            lambda sigma: price_and_vega_func(sigma)[0],
            lambda sigma: price_and_vega_func(sigma)[1],
            **settings,
        )
        solver._price_and_vega_func = price_and_vega_func
        return solver

    def implied_volatility(self, option_price: float, vol_guess: Optional[float] = None) -> float:
        """
        Volatility at which the model price equals option_price.

        Args:
            option_price: Target price (positive, finite)
            vol_guess: Starting point for the bracket search, default VOL_GUESS

        Returns:
            sigma with |price(sigma) - option_price| consistent with VOL_TOL

        Raises:
            InvalidArgumentError: If option_price or vol_guess is out of domain
            NoImpliedVolatilityError: If no volatility in [0, inf) reproduces the price
        """
        if vol_guess is None:
            vol_guess = VOL_GUESS
        check_non_negative("vol_guess", vol_guess)
        check_finite("vol_guess", vol_guess)
        check_positive("option_price", option_price)
        check_finite("option_price", option_price)

        try:
            lower_sigma, upper_sigma = self._bracket_root(option_price, vol_guess)
        except BracketingError as e:
            raise NoImpliedVolatilityError(
                f"{e} No implied volatility for this price. [price: {option_price}]", option_price
            ) from e

        sigma = 0.5 * (lower_sigma + upper_sigma)
        price, vega = self._price_and_vega_func(sigma)

        # Early-exercise models have zero vega at low volatilities
        if vega == 0.0 or math.isnan(vega):
            return self._solve_by_bisection(option_price, lower_sigma, upper_sigma)

        lower_sigma, upper_sigma, change = self._newton_change(
            sigma, price - option_price, vega, lower_sigma, upper_sigma)

        count = 0
        while abs(change) > self.vol_tol:
            sigma += change
            price, vega = self._price_and_vega_func(sigma)

            if vega == 0.0 or math.isnan(vega):
                return self._solve_by_bisection(option_price, lower_sigma, upper_sigma)

            lower_sigma, upper_sigma, change = self._newton_change(
                sigma, price - option_price, vega, lower_sigma, upper_sigma)

            count += 1
            if count > self.max_iterations:
                logger.debug("no Newton convergence after %d iterations, bisecting [%s, %s]",
                             count, lower_sigma, upper_sigma)
                return self._solve_by_bisection(option_price, lower_sigma, upper_sigma)

        # apply the final change
        return sigma + change

    def _newton_change(
        self,
        sigma: float,
        diff: float,
        vega: float,
        lower_sigma: float,
        upper_sigma: float,
    ) -> Tuple[float, float, float]:
        """Narrow the bracket on the sign of diff and return the clamped Newton step."""
        if diff > 0.0:
            upper_sigma = sigma
        else:
            lower_sigma = sigma

        trial_change = -diff / vega
        if trial_change > 0.0:
            change = min(self.max_change, trial_change, upper_sigma - sigma)
        else:
            change = max(-self.max_change, trial_change, lower_sigma - sigma)
        return lower_sigma, upper_sigma, change

    def _bracket_root(self, option_price: float, sigma: float) -> Tuple[float, float]:
        def relative_error(volatility: float) -> float:
            return self._price_func(volatility) / option_price - 1.0

        return bracket_root(
            relative_error,
            max(0.0, sigma - self.bracket_step),
            sigma + self.bracket_step,
            0.0,
            math.inf,
        )

    def _solve_by_bisection(self, option_price: float, lower_sigma: float, upper_sigma: float) -> float:
        logger.debug("degenerate vega or slow convergence: bisecting [%s, %s]", lower_sigma, upper_sigma)

        def relative_error(volatility: float) -> float:
            return self._price_func(volatility) / option_price - 1.0

        try:
            return bisection_root(relative_error, lower_sigma, upper_sigma, self.vol_tol)
        except (BracketingError, RuntimeError) as e:
            raise NoImpliedVolatilityError(
                f"{e} No implied volatility for this price. [price: {option_price}]", option_price
            ) from e
