"""
portfolio.py - Present values and implied volatility of option strips

A cap (floor) is a portfolio of caplets (floorlets) priced with one Black
volatility; its implied volatility is the single volatility at which the sum of
the legs' present values equals the market price of the whole strip.

Provides:
- option_price, option_vega, option_implied_volatility: one discounted leg
- portfolio_price, portfolio_vega: sums over legs at a common volatility
- portfolio_intrinsic_value
- portfolio_implied_volatility
"""

import logging
from typing import Sequence

from . import black_formula
from .core import InvalidArgumentError, SimpleOptionData, check_finite, check_non_negative
from .implied_vol_solver import VOL_GUESS, GenericImpliedVolatilitySolver


logger = logging.getLogger(__name__)


# ============================================================================
# SINGLE LEG
# ============================================================================

def option_price(data: SimpleOptionData, lognormal_vol: float) -> float:
    """Present value of one option: discount_factor * Black forward price."""
    if data is None:
        raise InvalidArgumentError("null data")
    return data.discount_factor * black_formula.price(
        data.forward, data.strike, data.time_to_expiry, lognormal_vol, data.is_call)


def option_vega(data: SimpleOptionData, lognormal_vol: float) -> float:
    """Present value vega of one option."""
    if data is None:
        raise InvalidArgumentError("null data")
    return data.discount_factor * black_formula.vega(
        data.forward, data.strike, data.time_to_expiry, lognormal_vol)


def option_implied_volatility(data: SimpleOptionData, price: float) -> float:
    """
    Implied volatility of one option from its present value.

    The price is converted to a forward price with the leg's discount factor.
    """
    if data is None:
        raise InvalidArgumentError("null data")
    return black_formula.implied_volatility(
        price / data.discount_factor, data.forward, data.strike, data.time_to_expiry, data.is_call)


# ============================================================================
# STRIPS
# ============================================================================

def _check_portfolio(data: Sequence[SimpleOptionData]) -> None:
    if data is None or len(data) == 0:
        raise InvalidArgumentError("no option data given")
    for i, option in enumerate(data):
        if option is None:
            raise InvalidArgumentError(f"null option data at index {i}")


def portfolio_price(data: Sequence[SimpleOptionData], lognormal_vol: float) -> float:
    """Present value of a strip of options sharing one Black volatility."""
    _check_portfolio(data)
    return sum(option_price(option, lognormal_vol) for option in data)


def portfolio_vega(data: Sequence[SimpleOptionData], lognormal_vol: float) -> float:
    """Vega of a strip of options sharing one Black volatility."""
    _check_portfolio(data)
    return sum(option_vega(option, lognormal_vol) for option in data)


def portfolio_intrinsic_value(data: Sequence[SimpleOptionData]) -> float:
    """Sum of discounted intrinsic values, the zero-volatility price of the strip."""
    _check_portfolio(data)
    return sum(option.intrinsic_value() for option in data)


def portfolio_implied_volatility(data: Sequence[SimpleOptionData], price: float) -> float:
    """
    The single volatility at which the strip's Black present value equals price.

    Args:
        data: Legs of the portfolio (non-empty; order is irrelevant)
        price: Market present value of the whole portfolio

    Returns:
        Implied volatility, 0.0 when price equals the intrinsic value exactly

    Raises:
        InvalidArgumentError: If data is empty or price is below the intrinsic value
        NoImpliedVolatilityError: If the solver cannot match the price
    """
    _check_portfolio(data)
    check_non_negative("price", price)
    check_finite("price", price)

    legs = tuple(data)
    intrinsic = portfolio_intrinsic_value(legs)
    if price < intrinsic:
        raise InvalidArgumentError(f"option price ({price}) less than intrinsic value ({intrinsic})")
    if price == intrinsic:
        return 0.0

    logger.debug("solving implied volatility of %d options for price %s", len(legs), price)
    solver = GenericImpliedVolatilitySolver(
        lambda sigma: portfolio_price(legs, sigma),
        lambda sigma: portfolio_vega(legs, sigma),
    )
    return solver.implied_volatility(price, VOL_GUESS)
