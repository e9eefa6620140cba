"""
blackvol - Black Formula Pricing, Greeks and Implied Volatility

Closed-form European option prices and Greeks under the Black (lognormal forward)
model, and a safeguarded solver recovering the implied volatility of a single
option or of a strip of options from an observed price.

Usage:
    from blackvol import price, vega, implied_volatility

    p = price(100.0, 110.0, 1.0, 0.25, True)
    sigma = implied_volatility(p, 100.0, 110.0, 1.0, True)

    from blackvol import SimpleOptionData, portfolio_implied_volatility

    caplets = [SimpleOptionData(0.03, 0.035, t, df, True) for t, df in schedule]
    cap_vol = portfolio_implied_volatility(caplets, cap_price)

All prices are forward prices unless a discount factor is part of the input.
"""

# Core types
from .core import (
    LARGE,
    SMALL,
    BlackFormulaError,
    InvalidArgumentError,
    NoImpliedVolatilityError,
    BracketingError,
    SimpleOptionData,
)

# Normal distribution
from .normal import normal_cdf, normal_pdf, normal_inverse_cdf

# Black pricing, Greeks and implied volatility
from .black_formula import (
    price,
    delta, dual_delta, simple_delta, forward_delta,
    strike_for_delta,
    gamma, dual_gamma, cross_gamma,
    theta, theta_mod, driftless_theta,
    vega, vanna, dual_vanna, vomma, volga,
    implied_strike, implied_strike_with_derivatives,
    implied_volatility, implied_volatility_from_otm_price, implied_volatilities,
)

# Solver
from .implied_vol_solver import GenericImpliedVolatilitySolver

# Root finding
from .rootfinding import bracket_root, bisection_root

# Portfolios
from .portfolio import (
    option_price,
    option_vega,
    option_implied_volatility,
    portfolio_price,
    portfolio_vega,
    portfolio_intrinsic_value,
    portfolio_implied_volatility,
)

# Market state
from .market import OptionMarketState, BlackGreeks

__all__ = [
    # Core
    'LARGE', 'SMALL',
    'BlackFormulaError', 'InvalidArgumentError', 'NoImpliedVolatilityError', 'BracketingError',
    'SimpleOptionData',

    # Normal distribution
    'normal_cdf', 'normal_pdf', 'normal_inverse_cdf',

    # Black formula
    'price',
    'delta', 'dual_delta', 'simple_delta', 'forward_delta',
    'strike_for_delta',
    'gamma', 'dual_gamma', 'cross_gamma',
    'theta', 'theta_mod', 'driftless_theta',
    'vega', 'vanna', 'dual_vanna', 'vomma', 'volga',
    'implied_strike', 'implied_strike_with_derivatives',
    'implied_volatility', 'implied_volatility_from_otm_price', 'implied_volatilities',

    # Solver
    'GenericImpliedVolatilitySolver',
    'bracket_root', 'bisection_root',

    # Portfolios
    'option_price', 'option_vega', 'option_implied_volatility',
    'portfolio_price', 'portfolio_vega', 'portfolio_intrinsic_value', 'portfolio_implied_volatility',

    # Market state
    'OptionMarketState', 'BlackGreeks',
]
