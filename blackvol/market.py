"""
market.py - Option market state and Greeks bundle

OptionMarketState groups the five inputs of the Black formula so that a caller
holding one option can price it and collect its Greeks in one call.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import black_formula
from .core import check_non_negative


@dataclass(frozen=True, slots=True)
class BlackGreeks:
    """
    Price and Greeks of one option, all on a forward basis.

    Attributes:
        price: Forward price
        delta: ∂V/∂F
        gamma: ∂²V/∂F²
        vega: ∂V/∂σ
        theta: -∂V/∂T (driftless when the rate is zero)
        vanna: ∂²V/∂F∂σ
        vomma: ∂²V/∂σ²
    """
    price: float
    delta: float
    gamma: float
    vega: float
    theta: float
    vanna: float
    vomma: float


@dataclass(frozen=True, slots=True)
class OptionMarketState:
    """
    Inputs of the Black formula for one European option.

    All numeric fields must be non-negative and not NaN; this is checked in
    __post_init__ and raises InvalidArgumentError.
    """
    forward: float
    strike: float
    time_to_expiry: float
    lognormal_vol: float
    is_call: bool

    def __post_init__(self):
        check_non_negative("forward", self.forward)
        check_non_negative("strike", self.strike)
        check_non_negative("time_to_expiry", self.time_to_expiry)
        check_non_negative("lognormal_vol", self.lognormal_vol)

    def intrinsic_value(self) -> float:
        sign = 1 if self.is_call else -1
        return max(0.0, sign * (self.forward - self.strike))

    def price(self) -> float:
        return black_formula.price(
            self.forward, self.strike, self.time_to_expiry, self.lognormal_vol, self.is_call)

    def greeks(self, interest_rate: float = 0.0) -> BlackGreeks:
        """Price and Greeks at this state; theta uses interest_rate for discounting."""
        args = (self.forward, self.strike, self.time_to_expiry, self.lognormal_vol)
        return BlackGreeks(
            price=self.price(),
            delta=black_formula.delta(*args, self.is_call),
            gamma=black_formula.gamma(*args),
            vega=black_formula.vega(*args),
            theta=black_formula.theta(*args, self.is_call, interest_rate),
            vanna=black_formula.vanna(*args),
            vomma=black_formula.vomma(*args),
        )

    def with_vol(self, lognormal_vol: float) -> OptionMarketState:
        """Copy of this state with a different volatility."""
        return OptionMarketState(self.forward, self.strike, self.time_to_expiry, lognormal_vol, self.is_call)
