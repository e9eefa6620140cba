"""
core.py - Shared types for the Black formula library

Provides:
- Exceptions (InvalidArgumentError, NoImpliedVolatilityError, BracketingError)
- Numeric thresholds used to classify degenerate inputs
- Argument checks shared by every pricing function
- IEEE-754 style arithmetic helpers (division and exp never raise)
- SimpleOptionData: one discounted option leg

All prices handled by this package are FORWARD prices, i.e. (spot price) / numeraire,
unless a function explicitly takes a discount factor.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np


# ============================================================================
# CONSTANTS
# ============================================================================

# Above LARGE an input is treated as infinite; below SMALL as zero.
LARGE = 1.0e13
SMALL = 1.0e-13


# ============================================================================
# EXCEPTIONS
# ============================================================================

class BlackFormulaError(Exception):
    """Base exception for all errors raised by this package."""
    pass


class InvalidArgumentError(BlackFormulaError, ValueError):
    """Raised when an input violates a documented precondition (negative, NaN, out of domain)."""
    pass


class NoImpliedVolatilityError(InvalidArgumentError):
    """
    Raised when no non-negative volatility reproduces the requested price.

    Attributes:
        price: The target price that could not be matched.
    """

    def __init__(self, message: str, price: float):
        super().__init__(message)
        self.price = price


class BracketingError(BlackFormulaError):
    """Raised when a root cannot be bracketed inside the allowed interval."""
    pass


# ============================================================================
# ARGUMENT CHECKS
# ============================================================================

def check_non_negative(name: str, value: float) -> None:
    """
    Reject negative and NaN values.

    Raises:
        InvalidArgumentError: naming the parameter and its value
    """
    # NaN fails every comparison, so this also catches it
    if not value >= 0.0:
        raise InvalidArgumentError(f"negative/NaN {name}; have {value}")


def check_positive(name: str, value: float) -> None:
    if not value > 0.0:
        raise InvalidArgumentError(f"non-positive/NaN {name}; have {value}")


def check_finite(name: str, value: float) -> None:
    if math.isinf(value):
        raise InvalidArgumentError(f"{name} is infinite; have {value}")


def check_black_inputs(forward: float, strike: float, time_to_expiry: float, lognormal_vol: float) -> None:
    """Validate the four market inputs common to every Black formula."""
    check_non_negative("forward", forward)
    check_non_negative("strike", strike)
    check_non_negative("time_to_expiry", time_to_expiry)
    check_non_negative("lognormal_vol", lognormal_vol)


# ============================================================================
# IEEE ARITHMETIC
# ============================================================================

def divide(numerator: float, denominator: float) -> float:
    """
    numerator / denominator with IEEE-754 results for a zero denominator.

    Degenerate corners of the Greeks divide by a volatility or forward that
    may be exactly zero; the limit there is +/-inf, not an exception.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.divide(numerator, denominator))


def exp(x: float) -> float:
    """exp(x) that overflows to inf instead of raising OverflowError."""
    with np.errstate(over="ignore"):
        return float(np.exp(x))


def log_moneyness(forward: float, strike: float) -> float:
    """
    log(forward / strike) with the limits +inf for a zero strike and -inf
    for a zero (or underflowing) ratio.
    """
    ratio = divide(forward, strike)
    if ratio == 0.0:
        return -math.inf
    return math.log(ratio)


# ============================================================================
# OPTION DATA
# ============================================================================

@dataclass(frozen=True, slots=True)
class SimpleOptionData:
    """
    One European option leg, e.g. a single caplet of a cap.

    Attributes:
        forward: Forward value of the underlying
        strike: Strike
        time_to_expiry: Time to expiry as a year fraction
        discount_factor: Numeraire converting the forward price into a present value
        is_call: True for a call, False for a put

    This class is immutable (frozen=True) and memory-optimized (slots=True).
    All fields are validated in __post_init__.
    """
    forward: float
    strike: float
    time_to_expiry: float
    discount_factor: float
    is_call: bool

    def __post_init__(self):
        check_non_negative("forward", self.forward)
        check_non_negative("strike", self.strike)
        check_non_negative("time_to_expiry", self.time_to_expiry)
        check_positive("discount_factor", self.discount_factor)
        check_finite("discount_factor", self.discount_factor)

    @property
    def sign(self) -> int:
        return 1 if self.is_call else -1

    def intrinsic_value(self) -> float:
        """Discounted intrinsic value: df * max(0, sign * (forward - strike))."""
        return max(0.0, self.sign * self.discount_factor * (self.forward - self.strike))

    def __repr__(self) -> str:
        kind = "Call" if self.is_call else "Put"
        return (f"SimpleOptionData({kind} F={self.forward} K={self.strike} "
                f"T={self.time_to_expiry} df={self.discount_factor})")
