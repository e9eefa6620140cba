"""
conftest.py - Shared pytest fixtures for blackvol tests

Provides:
- Reference Black prices computed independently with scipy.stats.norm
- Central finite differences for checking Greeks
- A cap (strip of caplets) for portfolio tests
"""

import math
from typing import Callable, List

import pytest
from scipy.stats import norm

from blackvol import SimpleOptionData


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def reference_black_price(forward: float, strike: float, t: float, vol: float, is_call: bool) -> float:
    """Textbook Black price with no special-casing, for generic inputs only."""
    sig_rt = vol * math.sqrt(t)
    d1 = math.log(forward / strike) / sig_rt + 0.5 * sig_rt
    d2 = d1 - sig_rt
    if is_call:
        return forward * norm.cdf(d1) - strike * norm.cdf(d2)
    return strike * norm.cdf(-d2) - forward * norm.cdf(-d1)


def central_difference(func: Callable[[float], float], x: float, h: float) -> float:
    """(f(x + h) - f(x - h)) / 2h"""
    return (func(x + h) - func(x - h)) / (2.0 * h)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def black_reference():
    return reference_black_price


@pytest.fixture
def fd():
    return central_difference


@pytest.fixture
def caplet_strip() -> List[SimpleOptionData]:
    """Two-year quarterly cap struck at 3.5% on a rising forward curve."""
    legs = []
    for i in range(1, 9):
        t = 0.25 * i
        forward = 0.030 + 0.001 * i
        discount_factor = math.exp(-0.03 * (t + 0.25))
        legs.append(SimpleOptionData(forward, 0.035, t, discount_factor, True))
    return legs


@pytest.fixture
def floorlet_strip() -> List[SimpleOptionData]:
    """Short floor with one floorlet already deep in the money."""
    return [
        SimpleOptionData(0.020, 0.030, 0.5, 0.99, False),
        SimpleOptionData(0.028, 0.030, 1.0, 0.97, False),
        SimpleOptionData(0.033, 0.030, 1.5, 0.95, False),
    ]
