"""
normal.py - Standard normal distribution

CDF, PDF and inverse CDF of N(0, 1). Stateless wrappers around scipy.special,
accepting scalars or numpy arrays.

ndtr is used for the CDF rather than 0.5 * (1 + erf(x / sqrt(2))): the erf form
cancels catastrophically in the lower tail, where out-of-the-money Black prices
of order 1e-18 still have to be resolved by the implied volatility solver.
"""

import math
from typing import Union

import numpy as np
from scipy.special import ndtr, ndtri


# Type alias for scalar or array inputs
Numeric = Union[float, np.ndarray]

INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


def normal_cdf(x: Numeric) -> Numeric:
    """Standard normal cumulative distribution function."""
    return ndtr(x)


def normal_pdf(x: Numeric) -> Numeric:
    """Standard normal probability density function."""
    return INV_SQRT_2PI * np.exp(-0.5 * np.square(x))


def normal_inverse_cdf(p: Numeric) -> Numeric:
    """
    Inverse of the standard normal CDF (the probit function).

    Returns -inf at 0, +inf at 1 and NaN outside [0, 1].
    """
    return ndtri(p)
