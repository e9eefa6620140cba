"""
black_formula.py - Black (lognormal forward) Option Pricing and Greeks

All inputs and outputs are FORWARD values: the numeraire (e.g. the zero bond p(0,T)
in the T-forward measure) is only a multiplicative factor, so a present value is
obtained by multiplying the result by the discount factor.

Provides:
- Option pricing: price
- First-order Greeks: delta, dual_delta, simple_delta, vega, theta, theta_mod, driftless_theta
- Second-order Greeks: gamma, dual_gamma, cross_gamma, vanna, dual_vanna, vomma (volga)
- Strike from delta: strike_for_delta, implied_strike, implied_strike_with_derivatives
- Implied volatility: implied_volatility, implied_volatility_from_otm_price, implied_volatilities

Every function is total on its validated domain. Inputs of zero or infinity make the
usual formulas indeterminate (log(1)/0, inf/inf); each function classifies its inputs
before computing d1/d2:
- forward and strike both above LARGE: the ratio forward/strike is ambiguous
- sigma * sqrt(t) below SMALL: the deterministic (intrinsic) limit applies
- at-the-money or sigma * sqrt(t) above LARGE: d1 = sigma*sqrt(t)/2 is used directly
Where the limit itself is ambiguous, a documented REFERENCE VALUE is returned and the
event is logged at INFO level. These values are not errors.

    d1 = ln(F/K) / (σ√t) + σ√t/2
    d2 = d1 - σ√t
"""

import logging
import math
from typing import Tuple, Union

import numpy as np

from .core import (
    LARGE,
    SMALL,
    InvalidArgumentError,
    NoImpliedVolatilityError,
    check_black_inputs,
    check_finite,
    check_non_negative,
    check_positive,
    divide,
    exp,
    log_moneyness,
)
from .implied_vol_solver import VOL_GUESS, GenericImpliedVolatilitySolver
from .normal import normal_cdf, normal_inverse_cdf, normal_pdf


logger = logging.getLogger(__name__)

# n(0) = 1/sqrt(2*pi)
PDF_ZERO = float(normal_pdf(0.0))


# ============================================================================
# HELPERS
# ============================================================================

def _sigma_root_t(lognormal_vol: float, time_to_expiry: float) -> float:
    """σ√t, with the indeterminate inf * 0 replaced by the reference value 1."""
    sigma_root_t = lognormal_vol * math.sqrt(time_to_expiry)
    if math.isnan(sigma_root_t):
        logger.info("lognormal_vol * sqrt(time_to_expiry) ambiguous")
        sigma_root_t = 1.0
    return sigma_root_t


def _at_the_money(forward: float, strike: float) -> bool:
    """True where log(forward/strike) must be taken as 0: equal or both infinite."""
    return abs(forward - strike) < SMALL or (forward > LARGE and strike > LARGE)


def _d1(forward: float, strike: float, sigma_root_t: float, snap: bool) -> float:
    if snap:
        return 0.5 * sigma_root_t
    return log_moneyness(forward, strike) / sigma_root_t + 0.5 * sigma_root_t


def _d2(forward: float, strike: float, sigma_root_t: float, snap: bool) -> float:
    if snap:
        return -0.5 * sigma_root_t
    return log_moneyness(forward, strike) / sigma_root_t - 0.5 * sigma_root_t


def _sign(is_call: bool) -> int:
    return 1 if is_call else -1


# ============================================================================
# OPTION PRICE
# ============================================================================

def price(forward: float, strike: float, time_to_expiry: float, lognormal_vol: float, is_call: bool) -> float:
    """
    Forward price of a European option under the Black formula.

    Call = F*N(d1) - K*N(d2)
    Put  = K*N(-d2) - F*N(-d1)

    Args:
        forward: Forward value of the underlying
        strike: Strike
        time_to_expiry: Time to expiry (year fraction)
        lognormal_vol: Lognormal (Black) volatility
        is_call: True for calls, False for puts

    Returns:
        The forward price, never negative

    Raises:
        InvalidArgumentError: If any input is negative or NaN
    """
    check_black_inputs(forward, strike, time_to_expiry, lognormal_vol)

    sigma_root_t = _sigma_root_t(lognormal_vol, time_to_expiry)
    sign = _sign(is_call)

    if forward > LARGE and strike > LARGE:
        logger.info("(large value)/(large value) ambiguous")
        if is_call:
            return forward if forward >= strike else 0.0
        return strike if strike >= forward else 0.0
    if sigma_root_t < SMALL:
        return float(max(sign * (forward - strike), 0.0))

    snap = abs(forward - strike) < SMALL or sigma_root_t > LARGE
    d1 = _d1(forward, strike, sigma_root_t, snap)
    d2 = d1 - sigma_root_t

    n_f = normal_cdf(sign * d1)
    n_s = normal_cdf(sign * d2)
    # a zero probability kills an infinite forward/strike
    first = 0.0 if n_f == 0.0 else forward * n_f
    second = 0.0 if n_s == 0.0 else strike * n_s

    return float(max(0.0, sign * (first - second)))


# ============================================================================
# DELTAS
# ============================================================================

def delta(forward: float, strike: float, time_to_expiry: float, lognormal_vol: float, is_call: bool) -> float:
    """
    Forward (driftless) delta: ∂V/∂F = sign * N(sign * d1).

    Reference value for an at-the-money option with σ√t = 0: ±0.5.
    """
    check_black_inputs(forward, strike, time_to_expiry, lognormal_vol)

    sigma_root_t = _sigma_root_t(lognormal_vol, time_to_expiry)
    sign = _sign(is_call)
    atm = _at_the_money(forward, strike)

    if sigma_root_t > LARGE:
        return 1.0 if is_call else 0.0
    if sigma_root_t < SMALL:
        if not atm:
            if is_call:
                return 1.0 if forward > strike else 0.0
            return 0.0 if forward > strike else -1.0
        logger.info("(log 1.)/0., ambiguous value")
        return 0.5 if is_call else -0.5

    d1 = _d1(forward, strike, sigma_root_t, atm)
    return float(sign * normal_cdf(sign * d1))


def dual_delta(forward: float, strike: float, time_to_expiry: float, lognormal_vol: float, is_call: bool) -> float:
    """
    Driftless dual delta, the first derivative of the price with respect to strike.

    ∂V/∂K = -sign * N(sign * d2)
    """
    check_black_inputs(forward, strike, time_to_expiry, lognormal_vol)

    sigma_root_t = _sigma_root_t(lognormal_vol, time_to_expiry)
    sign = _sign(is_call)
    atm = _at_the_money(forward, strike)

    if sigma_root_t > LARGE:
        return 0.0 if is_call else 1.0
    if sigma_root_t < SMALL:
        if not atm:
            if is_call:
                return -1.0 if forward > strike else 0.0
            return 0.0 if forward > strike else 1.0
        logger.info("(log 1.)/0., ambiguous value")
        return -0.5 if is_call else 0.5

    d2 = _d2(forward, strike, sigma_root_t, atm)
    return float(-sign * normal_cdf(sign * d2))


def simple_delta(forward: float, strike: float, time_to_expiry: float, lognormal_vol: float, is_call: bool) -> float:
    """
    Simple delta: sign * N(sign * d) with d = ln(F/K) / σ√t.

    Not the usual delta; the argument of N has no convexity term. Used as a
    moneyness coordinate by smile parameterisations.
    """
    check_black_inputs(forward, strike, time_to_expiry, lognormal_vol)

    sigma_root_t = _sigma_root_t(lognormal_vol, time_to_expiry)
    sign = _sign(is_call)
    atm = _at_the_money(forward, strike)

    if sigma_root_t > LARGE:
        return 0.5 if is_call else -0.5
    if sigma_root_t < SMALL:
        if not atm:
            if is_call:
                return 1.0 if forward > strike else 0.0
            return 0.0 if forward > strike else -1.0
        logger.info("(log 1.)/0., ambiguous")
        return 0.5 if is_call else -0.5

    d = 0.0 if atm else log_moneyness(forward, strike) / sigma_root_t
    return float(sign * normal_cdf(sign * d))


def strike_for_delta(
    forward: float,
    forward_delta: float,
    time_to_expiry: float,
    lognormal_vol: float,
    is_call: bool,
) -> float:
    """
    Strike at which the forward delta equals forward_delta.

    K = F * exp(-d1 * σ√t + σ²t/2),  d1 = sign * N⁻¹(sign * delta)

    Raises:
        InvalidArgumentError: If forward_delta is not in (0, 1) for a call or (-1, 0) for a put
    """
    check_non_negative("forward", forward)
    if not ((is_call and 0.0 < forward_delta < 1.0) or (not is_call and -1.0 < forward_delta < 0.0)):
        raise InvalidArgumentError(f"delta out of range; have {forward_delta} (is_call={is_call})")
    check_non_negative("time_to_expiry", time_to_expiry)
    check_non_negative("lognormal_vol", lognormal_vol)

    sign = _sign(is_call)
    d1 = sign * float(normal_inverse_cdf(sign * forward_delta))

    sigma_sq_t = lognormal_vol * lognormal_vol * time_to_expiry
    if math.isnan(sigma_sq_t):
        logger.info("lognormal_vol * sqrt(time_to_expiry) ambiguous")
        sigma_sq_t = 1.0

    return forward * exp(-d1 * math.sqrt(sigma_sq_t) + 0.5 * sigma_sq_t)


# ============================================================================
# GAMMAS
# ============================================================================

def gamma(forward: float, strike: float, time_to_expiry: float, lognormal_vol: float) -> float:
    """
    Forward (driftless) gamma: ∂²V/∂F² = n(d1) / (F σ√t).

    Same for calls and puts.
    """
    check_black_inputs(forward, strike, time_to_expiry, lognormal_vol)

    sigma_root_t = _sigma_root_t(lognormal_vol, time_to_expiry)
    atm = _at_the_money(forward, strike)

    if sigma_root_t > LARGE:
        return 0.0
    if sigma_root_t < SMALL:
        if not atm:
            return 0.0
        logger.info("(log 1.)/0. ambiguous")
        if forward > LARGE:
            return PDF_ZERO
        return divide(divide(PDF_ZERO, forward), sigma_root_t)

    n_val = float(normal_pdf(_d1(forward, strike, sigma_root_t, atm)))
    return 0.0 if n_val == 0.0 else divide(divide(n_val, forward), sigma_root_t)


def dual_gamma(forward: float, strike: float, time_to_expiry: float, lognormal_vol: float) -> float:
    """Driftless dual gamma: ∂²V/∂K² = n(d2) / (K σ√t)."""
    check_black_inputs(forward, strike, time_to_expiry, lognormal_vol)

    sigma_root_t = _sigma_root_t(lognormal_vol, time_to_expiry)
    atm = _at_the_money(forward, strike)

    if sigma_root_t > LARGE:
        return 0.0
    if sigma_root_t < SMALL:
        if not atm:
            return 0.0
        logger.info("(log 1.)/0. ambiguous")
        if strike > LARGE:
            return PDF_ZERO
        return divide(divide(PDF_ZERO, strike), sigma_root_t)

    n_val = float(normal_pdf(_d2(forward, strike, sigma_root_t, atm)))
    return 0.0 if n_val == 0.0 else divide(divide(n_val, strike), sigma_root_t)


def cross_gamma(forward: float, strike: float, time_to_expiry: float, lognormal_vol: float) -> float:
    """Driftless cross gamma, the sensitivity of delta to strike: ∂²V/∂F∂K = -n(d2) / (F σ√t)."""
    check_black_inputs(forward, strike, time_to_expiry, lognormal_vol)

    sigma_root_t = _sigma_root_t(lognormal_vol, time_to_expiry)
    atm = _at_the_money(forward, strike)

    if sigma_root_t > LARGE:
        return 0.0
    if sigma_root_t < SMALL:
        if not atm:
            return 0.0
        logger.info("(log 1.)/0. ambiguous")
        if forward > LARGE:
            return -PDF_ZERO
        return divide(divide(-PDF_ZERO, forward), sigma_root_t)

    n_val = float(normal_pdf(_d2(forward, strike, sigma_root_t, atm)))
    return 0.0 if n_val == 0.0 else divide(divide(-n_val, forward), sigma_root_t)


# ============================================================================
# THETAS
# ============================================================================

def driftless_theta(forward: float, strike: float, time_to_expiry: float, lognormal_vol: float) -> float:
    """
    Forward (driftless) theta: -F n(d1) σ / (2√t).

    Same for calls and puts.
    """
    check_black_inputs(forward, strike, time_to_expiry, lognormal_vol)

    root_t = math.sqrt(time_to_expiry)
    sigma_root_t = _sigma_root_t(lognormal_vol, time_to_expiry)
    atm = _at_the_money(forward, strike)

    if sigma_root_t > LARGE:
        return 0.0
    if sigma_root_t < SMALL:
        if not atm:
            return 0.0
        logger.info("log(1)/0 ambiguous")
        if root_t < SMALL:
            if forward < SMALL:
                return -PDF_ZERO * lognormal_vol / 2.0
            if lognormal_vol < SMALL:
                return -forward * PDF_ZERO / 2.0
            return divide(-forward * PDF_ZERO * lognormal_vol / 2.0, root_t)
        if lognormal_vol < SMALL:
            if forward > LARGE:
                return -PDF_ZERO / 2.0 / root_t
            return -forward * PDF_ZERO * lognormal_vol / 2.0 / root_t
        # both factors small but not negligible: the generic formula is finite

    n_val = float(normal_pdf(_d1(forward, strike, sigma_root_t, atm)))
    return 0.0 if n_val == 0.0 else divide(-forward * n_val * lognormal_vol / 2.0, root_t)


def theta(
    forward: float,
    strike: float,
    time_to_expiry: float,
    lognormal_vol: float,
    is_call: bool,
    interest_rate: float,
) -> float:
    """
    Spot theta, -∂V/∂T of the present value, for a continuously compounded rate.

    theta = driftless_theta + r * sign * (F N(sign d1) - K e^(-rT) N(sign d2))

    Raises:
        InvalidArgumentError: If an input is negative/NaN or interest_rate is NaN
    """
    check_black_inputs(forward, strike, time_to_expiry, lognormal_vol)
    if math.isnan(interest_rate):
        raise InvalidArgumentError("interest_rate is NaN")

    if -interest_rate > LARGE:
        return 0.0
    driftless = driftless_theta(forward, strike, time_to_expiry, lognormal_vol)
    if abs(interest_rate) < SMALL:
        return driftless

    sigma_root_t = _sigma_root_t(lognormal_vol, time_to_expiry)
    sign = _sign(is_call)
    b_fwd = forward > LARGE
    b_str = strike > LARGE
    b_sig_rt = sigma_root_t > LARGE

    if time_to_expiry < SMALL and abs(interest_rate) > LARGE:
        rt = 1.0 if interest_rate > 0.0 else -1.0
    else:
        rt = interest_rate * time_to_expiry

    if b_fwd and b_str:
        logger.info("(large value)/(large value) ambiguous")
        if is_call:
            price_like = forward if forward >= strike else 0.0
        else:
            price_like = strike if strike >= forward else 0.0
    elif sigma_root_t < SMALL:
        if rt > LARGE:
            if is_call:
                price_like = forward if forward > strike else 0.0
            else:
                price_like = 0.0 if forward > strike else -forward
        else:
            if is_call:
                price_like = forward - strike * exp(-rt) if forward > strike else 0.0
            else:
                price_like = 0.0 if forward > strike else -forward + strike * exp(-rt)
    else:
        snap = abs(forward - strike) < SMALL or b_sig_rt
        d1 = _d1(forward, strike, sigma_root_t, snap)
        d2 = d1 - sigma_root_t
        n_f = float(normal_cdf(sign * d1))
        n_s = float(normal_cdf(sign * d2))
        discount = exp(-interest_rate * time_to_expiry)
        first = 0.0 if n_f == 0.0 else forward * n_f
        second = 0.0 if (n_s == 0.0 or discount == 0.0) else strike * discount * n_s
        price_like = sign * (first - second)

    res = 0.0 if (interest_rate > LARGE and abs(price_like) < SMALL) else interest_rate * price_like
    return res if abs(res) > LARGE else driftless + res


def theta_mod(
    forward: float,
    strike: float,
    time_to_expiry: float,
    lognormal_vol: float,
    is_call: bool,
    interest_rate: float,
) -> float:
    """
    Spot theta with only the strike leg discounted, the convention of the
    Black-Scholes spot formulas.

    theta_mod = driftless_theta - r * sign * K N(sign d2)
    """
    check_black_inputs(forward, strike, time_to_expiry, lognormal_vol)
    if math.isnan(interest_rate):
        raise InvalidArgumentError("interest_rate is NaN")

    if -interest_rate > LARGE:
        return 0.0
    driftless = driftless_theta(forward, strike, time_to_expiry, lognormal_vol)
    if abs(interest_rate) < SMALL:
        return driftless

    sigma_root_t = _sigma_root_t(lognormal_vol, time_to_expiry)
    sign = _sign(is_call)
    b_fwd = forward > LARGE
    b_str = strike > LARGE
    b_sig_rt = sigma_root_t > LARGE

    if time_to_expiry < SMALL and abs(interest_rate) > LARGE:
        rt = 1.0 if interest_rate > 0.0 else -1.0
    else:
        rt = interest_rate * time_to_expiry

    if b_fwd and b_str:
        logger.info("(large value)/(large value) ambiguous")
        if is_call:
            price_like = 0.0
        else:
            price_like = strike if strike >= forward else 0.0
    elif sigma_root_t < SMALL:
        if rt > LARGE:
            price_like = 0.0
        elif is_call:
            price_like = -strike if forward > strike else 0.0
        else:
            price_like = 0.0 if forward > strike else strike
    else:
        snap = abs(forward - strike) < SMALL or b_sig_rt
        d2 = _d2(forward, strike, sigma_root_t, snap)
        n_s = float(normal_cdf(sign * d2))
        price_like = 0.0 if n_s == 0.0 else -sign * strike * n_s

    res = 0.0 if (interest_rate > LARGE and abs(price_like) < SMALL) else interest_rate * price_like
    return res if abs(res) > LARGE else driftless + res


# ============================================================================
# VOLATILITY GREEKS
# ============================================================================

def vega(forward: float, strike: float, time_to_expiry: float, lognormal_vol: float) -> float:
    """
    Forward vega: ∂V/∂σ = F √t n(d1).

    This is the spot vega divided by the numeraire. Same for calls and puts.
    """
    check_black_inputs(forward, strike, time_to_expiry, lognormal_vol)

    root_t = math.sqrt(time_to_expiry)
    sigma_root_t = _sigma_root_t(lognormal_vol, time_to_expiry)
    atm = _at_the_money(forward, strike)

    if sigma_root_t > LARGE:
        return 0.0
    if sigma_root_t < SMALL:
        if not atm:
            return 0.0
        logger.info("log(1)/0 ambiguous")
        if root_t < SMALL and forward > LARGE:
            return PDF_ZERO
        return forward * root_t * PDF_ZERO

    n_val = float(normal_pdf(_d1(forward, strike, sigma_root_t, atm)))
    return 0.0 if n_val == 0.0 else forward * root_t * n_val


def vanna(forward: float, strike: float, time_to_expiry: float, lognormal_vol: float) -> float:
    """
    Driftless vanna: ∂²V/∂F∂σ = -n(d1) d2 / σ.
    """
    check_black_inputs(forward, strike, time_to_expiry, lognormal_vol)

    root_t = math.sqrt(time_to_expiry)
    sigma_root_t = _sigma_root_t(lognormal_vol, time_to_expiry)
    atm = _at_the_money(forward, strike)

    if sigma_root_t > LARGE:
        return 0.0
    if sigma_root_t < SMALL:
        if not atm:
            return 0.0
        logger.info("log(1)/0 ambiguous")
        if lognormal_vol < SMALL:
            return divide(-PDF_ZERO, lognormal_vol)
        return PDF_ZERO * root_t

    d1 = _d1(forward, strike, sigma_root_t, atm)
    d2 = d1 - sigma_root_t
    n_val = float(normal_pdf(d1))
    return 0.0 if n_val == 0.0 else divide(-n_val * d2, lognormal_vol)


def dual_vanna(forward: float, strike: float, time_to_expiry: float, lognormal_vol: float) -> float:
    """
    Driftless dual vanna: ∂²V/∂K∂σ = n(d2) d1 / σ.
    """
    check_black_inputs(forward, strike, time_to_expiry, lognormal_vol)

    root_t = math.sqrt(time_to_expiry)
    sigma_root_t = _sigma_root_t(lognormal_vol, time_to_expiry)
    atm = _at_the_money(forward, strike)

    if sigma_root_t > LARGE:
        return 0.0
    if sigma_root_t < SMALL:
        if not atm:
            return 0.0
        logger.info("log(1)/0 ambiguous")
        if lognormal_vol < SMALL:
            return divide(-PDF_ZERO, lognormal_vol)
        return -PDF_ZERO * root_t

    d1 = _d1(forward, strike, sigma_root_t, atm)
    d2 = d1 - sigma_root_t
    n_val = float(normal_pdf(d2))
    return 0.0 if n_val == 0.0 else divide(n_val * d1, lognormal_vol)


def vomma(forward: float, strike: float, time_to_expiry: float, lognormal_vol: float) -> float:
    """
    Driftless vomma (volga): ∂²V/∂σ² = F n(d1) √t d1 d2 / σ.
    """
    check_black_inputs(forward, strike, time_to_expiry, lognormal_vol)

    root_t = math.sqrt(time_to_expiry)
    sigma_root_t = _sigma_root_t(lognormal_vol, time_to_expiry)
    atm = _at_the_money(forward, strike)

    if sigma_root_t > LARGE:
        return 0.0
    if sigma_root_t < SMALL:
        if not atm:
            return 0.0
        logger.info("log(1)/0 ambiguous")
        if forward > LARGE:
            if root_t < SMALL:
                return divide(PDF_ZERO, lognormal_vol)
            return divide(forward * PDF_ZERO * root_t, lognormal_vol)
        if lognormal_vol < SMALL:
            return divide(forward * PDF_ZERO * root_t, lognormal_vol)
        return -forward * PDF_ZERO * time_to_expiry * lognormal_vol / 4.0

    d1 = _d1(forward, strike, sigma_root_t, atm)
    d2 = d1 - sigma_root_t
    n_val = float(normal_pdf(d1))
    return 0.0 if n_val == 0.0 else divide(forward * n_val * root_t * d1 * d2, lognormal_vol)


# ============================================================================
# IMPLIED STRIKE
# ============================================================================

def _check_implied_strike_inputs(delta: float, is_call: bool, forward: float, time: float, volatility: float) -> None:
    if not -1.0 < delta < 1.0:
        raise InvalidArgumentError(f"delta out of range; have {delta}")
    if (is_call and not delta > 0.0) or (not is_call and not delta < 0.0):
        raise InvalidArgumentError(f"delta incompatible with call/put: is_call={is_call}, delta={delta}")
    check_positive("forward", forward)
    check_non_negative("time", time)
    check_non_negative("volatility", volatility)


def implied_strike(delta: float, is_call: bool, forward: float, time: float, volatility: float) -> float:
    """
    Strike implied by a forward delta and a volatility.

    K = F * exp(-σ√t ω N⁻¹(ω Δ) + σ²t/2),  ω = +1 for calls, -1 for puts

    Raises:
        InvalidArgumentError: If delta is outside (0, 1) for a call or (-1, 0) for a put,
            or forward is not positive
    """
    _check_implied_strike_inputs(delta, is_call, forward, time, volatility)
    omega = 1.0 if is_call else -1.0
    n = float(normal_inverse_cdf(omega * delta))
    return forward * exp(-volatility * math.sqrt(time) * omega * n + volatility * volatility * time / 2.0)


def implied_strike_with_derivatives(
    delta: float,
    is_call: bool,
    forward: float,
    time: float,
    volatility: float,
) -> Tuple[float, np.ndarray]:
    """
    Implied strike and its derivatives, by a backward (adjoint) sweep through implied_strike.

    Returns:
        (strike, derivatives) where derivatives holds ∂K/∂ of
        [0] delta, [1] forward, [2] time, [3] volatility
    """
    _check_implied_strike_inputs(delta, is_call, forward, time, volatility)
    omega = 1.0 if is_call else -1.0
    sqrt_t = math.sqrt(time)
    n = float(normal_inverse_cdf(omega * delta))
    part1 = exp(-volatility * sqrt_t * omega * n + volatility * volatility * time / 2.0)
    strike = forward * part1

    # Backward sweep
    strike_bar = 1.0
    part1_bar = forward * strike_bar
    n_bar = part1 * -volatility * sqrt_t * omega * part1_bar

    derivatives = np.array([
        omega / float(normal_pdf(n)) * n_bar,
        part1 * strike_bar,
        part1 * (divide(-volatility * omega * n * 0.5, sqrt_t) + volatility * volatility / 2.0) * part1_bar,
        part1 * (-sqrt_t * omega * n + volatility * time) * part1_bar,
    ])
    return strike, derivatives


# ============================================================================
# IMPLIED VOLATILITY
# ============================================================================

def implied_volatility(
    price: float,
    forward: float,
    strike: float,
    time_to_expiry: float,
    is_call: bool,
) -> float:
    """
    Black implied volatility of a European option from its forward price.

    The intrinsic value is removed first, which turns an in-the-money price into the
    price of the out-of-the-money option at the same strike (put-call parity).

    Args:
        price: Forward price, i.e. market price divided by the numeraire
        forward: Forward value of the underlying (positive)
        strike: Strike
        time_to_expiry: Time to expiry (year fraction)
        is_call: True for calls, False for puts

    Returns:
        Lognormal volatility, >= 0

    Raises:
        InvalidArgumentError: On a negative/NaN/infinite input or a price below intrinsic
        NoImpliedVolatilityError: If no volatility reproduces the price
    """
    check_non_negative("price", price)
    check_positive("forward", forward)
    check_non_negative("strike", strike)
    check_non_negative("time_to_expiry", time_to_expiry)
    check_finite("forward", forward)
    check_finite("strike", strike)
    check_finite("time_to_expiry", time_to_expiry)

    intrinsic = max(0.0, _sign(is_call) * (forward - strike))
    # not floored at zero: a price below intrinsic must be rejected, not mapped to 0
    otm_price = price - intrinsic
    return implied_volatility_from_otm_price(otm_price, forward, strike, time_to_expiry, VOL_GUESS)


def implied_volatility_from_otm_price(
    otm_price: float,
    forward: float,
    strike: float,
    time_to_expiry: float,
    vol_guess: float = VOL_GUESS,
) -> float:
    """
    Black implied volatility from an OUT-OF-THE-MONEY forward price.

    The price must be that of a call for strike >= forward and of a put otherwise.

    Raises:
        InvalidArgumentError: On a negative/NaN/infinite input
        NoImpliedVolatilityError: If otm_price >= min(forward, strike), which no
            volatility can produce, or the solver finds no root
    """
    check_non_negative("otm_price", otm_price)
    check_non_negative("forward", forward)
    check_non_negative("strike", strike)
    check_non_negative("time_to_expiry", time_to_expiry)
    check_non_negative("vol_guess", vol_guess)
    check_finite("otm_price", otm_price)
    check_finite("forward", forward)
    check_finite("strike", strike)
    check_finite("time_to_expiry", time_to_expiry)
    check_finite("vol_guess", vol_guess)

    if otm_price == 0.0:
        return 0.0
    upper_bound = min(forward, strike)
    if not otm_price < upper_bound:
        raise NoImpliedVolatilityError(
            f"otm_price of {otm_price} exceeded upper bound of {upper_bound}", otm_price)

    if forward == strike:
        if time_to_expiry == 0.0:
            raise NoImpliedVolatilityError(
                f"no implied volatility at expiry for a positive price. [price: {otm_price}]", otm_price)
        return float(normal_inverse_cdf(0.5 * (otm_price / forward + 1.0))) * 2.0 / math.sqrt(time_to_expiry)

    is_call = strike >= forward
    solver = GenericImpliedVolatilitySolver(
        lambda sigma: price(forward, strike, time_to_expiry, sigma, is_call),
        lambda sigma: vega(forward, strike, time_to_expiry, sigma),
    )
    return solver.implied_volatility(otm_price, vol_guess)


def implied_volatilities(
    prices: Union[float, np.ndarray],
    forward: float,
    strikes: Union[float, np.ndarray],
    time_to_expiry: float,
    is_call: Union[bool, np.ndarray],
) -> Union[float, np.ndarray]:
    """
    Implied volatilities for a slice of options on one forward and expiry.

    prices, strikes and is_call broadcast against each other. An entry with no
    implied volatility becomes NaN (logged at WARNING); invalid inputs still raise.

    Returns:
        Implied volatility (scalar or array matching the broadcast shape)
    """
    price_arr, strike_arr, call_arr = np.broadcast_arrays(
        np.asarray(prices, dtype=float),
        np.asarray(strikes, dtype=float),
        np.asarray(is_call, dtype=bool),
    )
    result = np.empty(price_arr.shape, dtype=float)

    for idx in np.ndindex(price_arr.shape):
        try:
            result[idx] = implied_volatility(
                float(price_arr[idx]), forward, float(strike_arr[idx]), time_to_expiry, bool(call_arr[idx]))
        except NoImpliedVolatilityError as e:
            logger.warning("no implied volatility for strike %s: %s", strike_arr[idx], e)
            result[idx] = np.nan

    if result.ndim == 0:
        return float(result)
    return result


# ============================================================================
# STANDARD GREEK ALIASES
# ============================================================================

volga = vomma
forward_delta = delta
