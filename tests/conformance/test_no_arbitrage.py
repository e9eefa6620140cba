"""
No-Arbitrage Conformance Tests

INVARIANT: Black prices respect the static arbitrage bounds.

    ∀ F, K ≥ 0, T ≥ 0, σ ≥ 0:
        max(F - K, 0) ≤ call ≤ F
        max(K - F, 0) ≤ put ≤ K
        call - put = F - K
        price is non-decreasing in σ
        call delta is non-decreasing in F

The zero-volatility and zero-time limits are exact intrinsic values.
"""

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from blackvol import delta, price, vega


positive = st.floats(min_value=1e-3, max_value=1e4)
expiries = st.floats(min_value=1e-3, max_value=30.0)
vols = st.floats(min_value=1e-3, max_value=3.0)


class TestBoundsProperties:
    """Property-based price bound tests."""

    @given(positive, positive, expiries, vols)
    @settings(max_examples=300)
    def test_call_bounds(self, forward, strike, t, sigma):
        """
        PROPERTY: Intrinsic ≤ call ≤ forward (up to rounding).
        """
        call = price(forward, strike, t, sigma, True)
        tol = 1e-12 * max(forward, strike)
        assert call >= max(forward - strike, 0.0) - tol
        assert call <= forward + tol

    @given(positive, positive, expiries, vols)
    @settings(max_examples=300)
    def test_put_bounds(self, forward, strike, t, sigma):
        """
        PROPERTY: Intrinsic ≤ put ≤ strike (up to rounding).
        """
        put = price(forward, strike, t, sigma, False)
        tol = 1e-12 * max(forward, strike)
        assert put >= max(strike - forward, 0.0) - tol
        assert put <= strike + tol

    @given(positive, positive, expiries, vols)
    @settings(max_examples=300)
    def test_put_call_parity(self, forward, strike, t, sigma):
        """
        PROPERTY: call - put = F - K.
        """
        call = price(forward, strike, t, sigma, True)
        put = price(forward, strike, t, sigma, False)
        assert call - put == pytest.approx(forward - strike, abs=1e-9 * max(forward, strike))

    @given(positive, positive, expiries, st.booleans())
    @settings(max_examples=200)
    def test_zero_vol_is_intrinsic(self, forward, strike, t, is_call):
        """
        PROPERTY: σ = 0 gives exactly the intrinsic value.
        """
        sign = 1.0 if is_call else -1.0
        assert price(forward, strike, t, 0.0, is_call) == max(sign * (forward - strike), 0.0)

    @given(positive, positive, vols, st.booleans())
    @settings(max_examples=200)
    def test_zero_time_is_intrinsic(self, forward, strike, sigma, is_call):
        """
        PROPERTY: T = 0 gives exactly the intrinsic value.
        """
        sign = 1.0 if is_call else -1.0
        assert price(forward, strike, 0.0, sigma, is_call) == max(sign * (forward - strike), 0.0)


class TestMonotonicityProperties:
    """Property-based monotonicity tests."""

    @given(positive, positive, expiries, vols, vols, st.booleans())
    @settings(max_examples=300)
    def test_price_increasing_in_vol(self, forward, strike, t, sigma1, sigma2, is_call):
        """
        PROPERTY: σ1 ≤ σ2 ⟹ price(σ1) ≤ price(σ2).
        """
        low, high = sorted((sigma1, sigma2))
        tol = 1e-12 * max(forward, strike)
        assert price(forward, strike, t, low, is_call) <= price(forward, strike, t, high, is_call) + tol

    @given(positive, positive, expiries, vols)
    @settings(max_examples=200)
    def test_vega_non_negative(self, forward, strike, t, sigma):
        """
        PROPERTY: vega ≥ 0.
        """
        assert vega(forward, strike, t, sigma) >= 0.0

    @given(positive, positive, positive, expiries, vols)
    @settings(max_examples=300)
    def test_call_delta_increasing_in_forward(self, forward1, forward2, strike, t, sigma):
        """
        PROPERTY: F1 ≤ F2 ⟹ Δcall(F1) ≤ Δcall(F2), and 0 ≤ Δcall ≤ 1.
        """
        assume(forward1 != forward2)
        low, high = sorted((forward1, forward2))
        delta_low = delta(low, strike, t, sigma, True)
        delta_high = delta(high, strike, t, sigma, True)
        assert 0.0 <= delta_low <= 1.0
        assert delta_low <= delta_high + 1e-12
