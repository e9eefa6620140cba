"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of blackvol pricing and inversion.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. round_trip.py - Implied volatility inverts the price (single options and strips)
2. no_arbitrage.py - Price bounds, put-call parity, intrinsic limits, monotonicity

These tests use hypothesis for property-based testing.
"""
