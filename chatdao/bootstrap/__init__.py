"""Composition root for wiring dependencies.

This package centralizes infrastructure-aware wiring so chat front-ends
and application services depend on ports without importing
infrastructure directly.
"""
