"""Proxy for TAGO real-time bus locations."""

__version__ = "1.0.0"
