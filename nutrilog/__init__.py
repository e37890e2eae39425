"""Личный дневник питания и активности."""

__version__ = "0.3.0"
