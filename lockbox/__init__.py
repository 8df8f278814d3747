"""Lockbox: personal secrets and credentials vault."""

__version__ = "1.0.0"
