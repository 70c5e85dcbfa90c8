"""Periodic collector of Linux system measurements, with a logging daemon."""

__version__ = "1.0.0"
__all__ = ["__version__"]