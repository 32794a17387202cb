"""Trusted Advisor findings with console deep links and HTML reporting."""

__version__ = "0.1.0"

__all__ = ["__version__"]