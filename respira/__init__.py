"""Respira — guided breathing exercises."""

__version__ = "0.1.0"
