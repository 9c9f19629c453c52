"""Cauldron management for native application containers."""

__version__ = "0.1.0"
