"""Offline resource cache and task reminder scheduler for Daily Tasks."""

__version__ = "0.1.0"
