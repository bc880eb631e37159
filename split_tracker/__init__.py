"""Workout split tracker."""
__version__ = "0.1.0"
