"""tasktrack - personal task tracking with a single active timer."""

__version__ = "0.1.0"
