"""
Exceptions Module

Error types shared across the floor plan analysis stages.
"""


class FloorTraceError(Exception):
    """Base class for errors raised by floortrace."""
    pass


class ConfigurationError(FloorTraceError, ValueError):
    """Raised when a stage configuration holds an invalid value."""
    pass
