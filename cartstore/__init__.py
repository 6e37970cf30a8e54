"""Cart store synchronized with durable key-value storage."""

__version__ = "1.0.0"
