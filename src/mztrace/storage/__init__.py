"""Data point store implementations."""

from .memory import OnMemoryDataPointStore

__all__ = ["OnMemoryDataPointStore"]
