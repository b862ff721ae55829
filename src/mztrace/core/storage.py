"""Storage interfaces."""

from typing import Protocol
from uuid import UUID

from ..utils.numpy import FloatArray1D


class DataPointStore(Protocol):
    """Append-only store for chromatogram point arrays.

    Data is written once and never modified afterwards.

    """

    def add(self, time: FloatArray1D, mz: FloatArray1D, spint: FloatArray1D) -> UUID:
        """Store a point sequence and create a handle to retrieve it."""
        ...

    def get(self, handle: UUID) -> tuple[FloatArray1D, FloatArray1D, FloatArray1D]:
        """Retrieve the time, m/z and intensity arrays associated with a handle.

        :raises DataHandleNotFound: if the handle does not exist in the store.
        """
        ...

    def has_handle(self, handle: UUID) -> bool:
        """Check if a handle exists in the store."""
        ...
