"""In memory data point store implementation."""

from __future__ import annotations

from uuid import UUID

import numpy as np

from ..core import exceptions
from ..utils.common import create_id
from ..utils.numpy import FloatArray1D


class OnMemoryDataPointStore:
    """Store chromatogram point arrays in memory.

    The store is append-only: arrays are copied on write and set as read-only.

    """

    def __init__(self) -> None:
        self._data: dict[UUID, tuple[FloatArray1D, FloatArray1D, FloatArray1D]] = dict()

    def add(self, time: FloatArray1D, mz: FloatArray1D, spint: FloatArray1D) -> UUID:
        """Store a point sequence.

        :param time: the retention time of each point
        :param mz: the m/z of each point
        :param spint: the intensity of each point
        :return: a handle to retrieve the data.

        """
        if not (time.size == mz.size == spint.size):
            raise ValueError("time, m/z and intensity arrays must have the same size.")

        handle = create_id()
        if handle in self._data:
            raise exceptions.RepeatedIdError(str(handle))

        arrays = tuple(_read_only_copy(x) for x in (time, mz, spint))
        self._data[handle] = arrays  # type: ignore
        return handle

    def get(self, handle: UUID) -> tuple[FloatArray1D, FloatArray1D, FloatArray1D]:
        """Retrieve the time, m/z and intensity arrays associated with a handle."""
        if handle not in self._data:
            raise exceptions.DataHandleNotFound(str(handle))
        return self._data[handle]

    def has_handle(self, handle: UUID) -> bool:
        """Check if a handle exists in the store."""
        return handle in self._data

    def get_n_entries(self) -> int:
        """Retrieve the number of point sequences in the store."""
        return len(self._data)


def _read_only_copy(arr: FloatArray1D) -> FloatArray1D:
    res = np.array(arr, dtype=float)
    res.flags.writeable = False
    return res
