"""mztrace core data models."""

from __future__ import annotations

import json
from functools import cached_property, lru_cache
from math import nan
from uuid import UUID

import numpy as np
import pydantic
from scipy.integrate import trapezoid
from typing_extensions import Self

from ..utils.common import create_id
from ..utils.numpy import FloatArray1D, IntArray1D


class MZTraceBaseModel(pydantic.BaseModel):
    """Base model that all other library models inherit from."""

    id: UUID = pydantic.Field(default_factory=create_id)
    """A unique id for the model."""

    model_config = pydantic.ConfigDict(validate_assignment=True, arbitrary_types_allowed=True)


class MSSpectrum(MZTraceBaseModel):
    """Representation of a Mass Spectrum, i.e. a single scan of a raw data file."""

    model_config = pydantic.ConfigDict(arbitrary_types_allowed=True)

    index: int = -1
    """The scan number in the data file."""

    mz: FloatArray1D
    """m/z data. Must be sorted in strictly increasing order."""

    int: FloatArray1D
    """Spectral intensity"""

    ms_level: pydantic.PositiveInt = 1
    """MS level of the current spectrum"""

    time: pydantic.NonNegativeFloat | None = None
    """Acquisition time of the spectrum. ``None`` if the scan does not have retention time information."""

    centroid: bool = True
    """Set to ``True`` if the spectrum was converted to centroid mode. ``False`` otherwise."""

    @pydantic.model_validator(mode="after")
    def check_mz_and_int_have_equal_size(self) -> Self:
        """Validate array sizes."""
        msg = "m/z and intensity arrays must have the same size."
        assert self.mz.shape == self.int.shape, msg
        return self

    @pydantic.model_validator(mode="after")
    def check_mz_is_strictly_increasing(self) -> Self:
        """Validate m/z order."""
        msg = "m/z values in a spectrum must be sorted and must not contain repeated values."
        assert np.all(np.diff(self.mz) > 0.0), msg
        return self

    def get_nbytes(self) -> int:
        """Get the number of bytes stored in m/z and intensity arrays."""
        return self.int.nbytes + self.mz.nbytes


class MZTolerance(pydantic.BaseModel):
    """Symmetric m/z window used to decide if two m/z values belong to the same species.

    The window is the largest of an absolute tolerance and a tolerance relative to the m/z value,
    in parts per million.

    """

    model_config = pydantic.ConfigDict(frozen=True)

    mz: pydantic.NonNegativeFloat = 0.01
    """The absolute m/z tolerance."""

    ppm: pydantic.NonNegativeFloat = 0.0
    """The m/z tolerance in parts per million."""

    def get_window(self, mz: float) -> float:
        """Compute the window half width around an m/z value."""
        return max(self.mz, mz * self.ppm * 1e-6)

    def get_range(self, mz: float) -> tuple[float, float]:
        """Compute the lower and upper bounds of the window centered at an m/z value."""
        window = self.get_window(mz)
        return mz - window, mz + window

    def check_match(self, mz: float, other: float) -> bool:
        """Check if `other` falls inside the window centered at `mz`."""
        lower, upper = self.get_range(mz)
        return lower <= other <= upper


class Chromatogram(MZTraceBaseModel):
    """An accepted m/z trace built by linking points across consecutive scans.

    Chromatograms are immutable: the model is frozen and its arrays are set as read-only
    after validation.

    Descriptors are computed fields, as in:

    - height: the maximum intensity of the trace.
    - span: the difference between the last and first retention time of the trace.
    - rt: the retention time at the trace apex.
    - mz_mean: the intensity-weighted m/z of the trace.
    - area: the area under the trace, computed with the trapezoidal rule.

    Scans without retention time information are represented as ``nan`` in the time array and
    they are ignored by time based descriptors.

    """

    model_config = pydantic.ConfigDict(frozen=True, arbitrary_types_allowed=True)

    index: int = -1
    """The chromatogram order in the builder output."""

    trace_id: int = -1
    """The id of the trace that originated the chromatogram."""

    data_source: str = ""
    """The name of the data source where the chromatogram was built from."""

    data_handle: UUID | None = None
    """Handle returned by the data point store where the chromatogram points were written."""

    time: FloatArray1D
    """Retention time of each point."""

    mz: FloatArray1D
    """m/z of each point."""

    spint: FloatArray1D
    """Intensity of each point."""

    scan: IntArray1D
    """Scan index of each point."""

    @pydantic.model_validator(mode="after")
    def check_array_sizes(self) -> Self:
        """Check that all arrays are non-empty and have the same size."""
        size = self.spint.size
        msg = "A chromatogram must contain at least one point."
        assert size > 0, msg
        msg = "time, m/z, intensity and scan arrays must have the same size."
        assert self.time.size == self.mz.size == self.scan.size == size, msg
        return self

    @pydantic.field_validator("time", "mz", "spint", "scan", mode="after")
    @classmethod
    def copy_as_read_only(cls, arr: np.ndarray) -> np.ndarray:
        """Store a read-only copy of each array. Arrays passed by the caller are not modified."""
        arr = arr.copy()
        arr.flags.writeable = False
        return arr

    def __len__(self) -> int:
        return self.spint.size

    @pydantic.computed_field(repr=False)
    @cached_property
    def height(self) -> float:
        """The chromatogram height, defined as the maximum intensity."""
        return self.spint.max().item()

    @pydantic.computed_field(repr=False)
    @cached_property
    def span(self) -> float:
        """The chromatogram duration. ``nan`` if none of the points has retention time information."""
        time = self.time[~np.isnan(self.time)]
        if not time.size:
            return nan
        return (time[-1] - time[0]).item()

    @pydantic.computed_field(repr=False)
    @cached_property
    def rt(self) -> float:
        """The retention time of the most intense point."""
        return self.time[np.argmax(self.spint)].item()

    @pydantic.computed_field(repr=False)
    @cached_property
    def mz_mean(self) -> float:
        """The intensity-weighted m/z."""
        try:
            return np.average(self.mz, weights=self.spint).item()
        except ZeroDivisionError:
            return nan

    @pydantic.computed_field(repr=False)
    @cached_property
    def area(self) -> float:
        """The area under the chromatogram."""
        has_time = ~np.isnan(self.time)
        return float(trapezoid(self.spint[has_time], self.time[has_time]))

    def describe(self) -> dict[str, float]:
        """Compute all available descriptors of the chromatogram.

        :return: a dictionary that maps descriptor names to descriptor values.

        """
        return {x: getattr(self, x) for x in self.descriptor_names()}

    def equals(self, other: Self) -> bool:
        """Check if two chromatograms contain the same data."""
        return (
            np.array_equal(self.mz, other.mz)
            and np.array_equal(self.time, other.time, equal_nan=True)
            and np.array_equal(self.spint, other.spint)
            and np.array_equal(self.scan, other.scan)
            and self.id == other.id
        )

    def to_str(self) -> str:
        """Serialize the chromatogram into a JSON string.

        :return: a string serialization of the chromatogram.

        """
        return self.model_dump_json(exclude=self.descriptor_names())

    @classmethod
    def from_str(cls, s: str) -> Self:
        """Create a chromatogram instance from a JSON string.

        :param s: a serialized chromatogram obtained using the `to_str` method
        :return: a new chromatogram instance.

        """
        return cls(**json.loads(s))

    @classmethod
    @lru_cache
    def descriptor_names(cls) -> set[str]:
        """Retrieve the available descriptor names."""
        return set(cls.model_computed_fields)
