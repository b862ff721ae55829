"""Simulated LC-MS data.

Scans are computed from a list of features with gaussian elution profiles, sampled on an m/z grid.
Simulated samples are plugged into :py:class:`~mztrace.core.io.MSData` using the
:py:class:`SimulatedLCMSDataReader`.

"""

from __future__ import annotations

import pathlib

import numpy as np
import pydantic
from typing_extensions import Self

from ..core.io import reader_registry
from ..core.models import MSSpectrum
from ..utils.numpy import FloatArray1D


class MZGridSpecification(pydantic.BaseModel):
    """Evenly spaced m/z values where signals are sampled."""

    low: pydantic.PositiveFloat = 100.0
    high: pydantic.PositiveFloat = 1200.0
    size: pydantic.PositiveInt = 10000

    def create(self) -> FloatArray1D:
        """Create the m/z grid."""
        return np.linspace(self.low, self.high, self.size)


class SimulatedLCMSFeature(pydantic.BaseModel):
    """An LC-MS peak with a gaussian elution profile."""

    mz: pydantic.PositiveFloat
    """The feature m/z."""

    rt: pydantic.PositiveFloat
    """The retention time at the peak apex."""

    int: pydantic.PositiveFloat
    """The intensity at the peak apex."""

    width: pydantic.PositiveFloat = 3.0
    """The gaussian width in the time domain."""

    def get_height(self, time: float) -> float:
        """Compute the feature intensity at a given time."""
        return self.int * np.exp(-0.5 * ((time - self.rt) / self.width) ** 2)


class SimulatedLCMSDataConfiguration(pydantic.BaseModel):
    """Acquisition settings of a simulated sample."""

    grid: MZGridSpecification | None = None
    """If not specified, signals are only sampled at the features m/z and scans are centroided."""

    mz_noise: pydantic.NonNegativeFloat = 0.0
    """Standard deviation of the gaussian noise added to m/z values."""

    amp_noise: pydantic.NonNegativeFloat = 0.0
    """Standard deviation of the gaussian noise added to intensity values."""

    mz_width: pydantic.PositiveFloat = 0.005
    """The gaussian width in the m/z domain."""

    n_scans: pydantic.PositiveInt = 100

    time_resolution: pydantic.PositiveFloat = 1.0
    """The time between consecutive scans."""

    min_signal_intensity: pydantic.PositiveFloat | None = None
    """If specified, points with intensity lower than this value are removed from scans."""

    ms_level: pydantic.PositiveInt = 1

    dropped_scans: list[pydantic.NonNegativeInt] = list()
    """Scans in this list contain no points."""

    seed: pydantic.NonNegativeInt = 0
    """Seed used to generate noise. Each scan is generated with its own random generator."""


class SimulatedLCMSSample(pydantic.BaseModel):
    """A simulated sample: acquisition settings and features."""

    id: str = "simulated"
    """The sample id. Used as the data source name."""

    config: SimulatedLCMSDataConfiguration = SimulatedLCMSDataConfiguration()

    features: list[SimulatedLCMSFeature] = list()

    def __str__(self) -> str:
        return self.id

    def make_grid(self) -> FloatArray1D:
        """Create the m/z values where signals are sampled."""
        if self.config.grid is None:
            return np.unique([x.mz for x in self.features]).astype(float)
        return self.config.grid.create()

    @classmethod
    def from_json(cls, path: pathlib.Path) -> Self:
        """Load a sample from a JSON file."""
        with path.open("rt") as f:
            return cls.model_validate_json(f.read())

    def to_json(self, path: pathlib.Path) -> None:
        """Store the sample as a JSON file."""
        with path.open("wt") as f:
            f.write(self.model_dump_json())


class ScanSimulator:
    """Compute the scans of a simulated sample."""

    def __init__(self, sample: SimulatedLCMSSample) -> None:
        self.sample = sample
        self.grid = sample.make_grid()
        self._centers = np.array([x.mz for x in sample.features], dtype=float)

    def simulate(self, index: int) -> MSSpectrum:
        """Compute a scan. The same index always produces the same scan."""
        config = self.sample.config
        if not 0 <= index < config.n_scans:
            raise ValueError(f"Scan index must be in the range [0, {config.n_scans}). Got {index}.")

        time = config.time_resolution * index
        if index in config.dropped_scans:
            mz = np.array([], dtype=float)
            spint = np.array([], dtype=float)
        else:
            rng = np.random.default_rng((config.seed, index))
            mz = self._sample_mz(rng)
            spint = self._sample_intensity(mz, time, rng)

        if config.min_signal_intensity is not None:
            keep = spint >= config.min_signal_intensity
            mz = mz[keep]
            spint = spint[keep]

        return MSSpectrum(
            index=index, time=time, mz=mz, int=spint, ms_level=config.ms_level, centroid=config.grid is None
        )

    def _sample_mz(self, rng: np.random.Generator) -> FloatArray1D:
        if self.sample.config.mz_noise > 0.0:
            return np.sort(self.grid + rng.normal(scale=self.sample.config.mz_noise, size=self.grid.size))
        return self.grid.copy()

    def _sample_intensity(self, mz: FloatArray1D, time: float, rng: np.random.Generator) -> FloatArray1D:
        config = self.sample.config
        heights = np.array([x.get_height(time) for x in self.sample.features], dtype=float)
        # rows are m/z values, columns are features
        profiles = np.exp(-0.5 * ((mz[:, np.newaxis] - self._centers) / config.mz_width) ** 2)
        spint = profiles @ heights
        if config.amp_noise > 0.0:
            spint = np.maximum(spint + rng.normal(scale=config.amp_noise, size=spint.size), 0.0)
        return spint


@reader_registry.register
class SimulatedLCMSDataReader:
    """Read scans from a simulated sample."""

    def __init__(self, src: SimulatedLCMSSample) -> None:
        if not isinstance(src, SimulatedLCMSSample):
            msg = f"Simulated LC-MS reader requires a simulated sample as source. Got {type(src).__name__}."
            raise ValueError(msg)
        self._n_scans = src.config.n_scans
        self._simulator = ScanSimulator(src)

    def get_spectrum(self, index: int) -> MSSpectrum:
        """Retrieve a spectrum."""
        return self._simulator.simulate(index)

    def get_n_spectra(self) -> int:
        """Retrieve the total number of spectra."""
        return self._n_scans
