"""Helpers classes and functions for unit tests."""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING

import numpy as np

from mztrace.core.models import MSSpectrum, MZTolerance

if TYPE_CHECKING:
    from mztrace.lcms.builder import ChromatogramBuilder


def create_scan(index: int, time: float | None, mz: list[float], spint: list[float]) -> MSSpectrum:
    return MSSpectrum(index=index, time=time, mz=np.array(mz, dtype=float), int=np.array(spint, dtype=float))


def create_single_mz_scans(spint: list[float], mz: float = 100.0, time_resolution: float = 1.0) -> list[MSSpectrum]:
    """Create scans with a single point at the same m/z."""
    return [create_scan(k, k * time_resolution, [mz], [x]) for k, x in enumerate(spint)]


class CountingToleranceProvider:
    """Return a fixed tolerance and record the scans passed to it."""

    def __init__(self, tolerance: MZTolerance):
        self.tolerance = tolerance
        self.scans: list[int] = list()

    def get_mz_tolerance(self, scan: MSSpectrum) -> MZTolerance:
        self.scans.append(scan.index)
        return self.tolerance


class CancelingToleranceProvider:
    """Cancel a builder after resolving the tolerance of a scan."""

    def __init__(self, tolerance: MZTolerance, cancel_at: int):
        self.tolerance = tolerance
        self.cancel_at = cancel_at
        self.builder: ChromatogramBuilder | None = None

    def get_mz_tolerance(self, scan: MSSpectrum) -> MZTolerance:
        if scan.index == self.cancel_at and self.builder is not None:
            self.builder.cancel()
        return self.tolerance


class SpectrumTracker:
    """Keep weak references to spectra and count how many are alive when a tolerance is requested."""

    def __init__(self, tolerance: MZTolerance):
        self.tolerance = tolerance
        self.refs: list[weakref.ref[MSSpectrum]] = list()
        self.max_alive = 0

    def track(self, spectrum: MSSpectrum) -> None:
        self.refs.append(weakref.ref(spectrum))

    def count_alive(self) -> int:
        return sum(1 for x in self.refs if x() is not None)

    def get_mz_tolerance(self, scan: MSSpectrum) -> MZTolerance:
        self.max_alive = max(self.max_alive, self.count_alive())
        return self.tolerance


class TrackingReader:
    """Create single point spectra with a fixed m/z and register them in a tracker."""

    def __init__(self, src: int, tracker: SpectrumTracker):
        self.n_spectra = src
        self.tracker = tracker

    def get_spectrum(self, index: int) -> MSSpectrum:
        spectrum = create_scan(index, float(index), [100.0], [50.0])
        self.tracker.track(spectrum)
        return spectrum

    def get_n_spectra(self) -> int:
        return self.n_spectra
