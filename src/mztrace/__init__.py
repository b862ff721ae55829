"""Build chromatograms from LC-MS scans.

Provides:

- data models for MS scans and chromatograms.
- raw data access through pluggable readers.
- a trace connector that links points across consecutive scans.
- a chromatogram builder that validates scans, drives the connector and filters the resulting traces.

"""

from .core.exceptions import EmptyInputError, UnorderedScansError
from .core.io import MSData, ScanList
from .core.models import Chromatogram, MSSpectrum, MZTolerance
from .core.tolerance import FixedMZToleranceProvider
from .lcms import ChromatogramBuilder, ChromatogramBuilderParameters, build_chromatograms
from .storage import OnMemoryDataPointStore

__all__ = [
    "build_chromatograms",
    "Chromatogram",
    "ChromatogramBuilder",
    "ChromatogramBuilderParameters",
    "EmptyInputError",
    "FixedMZToleranceProvider",
    "MSData",
    "MSSpectrum",
    "MZTolerance",
    "OnMemoryDataPointStore",
    "ScanList",
    "UnorderedScansError",
]
