"""m/z tolerance providers."""

from typing import Protocol

import pydantic

from .models import MSSpectrum, MZTolerance


class MZToleranceProvider(Protocol):
    """Compute the m/z tolerance used to match points of a scan.

    Providers are called once per scan and must not have side effects. Different tolerances
    may be returned for different scans, e.g. to compensate a calibration drift.

    """

    def get_mz_tolerance(self, scan: MSSpectrum) -> MZTolerance:
        """Retrieve the m/z tolerance for a scan."""
        ...


class FixedMZToleranceProvider(pydantic.BaseModel):
    """Use the same m/z tolerance for all scans."""

    tolerance: MZTolerance = MZTolerance()
    """The tolerance returned for every scan."""

    def get_mz_tolerance(self, scan: MSSpectrum) -> MZTolerance:
        """Retrieve the m/z tolerance for a scan."""
        return self.tolerance
