"""Build chromatograms from MS scans."""

from __future__ import annotations

import threading
from logging import getLogger
from typing import TYPE_CHECKING, Any, Iterable, Sequence

import numpy as np
import pydantic
from typing_extensions import Self

from ..core.enums import MSInstrument, Polarity, SeparationMode
from ..core.exceptions import EmptyInputError, UnorderedScansError
from ..core.io import ScanList, ScanSource
from ..core.models import Chromatogram, MSSpectrum, MZTolerance
from ..core.storage import DataPointStore
from ..core.tolerance import FixedMZToleranceProvider, MZToleranceProvider
from ..storage.memory import OnMemoryDataPointStore
from .connector import ActiveTrace, TraceConnector

if TYPE_CHECKING:
    from typing import assert_never

logger = getLogger(__name__)


class ChromatogramBuilderParameters(pydantic.BaseModel):
    """Store the chromatogram builder parameters."""

    model_config = pydantic.ConfigDict(validate_assignment=True)

    noise_level: pydantic.NonNegativeFloat = 0.0
    """Points with intensity lower or equal than this value do not start new traces. They may still
    extend existing traces."""

    min_time_span: pydantic.NonNegativeFloat = 0.0
    """Traces with a duration lower than this value are discarded."""

    min_height: pydantic.NonNegativeFloat = 0.0
    """Traces with a maximum intensity lower than this value are discarded."""

    mz_tolerance: MZTolerance = MZTolerance()
    """The m/z tolerance used to match points if no tolerance provider is passed to the builder."""

    @classmethod
    def from_defaults(cls, instrument: MSInstrument, separation: SeparationMode, polarity: Polarity) -> Self:
        """Create a new parameter set with sane defaults for the specified MS instrument and separation mode.

        :param instrument: The MS instrument used to measure the samples
        :param separation: The analytical method used for separation
        :param polarity: The polarity in which the samples where measured
        :return: A new parameters instance

        """
        params = cls()

        match instrument:
            case MSInstrument.QTOF:
                params.mz_tolerance = MZTolerance(mz=0.01)
                params.noise_level = 100.0
                params.min_height = 500.0
            case MSInstrument.ORBITRAP:
                params.mz_tolerance = MZTolerance(mz=0.005)
                params.noise_level = 1000.0
                params.min_height = 5000.0
            case _ as never:
                assert_never(never)

        match separation:
            case SeparationMode.HPLC:
                params.min_time_span = 5.0
            case SeparationMode.UPLC:
                params.min_time_span = 3.0
            case SeparationMode.DART:
                params.min_time_span = 0.0
            case _ as never:
                assert_never(never)

        return params


class ChromatogramBuilder:
    """Build chromatograms from the scans of a data source.

    Scans are processed sequentially by a :py:class:`~mztrace.lcms.connector.TraceConnector`. After all
    scans are processed, traces with height greater or equal than `min_height` and time span greater
    or equal than `min_time_span` are written to the data point store and returned as chromatograms.

    The builder may be canceled from another thread using :py:meth:`cancel`. Cancellation is checked
    before processing each scan. A canceled builder returns ``None``.

    :param data: the data source. Its name is used to label the chromatograms.
    :param store: the store where accepted chromatogram points are written. If not provided, points are
        stored in memory.
    :param tolerance_provider: computes the m/z tolerance for each scan. If not provided, the `mz_tolerance`
        parameter is used for all scans.
    :param scans: the scans used to build chromatograms. If not provided, all scans in `data` are used.
    :param params: the builder parameters.
    :param kwargs: parameters values, override values in `params`.

    """

    def __init__(
        self,
        data: ScanSource,
        store: DataPointStore | None = None,
        tolerance_provider: MZToleranceProvider | None = None,
        scans: Sequence[MSSpectrum] | None = None,
        params: ChromatogramBuilderParameters | None = None,
        **kwargs: Any,
    ):
        if params is None:
            params = ChromatogramBuilderParameters(**kwargs)
        elif kwargs:
            params = ChromatogramBuilderParameters(**{**params.model_dump(), **kwargs})

        if tolerance_provider is None:
            tolerance_provider = FixedMZToleranceProvider(tolerance=params.mz_tolerance)

        self.data = data
        self.params = params
        self.store = OnMemoryDataPointStore() if store is None else store
        self.tolerance_provider = tolerance_provider

        self._scans = scans
        self._canceled = threading.Event()
        self._lock = threading.Lock()
        self._processed_scans = 0
        self._total_scans = 0
        self._result: list[Chromatogram] | None = None

    def execute(self) -> list[Chromatogram] | None:
        """Build chromatograms.

        Scans are read twice: a first pass validates retention times and counts scans, a second pass
        feeds scans one at a time to the connector. Spectra are not kept between scans.

        Progress counters restart on each successful validation. If validation fails, counters and
        result of a previous run are kept.

        :return: the list of chromatograms, or ``None`` if the builder was canceled.
        :raises EmptyInputError: if there are no scans to process.
        :raises UnorderedScansError: if scans are not sorted by retention time.

        """
        name = self.data.name
        logger.info(f"Started chromatogram builder on `{name}`.")

        source: Iterable[MSSpectrum] = self.data if self._scans is None else self._scans
        n_scans = check_scans(source)
        with self._lock:
            self._total_scans = n_scans
            self._processed_scans = 0

        connector = TraceConnector(self.params.noise_level)
        for scan in source:
            if self._canceled.is_set():
                logger.warning(f"Chromatogram builder on `{name}` canceled ({self._processed_scans}/{n_scans}).")
                return None

            tolerance = self.tolerance_provider.get_mz_tolerance(scan)
            connector.add_scan(scan, tolerance)
            with self._lock:
                self._processed_scans += 1

        candidates = connector.finish()
        result = self._create_chromatograms(candidates)
        self._result = result

        logger.info(f"Finished chromatogram builder on `{name}`. Accepted {len(result)}/{len(candidates)} traces.")
        return result

    def get_finished_percentage(self) -> float | None:
        """Retrieve the fraction of processed scans. ``None`` if the total number of scans is not known yet."""
        with self._lock:
            if self._total_scans == 0:
                return None
            return self._processed_scans / self._total_scans

    def get_result(self) -> list[Chromatogram] | None:
        """Retrieve the last result. ``None`` if the builder did not finish."""
        return self._result

    def cancel(self) -> None:
        """Stop the builder before processing the next scan."""
        self._canceled.set()

    def is_canceled(self) -> bool:
        """Check if the builder was canceled."""
        return self._canceled.is_set()

    def _create_chromatograms(self, candidates: list[ActiveTrace]) -> list[Chromatogram]:
        result = list()
        for trace in candidates:
            if not is_accepted(trace, self.params.min_height, self.params.min_time_span):
                logger.debug(f"Discarded trace {trace.id}: height={trace.max_int}, span={trace.span}.")
                continue

            time = np.array(trace.time, dtype=float)
            mz = np.array(trace.mz, dtype=float)
            spint = np.array(trace.spint, dtype=float)
            scan = np.array(trace.scan, dtype=int)
            handle = self.store.add(time, mz, spint)
            chromatogram = Chromatogram(
                index=len(result),
                trace_id=trace.id,
                data_source=self.data.name,
                data_handle=handle,
                time=time,
                mz=mz,
                spint=spint,
                scan=scan,
            )
            result.append(chromatogram)
        return result


def check_scans(scans: Iterable[MSSpectrum]) -> int:
    """Check that scans are not empty and sorted by retention time.

    Scans are consumed one at a time and only their retention times are kept. Scans without
    retention time are ignored.

    :return: the number of scans.
    :raises EmptyInputError: if `scans` is empty.
    :raises UnorderedScansError: if a scan retention time is lower than the previous retention time.

    """
    n_scans = 0
    previous = None
    for scan in scans:
        n_scans += 1
        if scan.time is None:
            continue
        if previous is not None and scan.time < previous:
            raise UnorderedScansError(scan.index)
        previous = scan.time

    if n_scans == 0:
        raise EmptyInputError("No scans provided to the chromatogram builder.")
    return n_scans


def is_accepted(trace: ActiveTrace, min_height: float, min_time_span: float) -> bool:
    """Check if a trace passes the height and time span thresholds.

    Traces without time information have a ``nan`` span and are always rejected.

    """
    return trace.max_int >= min_height and trace.span >= min_time_span


def build_chromatograms(
    scans: Sequence[MSSpectrum],
    noise_level: float,
    min_time_span: float,
    min_height: float,
    tolerance_provider: MZToleranceProvider,
    name: str = "",
    store: DataPointStore | None = None,
) -> list[Chromatogram]:
    """Build chromatograms from a sequence of scans.

    :param scans: the scans, sorted by retention time.
    :param noise_level: minimum intensity required to start a new trace.
    :param min_time_span: minimum duration of a chromatogram.
    :param min_height: minimum intensity of a chromatogram.
    :param tolerance_provider: computes the m/z tolerance of each scan.
    :param name: a name for the scans, used in logs and to label chromatograms.
    :param store: the store where chromatogram points are written. If not provided, points are stored in memory.
    :return: the list of chromatograms.

    """
    builder = ChromatogramBuilder(
        ScanList(scans, name=name),
        store=store,
        tolerance_provider=tolerance_provider,
        noise_level=noise_level,
        min_time_span=min_time_span,
        min_height=min_height,
    )
    result = builder.execute()
    assert result is not None
    return result
