"""General purpose raw data access."""

from __future__ import annotations

import pathlib
from collections import OrderedDict
from logging import getLogger
from typing import Any, Generator, Iterator, Protocol, Sequence

from .models import MSSpectrum
from .registry import Registry

logger = getLogger(__name__)

reader_registry: Registry[Reader] = Registry("reader")


class Reader(Protocol):
    """Reader interface for raw data."""

    def __init__(self, src: Any): ...

    def get_spectrum(self, index: int) -> MSSpectrum:
        """Retrieve a spectrum from file."""
        ...

    def get_n_spectra(self) -> int:
        """Retrieve the total number of spectra."""
        ...


class ScanSource(Protocol):
    """Minimal interface required to build chromatograms from a data source.

    The name is only used in log messages and to label the chromatograms built from the source. The
    builder iterates over the source twice, so each call to `__iter__` must start a new pass.

    """

    name: str

    def __iter__(self) -> Iterator[MSSpectrum]: ...


class ScanList:
    """Use a sequence of spectra as a scan source.

    :param scans: the spectra, sorted by retention time.
    :param name: a display name for the scans.

    """

    def __init__(self, scans: Sequence[MSSpectrum], name: str = ""):
        self.name = name
        self._scans = scans

    def __iter__(self) -> Iterator[MSSpectrum]:
        return iter(self._scans)

    def __len__(self) -> int:
        return len(self._scans)


class MSData:
    """Provide access to raw MS data.

    Spectra are read lazily and kept in a :py:class:`SpectrumCache`.

    :param src: the data source passed to the reader, usually a raw data file path.
    :param reader: the Reader to read raw data. If ``None``, the reader is inferred using the file extension.
        If an string is provided, a reader with the provided name is fetched from the reader registry.
    :param cache: the maximum cache size, in bytes. If set to ``-1``, the cache can grow indefinitely.
    :param ms_level: skip spectra without this MS level when iterating over spectra.
    :param start_time: skip spectra with time lower than this value when iterating over data.
    :param end_time: skip spectra with time greater or equal than this value when iterating over data.
    :param name: a display name for the data. If not provided, the file stem is used if `src` is a path.
    :param kwargs: keyword arguments passed to the reader.

    """

    def __init__(
        self,
        src: Any,
        reader: type[Reader] | str | None = None,
        cache: int = -1,
        ms_level: int = 1,
        start_time: float = 0.0,
        end_time: float | None = None,
        name: str | None = None,
        **kwargs,
    ):
        if reader is None:
            if not isinstance(src, pathlib.Path):
                raise ValueError("A reader must be provided if `src` is not a path.")
            reader = reader_registry.get(src.suffix[1:])
        elif isinstance(reader, str):
            reader = reader_registry.get(reader)

        if name is None:
            name = src.stem if isinstance(src, pathlib.Path) else str(src)

        self.name = name
        self.ms_level = ms_level
        self.start_time = start_time
        self.end_time = end_time

        self._reader = reader(src, **kwargs)
        self._cache = SpectrumCache(max_size=cache)
        self._n_spectra: int | None = None

    def get_n_spectra(self) -> int:
        """Retrieve the total number of spectra stored in the source."""
        if self._n_spectra is None:
            self._n_spectra = self._reader.get_n_spectra()
        return self._n_spectra

    def get_spectrum(self, index: int) -> MSSpectrum:
        """Retrieve a spectrum by index."""
        n_spectra = self.get_n_spectra()
        if not 0 <= index < n_spectra:
            raise ValueError(f"Spectrum index must be in the interval [0, {n_spectra}). Got {index}.")

        spectrum = self._cache.get(index)
        if spectrum is None:
            spectrum = self._reader.get_spectrum(index)
            self._cache.put(spectrum)
        return spectrum

    def __iter__(self) -> Generator[MSSpectrum, None, None]:
        """Iterate over spectra with the selected MS level inside the time window.

        Spectra without time information are not filtered by the time window.

        """
        for index in range(self.get_n_spectra()):
            spectrum = self.get_spectrum(index)
            if spectrum.ms_level == self.ms_level and self._in_time_window(spectrum.time):
                yield spectrum

    def _in_time_window(self, time: float | None) -> bool:
        if time is None:
            return True
        return self.start_time <= time and (self.end_time is None or time < self.end_time)


class SpectrumCache:
    """Least recently used spectra, bounded by their size in bytes.

    :param max_size: the maximum size of stored spectra, in bytes. If set to ``-1``, the cache is unbounded.

    """

    def __init__(self, max_size: int = -1):
        self.max_size = max_size
        self.nbytes = 0
        self._spectra: OrderedDict[int, MSSpectrum] = OrderedDict()

    def __contains__(self, index: int) -> bool:
        return index in self._spectra

    def __len__(self) -> int:
        return len(self._spectra)

    def get(self, index: int) -> MSSpectrum | None:
        """Retrieve a spectrum and mark it as recently used. ``None`` if the spectrum is not cached."""
        spectrum = self._spectra.get(index)
        if spectrum is not None:
            self._spectra.move_to_end(index)
        return spectrum

    def put(self, spectrum: MSSpectrum) -> None:
        """Store a spectrum, evicting the least recently used ones if the size limit is exceeded."""
        previous = self._spectra.pop(spectrum.index, None)
        if previous is not None:
            self.nbytes -= previous.get_nbytes()
        self._spectra[spectrum.index] = spectrum
        self.nbytes += spectrum.get_nbytes()

        while self.max_size > -1 and self.nbytes > self.max_size:
            index, evicted = self._spectra.popitem(last=False)
            self.nbytes -= evicted.get_nbytes()
            logger.debug(f"Evicted spectrum {index} from cache.")
