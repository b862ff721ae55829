"""Connect points from consecutive scans into m/z traces.

Points in a scan are visited from the most intense to the least intense one. Each point extends
the closest trace in m/z that was not extended yet in the scan, or starts a new trace if it is above
the noise level. Traces that are not extended in a scan are closed: a single missing scan terminates
a trace.

"""

from __future__ import annotations

import bisect
from logging import getLogger
from math import inf, isnan, nan

import numpy as np

from ..core.models import MSSpectrum, MZTolerance

logger = getLogger(__name__)


class ActiveTrace:
    """An m/z trace under construction.

    :param id: the trace id. Assigned in creation order by the connector.
    :param time: the retention time of the seed point. ``nan`` if the scan has no time information.
    :param mz: the m/z of the seed point.
    :param spint: the intensity of the seed point.
    :param scan: the scan index of the seed point.

    """

    def __init__(self, id: int, time: float, mz: float, spint: float, scan: int):
        self.id = id
        self.time = [time]
        self.mz = [mz]
        self.spint = [spint]
        self.scan = [scan]
        self.last_mz = mz
        self.max_int = spint
        self.extended = True

    def __len__(self) -> int:
        return len(self.spint)

    def extend(self, time: float, mz: float, spint: float, scan: int) -> None:
        """Append a point to the trace."""
        assert not self.extended, f"Trace {self.id} was already extended in the current scan."
        self.time.append(time)
        self.mz.append(mz)
        self.spint.append(spint)
        self.scan.append(scan)
        self.last_mz = mz
        self.max_int = max(self.max_int, spint)
        self.extended = True

    @property
    def span(self) -> float:
        """The trace duration. ``nan`` if none of the points has time information."""
        time = [x for x in self.time if not isnan(x)]
        if not time:
            return nan
        return time[-1] - time[0]


class TraceConnector:
    """Build m/z traces from a sequence of scans.

    Active traces are indexed by their last m/z in a sorted list of ``(last_mz, id)`` keys. The index
    is rebuilt after each scan is processed, so traces created or extended in a scan never match a second
    point from the same scan.

    :param noise_level: points with intensity lower or equal than this value do not start new traces.

    """

    def __init__(self, noise_level: float):
        self.noise_level = noise_level
        self._active: dict[int, ActiveTrace] = dict()
        self._keys: list[tuple[float, int]] = list()
        self._closed: list[ActiveTrace] = list()
        self._next_id = 0

    def get_n_active(self) -> int:
        """Retrieve the number of traces that are still being extended."""
        return len(self._active)

    def get_n_closed(self) -> int:
        """Retrieve the number of closed traces."""
        return len(self._closed)

    def add_scan(self, scan: MSSpectrum, tolerance: MZTolerance) -> None:
        """Connect points from a scan to active traces.

        :param scan: the scan to add. Scans must be added in retention time order.
        :param tolerance: the m/z tolerance used to match points with traces.

        """
        for trace in self._active.values():
            trace.extended = False

        time = nan if scan.time is None else scan.time

        # descending intensity, ties solved by ascending m/z
        order = np.lexsort((scan.mz, -scan.int))

        new_traces: list[ActiveTrace] = list()
        for k in order:
            mz = scan.mz[k].item()
            spint = scan.int[k].item()
            trace = self._find_match(mz, tolerance)
            if trace is not None:
                trace.extend(time, mz, spint, scan.index)
            elif spint > self.noise_level:
                new_traces.append(self._create_trace(time, mz, spint, scan.index))

        self._commit(new_traces)

    def finish(self) -> list[ActiveTrace]:
        """Close all active traces.

        :return: all closed traces, sorted by closing order.

        """
        self._closed.extend(self._active.values())
        self._active = dict()
        self._keys = list()
        logger.debug(f"Connector finished with {len(self._closed)} traces.")
        return list(self._closed)

    def _find_match(self, mz: float, tolerance: MZTolerance) -> ActiveTrace | None:
        """Search the closest trace that was not extended in the current scan."""
        lower, upper = tolerance.get_range(mz)
        best = None
        best_distance = inf
        k = bisect.bisect_left(self._keys, (lower, -1))
        while k < len(self._keys) and self._keys[k][0] <= upper:
            key_mz, trace_id = self._keys[k]
            k += 1
            trace = self._active[trace_id]
            if trace.extended:
                continue
            distance = abs(key_mz - mz)
            if distance < best_distance or (distance == best_distance and best is not None and trace_id < best.id):
                best = trace
                best_distance = distance
        return best

    def _create_trace(self, time: float, mz: float, spint: float, scan: int) -> ActiveTrace:
        trace = ActiveTrace(self._next_id, time, mz, spint, scan)
        self._next_id += 1
        return trace

    def _commit(self, new_traces: list[ActiveTrace]) -> None:
        """Close traces that were not extended and update the active trace index."""
        closed = [x for x in self._active.values() if not x.extended]
        for trace in closed:
            del self._active[trace.id]
        self._closed.extend(closed)

        for trace in new_traces:
            self._active[trace.id] = trace

        self._keys = sorted((x.last_mz, x.id) for x in self._active.values())
