"""Utilities to process LC-MS datasets."""

from .builder import ChromatogramBuilder, ChromatogramBuilderParameters, build_chromatograms
from .connector import ActiveTrace, TraceConnector
from .simulation import SimulatedLCMSDataReader, SimulatedLCMSFeature, SimulatedLCMSSample

__all__ = [
    "ActiveTrace",
    "build_chromatograms",
    "ChromatogramBuilder",
    "ChromatogramBuilderParameters",
    "SimulatedLCMSDataReader",
    "SimulatedLCMSFeature",
    "SimulatedLCMSSample",
    "TraceConnector",
]
