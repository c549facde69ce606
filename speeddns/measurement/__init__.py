"""
Measurement package: address pool selection, the cfst invoker and its result parser.
"""

from speeddns.measurement.invoker import (
    MeasurementCounts,
    MeasurementError,
    MeasurementInvoker,
    MeasurementOutcome,
    build_arguments,
    resolve_counts,
)
from speeddns.measurement.results import parse_result_csv
from speeddns.measurement.sources import EndpointSourceError, resolve_source_file

__all__ = [
    "EndpointSourceError",
    "MeasurementCounts",
    "MeasurementError",
    "MeasurementInvoker",
    "MeasurementOutcome",
    "build_arguments",
    "parse_result_csv",
    "resolve_counts",
    "resolve_source_file",
]
