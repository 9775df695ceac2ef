"""
Scanner package for the Java/Scala endpoint scanner.

Exports the framework extractors, the specification parser, the coverage
matcher and the shared data models.
"""

from .base import (
    HttpMethod,
    Endpoint,
    ScanState,
    BaseScanner,
)
from .paths import normalize, combine, is_parameter_segment

from .java import JavaScanner
from .scala import ScalaScanner
from .spec import SpecEndpoint, Specification, build_specification, parse_spec
from .coverage import (
    CoverageStatus,
    CoverageResult,
    EndpointWithCoverage,
    CoverageAnalyzer,
    compute_coverage,
)
from .dispatcher import ScanOutcome, EndpointDispatcher

__all__ = [
    # Data models
    "HttpMethod",
    "Endpoint",
    "ScanState",
    "BaseScanner",
    "SpecEndpoint",
    "Specification",
    "CoverageStatus",
    "CoverageResult",
    "EndpointWithCoverage",
    "ScanOutcome",
    # Path helpers
    "normalize",
    "combine",
    "is_parameter_segment",
    # Scanner classes
    "JavaScanner",
    "ScalaScanner",
    "EndpointDispatcher",
    "CoverageAnalyzer",
    # Functions
    "parse_spec",
    "build_specification",
    "compute_coverage",
]
