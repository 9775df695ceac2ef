"""Routes source files to the matching extractor and aggregates the results."""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .base import BaseScanner, Endpoint
from .coverage import CoverageAnalyzer, CoverageStatus, EndpointWithCoverage
from .java import JavaScanner
from .scala import ScalaScanner
from .spec import Specification

logger = logging.getLogger("endpoint_scanner.dispatcher")

AnyEndpoint = Union[Endpoint, EndpointWithCoverage]

ROUTES_BASENAME = "routes"
ROUTES_SUFFIX = ".routes"


@dataclass(frozen=True)
class ScanOutcome:
    """Result of one scan: file counts, endpoints and per-file errors."""
    files_total: int
    files_scanned: int
    endpoints: Tuple[AnyEndpoint, ...] = field(default_factory=tuple)
    errors: Tuple[str, ...] = field(default_factory=tuple)
    specifications: Tuple[Specification, ...] = field(default_factory=tuple)

    @property
    def has_coverage(self) -> bool:
        return any(isinstance(ep, EndpointWithCoverage) for ep in self.endpoints)

    def method_counts(self) -> Dict[str, int]:
        return dict(Counter(ep.method.value for ep in self.endpoints))

    def coverage_counts(self) -> Dict[str, int]:
        counts = {status: 0 for status in CoverageStatus.ALL}
        for ep in self.endpoints:
            if isinstance(ep, EndpointWithCoverage):
                counts[ep.coverage.status] += 1
        return counts

    def with_coverage(self, specifications: Sequence[Specification],
                      analyzer: Optional[CoverageAnalyzer] = None) -> "ScanOutcome":
        """Return a copy whose endpoints carry their coverage verdicts."""
        analyzer = analyzer or CoverageAnalyzer()
        plain = [ep.endpoint if isinstance(ep, EndpointWithCoverage) else ep for ep in self.endpoints]
        return ScanOutcome(
            files_total=self.files_total,
            files_scanned=self.files_scanned,
            endpoints=tuple(analyzer.analyze(plain, specifications)),
            errors=self.errors,
            specifications=tuple(specifications),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files_total": self.files_total,
            "files_scanned": self.files_scanned,
            "endpoints": [ep.to_dict() for ep in self.endpoints],
            "errors": list(self.errors),
            "specifications": [spec.to_dict() for spec in self.specifications],
        }


class EndpointDispatcher:
    """Pick the extractor for a file by its name and merge per-file results."""

    def __init__(self):
        self.java = JavaScanner()
        self.scala = ScalaScanner()

    def scanner_for(self, file_path: str) -> Optional[BaseScanner]:
        name = PurePath(file_path.replace('\\', '/')).name
        if name.endswith(".java"):
            return self.java
        if name.endswith(".scala") or name == ROUTES_BASENAME or name.endswith(ROUTES_SUFFIX):
            return self.scala
        return None

    def is_supported(self, file_path: str) -> bool:
        return self.scanner_for(file_path) is not None

    def extract(self, file_path: str, content: str) -> List[Endpoint]:
        scanner = self.scanner_for(file_path)
        if not scanner:
            return []
        return scanner.extract(file_path, content)

    def scan(self, files: Iterable[Tuple[str, str]],
             files_total: Optional[int] = None,
             errors: Sequence[str] = ()) -> ScanOutcome:
        """
        Extract endpoints from ``(file_path, content)`` pairs.

        ``errors`` carries failures the caller hit before handing content
        over (unreadable files); they are kept ahead of extraction errors.
        """
        endpoints: List[Endpoint] = []
        collected_errors = list(errors)
        seen = 0
        scanned = 0

        for file_path, content in files:
            seen += 1
            try:
                found = self.extract(file_path, content)
            except Exception as e:
                logger.error(f"Unexpected error scanning {file_path}: {e}")
                collected_errors.append(f"Failed to process {file_path}: {e}")
                continue
            endpoints.extend(found)
            scanned += 1
            logger.debug(f"{file_path}: {len(found)} endpoints")

        return ScanOutcome(
            files_total=files_total if files_total is not None else seen,
            files_scanned=scanned,
            endpoints=tuple(endpoints),
            errors=tuple(collected_errors),
        )
