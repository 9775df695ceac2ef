"""
Coverage Analyzer
=================
Reconciles extracted endpoints with the operations declared in discovered
OpenAPI/Swagger specifications.

Matching rules:
- methods compare case-insensitively
- paths are normalized first; identical paths match immediately
- otherwise paths match segment by segment, where a parameter segment on
  either side (``{id}``, ``:id``, ``*``) matches anything
- the first matching spec endpoint wins, specs scanned in the given order
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .base import Endpoint, HttpMethod
from .paths import is_parameter_segment, normalize
from .spec import SpecEndpoint, Specification

logger = logging.getLogger("endpoint_scanner.coverage")


class CoverageStatus:
    COVERED = "covered"
    NOT_COVERED = "not-covered"
    NO_SPEC_FOUND = "no-spec-found"

    ALL = (COVERED, NOT_COVERED, NO_SPEC_FOUND)


@dataclass(frozen=True)
class CoverageResult:
    status: str
    spec_file: Optional[str] = None
    matched: Optional[SpecEndpoint] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "spec_file": self.spec_file,
            "matched": self.matched.to_dict() if self.matched else None,
        }


@dataclass(frozen=True)
class EndpointWithCoverage:
    """An extracted endpoint decorated with its coverage verdict."""
    endpoint: Endpoint
    coverage: CoverageResult

    @property
    def method(self) -> HttpMethod:
        return self.endpoint.method

    @property
    def path(self) -> str:
        return self.endpoint.path

    @property
    def file_path(self) -> str:
        return self.endpoint.file_path

    @property
    def line_number(self) -> int:
        return self.endpoint.line_number

    @property
    def class_name(self) -> Optional[str]:
        return self.endpoint.class_name

    @property
    def method_name(self) -> Optional[str]:
        return self.endpoint.method_name

    def to_dict(self) -> Dict[str, Any]:
        data = self.endpoint.to_dict()
        data["coverage"] = self.coverage.to_dict()
        return data


def methods_match(endpoint_method: str, spec_method: str) -> bool:
    return endpoint_method.upper() == spec_method.upper()


def paths_match(endpoint_path: str, spec_path: str) -> bool:
    left = normalize(endpoint_path)
    right = normalize(spec_path)
    if left == right:
        return True

    left_segments = left.split('/')
    right_segments = right.split('/')
    if len(left_segments) != len(right_segments):
        return False

    for ours, theirs in zip(left_segments, right_segments):
        if is_parameter_segment(ours) or is_parameter_segment(theirs):
            continue
        if ours != theirs:
            return False
    return True


class CoverageAnalyzer:
    """Compute documentation coverage for extracted endpoints."""

    def find_matching_endpoint(self, endpoint: Endpoint,
                               spec_endpoints: Iterable[SpecEndpoint]) -> Optional[SpecEndpoint]:
        for candidate in spec_endpoints:
            if methods_match(endpoint.method.value, candidate.method) and \
                    paths_match(endpoint.path, candidate.path):
                return candidate
        return None

    def find_coverage(self, endpoint: Endpoint,
                      specifications: Sequence[Specification]) -> CoverageResult:
        for spec in specifications:
            matched = self.find_matching_endpoint(endpoint, spec.endpoints)
            if matched:
                return CoverageResult(
                    status=CoverageStatus.COVERED,
                    spec_file=spec.source_path,
                    matched=matched,
                )
        return CoverageResult(status=CoverageStatus.NOT_COVERED)

    def analyze(self, endpoints: Iterable[Endpoint],
                specifications: Sequence[Specification]) -> List[EndpointWithCoverage]:
        if not specifications:
            # Scan-wide verdict: applies to every endpoint regardless of path.
            return [
                EndpointWithCoverage(ep, CoverageResult(status=CoverageStatus.NO_SPEC_FOUND))
                for ep in endpoints
            ]

        results = [EndpointWithCoverage(ep, self.find_coverage(ep, specifications)) for ep in endpoints]
        logger.debug(
            "Coverage computed for %d endpoints against %d specifications",
            len(results), len(specifications),
        )
        return results


def compute_coverage(endpoints: Iterable[Endpoint],
                     specifications: Sequence[Specification]) -> List[EndpointWithCoverage]:
    return CoverageAnalyzer().analyze(endpoints, specifications)
