"""Spec parser: OpenAPI 3.x / Swagger 2.0 documents (.json/.yaml) reduced to their endpoints."""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import yaml

SPEC_KINDS = ("openapi", "swagger")
FORMAT_HINTS = ("json", "yaml")

# Lower-case operation keys read from each path item, in this order.
OPERATION_KEYS = ("get", "post", "put", "patch", "delete", "head", "options")

OPENAPI_VERSION_RE = re.compile(r'^3\.\d+\.\d+')
SWAGGER_VERSION = "2.0"


@dataclass(frozen=True)
class SpecEndpoint:
    """One operation declared in a specification."""
    method: str
    path: str
    operation_id: Optional[str] = None
    summary: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "path": self.path,
            "operation_id": self.operation_id,
            "summary": self.summary,
        }


@dataclass(frozen=True)
class Specification:
    """A validated OpenAPI/Swagger document."""
    source_path: str
    kind: str
    version: str
    endpoints: Tuple[SpecEndpoint, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_path": self.source_path,
            "kind": self.kind,
            "version": self.version,
            "endpoint_count": len(self.endpoints),
        }


def load_document(raw_text: str, format_hint: str) -> Any:
    """Decode ``raw_text``; returns ``None`` when it cannot be decoded.

    Besides syntax errors this covers constructor failures such as
    impossible YAML dates (``2023-02-30``) and overly deep nesting.
    """
    if format_hint not in FORMAT_HINTS:
        raise ValueError(f"Unsupported spec format: {format_hint!r}")

    try:
        if format_hint == "json":
            return json.loads(raw_text)
        return yaml.safe_load(raw_text)
    except Exception:
        return None


def is_valid_spec(document: Any) -> bool:
    """
    Check the minimal shape of an OpenAPI/Swagger document.

    Requires an ``openapi`` (3.x.y) or ``swagger`` ("2.0") marker plus
    object-typed ``paths`` and ``info`` sections.
    """
    if not isinstance(document, dict):
        return False

    if not document.get("openapi") and not document.get("swagger"):
        return False

    if not isinstance(document.get("paths"), dict):
        return False
    if not isinstance(document.get("info"), dict):
        return False

    if document.get("openapi"):
        version = document["openapi"]
        return isinstance(version, str) and bool(OPENAPI_VERSION_RE.match(version))

    return document["swagger"] == SWAGGER_VERSION


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def extract_spec_endpoints(document: Dict[str, Any]) -> List[SpecEndpoint]:
    results = []

    for path, path_item in document.get("paths", {}).items():
        if not isinstance(path_item, dict):
            continue

        for key in OPERATION_KEYS:
            operation = path_item.get(key)
            if not isinstance(operation, dict):
                continue
            results.append(SpecEndpoint(
                method=key.upper(),
                path=str(path),
                operation_id=_optional_str(operation.get("operationId")),
                summary=_optional_str(operation.get("summary")),
            ))

    return results


def build_specification(document: Any, source_path: str = "") -> Optional[Specification]:
    """Turn an already decoded document into a ``Specification``, or ``None``."""
    if not is_valid_spec(document):
        return None

    kind = "openapi" if document.get("openapi") else "swagger"
    return Specification(
        source_path=source_path,
        kind=kind,
        version=str(document[kind]),
        endpoints=tuple(extract_spec_endpoints(document)),
    )


def parse_spec(raw_text: str, format_hint: str, source_path: str = "") -> Optional[Specification]:
    """
    Parse one candidate specification document.

    Returns ``None`` both for malformed text and for documents that are not
    OpenAPI/Swagger specifications; callers decide whether that is worth
    reporting.
    """
    return build_specification(load_document(raw_text, format_hint), source_path)
