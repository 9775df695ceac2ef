"""
Shared data models and BaseScanner for the endpoint extractors.

All framework-specific scanners import from this module.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Pattern, Sequence, Set

from .paths import combine


# =============================================================================
# ENUMS
# =============================================================================

class HttpMethod(Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, verb: Optional[str]) -> Optional["HttpMethod"]:
        """Map a verb token (any case) to a member, ``None`` for HEAD/OPTIONS/etc."""
        if not verb:
            return None
        try:
            return cls(verb.upper())
        except ValueError:
            return None


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class Endpoint:
    """An extracted route declaration and where it was found."""
    method: HttpMethod
    path: str
    file_path: str
    line_number: int
    class_name: Optional[str] = None
    method_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method.value,
            "path": self.path,
            "file_path": self.file_path,
            "line_number": self.line_number,
            "class_name": self.class_name,
            "method_name": self.method_name,
        }


_BRACE_NOISE = re.compile(r'"(?:\\.|[^"\\])*"|\'(?:\\.|[^\'\\])\'|//.*$')


@dataclass
class ScanState:
    """Per-file state carried from line to line while scanning."""
    class_name: Optional[str] = None
    base_path: str = ""
    pending_base: Optional[str] = None
    depth: int = 0
    line_depth: int = 0

    @property
    def at_top_level(self) -> bool:
        """True if the current line starts outside every brace block."""
        return self.line_depth == 0

    def begin_line(self, line: str) -> None:
        """Record the depth the line starts at, then apply its braces."""
        self.line_depth = self.depth
        code = _BRACE_NOISE.sub('', line)
        self.depth = max(0, self.depth + code.count('{') - code.count('}'))

    def enter_type(self, name: Optional[str]) -> None:
        # A class-level mapping seen just above the declaration belongs to it.
        self.class_name = name
        self.base_path = self.pending_base or ""
        self.pending_base = None

    def set_base_mapping(self, path: str) -> None:
        self.pending_base = path
        self.base_path = path


# =============================================================================
# SPRING ANNOTATION PATTERNS
# =============================================================================

MAPPING_ANNOTATION_RE = re.compile(
    r'@(GetMapping|PostMapping|PutMapping|PatchMapping|DeleteMapping|RequestMapping)\b'
)
REQUEST_METHOD_RE = re.compile(r'method\s*=\s*(?:\{\s*|Array\(\s*)?RequestMethod\.(\w+)')
CONTROLLER_MARKER_RE = re.compile(r'@(?:Rest)?Controller\b')

DIRECT_MAPPINGS = {
    'GetMapping': HttpMethod.GET,
    'PostMapping': HttpMethod.POST,
    'PutMapping': HttpMethod.PUT,
    'PatchMapping': HttpMethod.PATCH,
    'DeleteMapping': HttpMethod.DELETE,
}

# Tried in order, first non-empty capture wins.
SPRING_PATH_PATTERNS: List[Pattern[str]] = [
    re.compile(r'\bvalue\s*=\s*"([^"]*)"'),
    re.compile(r'@\w+Mapping\s*\(\s*"([^"]*)"'),
    re.compile(r'\bpath\s*=\s*"([^"]*)"'),
    re.compile(r'\b(?:value|path)\s*=\s*\{\s*"([^"]*)"'),
    re.compile(r'@\w+Mapping\s*\(\s*\{\s*"([^"]*)"'),
]


def first_capture(patterns: Sequence[Pattern[str]], line: str) -> str:
    """Return the first non-empty group 1 produced by ``patterns``."""
    for pattern in patterns:
        match = pattern.search(line)
        if match and match.group(1):
            return match.group(1)
    return ""


# =============================================================================
# BASE SCANNER (Abstract)
# =============================================================================

class BaseScanner(ABC):
    """
    Abstract base class for the line-oriented endpoint extractors.

    Subclasses describe their language through a few regexes; the Spring
    annotation state machine shared by Java and Scala lives here.
    """

    METHOD_LOOKAHEAD = 4

    @property
    @abstractmethod
    def language(self) -> str:
        """Display name of the source language."""
        pass

    @property
    @abstractmethod
    def extensions(self) -> Set[str]:
        """File extensions this scanner processes."""
        pass

    @property
    @abstractmethod
    def type_declaration_re(self) -> Pattern[str]:
        """Regex whose group ``name`` captures a type declaration's name."""
        pass

    @property
    @abstractmethod
    def method_name_patterns(self) -> List[Pattern[str]]:
        """Regexes capturing a method/function name in group 1."""
        pass

    @property
    def path_patterns(self) -> List[Pattern[str]]:
        return SPRING_PATH_PATTERNS

    @abstractmethod
    def extract(self, file_path: str, content: str) -> List[Endpoint]:
        """Extract every endpoint declared in ``content``."""
        pass

    # -------------------------------------------------------------------------
    # Type declarations
    # -------------------------------------------------------------------------

    def match_type_declaration(self, line: str) -> Optional[re.Match]:
        return self.type_declaration_re.search(line)

    def update_type_state(self, line: str, state: ScanState) -> bool:
        """Apply a top-level type declaration or controller marker; True if the line was one.

        Nested types (DTO records, case classes inside a routes object) keep
        the enclosing controller's name and base path.
        """
        if not state.at_top_level:
            return False

        decl = self.match_type_declaration(line)
        if decl:
            prefix = line[:decl.start('name')]
            if '@RequestMapping' in prefix and not REQUEST_METHOD_RE.search(prefix):
                state.pending_base = self.extract_path(prefix)
            state.enter_type(decl.group('name'))
            return True
        if CONTROLLER_MARKER_RE.search(line):
            state.class_name = None
            # "@RestController @RequestMapping(...)" still needs the mapping handled
            return not self.is_spring_annotation(line)
        return False

    # -------------------------------------------------------------------------
    # Spring annotations
    # -------------------------------------------------------------------------

    def is_spring_annotation(self, line: str) -> bool:
        return bool(MAPPING_ANNOTATION_RE.search(line))

    def extract_http_method(self, line: str) -> Optional[HttpMethod]:
        annotation = MAPPING_ANNOTATION_RE.search(line)
        if not annotation:
            return None
        name = annotation.group(1)
        if name in DIRECT_MAPPINGS:
            return DIRECT_MAPPINGS[name]

        explicit = REQUEST_METHOD_RE.search(line)
        if explicit:
            return HttpMethod.parse(explicit.group(1))
        return HttpMethod.GET

    def extract_path(self, line: str) -> str:
        return first_capture(self.path_patterns, line)

    def extract_method_name(self, lines: List[str], index: int) -> Optional[str]:
        end = min(index + 1 + self.METHOD_LOOKAHEAD, len(lines))
        for candidate in lines[index + 1:end]:
            stripped = candidate.strip()
            for pattern in self.method_name_patterns:
                match = pattern.search(stripped)
                if match:
                    return match.group(1)
        return None

    def annotates_type(self, lines: List[str], index: int) -> bool:
        """True if the annotation at ``index`` sits on a type declaration."""
        for candidate in lines[index + 1:]:
            stripped = candidate.strip()
            if not stripped or stripped.startswith(('@', '//', '/*', '*')):
                continue
            return bool(self.match_type_declaration(stripped))
        return False

    def is_base_mapping(self, line: str, lines: List[str], index: int) -> bool:
        annotation = MAPPING_ANNOTATION_RE.search(line)
        if not annotation or annotation.group(1) != 'RequestMapping':
            return False
        if REQUEST_METHOD_RE.search(line):
            return False
        return self.annotates_type(lines, index)

    def scan_spring_annotation(self, file_path: str, lines: List[str], index: int,
                               state: ScanState) -> Optional[Endpoint]:
        """Handle a line already known to carry a Spring mapping annotation."""
        line = lines[index].strip()

        if self.is_base_mapping(line, lines, index):
            if state.at_top_level:
                state.set_base_mapping(self.extract_path(line))
            return None

        method = self.extract_http_method(line)
        if method is None:
            return None

        return Endpoint(
            method=method,
            path=combine(state.base_path, self.extract_path(line)),
            file_path=file_path,
            line_number=index + 1,
            class_name=state.class_name,
            method_name=self.extract_method_name(lines, index),
        )
