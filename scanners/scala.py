"""Scala scanner: Spring annotations, Play Framework routes, Akka HTTP, http4s."""
from __future__ import annotations

import re
from typing import Callable, List, Optional, Pattern, Set, Tuple

from .base import SPRING_PATH_PATTERNS, BaseScanner, Endpoint, HttpMethod, ScanState, first_capture

# (predicate, handler) pairs are evaluated in order; the first predicate that
# accepts a line decides what, if anything, that line contributes.
LineRule = Tuple[Callable[[str], bool], Callable[[str, List[str], int, ScanState], Optional[Endpoint]]]


class ScalaScanner(BaseScanner):
    """Scala scanner supporting Spring, Play Framework, Akka HTTP and http4s."""

    TYPE_DECLARATION = re.compile(
        r'^(?:@\w+(?:\([^)]*\))?\s+)*'
        r'(?:(?:case|final|sealed|abstract|private|protected|implicit|override|package|'
        r'private\[\w+\]|protected\[\w+\])\s+)*'
        r'(?:class|object|trait)\s+(?P<name>\w+)'
    )

    METHOD_DECLARATIONS = [
        re.compile(r'\bdef\s+(\w+)\s*[\(\[:]'),
        re.compile(r'\bval\s+(\w+)\s*:'),
    ]

    TEST_FILE_SUFFIXES = (
        "Test.scala",
        "Spec.scala",
        "IT.scala",
        "IntegrationTest.scala",
        "TestDsl.scala",
    )
    TEST_DIR_MARKERS = ("/test/", "/tests/")

    # ===================== PLAY FRAMEWORK =====================
    PLAY_ROUTE = re.compile(
        r'^\s*(GET|POST|PUT|PATCH|DELETE)\s+(/\S*)\s+(\S*\.\S*.*?)\s*$'
    )

    # ===================== AKKA HTTP =====================
    AKKA_VERB = re.compile(r'\b(get|post|put|patch|delete)\b')
    AKKA_PATH_LITERAL = re.compile(r'\b(?:pathPrefix|path)\s*\(\s*"')
    AKKA_VERB_WRAPPING_PATH = re.compile(
        r'\b(?:get|post|put|patch|delete)\s*\(\s*(?:pathPrefix|path)\s*\('
    )
    AKKA_VERB_BLOCK = re.compile(r'\b(?:get|post|put|patch|delete)\s*\{')
    AKKA_PATH_PATTERNS = [
        re.compile(r'\b(?:pathPrefix|path)\s*\(\s*"([^"]*)"'),
        re.compile(r'"([^"]*/[^"]*)"'),
    ]

    # ===================== HTTP4S =====================
    HTTP4S_CASE = re.compile(
        r'\bcase\s+(?:\w+\s*@\s*)?(?:Method\.)?([A-Z]+)\s*->\s*Root\b'
    )
    HTTP4S_LITERAL = re.compile(r'"([^"]*)"')
    HTTP4S_EXTRACTOR = re.compile(r'\b([A-Z]\w*)\(([^)]*)\)')
    HTTP4S_FALLBACK_PARAM = "id"

    STRING_LITERAL = re.compile(r'"[^"]*"')

    @property
    def language(self) -> str:
        return "Scala"

    @property
    def extensions(self) -> Set[str]:
        return {".scala"}

    @property
    def comment_prefixes(self) -> tuple:
        return ("//", "*", "/*", "#")

    @property
    def type_declaration_re(self) -> Pattern[str]:
        return self.TYPE_DECLARATION

    @property
    def method_name_patterns(self) -> List[Pattern[str]]:
        return self.METHOD_DECLARATIONS

    @property
    def path_patterns(self) -> List[Pattern[str]]:
        return SPRING_PATH_PATTERNS + [re.compile(r'Array\(\s*"([^"]*)"')]

    @property
    def line_rules(self) -> List[LineRule]:
        return [
            (self.is_spring_annotation, self._handle_spring),
            (self.is_play_route, self._handle_play_route),
            (self.is_akka_route, self._handle_akka_route),
            (self.is_http4s_route, self._handle_http4s_route),
        ]

    def is_test_file(self, file_path: str) -> bool:
        normalized = '/' + file_path.replace('\\', '/').lstrip('/')
        if normalized.endswith(self.TEST_FILE_SUFFIXES):
            return True
        return any(marker in normalized for marker in self.TEST_DIR_MARKERS)

    def extract(self, file_path: str, content: str) -> List[Endpoint]:
        if self.is_test_file(file_path):
            return []

        results = []
        lines = content.split('\n')
        state = ScanState()
        rules = self.line_rules

        for index, raw in enumerate(lines):
            line = raw.strip()
            if not line or line.startswith(self.comment_prefixes):
                continue

            state.begin_line(line)
            if self.update_type_state(line, state):
                continue

            for predicate, handler in rules:
                if predicate(line):
                    endpoint = handler(file_path, lines, index, state)
                    if endpoint:
                        results.append(endpoint)
                    break

        return results

    # -------------------------------------------------------------------------
    # Spring
    # -------------------------------------------------------------------------

    def _handle_spring(self, file_path: str, lines: List[str], index: int,
                       state: ScanState) -> Optional[Endpoint]:
        return self.scan_spring_annotation(file_path, lines, index, state)

    # -------------------------------------------------------------------------
    # Play Framework
    # -------------------------------------------------------------------------

    def is_play_route(self, line: str) -> bool:
        return bool(self.PLAY_ROUTE.match(line))

    def _handle_play_route(self, file_path: str, lines: List[str], index: int,
                           state: ScanState) -> Optional[Endpoint]:
        match = self.PLAY_ROUTE.match(lines[index].strip())
        if not match:
            return None

        return Endpoint(
            method=HttpMethod(match.group(1)),
            path=match.group(2),
            file_path=file_path,
            line_number=index + 1,
            method_name=match.group(3),
        )

    # -------------------------------------------------------------------------
    # Akka HTTP
    # -------------------------------------------------------------------------

    def _without_strings(self, line: str) -> str:
        return self.STRING_LITERAL.sub('""', line)

    def is_akka_route(self, line: str) -> bool:
        code = self._without_strings(line)
        if self.AKKA_PATH_LITERAL.search(line) and self.AKKA_VERB.search(code):
            return True
        if self.AKKA_VERB_WRAPPING_PATH.search(code):
            return True
        return bool(self.AKKA_VERB_BLOCK.search(code) and 'path' in code)

    def _handle_akka_route(self, file_path: str, lines: List[str], index: int,
                           state: ScanState) -> Optional[Endpoint]:
        line = lines[index].strip()
        verb = self.AKKA_VERB.search(self._without_strings(line))
        method = HttpMethod.parse(verb.group(1)) if verb else None
        if method is None:
            return None

        # A bare or missing path is almost always a directive we misread.
        path = first_capture(self.AKKA_PATH_PATTERNS, line)
        if not path or path == '/':
            return None
        if not path.startswith('/'):
            path = f"/{path}"

        return Endpoint(
            method=method,
            path=path,
            file_path=file_path,
            line_number=index + 1,
            class_name=state.class_name,
        )

    # -------------------------------------------------------------------------
    # http4s
    # -------------------------------------------------------------------------

    def is_http4s_route(self, line: str) -> bool:
        return bool(self.HTTP4S_CASE.search(line))

    def _http4s_segments(self, pattern: str) -> List[str]:
        """Literal segments first, then extractor variables, each in source order."""
        segments = [literal for literal in self.HTTP4S_LITERAL.findall(pattern) if literal]

        for _extractor, arg in self.HTTP4S_EXTRACTOR.findall(pattern):
            name = arg.strip()
            if not re.fullmatch(r'\w+', name):
                name = self.HTTP4S_FALLBACK_PARAM
            segments.append(f":{name}")

        return segments

    def _handle_http4s_route(self, file_path: str, lines: List[str], index: int,
                             state: ScanState) -> Optional[Endpoint]:
        line = lines[index].strip()
        match = self.HTTP4S_CASE.search(line)
        if not match:
            return None

        method = HttpMethod.parse(match.group(1))
        if method is None:
            return None

        # Only the route pattern matters, not the response built after "=>".
        pattern = line[match.end():].split('=>', 1)[0]
        segments = self._http4s_segments(pattern)

        return Endpoint(
            method=method,
            path='/' + '/'.join(segments) if segments else '/',
            file_path=file_path,
            line_number=index + 1,
            class_name=state.class_name,
        )
