"""Java scanner: Spring MVC / Spring WebFlux annotated controllers."""
from __future__ import annotations

import re
from typing import List, Pattern, Set

from .base import BaseScanner, Endpoint, ScanState


class JavaScanner(BaseScanner):
    """Java scanner for Spring Boot controllers."""

    TYPE_DECLARATION = re.compile(
        r'^(?:@\w+(?:\([^)]*\))?\s+)*'
        r'(?:(?:public|protected|private|abstract|final|static|sealed|non-sealed|strictfp)\s+)*'
        r'(?:class|interface|enum|record)\s+(?P<name>\w+)'
    )

    METHOD_DECLARATION = re.compile(
        r'^(?:public|protected|private)\s+'
        r'(?:(?:static|final|synchronized|abstract|default|native)\s+)*'
        r'(?:<[^>]*>\s+)?'
        r'[\w.$]+(?:<.*>)?(?:\[\])*\s+(\w+)\s*\('
    )

    @property
    def language(self) -> str:
        return "Java"

    @property
    def extensions(self) -> Set[str]:
        return {".java"}

    @property
    def comment_prefixes(self) -> tuple:
        return ("//", "*", "/*")

    @property
    def type_declaration_re(self) -> Pattern[str]:
        return self.TYPE_DECLARATION

    @property
    def method_name_patterns(self) -> List[Pattern[str]]:
        return [self.METHOD_DECLARATION]

    def extract(self, file_path: str, content: str) -> List[Endpoint]:
        results = []
        lines = content.split('\n')
        state = ScanState()

        for index, raw in enumerate(lines):
            line = raw.strip()
            if not line or line.startswith(self.comment_prefixes):
                continue

            state.begin_line(line)
            if self.update_type_state(line, state):
                continue

            if self.is_spring_annotation(line):
                endpoint = self.scan_spring_annotation(file_path, lines, index, state)
                if endpoint:
                    results.append(endpoint)

        return results
