"""Path helpers shared by the extractors and the coverage matcher."""
from __future__ import annotations

import re

_SLASH_RUN = re.compile(r'/+')
_BRACE_PARAM = re.compile(r'\{[^}]+\}')


def normalize(path: str) -> str:
    """Collapse repeated slashes and drop the trailing one (``"" -> "/"``)."""
    collapsed = _SLASH_RUN.sub('/', path)
    if len(collapsed) > 1 and collapsed.endswith('/'):
        collapsed = collapsed[:-1]
    return collapsed or '/'


def _leading_slash(path: str) -> str:
    return path if path.startswith('/') else f"/{path}"


def combine(base_path: str, sub_path: str) -> str:
    """Join a class-level base path with a method-level path.

    ``combine("/api/", "/posts")`` and ``combine("/api", "posts")`` both give
    ``/api/posts``; two empty parts give ``/``.
    """
    if not base_path and not sub_path:
        return '/'
    if not base_path:
        return _leading_slash(sub_path)
    if not sub_path:
        return _leading_slash(base_path)

    base = _leading_slash(base_path)
    if base.endswith('/'):
        base = base[:-1]
    return f"{base}{_leading_slash(sub_path)}"


def is_parameter_segment(segment: str) -> bool:
    """True for ``{id}``, ``:id``, wildcards and segments embedding ``{...}``."""
    if segment.startswith('{') and segment.endswith('}'):
        return True
    if segment.startswith(':') or '*' in segment:
        return True
    return bool(_BRACE_PARAM.search(segment))
