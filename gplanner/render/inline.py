# gplanner/render/inline.py
from __future__ import annotations

import json
import re
from html import escape

from .template import HTML_TEMPLATE

try:
    import orjson  # type: ignore
except Exception:  # pragma: no cover
    orjson = None  # type: ignore

_DATA_MARKER = "__DATA_JSON__"
_SVG_MARKER = "__SVG_MARKUP__"
_LEGEND_MARKER = "__LEGEND_MARKUP__"
_TITLE_MARKER = "__TITLE__"
_MARKERS = (_DATA_MARKER, _SVG_MARKER, _LEGEND_MARKER, _TITLE_MARKER)
_MARKER_RE = re.compile("|".join(re.escape(m) for m in _MARKERS))


def dumps_payload(payload: dict) -> str:
    if orjson is not None:
        data_json = orjson.dumps(payload).decode("utf-8")
    else:
        data_json = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return data_json.replace("</", r"<\/")  # script-safe injection


def build_html(payload: dict, *, svg: str, legend: str = "", title: str = "gPlanner") -> str:
    # Hardening:
    #   - Template must contain every marker exactly once.
    #   - Substitution is a single pass over the template, so marker text
    #     inside task data is never expanded.
    if not isinstance(payload, dict):
        raise TypeError(f"payload must be dict, got {type(payload).__name__}")
    for marker in _MARKERS:
        n = HTML_TEMPLATE.count(marker)
        if n != 1:
            raise RuntimeError(f"HTML_TEMPLATE must contain {marker} exactly once (found {n})")

    values = {
        _DATA_MARKER: dumps_payload(payload),
        _SVG_MARKER: svg,
        _LEGEND_MARKER: legend,
        _TITLE_MARKER: escape(title),
    }
    return _MARKER_RE.sub(lambda m: values[m.group(0)], HTML_TEMPLATE)
